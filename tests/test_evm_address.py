import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

from polychain.evm_address import (
    Address,
    AddressDecoder,
    AddressEncodeDecoder,
    AddressEncoder,
    AddressError,
    keccak256,
    to_checksum_hex,
)

address_bytes = st.binary(min_size=20, max_size=20)
non_hex_text = st.text(min_size=40, max_size=40).filter(
    lambda s: any(c not in string.hexdigits for c in s)
)


@given(address_bytes)
def test_binary_round_trip(x):
    addr = Address(x)
    assert addr.size_hint() == 20
    assert Address.from_bytes(addr.to_bytes()) == addr


@given(address_bytes)
def test_json_round_trip(x):
    addr = Address(x)
    assert Address.from_json(addr.to_json()) == addr


@given(non_hex_text)
def test_json_invalid_hex(text):
    import json

    with pytest.raises(AddressError):
        Address.from_json(json.dumps(text))


@given(st.binary(min_size=10, max_size=10))
def test_json_invalid_length(x):
    import json

    with pytest.raises(AddressError):
        Address.from_json(json.dumps(x.hex()))


@given(st.binary())
def test_random_binary(x):
    if len(x) >= 20:
        assert Address.from_bytes(x).to_bytes() == x[:20]
    else:
        with pytest.raises(AddressError):
            Address.from_bytes(x)


@given(st.binary().filter(lambda b: b'"' not in b))
def test_random_json_raises_address_error(x):
    with pytest.raises(AddressError):
        Address.from_json(x)


def test_keccak_of_empty():
    assert (
        keccak256(b"").hex()
        == "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
    )


@pytest.mark.parametrize(
    "checksummed",
    [
        "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
        "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
    ],
)
def test_eip55_vectors(checksummed):
    raw = bytes.fromhex(checksummed[2:])
    assert to_checksum_hex(raw) == checksummed
    assert Address.from_hex(checksummed.lower()).checksum_hex() == checksummed


def test_from_hex_without_prefix():
    text = "58afb504ef2444a267b8c7ce57279417f1377ceb"
    addr = Address.from_hex(text)
    assert str(addr) == text
    assert bytes(addr) == bytes.fromhex(text)


def test_from_hex_rejects_spaces():
    with pytest.raises(AddressError):
        Address.from_hex("58 fb504ef2444a267b8c7ce57279417f1377ceb0")


def test_checksum_requires_twenty_bytes():
    with pytest.raises(AddressError):
        to_checksum_hex(bytes(19))


def test_address_rejects_wrong_length():
    with pytest.raises(AddressError):
        Address(bytes(21))


@given(address_bytes)
def test_encode_decode_round_trip(x):
    codec = AddressEncodeDecoder()
    encoded = codec.encode_address(x)
    assert encoded.startswith("0x")
    assert codec.decode_address(encoded) == x


def test_encoder_pads_and_truncates():
    encoder = AddressEncoder()
    assert encoder.encode_address(b"\x01") == "0x" + "00" * 19 + "01"
    long_raw = bytes(range(25))
    assert AddressDecoder().decode_address(encoder.encode_address(long_raw)) == long_raw[-20:]


def test_decoder_rejects_bad_input():
    with pytest.raises(AddressError):
        AddressDecoder().decode_address("0x1234")
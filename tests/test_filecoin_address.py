import pytest
from hypothesis import given
from hypothesis import strategies as st

from polychain.filecoin_address import (
    AddressEncodeDecoder,
    FilecoinAddress,
    FilecoinAddressError,
    Protocol,
)

codec = AddressEncodeDecoder()


@given(st.integers(min_value=0, max_value=(1 << 63) - 1))
def test_id_round_trip(number):
    raw = FilecoinAddress.from_string(f"f0{number}").to_bytes()
    assert raw[0] == Protocol.ID
    encoded = codec.encode_address(raw)
    assert encoded == f"f0{number}"
    assert codec.decode_address(encoded) == raw


@given(st.binary(min_size=20, max_size=20))
def test_secp256k1_round_trip(payload):
    raw = bytes([Protocol.SECP256K1]) + payload
    encoded = codec.encode_address(raw)
    assert encoded.startswith("f1")
    assert codec.decode_address(encoded) == raw


@given(st.binary(min_size=20, max_size=20))
def test_actor_round_trip(payload):
    raw = bytes([Protocol.ACTOR]) + payload
    assert codec.decode_address(codec.encode_address(raw)) == raw


@given(st.binary(min_size=48, max_size=48))
def test_bls_round_trip(payload):
    raw = bytes([Protocol.BLS]) + payload
    assert codec.decode_address(codec.encode_address(raw)) == raw


def test_encoding_empty_address_fails():
    with pytest.raises(FilecoinAddressError):
        codec.encode_address(b"")


def test_decoding_empty_address_fails():
    with pytest.raises(FilecoinAddressError, match="undefined address"):
        codec.decode_address("")


def test_small_id_string():
    assert codec.encode_address(b"\x00\x01") == "f01"


def test_testnet_prefix_is_accepted():
    raw = bytes([Protocol.SECP256K1]) + bytes(range(20))
    mainnet = codec.encode_address(raw)
    assert codec.decode_address("t" + mainnet[1:]) == raw


def test_unknown_network_rejected():
    raw = bytes([Protocol.SECP256K1]) + bytes(range(20))
    with pytest.raises(FilecoinAddressError, match="network"):
        codec.decode_address("x" + codec.encode_address(raw)[1:])


def test_tampered_checksum_rejected():
    raw = bytes([Protocol.SECP256K1]) + bytes(range(20))
    encoded = codec.encode_address(raw)
    swapped = "b" if encoded[5] != "b" else "c"
    with pytest.raises(FilecoinAddressError):
        codec.decode_address(encoded[:5] + swapped + encoded[6:])


def test_wrong_payload_length_rejected():
    with pytest.raises(FilecoinAddressError, match="payload"):
        codec.encode_address(bytes([Protocol.SECP256K1]) + bytes(19))


def test_unknown_protocol_rejected():
    with pytest.raises(FilecoinAddressError, match="protocol"):
        codec.encode_address(b"\x09" + bytes(20))


def test_non_numeric_id_rejected():
    with pytest.raises(FilecoinAddressError):
        codec.decode_address("f0abc")


def test_non_minimal_varint_rejected():
    with pytest.raises(FilecoinAddressError):
        FilecoinAddress.from_bytes(b"\x00\x81\x00")


def test_new_secp256k1_address():
    addr = FilecoinAddress.new_secp256k1(b"\x04" + bytes(64))
    assert addr.protocol is Protocol.SECP256K1
    assert len(addr.payload) == 20
    assert FilecoinAddress.from_string(str(addr)) == addr
import pytest
from hypothesis import given, strategies as st

from polychain import rlp

_items = st.recursive(
    st.binary(max_size=80),
    lambda children: st.lists(children, max_size=5),
    max_leaves=20,
)


def test_short_string():
    assert rlp.encode(b"dog") == b"\x83dog"


def test_empty_list_and_zero():
    assert rlp.encode([]) == b"\xc0"
    assert rlp.encode(0) == b"\x80"


def test_single_low_byte_is_itself():
    assert rlp.encode(b"\x05") == b"\x05"


@given(_items)
def test_round_trip(item):
    assert rlp.decode(rlp.encode(item)) == item


@given(st.integers(min_value=0, max_value=2**256))
def test_integer_round_trip(number):
    assert int.from_bytes(rlp.decode(rlp.encode(number)), "big") == number


def test_long_string_round_trip():
    data = b"x" * 1000
    encoded = rlp.encode(data)
    assert len(encoded) > len(data)
    assert rlp.decode(encoded) == data


def test_negative_rejected():
    with pytest.raises(rlp.RLPError):
        rlp.encode(-1)


def test_truncated_rejected():
    with pytest.raises(rlp.RLPError):
        rlp.decode(rlp.encode(b"hello world")[:-1])


def test_trailing_rejected():
    with pytest.raises(rlp.RLPError):
        rlp.decode(rlp.encode(b"abc") + b"\x00")


def test_non_canonical_single_byte_rejected():
    with pytest.raises(rlp.RLPError):
        rlp.decode(b"\x81\x05")
import hashlib

import pytest
from hypothesis import given, settings, strategies as st

from polychain import secp256k1
from polychain.secp256k1 import G, N, Point, SignatureError

_keys = st.integers(min_value=1, max_value=N - 1)
_digests = st.binary(min_size=32, max_size=32)


def test_private_key_one_is_generator():
    assert secp256k1.public_key(1) == G


def test_bytes_and_int_keys_agree():
    assert secp256k1.public_key((7).to_bytes(32, "big")) == secp256k1.public_key(7)


@settings(max_examples=10, deadline=None)
@given(_keys, _digests)
def test_sign_recover_round_trip(key, digest):
    signature = secp256k1.sign(digest, key)
    assert len(signature) == 65
    assert int.from_bytes(signature[32:64], "big") <= N // 2
    assert secp256k1.recover(digest, signature) == secp256k1.public_key(key)


def test_signing_is_deterministic():
    digest = hashlib.sha256(b"message").digest()
    first = secp256k1.sign(digest, 42)
    second = secp256k1.sign(digest, 42)
    assert len(first) == 65
    assert first == second
    assert secp256k1.recover(digest, first) == secp256k1.public_key(42)


@settings(max_examples=10, deadline=None)
@given(_keys)
def test_serialization_round_trips(key):
    point = secp256k1.public_key(key)
    assert secp256k1.parse_public_key(point.serialize_compressed()) == point
    assert secp256k1.parse_public_key(point.serialize_uncompressed()) == point


def test_invalid_private_keys():
    with pytest.raises(SignatureError):
        secp256k1.public_key(0)
    with pytest.raises(SignatureError):
        secp256k1.public_key(N)


def test_bad_digest_length():
    with pytest.raises(SignatureError):
        secp256k1.sign(b"short", 5)


def test_bad_signature_rejected():
    with pytest.raises(SignatureError):
        secp256k1.recover(bytes(32), bytes(65))


def test_off_curve_point_rejected():
    with pytest.raises(SignatureError):
        Point(1, 1)
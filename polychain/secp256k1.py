"""Recoverable ECDSA over secp256k1 with deterministic (RFC 6979) nonces."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Iterator, Optional, Union

P = 2**256 - 2**32 - 977
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
_GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8


class SignatureError(ValueError):
    """Raised for invalid keys, digests or signatures."""


@dataclass(frozen=True)
class Point:
    """An affine point on the curve (never the point at infinity)."""

    x: int
    y: int

    def __post_init__(self) -> None:
        if not (0 <= self.x < P and 0 <= self.y < P):
            raise SignatureError("coordinate out of range")
        if (self.y * self.y - self.x**3 - 7) % P:
            raise SignatureError("point is not on the curve")

    def serialize_uncompressed(self) -> bytes:
        return b"\x04" + self.x.to_bytes(32, "big") + self.y.to_bytes(32, "big")

    def serialize_compressed(self) -> bytes:
        return bytes([2 + (self.y & 1)]) + self.x.to_bytes(32, "big")


G = Point(_GX, _GY)

_Affine = Optional[tuple]


def _add(a: _Affine, b: _Affine) -> _Affine:
    if a is None:
        return b
    if b is None:
        return a
    x1, y1 = a
    x2, y2 = b
    if x1 == x2:
        if (y1 + y2) % P == 0:
            return None
        slope = 3 * x1 * x1 * pow(2 * y1, -1, P) % P
    else:
        slope = (y2 - y1) * pow(x2 - x1, -1, P) % P
    x3 = (slope * slope - x1 - x2) % P
    return x3, (slope * (x1 - x3) - y1) % P


def _mul(k: int, point: _Affine) -> _Affine:
    result = None
    addend = point
    while k:
        if k & 1:
            result = _add(result, addend)
        addend = _add(addend, addend)
        k >>= 1
    return result


def _private_scalar(private_key: Union[int, bytes]) -> int:
    scalar = (
        int.from_bytes(bytes(private_key), "big")
        if isinstance(private_key, (bytes, bytearray))
        else int(private_key)
    )
    if not 1 <= scalar < N:
        raise SignatureError("private key out of range")
    return scalar


def _digest_int(digest: bytes) -> int:
    if len(digest) != 32:
        raise SignatureError("digest must be 32 bytes")
    return int.from_bytes(digest, "big")


def public_key(private_key: Union[int, bytes]) -> Point:
    """The public point of a private key."""
    x, y = _mul(_private_scalar(private_key), (G.x, G.y))
    return Point(x, y)


def _nonces(digest: bytes, scalar: int) -> Iterator[int]:
    key_bytes = scalar.to_bytes(32, "big")
    hashed = (int.from_bytes(digest, "big") % N).to_bytes(32, "big")
    v = b"\x01" * 32
    k = b"\x00" * 32
    k = hmac.new(k, v + b"\x00" + key_bytes + hashed, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    k = hmac.new(k, v + b"\x01" + key_bytes + hashed, hashlib.sha256).digest()
    v = hmac.new(k, v, hashlib.sha256).digest()
    while True:
        v = hmac.new(k, v, hashlib.sha256).digest()
        candidate = int.from_bytes(v, "big")
        if 1 <= candidate < N:
            yield candidate
        k = hmac.new(k, v + b"\x00", hashlib.sha256).digest()
        v = hmac.new(k, v, hashlib.sha256).digest()


def sign(digest: bytes, private_key: Union[int, bytes]) -> bytes:
    """Sign a 32-byte digest; returns r || s || recovery id (65 bytes), low-s."""
    z = _digest_int(digest)
    d = _private_scalar(private_key)
    for k in _nonces(digest, d):
        rx, ry = _mul(k, (G.x, G.y))
        r = rx % N
        if r == 0:
            continue
        s = pow(k, -1, N) * (z + r * d) % N
        if s == 0:
            continue
        recid = (ry & 1) | (2 if rx >= N else 0)
        if s > N // 2:
            s = N - s
            recid ^= 1
        return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([recid])
    raise SignatureError("unreachable")  # pragma: no cover


def recover(digest: bytes, signature: bytes) -> Point:
    """Recover the public key from a 65-byte recoverable signature."""
    z = _digest_int(digest)
    signature = bytes(signature)
    if len(signature) != 65:
        raise SignatureError("signature must be 65 bytes")
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    recid = signature[64]
    if recid > 3 or not (1 <= r < N and 1 <= s < N):
        raise SignatureError("invalid signature values")
    x = r + (N if recid & 2 else 0)
    if x >= P:
        raise SignatureError("invalid signature values")
    y_squared = (pow(x, 3, P) + 7) % P
    y = pow(y_squared, (P + 1) // 4, P)
    if y * y % P != y_squared:
        raise SignatureError("no curve point for r")
    if (y & 1) != (recid & 1):
        y = P - y
    sum_point = _add(_mul(s, (x, y)), _mul((-z) % N, (G.x, G.y)))
    result = _mul(pow(r, -1, N), sum_point)
    if result is None:
        raise SignatureError("recovered the point at infinity")
    return Point(*result)


def parse_public_key(data: bytes) -> Point:
    """Parse a compressed (33), uncompressed (65) or raw (64) public key."""
    data = bytes(data)
    if len(data) == 65 and data[0] == 4:
        data = data[1:]
    if len(data) == 64:
        return Point(int.from_bytes(data[:32], "big"), int.from_bytes(data[32:], "big"))
    if len(data) == 33 and data[0] in (2, 3):
        x = int.from_bytes(data[1:], "big")
        if x >= P:
            raise SignatureError("coordinate out of range")
        y_squared = (pow(x, 3, P) + 7) % P
        y = pow(y_squared, (P + 1) // 4, P)
        if y * y % P != y_squared:
            raise SignatureError("point is not on the curve")
        if (y & 1) != (data[0] & 1):
            y = P - y
        return Point(x, y)
    raise SignatureError("unrecognised public key encoding")
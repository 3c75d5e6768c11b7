"""Addresses of EVM-compatible chains: hex parsing, EIP-55 checksums, binary and JSON forms."""

from __future__ import annotations

import json
import string
from dataclasses import dataclass
from typing import Union

from Crypto.Hash import keccak

ADDRESS_LENGTH = 20
_HEX_DIGITS = frozenset(string.hexdigits)


class AddressError(ValueError):
    """Raised for malformed EVM addresses."""


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (the pre-standard SHA-3 used by Ethereum)."""
    hasher = keccak.new(digest_bits=256)
    hasher.update(bytes(data))
    return hasher.digest()


def to_checksum_hex(raw: bytes) -> str:
    """Render 20 raw bytes as a 0x-prefixed EIP-55 mixed-case hex string."""
    raw = bytes(raw)
    if len(raw) != ADDRESS_LENGTH:
        raise AddressError(f"expected {ADDRESS_LENGTH} bytes, got {len(raw)}")
    lower = raw.hex()
    digest = keccak256(lower.encode("ascii")).hex()
    return "0x" + "".join(
        ch.upper() if ch.isalpha() and int(nibble, 16) >= 8 else ch
        for ch, nibble in zip(lower, digest)
    )


@dataclass(frozen=True)
class Address:
    """A 20-byte account or contract address."""

    raw: bytes = bytes(ADDRESS_LENGTH)

    def __post_init__(self) -> None:
        if len(self.raw) != ADDRESS_LENGTH:
            raise AddressError(f"expected {ADDRESS_LENGTH} bytes, got {len(self.raw)}")
        object.__setattr__(self, "raw", bytes(self.raw))

    @classmethod
    def from_hex(cls, text: str) -> "Address":
        """Parse 40 hex digits, optionally prefixed with 0x."""
        if text.startswith("0x"):
            text = text[2:]
        if len(text) != 2 * ADDRESS_LENGTH:
            raise AddressError(f"invalid ethaddress {text}")
        if not _HEX_DIGITS.issuperset(text):
            raise AddressError(f"invalid ethaddress {text}: not hexadecimal")
        return cls(bytes.fromhex(text))

    @classmethod
    def from_bytes(cls, data: bytes) -> "Address":
        """Read an address from the first 20 bytes of a binary buffer."""
        data = bytes(data)
        if len(data) < ADDRESS_LENGTH:
            raise AddressError("unexpected end of buffer")
        return cls(data[:ADDRESS_LENGTH])

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Address":
        """Decode a JSON string holding a hex address."""
        try:
            value = json.loads(data)
        except (ValueError, RecursionError) as exc:
            raise AddressError(f"invalid JSON: {exc}") from exc
        if not isinstance(value, str):
            raise AddressError("expected a JSON string")
        return cls.from_hex(value)

    def size_hint(self) -> int:
        """Number of bytes in the binary form."""
        return ADDRESS_LENGTH

    def to_bytes(self) -> bytes:
        """The 20-byte binary form."""
        return self.raw

    def to_json(self) -> str:
        """JSON string holding the checksummed hex form."""
        return json.dumps(self.checksum_hex())

    def checksum_hex(self) -> str:
        """The 0x-prefixed EIP-55 form."""
        return to_checksum_hex(self.raw)

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.raw.hex()


class AddressEncoder:
    """Turns raw address bytes into their human-readable form."""

    def encode_address(self, raw: bytes) -> str:
        raw = bytes(raw)[-ADDRESS_LENGTH:].rjust(ADDRESS_LENGTH, b"\0")
        return to_checksum_hex(raw)


class AddressDecoder:
    """Turns a human-readable address into raw bytes."""

    def decode_address(self, encoded: str) -> bytes:
        return Address.from_hex(str(encoded)).to_bytes()


class AddressEncodeDecoder(AddressEncoder, AddressDecoder):
    """Both directions of address conversion."""
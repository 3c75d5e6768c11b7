"""Filecoin addresses: binary and string forms with protocol-specific payloads."""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass
from enum import IntEnum

PAYLOAD_HASH_LENGTH = 20
BLS_PUBLIC_KEY_BYTES = 48
CHECKSUM_HASH_LENGTH = 4
MAX_ADDRESS_STRING_LENGTH = 2 + 84
MAX_ID_STRING_LENGTH = 19
MAINNET_PREFIX = "f"
TESTNET_PREFIX = "t"
UNDEF_ADDRESS_STRING = "<empty>"
_MAX_INT64 = (1 << 63) - 1
_BASE32_ALPHABET = frozenset("abcdefghijklmnopqrstuvwxyz234567")


class FilecoinAddressError(ValueError):
    """Raised for malformed Filecoin addresses."""


class Protocol(IntEnum):
    """Address protocol, the first byte of the binary form."""

    ID = 0
    SECP256K1 = 1
    ACTOR = 2
    BLS = 3


def _to_uvarint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _from_uvarint(data: bytes) -> int:
    """Decode a minimal unsigned varint that spans the whole buffer."""
    value = 0
    for index, byte in enumerate(data):
        if index >= 9:
            raise FilecoinAddressError("varints larger than uint63 not supported")
        value |= (byte & 0x7F) << (7 * index)
        if not byte & 0x80:
            if byte == 0 and index > 0:
                raise FilecoinAddressError("varint not minimally encoded")
            if index + 1 != len(data):
                raise FilecoinAddressError("invalid address payload")
            return value
    raise FilecoinAddressError("invalid address payload")


def _checksum(data: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=CHECKSUM_HASH_LENGTH).digest()


@dataclass(frozen=True)
class FilecoinAddress:
    """A protocol tag together with its payload."""

    protocol: Protocol
    payload: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", bytes(self.payload))
        try:
            object.__setattr__(self, "protocol", Protocol(self.protocol))
        except ValueError as exc:
            raise FilecoinAddressError("unknown address protocol") from exc
        if self.protocol is Protocol.ID:
            if _from_uvarint(self.payload) > _MAX_INT64:
                raise FilecoinAddressError("invalid address payload")
        elif self.protocol in (Protocol.SECP256K1, Protocol.ACTOR):
            if len(self.payload) != PAYLOAD_HASH_LENGTH:
                raise FilecoinAddressError("invalid address payload")
        elif len(self.payload) != BLS_PUBLIC_KEY_BYTES:
            raise FilecoinAddressError("invalid address payload")

    @classmethod
    def from_bytes(cls, data: bytes) -> "FilecoinAddress":
        """Parse the binary form: protocol byte followed by the payload."""
        data = bytes(data)
        if not data:
            raise FilecoinAddressError("unknown address protocol")
        return cls(data[0], data[1:])

    @classmethod
    def from_string(cls, text: str) -> "FilecoinAddress":
        """Parse the string form on mainnet (f) or testnet (t)."""
        if not text or text == UNDEF_ADDRESS_STRING:
            raise FilecoinAddressError("undefined address")
        if len(text) > MAX_ADDRESS_STRING_LENGTH or len(text) < 3:
            raise FilecoinAddressError("invalid address length")
        if text[0] not in (MAINNET_PREFIX, TESTNET_PREFIX):
            raise FilecoinAddressError("unknown address network")
        if text[1] not in "0123":
            raise FilecoinAddressError("unknown address protocol")
        protocol = Protocol(int(text[1]))
        raw = text[2:]

        if protocol is Protocol.ID:
            if len(raw) > MAX_ID_STRING_LENGTH + 1 or not raw.isdigit() or not raw.isascii():
                raise FilecoinAddressError("invalid address payload")
            number = int(raw)
            if number > _MAX_INT64:
                raise FilecoinAddressError("invalid address payload")
            return cls(protocol, _to_uvarint(number))

        if not _BASE32_ALPHABET.issuperset(raw):
            raise FilecoinAddressError("illegal base32 data")
        try:
            decoded = base64.b32decode(raw.upper() + "=" * (-len(raw) % 8))
        except (binascii.Error, ValueError) as exc:
            raise FilecoinAddressError(f"illegal base32 data: {exc}") from exc
        if len(decoded) < CHECKSUM_HASH_LENGTH:
            raise FilecoinAddressError("invalid address payload")
        payload = decoded[:-CHECKSUM_HASH_LENGTH]
        checksum = decoded[-CHECKSUM_HASH_LENGTH:]
        if protocol in (Protocol.SECP256K1, Protocol.ACTOR) and len(payload) != PAYLOAD_HASH_LENGTH:
            raise FilecoinAddressError("invalid address payload")
        if _checksum(bytes([protocol]) + payload) != checksum:
            raise FilecoinAddressError("invalid address checksum")
        return cls(protocol, payload)

    @classmethod
    def new_secp256k1(cls, pubkey: bytes) -> "FilecoinAddress":
        """The account address of a serialized secp256k1 public key."""
        digest = hashlib.blake2b(bytes(pubkey), digest_size=PAYLOAD_HASH_LENGTH).digest()
        return cls(Protocol.SECP256K1, digest)

    def to_bytes(self) -> bytes:
        """The binary form."""
        return bytes([self.protocol]) + self.payload

    def _render(self, prefix: str) -> str:
        if self.protocol is Protocol.ID:
            return f"{prefix}0{_from_uvarint(self.payload)}"
        body = self.payload + _checksum(self.to_bytes())
        encoded = base64.b32encode(body).decode("ascii").lower().rstrip("=")
        return f"{prefix}{int(self.protocol)}{encoded}"

    def __str__(self) -> str:
        return self._render(MAINNET_PREFIX)


@dataclass(frozen=True)
class AddressEncoder:
    """Turns raw address bytes into the human-readable form."""

    network: str = MAINNET_PREFIX

    def encode_address(self, raw: bytes) -> str:
        return FilecoinAddress.from_bytes(raw)._render(self.network)


@dataclass(frozen=True)
class AddressDecoder:
    """Turns a human-readable address into raw bytes."""

    def decode_address(self, addr: str) -> bytes:
        if not addr or addr == UNDEF_ADDRESS_STRING:
            raise FilecoinAddressError(f"decoding address: undefined address={addr}")
        return FilecoinAddress.from_string(str(addr)).to_bytes()


@dataclass(frozen=True)
class AddressEncodeDecoder(AddressEncoder, AddressDecoder):
    """Both directions of address conversion."""
"""Filecoin messages: building, CBOR serialization, CIDs, signing hashes."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Sequence

import cbor2

from polychain import secp256k1
from polychain.filecoin_address import FilecoinAddress, FilecoinAddressError

MESSAGE_VERSION = 0
SIG_TYPE_SECP256K1 = 1
_CID_V1 = 0x01
_DAG_CBOR = 0x71
_BLAKE2B_256 = 0xB220
_SIGNATURE_LENGTH = 65


def _uvarint(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _cid(block: bytes) -> bytes:
    digest = hashlib.blake2b(block, digest_size=32).digest()
    return (
        _uvarint(_CID_V1)
        + _uvarint(_DAG_CBOR)
        + _uvarint(_BLAKE2B_256)
        + _uvarint(len(digest))
        + digest
    )


def _big_int_bytes(value: int) -> bytes:
    if value == 0:
        return b""
    magnitude = abs(value)
    sign = b"\x01" if value < 0 else b"\x00"
    return sign + magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "big")


@dataclass(frozen=True)
class Message:
    """An unsigned Filecoin message."""

    to: FilecoinAddress
    sender: FilecoinAddress
    nonce: int
    value: int
    gas_limit: int
    gas_fee_cap: int
    gas_premium: int
    method: int = 0
    params: bytes = b""
    version: int = MESSAGE_VERSION

    def _fields(self) -> list:
        return [
            self.version,
            self.to.to_bytes(),
            self.sender.to_bytes(),
            self.nonce,
            _big_int_bytes(self.value),
            self.gas_limit,
            _big_int_bytes(self.gas_fee_cap),
            _big_int_bytes(self.gas_premium),
            self.method,
            bytes(self.params),
        ]

    def to_cbor(self) -> bytes:
        """The DAG-CBOR encoding of the message."""
        return cbor2.dumps(self._fields())

    def cid(self) -> bytes:
        """The binary CIDv1 (dag-cbor, blake2b-256) of the message."""
        return _cid(self.to_cbor())


@dataclass
class Tx:
    """A Filecoin message with its secp256k1 signature, once signed."""

    message: Message
    signature: bytes = bytes(_SIGNATURE_LENGTH)

    def _is_signed(self) -> bool:
        return any(self.signature)

    def hash(self) -> bytes:
        """CID of the signed message if signed, otherwise of the bare message."""
        if self._is_signed():
            signed = cbor2.dumps(
                [self.message._fields(), bytes([SIG_TYPE_SECP256K1]) + bytes(self.signature)]
            )
            return _cid(signed)
        return self.message.cid()

    def sender(self) -> str:
        return str(self.message.sender)

    def to(self) -> str:
        return str(self.message.to)

    def value(self) -> int:
        return self.message.value

    def nonce(self) -> int:
        return self.message.nonce

    def payload(self) -> bytes:
        return self.message.params

    def sighashes(self) -> list:
        return [hashlib.blake2b(self.hash(), digest_size=32).digest()]

    def sign(self, signatures: Sequence[bytes], pubkey: bytes = b"") -> None:
        """Store the single 65-byte signature."""
        if len(signatures) != 1:
            raise ValueError(f"expected 1 signature, got {len(signatures)} signatures")
        signature = bytes(signatures[0])
        if len(signature) != _SIGNATURE_LENGTH:
            raise ValueError(f"expected {_SIGNATURE_LENGTH}-byte signature, got {len(signature)}")
        self.signature = signature

    def serialize(self) -> bytes:
        """The CBOR encoding of the message."""
        return self.message.to_cbor()


@dataclass(frozen=True)
class TxBuilder:
    """Builds Filecoin send messages."""

    def build_tx(self, from_pub_key, to, value, nonce, gas_limit, gas_price, gas_cap, payload) -> Tx:
        point = (
            from_pub_key
            if isinstance(from_pub_key, secp256k1.Point)
            else secp256k1.parse_public_key(bytes(from_pub_key))
        )
        sender = FilecoinAddress.new_secp256k1(point.serialize_uncompressed())
        try:
            recipient = FilecoinAddress.from_string(str(to))
        except FilecoinAddressError as exc:
            raise FilecoinAddressError(f"bad to address '{to}': {exc}") from exc
        return Tx(
            Message(
                to=recipient,
                sender=sender,
                nonce=int(nonce),
                value=int(value),
                gas_limit=int(gas_limit),
                gas_fee_cap=int(gas_cap),
                gas_premium=int(gas_price),
                method=0,
                params=bytes(payload or b""),
            )
        )
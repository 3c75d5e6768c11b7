"""EVM transactions: building, signing hashes, signature injection and serialization."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from polychain import rlp, secp256k1
from polychain.evm_address import Address, AddressError, keccak256, to_checksum_hex


def _split_signature(signature: bytes) -> tuple:
    signature = bytes(signature)
    if len(signature) != 65:
        raise ValueError(f"expected 65-byte signature, got {len(signature)}")
    return (
        int.from_bytes(signature[:32], "big"),
        int.from_bytes(signature[32:64], "big"),
        signature[64],
    )


@dataclass(frozen=True)
class LegacyTransaction:
    """A pre-EIP-2718 transaction, signed with EIP-155 replay protection."""

    nonce: int
    gas_price: int
    gas: int
    to: Optional[bytes]
    value: int
    data: bytes = b""
    v: int = 0
    r: int = 0
    s: int = 0

    def _fields(self) -> list:
        return [self.nonce, self.gas_price, self.gas, self.to or b"", self.value, self.data]

    def sighash(self, chain_id: int) -> bytes:
        return keccak256(rlp.encode(self._fields() + [chain_id, 0, 0]))

    def with_signature(self, signature: bytes, chain_id: int) -> "LegacyTransaction":
        r, s, recid = _split_signature(signature)
        return dataclasses.replace(self, v=recid + 35 + 2 * chain_id, r=r, s=s)

    def recovery_id(self, chain_id: int) -> int:
        if self.v in (27, 28):
            return self.v - 27
        return self.v - 35 - 2 * chain_id

    def serialize(self) -> bytes:
        return rlp.encode(self._fields() + [self.v, self.r, self.s])


@dataclass(frozen=True)
class DynamicFeeTransaction:
    """An EIP-1559 transaction with a tip cap and a fee cap."""

    chain_id: int
    nonce: int
    gas_tip_cap: int
    gas_fee_cap: int
    gas: int
    to: Optional[bytes]
    value: int
    data: bytes = b""
    v: int = 0
    r: int = 0
    s: int = 0

    TYPE = 0x02

    def _fields(self) -> list:
        return [
            self.chain_id,
            self.nonce,
            self.gas_tip_cap,
            self.gas_fee_cap,
            self.gas,
            self.to or b"",
            self.value,
            self.data,
            [],
        ]

    def sighash(self, chain_id: int) -> bytes:
        return keccak256(bytes([self.TYPE]) + rlp.encode(self._fields()))

    def with_signature(self, signature: bytes, chain_id: int) -> "DynamicFeeTransaction":
        r, s, recid = _split_signature(signature)
        return dataclasses.replace(self, v=recid, r=r, s=s)

    def recovery_id(self, chain_id: int) -> int:
        return self.v

    def serialize(self) -> bytes:
        return bytes([self.TYPE]) + rlp.encode(self._fields() + [self.v, self.r, self.s])


EthTransaction = Union[LegacyTransaction, DynamicFeeTransaction]


def pubkey_to_address(point: secp256k1.Point) -> bytes:
    """The 20-byte account address of a public key."""
    return keccak256(point.serialize_uncompressed()[1:])[-20:]


@dataclass
class Tx:
    """An EVM transaction together with the chain id it is signed for."""

    eth_tx: EthTransaction
    chain_id: int

    def hash(self) -> bytes:
        return keccak256(self.eth_tx.serialize())

    def sender(self) -> str:
        """The checksummed sender address, or "" if it cannot be recovered."""
        tx = self.eth_tx
        if tx.r == 0 and tx.s == 0:
            return ""
        recid = tx.recovery_id(self.chain_id)
        if not 0 <= recid <= 3:
            return ""
        signature = tx.r.to_bytes(32, "big") + tx.s.to_bytes(32, "big") + bytes([recid])
        try:
            point = secp256k1.recover(tx.sighash(self.chain_id), signature)
        except (secp256k1.SignatureError, OverflowError):
            return ""
        return to_checksum_hex(pubkey_to_address(point))

    def to(self) -> str:
        return to_checksum_hex(self.eth_tx.to) if self.eth_tx.to else ""

    def value(self) -> int:
        return self.eth_tx.value

    def nonce(self) -> int:
        return self.eth_tx.nonce

    def payload(self) -> bytes:
        return self.eth_tx.data

    def sighashes(self) -> list:
        return [self.eth_tx.sighash(self.chain_id)]

    def sign(self, signatures: Sequence[bytes], pubkey: bytes = b"") -> None:
        """Inject the signature for the single sighash."""
        if not signatures:
            raise ValueError("expected 1 signature, got 0 signatures")
        self.eth_tx = self.eth_tx.with_signature(signatures[0], self.chain_id)

    def serialize(self) -> bytes:
        return self.eth_tx.serialize()


@dataclass(frozen=True)
class TxBuilder:
    """Builds legacy transactions for one chain."""

    chain_id: int

    def build_tx(self, from_pub_key, to, value, nonce, gas_limit, gas_price, gas_cap, payload) -> Tx:
        try:
            to_addr = Address.from_hex(str(to))
        except AddressError as exc:
            raise ValueError(f"bad to address '{to}': {exc}") from exc
        return Tx(
            LegacyTransaction(
                nonce=int(nonce),
                gas_price=int(gas_price),
                gas=int(gas_limit),
                to=to_addr.to_bytes(),
                value=int(value),
                data=bytes(payload or b""),
            ),
            self.chain_id,
        )
"""Network parameters for the DigiByte and Dogecoin chains, with a registry of known networks."""

from __future__ import annotations

import hashlib
import struct
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ParamsRegistrationError(Exception):
    """Raised when a network is registered twice."""


POW_LIMIT = (1 << 224) - 1


class Deployment(IntEnum):
    """Soft-fork deployment identifiers."""

    TEST_DUMMY = 0
    CSV = 1
    SEGWIT = 2


DEFINED_DEPLOYMENTS = len(Deployment)


@dataclass(frozen=True)
class GenesisBlock:
    """The first block of a chain, with its single coinbase transaction."""

    version: int
    prev_block: bytes
    merkle_root: bytes
    timestamp: int
    bits: int
    nonce: int
    coinbase_signature_script: bytes = b""
    coinbase_value: int = 0
    coinbase_pk_script: bytes = b""

    def __post_init__(self) -> None:
        if len(self.prev_block) != 32 or len(self.merkle_root) != 32:
            raise ValueError("block hashes must be 32 bytes")

    def header_bytes(self) -> bytes:
        """Serialize the 80-byte block header."""
        return (
            struct.pack("<i", self.version)
            + self.prev_block
            + self.merkle_root
            + struct.pack("<III", self.timestamp, self.bits, self.nonce)
        )

    def hash_hex(self) -> str:
        """Double SHA-256 of the header, in the usual reversed display order."""
        digest = hashlib.sha256(hashlib.sha256(self.header_bytes()).digest()).digest()
        return digest[::-1].hex()


@dataclass(frozen=True)
class ChainParams:
    """Address magics and network identity of a Bitcoin-like chain."""

    name: str
    net: int
    pubkey_hash_addr_id: int
    script_hash_addr_id: int
    private_key_id: int
    hd_private_key_id: bytes
    hd_public_key_id: bytes
    bech32_hrp_segwit: str
    default_port: str = ""
    witness_pubkey_hash_addr_id: int = 0
    witness_script_hash_addr_id: int = 0
    hd_coin_type: int = 0
    genesis_block: Optional[GenesisBlock] = None
    genesis_hash: Optional[bytes] = None

    def __post_init__(self) -> None:
        if len(self.hd_private_key_id) != 4 or len(self.hd_public_key_id) != 4:
            raise ValueError("HD key identifiers must be 4 bytes")
        if not 0 <= self.net < (1 << 32):
            raise ValueError("network magic must fit in 32 bits")

    @property
    def genesis_hash_hex(self) -> Optional[str]:
        """The declared genesis hash in display order, if any."""
        if self.genesis_hash is None:
            return None
        return self.genesis_hash[::-1].hex()


# Networks that are always known to the registry.
_BITCOIN_NETS = {0xD9B4BEF9, 0xDAB5BFFA, 0x0709110B, 0x12141C16}

_registry_lock = threading.Lock()
_registered_nets: set[int] = set(_BITCOIN_NETS)


def register(params: ChainParams) -> None:
    """Register a network; raise if its magic is already known."""
    with _registry_lock:
        if params.net in _registered_nets:
            raise ParamsRegistrationError(
                f"duplicate network 0x{params.net:08x} ({params.name})"
            )
        _registered_nets.add(params.net)


def is_registered(net: int) -> bool:
    """Whether a network magic is known to the registry."""
    with _registry_lock:
        return net in _registered_nets


_GENESIS_MERKLE_ROOT = bytes.fromhex(
    "96841e6ecc8dc9643aaddfb6fcd616e08f0777c87b508f1c9fb35e461bea9774"
)
_GENESIS_HASH = bytes.fromhex(
    "96841e6ecc8dc9643aaddfb6fcd616e08f0777c87b508f1c9fb35e461bea9774"
)

DIGIBYTE_GENESIS_BLOCK = GenesisBlock(
    version=1,
    prev_block=bytes(32),
    merkle_root=_GENESIS_MERKLE_ROOT,
    timestamp=1389388394,
    bits=0x1E0FFFF0,
    nonce=2447652,
    coinbase_signature_script=bytes.fromhex("04ffff001d010445")
    + b"USA Today: 10/Jan/2014, Target: Data stolen from up to 110M customers",
    coinbase_value=0x12A05F200,
    coinbase_pk_script=bytes.fromhex(
        "4104678afdb0fe5548271967f1a67130b7105cd6a828e03909a67962e0ea1f61"
        "deb649f6bc3f4cef38c4f35504e51ec112de5c384df7ba0b8d578a4c702b6bf1"
        "1d5fac"
    ),
)

DIGIBYTE_MAINNET = ChainParams(
    name="mainnet",
    net=0xDAB6C3FA,
    default_port="12024",
    genesis_block=DIGIBYTE_GENESIS_BLOCK,
    genesis_hash=_GENESIS_HASH,
    bech32_hrp_segwit="dgb",
    pubkey_hash_addr_id=0x1E,
    script_hash_addr_id=0x3F,
    private_key_id=0x80,
    witness_pubkey_hash_addr_id=0x06,
    witness_script_hash_addr_id=0x0A,
    hd_private_key_id=bytes([0x04, 0x88, 0xAD, 0xE4]),
    hd_public_key_id=bytes([0x04, 0x88, 0xB2, 0x1E]),
    hd_coin_type=0x14,
)

DIGIBYTE_TESTNET = ChainParams(
    name="testnet",
    net=0xDDBDC8FD,
    default_port="12026",
    genesis_block=DIGIBYTE_GENESIS_BLOCK,
    genesis_hash=_GENESIS_HASH,
    bech32_hrp_segwit="dgbt",
    pubkey_hash_addr_id=0x7E,
    script_hash_addr_id=0x8C,
    private_key_id=0xFE,
    witness_pubkey_hash_addr_id=0x06,
    witness_script_hash_addr_id=0x0A,
    hd_private_key_id=bytes([0x04, 0x35, 0x83, 0x94]),
    hd_public_key_id=bytes([0x04, 0x35, 0x87, 0xCF]),
    hd_coin_type=0x14,
)

DIGIBYTE_REGTEST = ChainParams(
    name="regtest",
    net=0xD191841E,
    default_port="18444",
    genesis_block=DIGIBYTE_GENESIS_BLOCK,
    genesis_hash=_GENESIS_HASH,
    bech32_hrp_segwit="dgbrt",
    pubkey_hash_addr_id=0x7E,
    script_hash_addr_id=0x8C,
    private_key_id=0xFE,
    witness_pubkey_hash_addr_id=0x06,
    witness_script_hash_addr_id=0x0A,
    hd_private_key_id=bytes([0x04, 0x35, 0x83, 0x94]),
    hd_public_key_id=bytes([0x04, 0x35, 0x87, 0xCF]),
    hd_coin_type=0x14,
)

DOGECOIN_MAINNET = ChainParams(
    name="mainnet",
    net=0xC0C0C0C0,
    pubkey_hash_addr_id=30,
    script_hash_addr_id=22,
    private_key_id=158,
    hd_private_key_id=bytes([0x02, 0xFA, 0xC3, 0x98]),
    hd_public_key_id=bytes([0x02, 0xFA, 0xCA, 0xFD]),
    bech32_hrp_segwit="doge",
)

DOGECOIN_TESTNET = ChainParams(
    name="testnet",
    net=0xFCC1B7DC,
    pubkey_hash_addr_id=113,
    script_hash_addr_id=196,
    private_key_id=241,
    hd_private_key_id=bytes([0x04, 0x35, 0x83, 0x94]),
    hd_public_key_id=bytes([0x04, 0x35, 0x87, 0xCF]),
    bech32_hrp_segwit="doget",
)

DOGECOIN_REGTEST = ChainParams(
    name="regtest",
    net=0xFABFB5DA,
    pubkey_hash_addr_id=111,
    script_hash_addr_id=196,
    private_key_id=239,
    hd_private_key_id=bytes([0x04, 0x35, 0x83, 0x94]),
    hd_public_key_id=bytes([0x04, 0x35, 0x87, 0xCF]),
    bech32_hrp_segwit="dogert",
)

for _params in (
    DIGIBYTE_MAINNET,
    DIGIBYTE_TESTNET,
    DIGIBYTE_REGTEST,
    DOGECOIN_MAINNET,
    DOGECOIN_TESTNET,
    DOGECOIN_REGTEST,
):
    register(_params)
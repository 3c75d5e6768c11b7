"""Solidity ABI encoding of fixed-width integers, byte strings and addresses."""

from __future__ import annotations

from dataclasses import dataclass

from polychain.evm_address import Address

_WORD = 32


class EncodeError(TypeError):
    """Raised when a value has no ABI encoding."""


class _UInt(int):
    """An unsigned integer bounded to a fixed bit width."""

    BITS = 256

    def __new__(cls, value: int = 0):
        number = int.__new__(cls, value)
        if not 0 <= number < (1 << cls.BITS):
            raise ValueError(f"{value} does not fit in {cls.__name__}")
        return number

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class U8(_UInt):
    BITS = 8


class U16(_UInt):
    BITS = 16


class U32(_UInt):
    BITS = 32


class U64(_UInt):
    BITS = 64


class U128(_UInt):
    BITS = 128


class U256(_UInt):
    BITS = 256


class Bytes32(bytes):
    """Exactly 32 bytes, encoded as the static ABI type bytes32."""

    def __new__(cls, value: bytes = bytes(_WORD)):
        data = bytes.__new__(cls, value)
        if len(data) != _WORD:
            raise ValueError(f"expected {_WORD} bytes, got {len(data)}")
        return data


@dataclass(frozen=True)
class Payload:
    """An encoded contract call: the ABI, the function name and its data."""

    abi: bytes = b""
    fn: bytes = b""
    data: bytes = b""


def _pad_right(data: bytes) -> bytes:
    return data + bytes(-len(data) % _WORD)


def encode(*args) -> bytes:
    """Encode values as a Solidity ABI argument tuple."""
    heads: list = []
    for arg in args:
        if isinstance(arg, Bytes32):
            heads.append(bytes(arg))
        elif isinstance(arg, _UInt):
            heads.append(int(arg).to_bytes(_WORD, "big"))
        elif isinstance(arg, Address):
            heads.append(_pad_right(arg.to_bytes()))
        elif isinstance(arg, (bytes, bytearray)):
            tail = len(arg).to_bytes(_WORD, "big") + _pad_right(bytes(arg))
            heads.append(tail if False else _Dynamic(tail))
        else:
            raise EncodeError(f"non-exhaustive pattern: {type(arg).__name__}")

    offset = _WORD * len(heads)
    head_out = []
    tail_out = []
    for item in heads:
        if isinstance(item, _Dynamic):
            head_out.append(offset.to_bytes(_WORD, "big"))
            tail_out.append(item.data)
            offset += len(item.data)
        else:
            head_out.append(item)
    return b"".join(head_out) + b"".join(tail_out)


@dataclass(frozen=True)
class _Dynamic:
    data: bytes
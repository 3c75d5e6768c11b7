"""Recursive Length Prefix encoding, as used for EVM transactions."""

from __future__ import annotations

from typing import Union

Item = Union[bytes, list]


class RLPError(ValueError):
    """Raised for values that cannot be encoded or data that cannot be decoded."""


def _length_prefix(length: int, offset: int) -> bytes:
    if length < 56:
        return bytes([offset + length])
    size = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([offset + 55 + len(size)]) + size


def encode(item) -> bytes:
    """Encode bytes, non-negative integers and (nested) lists of them."""
    if isinstance(item, bool):
        raise RLPError("booleans have no RLP encoding")
    if isinstance(item, int):
        if item < 0:
            raise RLPError("negative integers have no RLP encoding")
        item = item.to_bytes((item.bit_length() + 7) // 8, "big")
    if isinstance(item, (bytes, bytearray, memoryview)):
        data = bytes(item)
        if len(data) == 1 and data[0] < 0x80:
            return data
        return _length_prefix(len(data), 0x80) + data
    if isinstance(item, (list, tuple)):
        body = b"".join(encode(element) for element in item)
        return _length_prefix(len(body), 0xC0) + body
    raise RLPError(f"cannot encode {type(item).__name__}")


def _read_length(data: bytes, pos: int, size: int) -> int:
    if pos + size > len(data):
        raise RLPError("unexpected end of data")
    raw = data[pos : pos + size]
    if raw[0] == 0:
        raise RLPError("non-canonical length: leading zero")
    length = int.from_bytes(raw, "big")
    if length < 56:
        raise RLPError("non-canonical length: should use short form")
    return length


def _decode(data: bytes, pos: int) -> tuple:
    if pos >= len(data):
        raise RLPError("unexpected end of data")
    prefix = data[pos]
    if prefix < 0x80:
        return data[pos : pos + 1], pos + 1
    if prefix < 0xB8:
        length = prefix - 0x80
        start = pos + 1
        end = start + length
        if end > len(data):
            raise RLPError("unexpected end of data")
        if length == 1 and data[start] < 0x80:
            raise RLPError("non-canonical single byte")
        return data[start:end], end
    if prefix < 0xC0:
        size = prefix - 0xB7
        length = _read_length(data, pos + 1, size)
        start = pos + 1 + size
        end = start + length
        if end > len(data):
            raise RLPError("unexpected end of data")
        return data[start:end], end
    if prefix < 0xF8:
        length = prefix - 0xC0
        start = pos + 1
    else:
        size = prefix - 0xF7
        length = _read_length(data, pos + 1, size)
        start = pos + 1 + size
    end = start + length
    if end > len(data):
        raise RLPError("unexpected end of data")
    items = []
    cursor = start
    while cursor < end:
        element, cursor = _decode(data, cursor)
        items.append(element)
    if cursor != end:
        raise RLPError("list payload overruns its length")
    return items, end


def decode(data: bytes) -> Item:
    """Decode one RLP item; the whole input must be consumed."""
    data = bytes(data)
    item, end = _decode(data, 0)
    if end != len(data):
        raise RLPError("trailing bytes after RLP item")
    return item
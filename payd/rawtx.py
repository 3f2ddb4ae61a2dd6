"""Parsing of raw transactions to find their ids."""

from __future__ import annotations

import binascii
import hashlib
import io

_EXTENDED_MARKER = bytes.fromhex("0000000000ef")


def _read(stream: io.BytesIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise ValueError("unexpected end of transaction data")
    return data


def _read_varint(stream: io.BytesIO) -> tuple[int, bytes]:
    prefix = _read(stream, 1)
    if prefix[0] < 0xFD:
        return prefix[0], prefix
    extra = _read(stream, {0xFD: 2, 0xFE: 4, 0xFF: 8}[prefix[0]])
    return int.from_bytes(extra, "little"), prefix + extra


def _read_script(stream: io.BytesIO) -> bytes:
    length, encoded = _read_varint(stream)
    return encoded + _read(stream, length)


def tx_id(tx_hex: str) -> str:
    """Parse a raw transaction (standard or extended form) and return its id."""
    try:
        raw = binascii.unhexlify(tx_hex)
    except (binascii.Error, ValueError):
        raise ValueError("invalid transaction hex") from None
    if not raw:
        raise ValueError("empty transaction")
    stream = io.BytesIO(raw)
    parts = [_read(stream, 4)]
    extended = raw[4:10] == _EXTENDED_MARKER
    if extended:
        _read(stream, len(_EXTENDED_MARKER))

    count, encoded = _read_varint(stream)
    parts.append(encoded)
    for _ in range(count):
        parts.append(_read(stream, 36))
        parts.append(_read_script(stream))
        parts.append(_read(stream, 4))
        if extended:
            _read(stream, 8)
            _read_script(stream)

    count, encoded = _read_varint(stream)
    parts.append(encoded)
    for _ in range(count):
        parts.append(_read(stream, 8))
        parts.append(_read_script(stream))

    parts.append(_read(stream, 4))
    if stream.read(1):
        raise ValueError("unexpected trailing data after transaction")

    serialized = b"".join(parts)
    digest = hashlib.sha256(hashlib.sha256(serialized).digest()).digest()
    return digest[::-1].hex()
"""Named private keys and hierarchical deterministic key derivation."""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime

from Crypto.Hash import RIPEMD160

HARDENED = 1 << 31
"""First index of a hardened child key."""

_MASK64 = (1 << 64) - 1
_MAX_DEPTH = 255
_SERIALIZED_LENGTH = 82
_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

# secp256k1 domain parameters.
_P = 2**256 - 2**32 - 977
_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
_G = (
    0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798,
    0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8,
)

Point = tuple[int, int]


@dataclass(kw_only=True)
class PrivateKey:
    """A named private key belonging to a user."""

    user_id: int = 0
    name: str = ""
    xprv: str = ""
    created_at: datetime | None = None


@dataclass(kw_only=True)
class KeyArgs:
    """Identifies a stored private key."""

    name: str = ""
    user_id: int = 0


def _add(a: Point | None, b: Point | None) -> Point | None:
    if a is None:
        return b
    if b is None:
        return a
    (x1, y1), (x2, y2) = a, b
    if x1 == x2:
        if (y1 + y2) % _P == 0:
            return None
        slope = 3 * x1 * x1 * pow(2 * y1, -1, _P) % _P
    else:
        slope = (y2 - y1) * pow(x2 - x1, -1, _P) % _P
    x3 = (slope * slope - x1 - x2) % _P
    return x3, (slope * (x1 - x3) - y1) % _P


def _mul(scalar: int, point: Point) -> Point | None:
    result: Point | None = None
    addend: Point | None = point
    while scalar:
        if scalar & 1:
            result = _add(result, addend)
        addend = _add(addend, addend)
        scalar >>= 1
    return result


def _encode_point(point: Point) -> bytes:
    x, y = point
    return bytes([2 + (y & 1)]) + x.to_bytes(32, "big")


def _decode_point(data: bytes) -> Point:
    if len(data) == 65 and data[0] == 4:
        x = int.from_bytes(data[1:33], "big")
        y = int.from_bytes(data[33:], "big")
        if x >= _P or y >= _P or (y * y - x * x * x - 7) % _P != 0:
            raise ValueError("public key is not on the curve")
        return x, y
    if len(data) != 33 or data[0] not in (2, 3):
        raise ValueError("invalid public key encoding")
    x = int.from_bytes(data[1:], "big")
    if x >= _P:
        raise ValueError("public key x coordinate out of range")
    y_squared = (x * x * x + 7) % _P
    y = pow(y_squared, (_P + 1) // 4, _P)
    if y * y % _P != y_squared:
        raise ValueError("public key is not on the curve")
    if (y & 1) != (data[0] & 1):
        y = _P - y
    return x, y


def _hash160(data: bytes) -> bytes:
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def _double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def _b58decode(text: str) -> bytes:
    number = 0
    for char in text:
        digit = _ALPHABET.find(char)
        if digit < 0:
            raise ValueError(f"invalid base58 character {char!r}")
        number = number * 58 + digit
    leading = len(text) - len(text.lstrip("1"))
    return b"\x00" * leading + number.to_bytes((number.bit_length() + 7) // 8, "big")


def _b58encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    chars = []
    while number:
        number, remainder = divmod(number, 58)
        chars.append(_ALPHABET[remainder])
    leading = len(data) - len(data.lstrip(b"\x00"))
    return "1" * leading + "".join(reversed(chars))


def _parse_index(segment: str) -> int:
    offset = 0
    if segment.endswith(("'", "h", "H")):
        segment = segment[:-1]
        offset = HARDENED
    if not (segment.isascii() and segment.isdigit()):
        raise ValueError(f"invalid child index {segment!r}")
    value = int(segment)
    limit = HARDENED if offset else 1 << 32
    if value >= limit:
        raise ValueError(f"child index {segment} out of range")
    return value + offset


@dataclass(frozen=True)
class ExtendedKey:
    """A serialisable BIP32 extended key, private or public."""

    version: bytes
    depth: int
    parent_fingerprint: bytes
    child_number: int
    chain_code: bytes
    key: bytes

    @property
    def is_private(self) -> bool:
        return self.key[0] == 0

    @classmethod
    def from_string(cls, encoded: str) -> ExtendedKey:
        """Decode a base58check extended key such as an xprv or tprv."""
        raw = _b58decode(encoded)
        if len(raw) != _SERIALIZED_LENGTH:
            raise ValueError("the provided serialized extended key length is invalid")
        payload, checksum = raw[:-4], raw[-4:]
        if _double_sha256(payload)[:4] != checksum:
            raise ValueError("bad extended key checksum")
        key = payload[45:78]
        if key[0] == 0:
            scalar = int.from_bytes(key[1:], "big")
            if not 0 < scalar < _N:
                raise ValueError("invalid private key in extended key")
        else:
            _decode_point(key)
        return cls(
            version=payload[:4],
            depth=payload[4],
            parent_fingerprint=payload[5:9],
            child_number=int.from_bytes(payload[9:13], "big"),
            chain_code=payload[13:45],
            key=key,
        )

    def __str__(self) -> str:
        payload = (
            self.version
            + bytes([self.depth])
            + self.parent_fingerprint
            + self.child_number.to_bytes(4, "big")
            + self.chain_code
            + self.key
        )
        return _b58encode(payload + _double_sha256(payload)[:4])

    def public_key(self) -> bytes:
        """Return the compressed public key."""
        if not self.is_private:
            return _encode_point(_decode_point(self.key))
        point = _mul(int.from_bytes(self.key[1:], "big"), _G)
        assert point is not None
        return _encode_point(point)

    def _child(self, index: int) -> ExtendedKey:
        if self.depth >= _MAX_DEPTH:
            raise ValueError("cannot derive a key with more than 255 indices in its path")
        if index >= HARDENED:
            if not self.is_private:
                raise ValueError("cannot derive a hardened key from a public key")
            data = self.key + index.to_bytes(4, "big")
        else:
            data = self.public_key() + index.to_bytes(4, "big")
        digest = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        tweak = int.from_bytes(digest[:32], "big")
        if tweak >= _N:
            raise ValueError("the extended key at this index is invalid")
        if self.is_private:
            child_scalar = (tweak + int.from_bytes(self.key[1:], "big")) % _N
            if child_scalar == 0:
                raise ValueError("the extended key at this index is invalid")
            child_key = b"\x00" + child_scalar.to_bytes(32, "big")
        else:
            point = _add(_mul(tweak, _G), _decode_point(self.key))
            if point is None:
                raise ValueError("the extended key at this index is invalid")
            child_key = _encode_point(point)
        return ExtendedKey(
            version=self.version,
            depth=self.depth + 1,
            parent_fingerprint=_hash160(self.public_key())[:4],
            child_number=index,
            chain_code=digest[32:],
            key=child_key,
        )

    def derive_child_from_path(self, path: str) -> ExtendedKey:
        """Derive the key at a slash separated path; an empty path is this key."""
        if path == "":
            return self
        key = self
        for segment in path.split("/"):
            if segment == "m":
                continue
            try:
                index = _parse_index(segment)
            except ValueError as exc:
                raise ValueError(f"derivation path {path} is invalid: {exc}") from None
            key = key._child(index)
        return key

    def derive_public_key_from_path(self, path: str) -> bytes:
        """Return the compressed public key at ``path``."""
        return self.derive_child_from_path(path).public_key()


def derive_path(seed: int) -> str:
    """Turn a 64-bit number into a three level hardened derivation path."""
    if not 0 <= seed <= _MASK64:
        raise ValueError(f"seed {seed} is not an unsigned 64-bit number")
    first = (seed >> 33) | HARDENED
    second = (((seed << 31) & _MASK64) >> 33) | HARDENED
    third = (seed & 3) | HARDENED
    return f"{first}/{second}/{third}"


def derive_number(path: str) -> int:
    """Recover the number a path was made from by :func:`derive_path`."""
    segments = path.split("/")
    if len(segments) != 3:
        raise ValueError(f"path {path!r} must have exactly 3 levels")
    values = []
    for segment in segments:
        if not (segment.isascii() and segment.isdigit()):
            raise ValueError(f"invalid path segment {segment!r}")
        value = int(segment)
        if not HARDENED <= value < 1 << 32:
            raise ValueError(f"path segment {segment} is not a hardened index")
        values.append(value - HARDENED)
    first, second, third = values
    if third > 3:
        raise ValueError(f"last path segment {segments[2]} is out of range")
    return (first << 33) | (second << 2) | third


def p2pkh_script(public_key: bytes) -> bytes:
    """Build a pay-to-public-key-hash locking script."""
    if len(public_key) not in (33, 65):
        raise ValueError("public key must be 33 or 65 bytes")
    return b"\x76\xa9\x14" + _hash160(public_key) + b"\x88\xac"
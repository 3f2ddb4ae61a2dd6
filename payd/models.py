"""Shared wallet data types, configuration and payment request models."""

from __future__ import annotations

import json
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import SplitResult, urlsplit

from payd.validation import Validator, str_length

DUST_LIMIT = 136
"""Minimum amount a miner will accept for an output."""

_HEX = set(string.hexdigits)
_SCHEME_LETTERS = set(string.ascii_letters)
_SCHEME_OTHERS = set(string.digits + "+-.")


@dataclass(kw_only=True)
class MetaData:
    """Common timestamps for stored objects."""

    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass(kw_only=True)
class User:
    """A wallet user or merchant."""

    id: int = 0
    name: str = ""
    email: str = ""
    avatar: str = ""
    address: str = ""
    extended_data: dict[str, Any] | None = None


@dataclass(kw_only=True)
class WalletConfig:
    network: str = ""
    spv_required: bool = False
    payment_expiry_hours: int = 0
    payout_limit_enabled: bool = False
    payout_limit_satoshis: int = 0


@dataclass(kw_only=True)
class ServerConfig:
    hostname: str = ""


@dataclass(kw_only=True)
class DPPConfig:
    server_host: str = ""


def _quote(raw: str) -> str:
    return json.dumps(raw, ensure_ascii=False)


def _split_scheme(raw: str) -> tuple[str, str]:
    for i, char in enumerate(raw):
        if char in _SCHEME_LETTERS:
            continue
        if char in _SCHEME_OTHERS:
            if i == 0:
                return "", raw
            continue
        if char == ":":
            if i == 0:
                raise ValueError("missing protocol scheme")
            return raw[:i], raw[i + 1 :]
        return "", raw
    return "", raw


def _check_escapes(part: str) -> None:
    start = part.find("%")
    while start != -1:
        escape = part[start : start + 3]
        if len(escape) < 3 or escape[1] not in _HEX or escape[2] not in _HEX:
            raise ValueError(f"invalid URL escape {_quote(escape)}")
        start = part.find("%", start + 3)


def parse_url(raw: str) -> SplitResult:
    """Parse a URL, rejecting the malformed forms a strict URL parser refuses."""
    try:
        if any(ord(char) < 0x20 or ord(char) == 0x7F for char in raw):
            raise ValueError("net/url: invalid control character in URL")
        without_fragment, _, fragment = raw.partition("#")
        scheme, rest = _split_scheme(without_fragment)
        rest = rest.partition("?")[0]
        if not scheme and not rest.startswith("/"):
            if ":" in rest.partition("/")[0]:
                raise ValueError("first path segment in URL cannot contain colon")
        _check_escapes(rest)
        _check_escapes(fragment)
    except ValueError as exc:
        raise ValueError(f"parse {_quote(raw)}: {exc}") from None
    return urlsplit(raw)


@dataclass(kw_only=True)
class PayRequest:
    """A request to pay the payment request found at a URL."""

    pay_to_url: str = ""

    def validate(self) -> None:
        error = Validator().validate("payToURL", lambda: parse_url(self.pay_to_url) and None).err()
        if error is not None:
            raise error


@dataclass(kw_only=True)
class DPPOutput:
    amount: int = 0
    script: str = ""
    description: str = ""


@dataclass(kw_only=True)
class DPPDestination:
    outputs: list[DPPOutput] = field(default_factory=list)


@dataclass(kw_only=True)
class MerchantData:
    avatar: str = ""
    name: str = ""
    email: str = ""
    address: str = ""
    payment_reference: str = ""
    extended_data: dict[str, Any] | None = None


@dataclass(kw_only=True)
class PaymentACK:
    """Acknowledgement of a payment; a positive ``error`` means it was refused."""

    payment: Any = None
    memo: str = ""
    error: int = 0


@dataclass(kw_only=True)
class PaymentRequestArgs:
    invoice_id: str = ""

    def validate(self) -> None:
        error = Validator().validate("invoiceID", str_length(self.invoice_id, 1, 30)).err()
        if error is not None:
            raise error


@dataclass(kw_only=True)
class PaymentRequestResponse:
    network: str = ""
    destinations: DPPDestination = field(default_factory=DPPDestination)
    creation_timestamp: datetime | None = None
    expiration_timestamp: datetime | None = None
    payment_url: str = ""
    memo: str = ""
    merchant_data: User = field(default_factory=User)
    fee: Any = None
    ancestry_required: bool = False
"""Invoice management: a minimal order system feeding the payment server."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol

from payd.errors import PaydError
from payd.invoices import Invoice, InvoiceArgs, InvoiceCreate
from payd.models import ServerConfig, User, WalletConfig
from payd.services.connect import ConnectArgs
from payd.services.destinations import DestinationsCreate

_HASHID_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ1234567890"
_HASHID_SEPARATORS = "cfhistuCFHISTU"
_SEPARATOR_RATIO = 3.5
_GUARD_RATIO = 12

# Invoices at or below this amount never require SPV.
_SPV_THRESHOLD = 1000


def _shuffle(alphabet: str, salt: str) -> str:
    if not salt:
        return alphabet
    chars = list(alphabet)
    position = total = 0
    for i in range(len(chars) - 1, 0, -1):
        value = ord(salt[position])
        total += value
        j = (value + position + total) % i
        chars[i], chars[j] = chars[j], chars[i]
        position = (position + 1) % len(salt)
    return "".join(chars)


def _hash(number: int, alphabet: str) -> str:
    digits = []
    while True:
        number, remainder = divmod(number, len(alphabet))
        digits.append(alphabet[remainder])
        if number == 0:
            return "".join(reversed(digits))


def hashid_encode(numbers: list[int], salt: str) -> str:
    """Encode non-negative numbers as a short hashid using the default alphabet."""
    if not numbers:
        raise ValueError("encoding empty array of numbers makes no sense")
    if any(number < 0 for number in numbers):
        raise ValueError("negative number not supported")

    separators = _HASHID_SEPARATORS
    alphabet = "".join(char for char in _HASHID_ALPHABET if char not in separators)
    separators = _shuffle(separators, salt)
    if len(alphabet) / len(separators) > _SEPARATOR_RATIO:
        wanted = math.ceil(len(alphabet) / _SEPARATOR_RATIO)
        missing = wanted - len(separators)
        separators += alphabet[:missing]
        alphabet = alphabet[missing:]
    alphabet = _shuffle(alphabet, salt)
    guard_count = math.ceil(len(alphabet) / _GUARD_RATIO)
    alphabet = alphabet[guard_count:]

    numbers_hash = sum(number % (i + 100) for i, number in enumerate(numbers))
    lottery = alphabet[numbers_hash % len(alphabet)]
    parts = [lottery]
    for i, number in enumerate(numbers):
        alphabet = _shuffle(alphabet, (lottery + salt + alphabet)[: len(alphabet)])
        encoded = _hash(number, alphabet)
        parts.append(encoded)
        if i + 1 < len(numbers):
            number %= ord(encoded[0]) + i
            parts.append(separators[number % len(separators)])
    return "".join(parts)


def _format_time(value: datetime | None) -> str:
    """Render a timestamp as ``2006-01-02 15:04:05.999999999 -0700 MST``."""
    if value is None:
        return "0001-01-01 00:00:00 +0000 UTC"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d} "
        f"{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    total = int((value.utcoffset() or timedelta(0)).total_seconds())
    hours, minutes = divmod(abs(total) // 60, 60)
    numeric = f"{'-' if total < 0 else '+'}{hours:02d}{minutes:02d}"
    name = value.tzname() or ""
    if total == 0 and name in ("", "UTC", "UTC+00:00"):
        name = "UTC"
    elif not name.isalpha():
        name = numeric
    return f"{text} {numeric} {name}"


class _Store(Protocol):
    def invoice(self, args: InvoiceArgs) -> Invoice: ...
    def invoices(self) -> list[Invoice]: ...
    def invoice_create(self, req: InvoiceCreate) -> Invoice: ...
    def invoice_delete(self, args: InvoiceArgs) -> None: ...


class _DestinationCreator(Protocol):
    def destinations_create(self, req: DestinationsCreate) -> Any: ...


class _Transacter(Protocol):
    def begin(self) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class _Clock(Protocol):
    def now_utc(self) -> datetime: ...
    def nanosecond(self) -> int: ...


class _Connector(Protocol):
    def connect(self, args: ConnectArgs) -> None: ...


class InvoiceService:
    """Creates, reads and deletes invoices."""

    def __init__(
        self,
        server: ServerConfig | None,
        wallet: WalletConfig | None,
        store: _Store,
        destinations: _DestinationCreator | None,
        transacter: _Transacter | None,
        clock: _Clock | None,
    ) -> None:
        self._server = server
        self._wallet = wallet
        self._store = store
        self._destinations = destinations
        self._transacter = transacter
        self._clock = clock
        self._connect: _Connector | None = None

    def invoice(self, args: InvoiceArgs) -> Invoice:
        args.validate()
        try:
            return self._store.invoice(args)
        except Exception as exc:
            raise PaydError(f"failed to get invoice with id {args.invoice_id}", exc) from exc

    def invoices(self) -> list[Invoice]:
        try:
            return self._store.invoices()
        except Exception as exc:
            raise PaydError("failed to get invoices", exc) from exc

    def invoices_pending(self) -> list[Invoice]:
        """Return the stored invoices; the store offers no pending filter here."""
        try:
            return self._store.invoices()
        except Exception as exc:
            raise PaydError("failed to get invoices", exc) from exc

    def create(self, req: InvoiceCreate, user: User) -> Invoice:
        """Store a new invoice for ``user`` with its payment destinations."""
        timestamp = self._clock.now_utc()
        req = replace(req, created_at=timestamp)
        if req.expires_at is None:
            req.expires_at = timestamp + timedelta(hours=self._wallet.payment_expiry_hours)
        req.validate(self._clock.now_utc())

        salt = ":".join(
            (
                self._server.hostname,
                str(req.satoshis),
                req.reference or "",
                _format_time(req.expires_at),
            )
        )
        req.invoice_id = hashid_encode([self._clock.nanosecond()], salt)
        req.spv_required = self._wallet.spv_required and req.satoshis > _SPV_THRESHOLD

        self._transacter.begin()
        try:
            created = self._store.invoice_create(req)
            try:
                self._destinations.destinations_create(
                    DestinationsCreate(
                        invoice_id=req.invoice_id, satoshis=req.satoshis, user_id=user.id
                    )
                )
            except Exception as exc:
                raise PaydError("failed to create payment destinations for invoice", exc) from exc
            self._transacter.commit()
        finally:
            try:
                self._transacter.rollback()
            except Exception:
                pass
        if self._connect is not None:
            self._connect.connect(ConnectArgs(invoice_id=req.invoice_id))
        return created

    def delete(self, args: InvoiceArgs) -> None:
        args.validate()
        try:
            self._store.invoice_delete(args)
        except Exception as exc:
            raise PaydError(f"failed to delete invoice with ID {args.invoice_id}", exc) from exc

    def set_connection_service(self, connect: _Connector) -> None:
        self._connect = connect
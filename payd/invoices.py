"""Invoices: payment requests raised by this wallet."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from payd.models import DUST_LIMIT, MetaData
from payd.validation import Validator, date_after, min_uint64, str_length


class InvoiceState(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    DELETED = "deleted"

    def __str__(self) -> str:
        return self.value


@dataclass(kw_only=True)
class Invoice(MetaData):
    """A single request for a number of satoshis."""

    id: str = ""
    reference: str | None = None
    description: str | None = None
    satoshis: int = 0
    expires_at: datetime | None = None
    payment_received_at: datetime | None = None
    refund_to: str | None = None
    refunded_at: datetime | None = None
    state: InvoiceState = InvoiceState.PENDING
    spv_required: bool = False


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(kw_only=True)
class InvoiceCreate:
    """Fields used to create a new invoice."""

    invoice_id: str = ""
    satoshis: int = 0
    reference: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    expires_at: datetime | None = None
    spv_required: bool = False

    def validate(self, now: datetime) -> None:
        error = (
            Validator()
            .validate("satoshis", min_uint64(self.satoshis, DUST_LIMIT))
            .validate("description", str_length(self.description or "", 0, 1024))
            .validate("paymentReference", str_length(self.reference or "", 0, 32))
            .validate("expiresAt", date_after(_as_utc(self.expires_at), _as_utc(now)))
            .err()
        )
        if error is not None:
            raise error


@dataclass(kw_only=True)
class InvoiceUpdatePaid:
    payment_received_at: datetime | None = None
    refund_to: str = ""


@dataclass(kw_only=True)
class InvoiceUpdateRefunded:
    refund_to: str | None = None
    refunded_at: datetime | None = None


@dataclass(kw_only=True)
class InvoiceUpdateArgs:
    invoice_id: str = ""


@dataclass(kw_only=True)
class InvoiceArgs:
    invoice_id: str = ""

    def validate(self) -> None:
        error = Validator().validate("invoiceID", str_length(self.invoice_id, 1, 30)).err()
        if error is not None:
            raise error
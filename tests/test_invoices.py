from datetime import datetime, timedelta, timezone

import pytest

from payd.errors import ValidationError
from payd.invoices import Invoice, InvoiceArgs, InvoiceCreate, InvoiceState
from payd.models import DUST_LIMIT

NOW = datetime(2021, 1, 1, tzinfo=timezone.utc)


def _errors(req, now=NOW):
    try:
        req.validate(now)
    except ValidationError as exc:
        return exc.errors
    return {}


def test_invoice_args_empty_rejected():
    with pytest.raises(ValidationError) as info:
        InvoiceArgs().validate()
    assert str(info.value) == "[invoiceID: value must be between 1 and 30 characters]"


def test_invoice_args_valid():
    args = InvoiceArgs(invoice_id="abc123")
    args.validate()
    assert args.invoice_id == "abc123"


def test_invoice_create_invalid_message():
    req = InvoiceCreate(
        description="invoice" * 1000,
        reference="sick" * 50,
        expires_at=NOW + timedelta(hours=24),
    )
    with pytest.raises(ValidationError) as info:
        req.validate(NOW)
    assert str(info.value) == (
        "[description: value must be between 0 and 1024 characters], "
        "[paymentReference: value must be between 0 and 32 characters], "
        "[satoshis: value 0 is smaller than minimum 136]"
    )


def test_invoice_create_valid():
    req = InvoiceCreate(
        satoshis=2000,
        description="my cool invoice",
        reference="sick",
        expires_at=NOW + timedelta(hours=24),
    )
    assert _errors(req) == {}


@pytest.mark.parametrize("satoshis,ok", [(DUST_LIMIT, True), (DUST_LIMIT - 1, False)])
def test_invoice_create_dust_limit(satoshis, ok):
    req = InvoiceCreate(satoshis=satoshis, expires_at=NOW + timedelta(hours=1))
    assert (_errors(req) == {}) is ok


@pytest.mark.parametrize(
    "expires_at", [None, NOW - timedelta(seconds=1), NOW]
)
def test_invoice_create_expiry_must_be_future(expires_at):
    req = InvoiceCreate(satoshis=2000, expires_at=expires_at)
    assert list(_errors(req)) == ["expiresAt"]


def test_invoice_create_naive_times_treated_as_utc():
    req = InvoiceCreate(satoshis=2000, expires_at=datetime(2025, 1, 1))
    assert _errors(req, datetime(2021, 1, 1)) == {}


def test_invoice_state_strings():
    assert str(InvoiceState.PAID) == "paid"
    assert InvoiceState("refunded") is InvoiceState.REFUNDED
    assert [s.value for s in InvoiceState] == ["pending", "paid", "refunded", "deleted"]


def test_invoice_carries_metadata():
    inv = Invoice(id="abc123", satoshis=1000, created_at=NOW, spv_required=True)
    assert inv.created_at == NOW
    assert inv.state is InvoiceState.PENDING
    assert inv.expires_at is None
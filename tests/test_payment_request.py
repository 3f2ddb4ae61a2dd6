from datetime import datetime, timedelta, timezone

import pytest

from payd.errors import PaydError, UnprocessableError, ValidationError
from payd.models import PaymentRequestArgs, User, WalletConfig
from payd.services.destinations import Destination, Output
from payd.services.payment_request import FeeQuoteCreateArgs, PaymentRequestService

SCRIPT = "76a91474b0424726ca510399c1eb5c8374f974c68b2fa388ac"
NOW = datetime.now(timezone.utc)


class FakeDestinations:
    def __init__(self, dest=None, error=None):
        self.dest = dest
        self.error = error
        self.args = []

    def destinations(self, args):
        self.args.append(args)
        if self.error is not None:
            raise self.error
        return self.dest


class FakeFees:
    def __init__(self, quote=None, error=None, write_error=None):
        self.quote = quote
        self.error = error
        self.write_error = write_error
        self.written = []

    def fee_quote(self):
        if self.error is not None:
            raise self.error
        return self.quote

    def fee_quote_create(self, args):
        self.written.append(args)
        if self.write_error is not None:
            raise self.write_error


class FakeOwners:
    def __init__(self, owner=None, error=None):
        self.value = owner
        self.error = error

    def owner(self):
        if self.error is not None:
            raise self.error
        return self.value


def _destination(expires_at=NOW + timedelta(hours=1), spv_required=True):
    return Destination(
        network="mainnet",
        spv_required=spv_required,
        outputs=[Output(locking_script=SCRIPT, satoshis=1000)],
        created_at=NOW,
        expires_at=expires_at,
    )


def _service(dests=None, fees=None, owners=None):
    fees = fees or FakeFees(quote={"fee": "quote"})
    return PaymentRequestService(
        WalletConfig(network="mainnet"),
        dests or FakeDestinations(_destination()),
        fees,
        fees,
        owners or FakeOwners(User(name="Merchant Person", email="merchant@example.com")),
    ), fees


def test_successful_payment_request():
    svc, fees = _service()
    resp = svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))

    assert resp.network == "mainnet"
    assert resp.ancestry_required is True
    assert resp.memo == "invoice abc123"
    assert resp.fee == {"fee": "quote"}
    assert resp.creation_timestamp == NOW
    output = resp.destinations.outputs[0]
    assert (output.amount, output.script) == (1000, SCRIPT)
    assert output.description == "payment reference abc123"
    assert resp.merchant_data.name == "Merchant Person"
    assert resp.merchant_data.extended_data == {"paymentReference": "abc123"}
    assert fees.written == [FeeQuoteCreateArgs(invoice_id="abc123", fee_quote={"fee": "quote"})]


def test_existing_extended_data_is_kept():
    owner = User(name="Merchant Person", extended_data={"shop": "fruit"})
    svc, _ = _service(owners=FakeOwners(owner))
    resp = svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))
    assert resp.merchant_data.extended_data == {"shop": "fruit", "paymentReference": "abc123"}


def test_no_expiry_is_accepted():
    svc, _ = _service(dests=FakeDestinations(_destination(expires_at=None, spv_required=False)))
    resp = svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))
    assert resp.expiration_timestamp is None
    assert resp.ancestry_required is False


def test_invalid_args_are_rejected():
    svc, _ = _service()
    with pytest.raises(ValidationError) as excinfo:
        svc.payment_request(PaymentRequestArgs())
    assert str(excinfo.value) == "[invoiceID: value must be between 1 and 30 characters]"


def test_expired_payment_is_rejected():
    dests = FakeDestinations(_destination(expires_at=NOW - timedelta(hours=1)))
    svc, _ = _service(dests=dests)
    with pytest.raises(UnprocessableError) as excinfo:
        svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))
    assert excinfo.value.code == "U102"
    assert str(excinfo.value) == "Unprocessable: payment expired"


def test_destinations_error_is_reported():
    svc, _ = _service(dests=FakeDestinations(error=RuntimeError("boom")))
    with pytest.raises(PaydError) as excinfo:
        svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))
    assert str(excinfo.value) == (
        "failed to get destinations when building payment request 'abc123': boom"
    )


def test_owner_error_is_reported():
    svc, _ = _service(owners=FakeOwners(error=RuntimeError("boom")))
    with pytest.raises(PaydError) as excinfo:
        svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))
    assert str(excinfo.value) == "failed to get owner when building payment request 'abc123': boom"


def test_fee_fetch_error_is_reported():
    svc, _ = _service(fees=FakeFees(error=RuntimeError("boom")))
    with pytest.raises(PaydError) as excinfo:
        svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))
    assert str(excinfo.value) == "failed to get fees when getting payment request: boom"


def test_fee_write_error_is_reported():
    svc, _ = _service(fees=FakeFees(quote={"fee": "quote"}, write_error=RuntimeError("boom")))
    with pytest.raises(PaydError) as excinfo:
        svc.payment_request(PaymentRequestArgs(invoice_id="abc123"))
    assert str(excinfo.value) == "failed to write fees when getting payment request: boom"
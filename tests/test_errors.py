import pytest

from payd.errors import (
    ClientError,
    PaydError,
    UnprocessableError,
    ValidationError,
    find_cause,
    wrap,
)


def test_wrap_renders_message_and_cause():
    wrapped = wrap(PaydError("whoopsie"), "failed to get invoices")
    assert str(wrapped) == "failed to get invoices: whoopsie"


def test_wrap_keeps_python_cause_chain():
    original = ValueError("nope")
    wrapped = wrap(original, "failed to create payment destinations for invoice")
    assert wrapped.__cause__ is original
    assert str(wrapped) == "failed to create payment destinations for invoice: nope"


def test_wrap_of_none_is_none():
    assert wrap(None, "failed to delete invoice with ID cvb123") is None


def test_unprocessable_renders_prefix():
    err = UnprocessableError("E001", "no payment request for you")
    assert str(err) == "Unprocessable: no payment request for you"
    assert err.code == "E001"


def test_find_cause_through_wraps():
    inner = UnprocessableError("E001", "no payment request for you")
    outer = wrap(wrap(inner, "first"), "second")
    assert find_cause(outer, UnprocessableError) is inner


def test_find_cause_absent():
    outer = wrap(PaydError("whoopsie"), "failed")
    assert find_cause(outer, UnprocessableError) is None


def test_find_cause_follows_dunder_cause():
    inner = UnprocessableError("U102", "payment expired")
    try:
        try:
            raise inner
        except UnprocessableError as exc:
            raise RuntimeError("outer") from exc
    except RuntimeError as outer:
        assert find_cause(outer, UnprocessableError) is inner


def test_validation_error_sorted_fields():
    err = ValidationError(
        {
            "satoshis": ["value 0 is smaller than minimum 136"],
            "description": ["value must be between 0 and 1024 characters"],
            "paymentReference": ["value must be between 0 and 32 characters"],
        }
    )
    assert str(err) == (
        "[description: value must be between 0 and 1024 characters], "
        "[paymentReference: value must be between 0 and 32 characters], "
        "[satoshis: value 0 is smaller than minimum 136]"
    )


def test_validation_error_is_found_as_payd_error():
    err = ValidationError({"invoiceID": ["value cannot be empty"]})
    wrapped = wrap(err, "failed")
    assert find_cause(wrapped, PaydError) is wrapped or find_cause(wrapped, ValidationError) is err
    assert find_cause(wrapped, ValidationError) is err
    assert str(err) == "[invoiceID: value cannot be empty]"
    assert "invoiceID" in err.errors


def test_client_error_equality():
    first = ClientError(id="e1", code="N01", title="not found", message="unable to find foo")
    second = ClientError(id="e1", code="N01", title="not found", message="unable to find foo")
    assert first == second
    assert first.code == "N01"
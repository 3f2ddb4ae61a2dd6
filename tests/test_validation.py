import re
from datetime import datetime, timedelta, timezone

import pytest

from payd.errors import PaydError, ValidationError
from payd.validation import (
    Validator,
    date_after,
    match_string,
    min_uint64,
    not_empty,
    str_length,
    str_length_exact,
)


def _errors(validator):
    err = validator.err()
    return {} if err is None else err.errors


def test_min_uint64_message():
    v = Validator().validate("satoshis", min_uint64(100, 136))
    assert str(v.err()) == "[satoshis: value 100 is smaller than minimum 136]"


def test_min_uint64_boundary_passes():
    assert _errors(Validator().validate("satoshis", min_uint64(136, 136))) == {}


def test_str_length_message():
    v = Validator().validate("invoiceID", str_length("", 1, 30))
    assert str(v.err()) == "[invoiceID: value must be between 1 and 30 characters]"


@pytest.mark.parametrize("length,ok", [(1, True), (30, True), (31, False), (0, False)])
def test_str_length_bounds(length, ok):
    errors = _errors(Validator().validate("id", str_length("a" * length, 1, 30)))
    assert (errors == {}) is ok


def test_not_empty_message():
    v = Validator().validate("invoiceID", not_empty(""))
    assert str(v.err()) == "[invoiceID: value cannot be empty]"


@pytest.mark.parametrize("value", [None, "", {}, [], 0])
def test_not_empty_rejects_empty(value):
    assert list(_errors(Validator().validate("f", not_empty(value)))) == ["f"]


@pytest.mark.parametrize("value", ["x", {"a": 1}, [0], 5, object()])
def test_not_empty_accepts_values(value):
    assert _errors(Validator().validate("f", not_empty(value))) == {}


def test_str_length_exact():
    v = Validator().validate("txId", str_length_exact("a" * 63, 64)).validate(
        "other", str_length_exact("a" * 64, 64)
    )
    assert list(_errors(v)) == ["txId"]


def test_date_after():
    now = datetime(2021, 1, 1, tzinfo=timezone.utc)
    v = (
        Validator()
        .validate("future", date_after(now + timedelta(hours=1), now))
        .validate("past", date_after(now - timedelta(hours=1), now))
        .validate("same", date_after(now, now))
        .validate("missing", date_after(None, now))
    )
    assert sorted(_errors(v)) == ["missing", "past", "same"]


def test_match_string():
    pattern = re.compile(r"^(header|hash|merkleRoot)$")
    v = (
        Validator()
        .validate("good", match_string("header", pattern))
        .validate("bad", match_string("headers", pattern))
        .validate("str_pattern", match_string("hash", r"^(header|hash)$"))
    )
    assert list(_errors(v)) == ["bad"]


def test_raising_checks_are_collected():
    def check():
        raise ValueError("either an SPVEnvelope or a rawTX are required")

    def payd_check():
        raise PaydError("boom")

    v = Validator().validate("spvEnvelope", check).validate("x", payd_check)
    assert _errors(v) == {
        "spvEnvelope": ["either an SPVEnvelope or a rawTX are required"],
        "x": ["boom"],
    }


def test_multiple_messages_per_field_and_chaining():
    v = Validator()
    assert v.validate("a", not_empty(""), min_uint64(0, 136)) is v
    err = v.err()
    assert isinstance(err, ValidationError)
    assert err.errors["a"] == ["value cannot be empty", "value 0 is smaller than minimum 136"]


def test_err_none_when_valid():
    assert Validator().validate("a", not_empty("x")).err() is None
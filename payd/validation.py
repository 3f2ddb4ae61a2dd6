"""Field validation that collects every failure before reporting."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime
from typing import Any

from payd.errors import PaydError, ValidationError

Check = Callable[[], Any]


class Validator:
    """Runs checks per field and gathers their failure messages.

    A check is a callable taking no arguments. It fails when it returns a
    value other than None (the message) or raises ValueError/PaydError.
    """

    def __init__(self) -> None:
        self._errors: dict[str, list[str]] = {}

    def validate(self, field: str, *args: Check) -> Validator:
        for check in args:
            try:
                outcome = check()
            except (ValueError, PaydError) as exc:
                outcome = str(exc)
            if outcome is not None:
                self._errors.setdefault(field, []).append(str(outcome))
        return self

    def err(self) -> ValidationError | None:
        """Return the collected failures as an error, or None if all passed."""
        if not self._errors:
            return None
        return ValidationError(self._errors)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (int, float)):
        return value == 0
    try:
        return len(value) == 0
    except TypeError:
        return False


def min_uint64(value: int, minimum: int) -> Check:
    def check() -> str | None:
        if value < minimum:
            return f"value {value} is smaller than minimum {minimum}"
        return None

    return check


def str_length(value: str, minimum: int, maximum: int) -> Check:
    def check() -> str | None:
        if not minimum <= len(value) <= maximum:
            return f"value must be between {minimum} and {maximum} characters"
        return None

    return check


def str_length_exact(value: str, length: int) -> Check:
    def check() -> str | None:
        if len(value) != length:
            return f"value should be exactly {length} characters"
        return None

    return check


def date_after(value: datetime | None, after: datetime) -> Check:
    def check() -> str | None:
        if value is None:
            return f"value must be after {after.isoformat()}"
        if value <= after:
            return f"value {value.isoformat()} must be after {after.isoformat()}"
        return None

    return check


def not_empty(value: Any) -> Check:
    def check() -> str | None:
        return "value cannot be empty" if _is_empty(value) else None

    return check


def match_string(value: str, pattern: str | re.Pattern[str]) -> Check:
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    def check() -> str | None:
        if regex.search(value) is None:
            return f"value {value} does not match pattern {regex.pattern}"
        return None

    return check
"""Error types shared by the wallet services."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TypeVar

E = TypeVar("E", bound=BaseException)


@dataclass
class ClientError:
    """An error description that is safe to hand back to a client."""

    id: str
    code: str
    title: str
    message: str


class PaydError(Exception):
    """Base error; renders as ``message: cause`` when it wraps another error."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class ValidationError(PaydError):
    """One or more request fields failed validation."""

    def __init__(self, errors: Mapping[str, Sequence[str]]) -> None:
        self.errors = {field: list(messages) for field, messages in errors.items()}
        super().__init__(self._render())

    def _render(self) -> str:
        return ", ".join(
            f"[{field}: {', '.join(self.errors[field])}]" for field in sorted(self.errors)
        )

    def __str__(self) -> str:
        return self._render()


class UnprocessableError(PaydError):
    """The request was understood but cannot be processed."""

    def __init__(self, code: str, detail: str) -> None:
        super().__init__(detail)
        self.code = code
        self.detail = detail

    def __str__(self) -> str:
        return f"Unprocessable: {self.detail}"


def wrap(err: BaseException | None, message: str) -> PaydError | None:
    """Wrap ``err`` with a message; a missing error stays missing."""
    if err is None:
        return None
    return PaydError(message, err)


def find_cause(err: BaseException | None, error_type: type[E]) -> E | None:
    """Return the first error of ``error_type`` in the cause chain of ``err``."""
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        if isinstance(current, error_type):
            return current
        seen.add(id(current))
        current = getattr(current, "cause", None) or current.__cause__
    return None
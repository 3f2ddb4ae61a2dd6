"""Wallet balance lookups."""

from __future__ import annotations

from typing import Any, Protocol

from payd.errors import PaydError


class _BalanceReader(Protocol):
    def balance(self) -> Any: ...


class BalanceService:
    """Reports the current wallet balance."""

    def __init__(self, store: _BalanceReader) -> None:
        self._store = store

    def balance(self) -> Any:
        try:
            return self._store.balance()
        except Exception as exc:
            raise PaydError("failed to get balance", exc) from exc
"""Wallet owner lookups."""

from __future__ import annotations

from typing import Protocol

from payd.models import User


class _OwnerStore(Protocol):
    def owner(self) -> User | None: ...


class OwnerService:
    """Returns the owner of the wallet."""

    def __init__(self, store: _OwnerStore) -> None:
        self._store = store

    def owner(self) -> User | None:
        return self._store.owner()
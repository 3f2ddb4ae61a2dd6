"""Application health reporting."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from payd.errors import PaydError

_log = logging.getLogger(__name__)


class _HealthChecker(Protocol):
    def state(self) -> tuple[dict[str, Any], bool]:
        """Return the state of each check and whether any failed."""


class HealthService:
    """Raises when the application is unhealthy."""

    def __init__(self, checker: _HealthChecker) -> None:
        self._checker = checker

    def health(self) -> None:
        try:
            status, failed = self._checker.state()
        except Exception as exc:
            raise PaydError("failed to check health state", exc) from exc
        if not status:
            return
        if failed:
            _log.error("health check failed: %s", status)
            raise PaydError("all healthchecks failed")
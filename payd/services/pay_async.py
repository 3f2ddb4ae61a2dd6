"""Payments sent down an asynchronous payment channel."""

from __future__ import annotations

import logging
from typing import Protocol

from payd.models import PayRequest, PaymentACK

_log = logging.getLogger(__name__)


class _PayWriter(Protocol):
    def pay(self, req: PayRequest) -> None: ...


class PayChannel:
    """Starts an async payment; the final ack arrives later on the channel."""

    def __init__(self, writer: _PayWriter) -> None:
        self._writer = writer

    def pay(self, req: PayRequest) -> PaymentACK:
        try:
            self._writer.pay(req)
        except Exception as exc:
            _log.error("failed to setup async channel: %s", exc)
            return PaymentACK(memo=f"failed to setup channel {exc}", error=1)
        return PaymentACK(memo="pending", error=0)
"""Connecting invoices to a remote payment protocol server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from payd.errors import PaydError
from payd.invoices import InvoiceArgs
from payd.models import DPPConfig, parse_url
from payd.validation import Validator, not_empty

_SOCKET_SCHEMES = frozenset({"ws", "wss"})


@dataclass(kw_only=True)
class ConnectArgs:
    """Identifies the invoice to open a connection for."""

    invoice_id: str = ""

    def validate(self) -> None:
        error = Validator().validate("invoiceID", not_empty(self.invoice_id)).err()
        if error is not None:
            raise error


class _ConnectWriter(Protocol):
    def connect(self, args: ConnectArgs) -> None: ...


class _Invoices(Protocol):
    def invoice(self, args: InvoiceArgs) -> Any: ...


class ConnectService:
    """Connects this wallet to a payment server over a socket when configured."""

    def __init__(self, writer: _ConnectWriter, invoices: _Invoices, dpp: DPPConfig) -> None:
        self._writer = writer
        self._invoices = invoices
        self._dpp = dpp

    def connect(self, args: ConnectArgs) -> None:
        args.validate()
        try:
            self._invoices.invoice(InvoiceArgs(invoice_id=args.invoice_id))
        except Exception as exc:
            raise PaydError(
                f"failed to validate invoice {args.invoice_id} when attempting to create connection",
                exc,
            ) from exc
        try:
            url = parse_url(self._dpp.server_host)
        except ValueError as exc:
            raise PaydError("failed to parse url", exc) from exc
        if url.scheme in _SOCKET_SCHEMES:
            self._writer.connect(args)
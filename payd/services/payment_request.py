"""Building payment requests for invoices."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from payd.errors import PaydError, UnprocessableError
from payd.models import (
    DPPDestination,
    DPPOutput,
    PaymentRequestArgs,
    PaymentRequestResponse,
    User,
    WalletConfig,
)
from payd.services.destinations import Destination, DestinationsArgs


@dataclass(kw_only=True)
class FeeQuoteCreateArgs:
    """Records the fee quote handed out with an invoice's payment request."""

    invoice_id: str = ""
    fee_quote: Any = None


class _Destinations(Protocol):
    def destinations(self, args: DestinationsArgs) -> Destination: ...


class _FeeFetcher(Protocol):
    def fee_quote(self) -> Any: ...


class _FeeWriter(Protocol):
    def fee_quote_create(self, args: FeeQuoteCreateArgs) -> None: ...


class _Owners(Protocol):
    def owner(self) -> User | None: ...


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PaymentRequestService:
    """Assembles the payment request a payer needs to pay an invoice."""

    def __init__(
        self,
        wallet: WalletConfig,
        destinations: _Destinations,
        fee_fetcher: _FeeFetcher,
        fee_writer: _FeeWriter,
        owners: _Owners,
    ) -> None:
        self._wallet = wallet
        self._destinations = destinations
        self._fee_fetcher = fee_fetcher
        self._fee_writer = fee_writer
        self._owners = owners

    def payment_request(self, args: PaymentRequestArgs) -> PaymentRequestResponse:
        args.validate()
        dest, outputs = self._outputs(args.invoice_id)
        owner = self._owner(args.invoice_id)
        fees = self._fees(args.invoice_id)
        return PaymentRequestResponse(
            network=self._wallet.network,
            ancestry_required=dest.spv_required,
            destinations=DPPDestination(outputs=outputs),
            fee=fees,
            creation_timestamp=dest.created_at,
            expiration_timestamp=dest.expires_at,
            memo=f"invoice {args.invoice_id}",
            merchant_data=User(
                avatar=owner.avatar,
                name=owner.name,
                email=owner.email,
                address=owner.address,
                extended_data=owner.extended_data,
            ),
        )

    def _outputs(self, invoice_id: str) -> tuple[Destination, list[DPPOutput]]:
        try:
            dest = self._destinations.destinations(DestinationsArgs(invoice_id=invoice_id))
        except Exception as exc:
            raise PaydError(
                f"failed to get destinations when building payment request '{invoice_id}'", exc
            ) from exc
        outputs = [
            DPPOutput(
                amount=out.satoshis,
                script=out.locking_script,
                description=f"payment reference {invoice_id}",
            )
            for out in dest.outputs
        ]
        if dest.expires_at is not None and _as_utc(dest.expires_at) < datetime.now(timezone.utc):
            raise UnprocessableError("U102", "payment expired")
        return dest, outputs

    def _owner(self, invoice_id: str) -> User:
        try:
            owner = self._owners.owner()
        except Exception as exc:
            raise PaydError(
                f"failed to get owner when building payment request '{invoice_id}'", exc
            ) from exc
        if owner is None:
            raise PaydError(f"no owner found when building payment request '{invoice_id}'")
        if owner.extended_data is None:
            owner.extended_data = {}
        # The payment flow checks this reference against the invoice.
        owner.extended_data["paymentReference"] = invoice_id
        return owner

    def _fees(self, invoice_id: str) -> Any:
        try:
            quote = self._fee_fetcher.fee_quote()
        except Exception as exc:
            raise PaydError("failed to get fees when getting payment request", exc) from exc
        try:
            self._fee_writer.fee_quote_create(
                FeeQuoteCreateArgs(invoice_id=invoice_id, fee_quote=quote)
            )
        except Exception as exc:
            raise PaydError("failed to write fees when getting payment request", exc) from exc
        return quote
"""Payment destinations: the outputs an invoice asks to be paid to."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from payd.errors import PaydError
from payd.invoices import Invoice, InvoiceArgs
from payd.keys import ExtendedKey, derive_path, p2pkh_script
from payd.models import DUST_LIMIT, WalletConfig
from payd.validation import Validator, min_uint64, not_empty

MASTER_KEY_NAME = "masterkey"

# One output per invoice for now; the amount may be split across more later.
_OUTPUTS_PER_DESTINATION = 1


@dataclass(kw_only=True)
class DestinationsCreate:
    """A request to create payment destinations for an invoice."""

    invoice_id: str | None = None
    satoshis: int = 0
    user_id: int = 0

    def validate(self) -> None:
        error = Validator().validate("satoshis", min_uint64(self.satoshis, DUST_LIMIT)).err()
        if error is not None:
            raise error


@dataclass(kw_only=True)
class DestinationsArgs:
    """Identifies the invoice whose destinations are wanted."""

    invoice_id: str = ""

    def validate(self) -> None:
        error = Validator().validate("invoiceID", not_empty(self.invoice_id)).err()
        if error is not None:
            raise error


@dataclass(kw_only=True)
class DestinationsCreateArgs:
    invoice_id: str | None = None


@dataclass(kw_only=True)
class DestinationCreate:
    """A single output to be stored."""

    user_id: int = 0
    derivation_path: str = ""
    script: str = ""
    satoshis: int = 0
    key_name: str = ""


@dataclass(kw_only=True)
class DerivationExistsArgs:
    key_name: str = ""
    user_id: int = 0
    path: str = ""


@dataclass(kw_only=True)
class Output:
    """A stored output; ``locking_script`` is hex encoded."""

    id: int = 0
    locking_script: str = ""
    satoshis: int = 0
    derivation_path: str = ""
    state: str = ""


@dataclass(kw_only=True)
class Destination:
    """The outputs and terms a payer needs to pay an invoice."""

    network: str = ""
    spv_required: bool = False
    outputs: list[Output] = field(default_factory=list)
    created_at: datetime | None = None
    expires_at: datetime | None = None


class _PrivateKeys(Protocol):
    def private_key(self, name: str, user_id: int) -> ExtendedKey: ...


class _DestinationStore(Protocol):
    def destinations_create(
        self, args: DestinationsCreateArgs, dests: list[DestinationCreate]
    ) -> list[Output]: ...

    def destinations(self, args: DestinationsArgs) -> list[Output]: ...


class _Derivations(Protocol):
    def derivation_path_exists(self, args: DerivationExistsArgs) -> bool: ...


class _Invoices(Protocol):
    def invoice(self, args: InvoiceArgs) -> Invoice: ...


class _Seed(Protocol):
    def uint64(self) -> int: ...


class DestinationsService:
    """Creates and reads payment destinations."""

    def __init__(
        self,
        wallet: WalletConfig | None,
        private_keys: _PrivateKeys | None,
        store: _DestinationStore,
        derivations: _Derivations | None,
        invoices: _Invoices | None,
        seed: _Seed | None,
    ) -> None:
        self._wallet = wallet
        self._private_keys = private_keys
        self._store = store
        self._derivations = derivations
        self._invoices = invoices
        self._seed = seed

    def destinations_create(self, req: DestinationsCreate) -> Destination:
        """Derive fresh outputs for ``req`` and store them."""
        req.validate()
        master = self._private_keys.private_key(MASTER_KEY_NAME, req.user_id)
        dests = [
            self._new_destination(master, req) for _ in range(_OUTPUTS_PER_DESTINATION)
        ]
        try:
            outputs = self._store.destinations_create(
                DestinationsCreateArgs(invoice_id=req.invoice_id), dests
            )
        except Exception as exc:
            raise PaydError("failed to store destinations", exc) from exc
        return Destination(outputs=outputs)

    def _new_destination(self, master: ExtendedKey, req: DestinationsCreate) -> DestinationCreate:
        path = self._unique_path(req.user_id)
        try:
            public_key = master.derive_public_key_from_path(path)
        except ValueError as exc:
            raise PaydError(
                "failed to create new extended key when creating new payment request output", exc
            ) from exc
        try:
            script = p2pkh_script(public_key)
        except ValueError as exc:
            raise PaydError("failed to derive key when creating output", exc) from exc
        return DestinationCreate(
            user_id=req.user_id,
            derivation_path=path,
            script=script.hex(),
            satoshis=req.satoshis,
            key_name=MASTER_KEY_NAME,
        )

    def _unique_path(self, user_id: int) -> str:
        while True:
            try:
                seed = self._seed.uint64()
            except Exception as exc:
                raise PaydError("failed to create seed for derivation path", exc) from exc
            path = derive_path(seed)
            try:
                exists = self._derivations.derivation_path_exists(
                    DerivationExistsArgs(key_name=MASTER_KEY_NAME, user_id=user_id, path=path)
                )
            except Exception as exc:
                raise PaydError(
                    "failed to check derivation path exists when creating new destination", exc
                ) from exc
            if not exists:
                return path

    def destinations(self, args: DestinationsArgs) -> Destination:
        """Return the stored destinations of an invoice along with its terms."""
        args.validate()
        try:
            invoice: Any = self._invoices.invoice(InvoiceArgs(invoice_id=args.invoice_id))
        except Exception as exc:
            raise PaydError(
                f"failed to get invoice for invoiceID '{args.invoice_id}' when getting destinations",
                exc,
            ) from exc
        try:
            outputs = self._store.destinations(args)
        except Exception as exc:
            raise PaydError(
                f"failed to read destinations for invoiceID '{args.invoice_id}'", exc
            ) from exc
        return Destination(
            network=self._wallet.network,
            spv_required=invoice.spv_required,
            outputs=outputs,
            created_at=invoice.created_at,
            expires_at=invoice.expires_at,
        )
"""Incoming payments, acknowledgements and peer to peer payment records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from payd.models import User
from payd.peerchannels import PeerChannel
from payd.proofs import MerkleProof
from payd.rawtx import tx_id
from payd.validation import Validator, not_empty, str_length_exact


@dataclass(kw_only=True)
class SPVEnvelope:
    """A transaction with the ancestry needed to verify it."""

    tx_id: str = ""
    raw_tx: str = ""
    proof: MerkleProof | None = None
    mapi_responses: list[Any] = field(default_factory=list)
    parents: dict[str, SPVEnvelope] = field(default_factory=dict)


@dataclass(kw_only=True)
class ProofCallback:
    """Where to send a merkle proof, with an optional auth token."""

    token: str = ""


@dataclass(kw_only=True)
class PaymentCreate:
    """A payment submitted to be validated and added to the wallet."""

    merchant_data: User = field(default_factory=User)
    refund_to: str | None = None
    memo: str = ""
    spv_envelope: SPVEnvelope | None = None
    proof_callbacks: dict[str, ProofCallback] = field(default_factory=dict)

    def validate(self, spv_required: bool) -> None:
        """Raise ValidationError if the payment is not acceptable."""
        envelope = self.spv_envelope
        extended = self.merchant_data.extended_data
        validator = Validator().validate("spvEnvelope", self._check_envelope_present)
        validator = validator.validate("merchantData.extendedData", not_empty(extended))
        if extended is not None:
            validator = validator.validate(
                "merchantData.paymentReference", not_empty(extended.get("paymentReference"))
            )
        if spv_required:
            validator = validator.validate(
                "spvEnvelope",
                lambda: "spvEnvelope is required by this payment" if envelope is None else None,
            )
        if envelope is not None:
            validator = validator.validate(
                "spvEnvelope.txId", str_length_exact(envelope.tx_id, 64)
            ).validate("spvEnvelope.rawTx", lambda: _check_raw_tx(envelope))
        error = validator.err()
        if error is not None:
            raise error

    def _check_envelope_present(self) -> str | None:
        if self.spv_envelope is None or not self.spv_envelope.tx_id:
            return "either an SPVEnvelope or a rawTX are required"
        return None


def _check_raw_tx(envelope: SPVEnvelope) -> str | None:
    try:
        actual = tx_id(envelope.raw_tx)
    except ValueError as exc:
        return f"invalid rawTx hex supplied: {exc}"
    if actual != envelope.tx_id:
        return "transaction mismatch, root txId does not match rawTx supplied"
    return None


@dataclass(kw_only=True)
class PaymentCreateArgs:
    invoice_id: str = ""


@dataclass(kw_only=True)
class AckArgs:
    """Identifies the payment being acknowledged."""

    invoice_id: str = ""
    tx_id: str = ""
    peer_channel: PeerChannel | None = None


@dataclass(kw_only=True)
class Ack:
    failed: bool = False
    reason: str = ""


@dataclass(kw_only=True)
class Payment:
    transaction: str = ""
    spv_envelope: SPVEnvelope | None = None
    merchant_data: User = field(default_factory=User)
    memo: str = ""


@dataclass(kw_only=True)
class PaymentSend:
    spv_envelope: SPVEnvelope | None = None
    proof_callbacks: dict[str, ProofCallback] = field(default_factory=dict)
    merchant_data: User = field(default_factory=User)


@dataclass(kw_only=True)
class P2PTransactionArgs:
    alias: str = ""
    domain: str = ""
    payment_id: str = ""
    tx_hex: str = ""


@dataclass(kw_only=True)
class P2PTransactionMetadata:
    """Optional details sent along with a peer to peer payment."""

    note: str = ""
    pub_key: str = ""
    sender: str = ""
    signature: str = ""


@dataclass(kw_only=True)
class P2PTransaction:
    tx_hex: str = ""
    metadata: P2PTransactionMetadata = field(default_factory=P2PTransactionMetadata)


@dataclass(kw_only=True)
class P2PCapabilityArgs:
    domain: str = ""
    brfc_id: str = ""


@dataclass(kw_only=True)
class P2POutputCreateArgs:
    domain: str = ""
    alias: str = ""


@dataclass(kw_only=True)
class P2PPayment:
    satoshis: int = 0
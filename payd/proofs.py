"""Merkle proof callbacks and their validation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from payd.rawtx import tx_id
from payd.validation import Validator, match_string, not_empty

_TARGET_TYPE = re.compile(r"^(header|hash|merkleRoot)\Z")


@dataclass(kw_only=True)
class MerkleProof:
    """A merkle proof in TSC format."""

    index: int = 0
    tx_or_id: str = ""
    target: str = ""
    nodes: list[str] = field(default_factory=list)
    target_type: str = ""
    proof_type: str = ""
    composite: bool = False


@dataclass(kw_only=True)
class ProofCreateArgs:
    """Identifies the transaction a proof is expected for."""

    tx_id: str = ""


@dataclass(kw_only=True)
class ProofCallbackArgs:
    invoice_id: str = ""


@dataclass(kw_only=True)
class ProofWrapper:
    """A merkle proof callback payload as delivered by a miner."""

    callback_payload: MerkleProof | None = None
    block_hash: str = ""
    block_height: int = 0
    callback_tx_id: str = ""
    callback_reason: str = ""

    def validate(self, args: ProofCreateArgs) -> None:
        """Raise ValidationError unless this is a proof for ``args.tx_id``."""
        payload = self.callback_payload
        validator = (
            Validator()
            .validate("blockhash", not_empty(self.block_hash))
            .validate("callbackReason", self._check_reason)
            .validate("callbackTxID", lambda: self._check_callback_tx(args))
            .validate("callbackPayload", not_empty(payload))
        )
        if payload is not None:
            validator = (
                validator.validate(
                    "callbackPayload.targetType", match_string(payload.target_type, _TARGET_TYPE)
                )
                .validate("callbackPayload.target", not_empty(payload.target))
                .validate("callbackPayload.proofType", lambda: _check_proof_type(payload))
                .validate("callbackPayload.txOrId", lambda: _check_tx_or_id(payload, args))
            )
        error = validator.err()
        if error is not None:
            raise error

    def _check_reason(self) -> str | None:
        if self.callback_reason.lower() != "merkleproof":
            return "invalid callback received, should be of type merkleProof"
        return None

    def _check_callback_tx(self, args: ProofCreateArgs) -> str | None:
        if args.tx_id != self.callback_tx_id:
            return f"proof txid does not match expected txid {args.tx_id}"
        return None


def _check_proof_type(payload: MerkleProof) -> str | None:
    if payload.proof_type and payload.proof_type.lower() not in ("branch", "tree"):
        return "only branch or tree are allowed as proofType"
    return None


def _check_tx_or_id(payload: MerkleProof, args: ProofCreateArgs) -> str | None:
    if payload.tx_or_id == args.tx_id:
        return None
    if len(payload.tx_or_id) == 64:
        return f"txId provided in callbackPayload doesn't match expected txID {args.tx_id}"
    try:
        actual = tx_id(payload.tx_or_id)
    except ValueError as exc:
        return f"failed to parse txhex: {exc}"
    if actual != args.tx_id:
        return f"tx provided in callbackPayload doesn't match expected txID {args.tx_id}"
    return None
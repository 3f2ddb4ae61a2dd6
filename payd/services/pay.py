"""Paying another wallet's payment request."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol

from payd.errors import PaydError, UnprocessableError, find_cause
from payd.models import DPPDestination, PayRequest, ServerConfig, User, WalletConfig
from payd.payments import ProofCallback, SPVEnvelope
from payd.peerchannels import (
    PeerChannel,
    PeerChannelAPITokenStoreArgs,
    PeerChannelCreateArgs,
    PeerChannelHandlerType,
)

_log = logging.getLogger(__name__)

_NOTIFICATION_ROLE = "notification"


class TxState(str, Enum):
    """States a sent transaction can be in."""

    BROADCAST = "broadcast"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


@dataclass(kw_only=True)
class EnvelopeArgs:
    """Identifies the payment an envelope is built for."""

    pay_to_url: str = ""


@dataclass(kw_only=True)
class DPPPaymentRequest:
    """A payment request as returned by a payment protocol server."""

    network: str = ""
    destinations: DPPDestination = field(default_factory=DPPDestination)
    creation_timestamp: datetime | None = None
    expiration_timestamp: datetime | None = None
    fee_rate: Any = None
    memo: str = ""
    merchant_data: User | None = None
    payment_url: str = ""
    ancestry_required: bool = False


@dataclass(kw_only=True)
class DPPPayment:
    """A payment sent to a payment protocol server."""

    ancestry: str = ""
    raw_tx: str = ""
    proof_callbacks: dict[str, ProofCallback] = field(default_factory=dict)
    merchant_data: User = field(default_factory=User)


@dataclass(kw_only=True)
class PeerChannelData:
    """A channel on which proof notifications will be delivered."""

    host: str = ""
    path: str = ""
    channel_id: str = ""
    token: str = ""


@dataclass(kw_only=True)
class DPPPaymentACK:
    """Acknowledgement of a sent payment; a positive ``error`` means refusal."""

    memo: str = ""
    error: int = 0
    peer_channel: PeerChannelData | None = None


class _Transacter(Protocol):
    def begin(self) -> None: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...


class _DPP(Protocol):
    def payment_request(self, req: PayRequest) -> DPPPaymentRequest: ...
    def payment_send(self, req: PayRequest, payment: DPPPayment) -> DPPPaymentACK: ...


class _Envelopes(Protocol):
    def envelope(self, args: EnvelopeArgs, req: DPPPaymentRequest) -> SPVEnvelope: ...
    def envelope_bytes(self, envelope: SPVEnvelope) -> bytes: ...


class _Notify(Protocol):
    def subscribe(self, channel: PeerChannel) -> None: ...


class _Channels(Protocol):
    def peer_channel_create(self, args: PeerChannelCreateArgs) -> None: ...
    def peer_channel_api_token_create(self, args: PeerChannelAPITokenStoreArgs) -> None: ...


class _TxWriter(Protocol):
    def transaction_update_state(self, tx_id: str, state: TxState) -> None: ...


class PayService:
    """Fetches a payment request, funds it and sends the payment."""

    def __init__(
        self,
        store_tx: _Transacter,
        dpp: _DPP,
        envelopes: _Envelopes,
        server: ServerConfig,
        notify: _Notify,
        channels: _Channels,
        tx_writer: _TxWriter,
        wallet: WalletConfig | None,
    ) -> None:
        self._store_tx = store_tx
        self._dpp = dpp
        self._envelopes = envelopes
        self._server = server
        self._notify = notify
        self._channels = channels
        self._tx_writer = tx_writer
        self._wallet = wallet

    def pay(self, req: PayRequest) -> DPPPaymentACK:
        """Pay the request found at ``req.pay_to_url`` and return its ack."""
        req.validate()
        try:
            pay_req = self._dpp.payment_request(req)
        except Exception as exc:
            if find_cause(exc, UnprocessableError) is not None:
                raise UnprocessableError(
                    "U002", f"failed to request payment for url {req.pay_to_url} : {exc}"
                ) from exc
            raise PaydError(f"failed to request payment for url {req.pay_to_url}", exc) from exc

        if self._wallet.payout_limit_enabled:
            total = sum(output.amount for output in pay_req.destinations.outputs)
            limit = self._wallet.payout_limit_satoshis
            if total > limit:
                raise UnprocessableError(
                    "U003",
                    f"amount requested {total} satoshis is larger than our max payout "
                    f"of {limit} satoshis",
                )

        self._store_tx.begin()
        try:
            return self._send(req, pay_req)
        finally:
            try:
                self._store_tx.rollback()
            except Exception:
                pass

    def _send(self, req: PayRequest, pay_req: DPPPaymentRequest) -> DPPPaymentACK:
        try:
            env = self._envelopes.envelope(EnvelopeArgs(pay_to_url=req.pay_to_url), pay_req)
        except Exception as exc:
            raise PaydError(f"envelope creation failed for '{req.pay_to_url}'", exc) from exc

        ancestry = ""
        if pay_req.ancestry_required:
            try:
                ancestry = self._envelopes.envelope_bytes(env).hex()
            except Exception as exc:
                raise PaydError(
                    f"failed to convert ancestry into bytes for payment '{pay_req.payment_url}'",
                    exc,
                ) from exc

        merchant = pay_req.merchant_data or User()
        callback_url = f"https://{self._server.hostname}/api/v1/proofs/{env.tx_id}"
        payment = DPPPayment(
            ancestry=ancestry,
            raw_tx=env.raw_tx,
            proof_callbacks={callback_url: ProofCallback()},
            merchant_data=User(
                name=merchant.name,
                email=merchant.email,
                avatar=merchant.avatar,
                address=merchant.address,
                extended_data=merchant.extended_data,
            ),
        )
        try:
            ack = self._dpp.payment_send(req, payment)
        except Exception as exc:
            self._update_state(env.tx_id, TxState.FAILED, "failed to update tx after failed broadcast")
            raise PaydError(f"failed to send payment {req.pay_to_url}", exc) from exc
        if ack.error > 0:
            raise PaydError(f"failed to send payment. Code '{ack.error}' reason '{ack.memo}'")

        # The payment is out; a failed state update must not undo it.
        self._update_state(env.tx_id, TxState.BROADCAST, "failed to update tx to broadcast state")

        channel = ack.peer_channel
        if channel is None:
            return ack

        try:
            self._channels.peer_channel_create(
                PeerChannelCreateArgs(
                    peer_channel_account_id=0,
                    channel_id=channel.channel_id,
                    channel_host=channel.host,
                    channel_path=channel.path,
                    channel_type=PeerChannelHandlerType.PROOF,
                )
            )
        except Exception as exc:
            raise PaydError(
                f"failed to store channel {channel.host}/{channel.channel_id} in db", exc
            ) from exc
        try:
            self._channels.peer_channel_api_token_create(
                PeerChannelAPITokenStoreArgs(
                    token=channel.token,
                    can_read=True,
                    can_write=False,
                    peer_channels_channel_id=channel.channel_id,
                    role=_NOTIFICATION_ROLE,
                )
            )
        except Exception as exc:
            raise PaydError(f"failed to store token {channel.token}", exc) from exc
        try:
            self._notify.subscribe(
                PeerChannel(
                    id=channel.channel_id,
                    token=channel.token,
                    host=channel.host,
                    path=channel.path,
                    type=PeerChannelHandlerType.PROOF,
                )
            )
        except Exception as exc:
            _log.error("failed to subscribe to channel %s: %s", channel.channel_id, exc)
        try:
            self._store_tx.commit()
        except Exception as exc:
            raise PaydError("failed to commit tx", exc) from exc
        return ack

    def _update_state(self, tx_id: str, state: TxState, message: str) -> None:
        try:
            self._tx_writer.transaction_update_state(tx_id, state)
        except Exception as exc:
            _log.error("%s: %s", message, exc)
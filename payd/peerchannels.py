"""Peer channel records used for proof notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class PeerChannelHandlerType(str, Enum):
    """The kind of handler a peer channel message is routed to."""

    PROOF = "proof"

    def __str__(self) -> str:
        return self.value


@dataclass(kw_only=True)
class PeerChannel:
    id: str = ""
    token: str = ""
    host: str = ""
    path: str = ""
    created_at: datetime | None = None
    type: PeerChannelHandlerType = PeerChannelHandlerType.PROOF


@dataclass(kw_only=True)
class PeerChannelIDArgs:
    user_id: int = 0


@dataclass(kw_only=True)
class PeerChannelAccount:
    id: int = 0
    username: str = ""
    password: str = ""


@dataclass(kw_only=True)
class PeerChannelCreateArgs:
    peer_channel_account_id: int = 0
    channel_type: PeerChannelHandlerType = PeerChannelHandlerType.PROOF
    channel_host: str = ""
    channel_path: str = ""
    channel_id: str = ""
    created_at: datetime | None = None


@dataclass(kw_only=True)
class PeerChannelAPITokenCreateArgs:
    role: str = ""
    persist: bool = False
    request: dict[str, Any] = field(default_factory=dict)


@dataclass(kw_only=True)
class PeerChannelAPITokenStoreArgs:
    peer_channels_channel_id: str = ""
    token: str = ""
    role: str = ""
    can_read: bool = False
    can_write: bool = False


@dataclass(kw_only=True)
class PeerChannelMessageArgs:
    channel_id: str = ""
    host: str = ""
    path: str = ""
    token: str = ""


@dataclass(kw_only=True)
class PeerChannelSubscription:
    """An open subscription to notifications on a channel."""

    host: str = ""
    path: str = ""
    channel_id: str = ""
    token: str = ""
    channel_type: PeerChannelHandlerType = PeerChannelHandlerType.PROOF
    conn: Any = None
"""Shared IRC data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum, auto


class ConnectionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    AUTHENTICATING = auto()
    READY = auto()


class LineKind(Enum):
    """Routing class of one raw server line for the session channel."""

    CHAT_MESSAGE = auto()
    JOIN = auto()
    PING = auto()
    USER_STATE = auto()
    OTHER = auto()


@dataclass
class ChatUser:
    """User metadata decoded from one IRC tag block.

    All attributes default to empty / zero; which ones are set depends on the
    tags Twitch sent. See https://dev.twitch.tv/docs/chat/irc#irc-tag-reference

    Attributes:
        color: ``#RRGGBB`` or empty meaning "use the default color".
        tmi_sent_ts: Server timestamp in milliseconds since the epoch.
    """

    badge_info: str = ""
    badges: str = ""
    bits: str = ""
    client_nonce: str = ""
    color: str = ""
    display_name: str = ""
    emotes: str = ""
    emote_only: int = 0
    first_msg: int = 0
    flags: str = ""
    id: str = ""
    mod: int = 0
    returning_chatter: int = 0
    room_id: int = 0
    subscriber: int = 0
    tmi_sent_ts: int = 0
    turbo: int = 0
    user_id: int = 0
    user_type: str = ""
    vip: int = 0

    @property
    def has_display_name(self) -> bool:
        return bool(self.display_name)

    @property
    def is_moderator(self) -> bool:
        return self.mod == 1

    @property
    def is_subscriber(self) -> bool:
        return self.subscriber == 1

    @property
    def sent_at(self) -> datetime | None:
        if not self.tmi_sent_ts:
            return None
        return datetime.fromtimestamp(self.tmi_sent_ts / 1000, tz=UTC)

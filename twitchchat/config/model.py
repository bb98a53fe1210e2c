from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..constants import TWITCH_IRC_HOST, TWITCH_IRC_PORT


class ChatConfig(BaseModel):
    """Settings for one chat session.

    Attributes:
        channel: Channel to join, stored without '#' and lower-cased.
        access_token: User access token with chat:read and chat:edit scopes.
        host: IRC server host.
        port: IRC server port.
        log_file: Optional path of an extra log file.
    """

    channel: str = Field(min_length=1, max_length=25)
    access_token: str = Field(min_length=1)
    host: str = TWITCH_IRC_HOST
    port: int = Field(default=TWITCH_IRC_PORT, gt=0, lt=65536)
    log_file: str | None = None

    @field_validator("channel", mode="before")
    @classmethod
    def normalize_channel(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("channel must be a string")
        return v.strip().lstrip("#").lower()

    @field_validator("access_token", mode="before")
    @classmethod
    def strip_oauth_prefix(cls, v: Any) -> str:
        if not isinstance(v, str):
            raise ValueError("access_token must be a string")
        v = v.strip()
        return v[len("oauth:") :] if v.startswith("oauth:") else v

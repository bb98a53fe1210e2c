"""IRC subsystem package.

Contains the chat session (connection manager), line dispatcher, tag parser,
event channels and shared models for Twitch IRC.
"""

from .dispatcher import IRCDispatcher  # noqa: F401
from .events import ChatEvents, EventChannel  # noqa: F401
from .models import ChatUser, ConnectionState, LineKind  # noqa: F401
from .parser import (  # noqa: F401
    classify_line,
    decode_chat_message,
    decode_join,
    decode_tags,
    decode_user_state,
    encode_tags,
    sanitize_content,
)
from .session import ChatSession  # noqa: F401

__all__ = [
    "ChatEvents",
    "ChatSession",
    "ChatUser",
    "ConnectionState",
    "EventChannel",
    "IRCDispatcher",
    "LineKind",
    "classify_line",
    "decode_chat_message",
    "decode_join",
    "decode_tags",
    "decode_user_state",
    "encode_tags",
    "sanitize_content",
]

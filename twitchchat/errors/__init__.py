"""Error hierarchy for the chat client."""

from .internal import (  # noqa: F401
    ChatNotConnectedError,
    ConfigError,
    InternalError,
    NetworkError,
    ParsingError,
)

__all__ = [
    "ChatNotConnectedError",
    "ConfigError",
    "InternalError",
    "NetworkError",
    "ParsingError",
]

"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the chat client. Raw
aiohttp / socket / pydantic errors are wrapped into them at the boundary
where they occur.

Classes:
  InternalError          – Base for all internal errors.
  NetworkError           – Transport / IO issues.
  ChatNotConnectedError  – Writing to chat without an open stream.
  ParsingError           – Malformed IRC lines or tag blocks.
  ConfigError            – Missing or invalid configuration.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for network or transport layer errors."""


class ChatNotConnectedError(NetworkError):
    """Raised when a chat line is written while no stream is open."""


class ParsingError(InternalError):
    """Exception raised for IRC line or tag block parsing errors.

    The offending line is dropped; parsing errors never interrupt the read
    loop.
    """


class ConfigError(InternalError):
    """Exception raised for missing or invalid configuration values."""


__all__ = [
    "InternalError",
    "NetworkError",
    "ChatNotConnectedError",
    "ParsingError",
    "ConfigError",
]

"""Authentication provider used by the chat session.

The OAuth / device flow that issues tokens lives outside this package. The
session only needs to know whether authentication finished, which scopes
were granted and which token to send as IRC password.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

import aiohttp

from ..constants import TOKEN_VALIDATION_TIMEOUT, TOKEN_VALIDATION_URL
from ..errors.internal import NetworkError, ParsingError
from ..irc.events import EventChannel
from ..logs.logger import logger


class AuthenticationProvider(Protocol):
    """What the chat session needs from an authentication source."""

    @property
    def authenticated(self) -> EventChannel:
        """Fires ``(success: bool)`` when authentication completes."""
        ...

    @property
    def permission_scope(self) -> frozenset[str]:
        """Scopes granted to the current token."""
        ...

    def is_authenticated(self) -> bool:
        ...

    def get_token(self) -> str:
        ...


def _strip_oauth_prefix(token: str) -> str:
    token = token.strip()
    return token[len("oauth:") :] if token.startswith("oauth:") else token


class StaticTokenProvider:
    """Provider for a token issued elsewhere, validated against Twitch.

    Args:
        access_token: User access token, with or without ``oauth:`` prefix.
        http_session: Shared aiohttp session used for validation requests.
    """

    def __init__(self, access_token: str, http_session: aiohttp.ClientSession):
        self.access_token = _strip_oauth_prefix(access_token)
        self.session = http_session
        self.login: str | None = None
        self.scopes: frozenset[str] = frozenset()
        self._authenticated = False
        self._events = EventChannel("authenticated")

    @property
    def authenticated(self) -> EventChannel:
        return self._events

    @property
    def permission_scope(self) -> frozenset[str]:
        return self.scopes

    def is_authenticated(self) -> bool:
        return self._authenticated

    def get_token(self) -> str:
        return self.access_token

    async def authenticate(self) -> bool:
        """Validate the token and notify listeners of the outcome.

        Returns:
            True if Twitch accepted the token.

        Raises:
            NetworkError: If the validation request could not be completed.
        """
        logger.log_event("auth", "validate_start", level=logging.DEBUG)
        try:
            payload = await self._validate_remote()
        except NetworkError as e:
            logger.log_event(
                "auth", "validate_network_error", level=logging.WARNING, error=str(e)
            )
            self._authenticated = False
            await self._events.emit(False)
            raise
        except ParsingError as e:
            logger.log_event(
                "auth", "validate_invalid", level=logging.WARNING, status=str(e)
            )
            payload = None
        if payload is None:
            self._authenticated = False
            await self._events.emit(False)
            return False
        self.login = payload.get("login")
        self.scopes = frozenset(payload.get("scopes") or ())
        self._authenticated = True
        logger.log_event(
            "auth",
            "validate_success",
            login=self.login,
            scopes=",".join(sorted(self.scopes)),
        )
        await self._events.emit(True)
        return True

    async def _validate_remote(self) -> dict[str, Any] | None:
        """GET the validate endpoint; None when Twitch rejects the token."""
        headers = {"Authorization": f"OAuth {self.access_token}"}
        timeout = aiohttp.ClientTimeout(total=TOKEN_VALIDATION_TIMEOUT)
        try:
            async with self.session.get(
                TOKEN_VALIDATION_URL, headers=headers, timeout=timeout
            ) as resp:
                if resp.status != 200:
                    logger.log_event(
                        "auth",
                        "validate_invalid",
                        level=logging.WARNING,
                        status=resp.status,
                    )
                    return None
                data = await resp.json()
        except TimeoutError as e:
            raise NetworkError("Token validation timeout") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error during validation: {e}") from e
        if not isinstance(data, dict):
            raise ParsingError("Unexpected validation payload", data={"payload": data})
        return data

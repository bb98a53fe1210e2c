from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from twitchchat.auth.provider import StaticTokenProvider
from twitchchat.constants import TOKEN_VALIDATION_URL
from twitchchat.errors import NetworkError


def mock_http_session(status: int = 200, payload=None, error: Exception | None = None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
        return session
    resp = MagicMock()
    resp.status = status
    resp.json = AsyncMock(return_value=payload)
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=resp)
    ctx.__aexit__ = AsyncMock(return_value=False)
    session.get.return_value = ctx
    return session


def test_oauth_prefix_is_stripped():
    provider = StaticTokenProvider("oauth:abc", mock_http_session())
    assert provider.get_token() == "abc"
    assert provider.is_authenticated() is False


@pytest.mark.asyncio
async def test_authenticate_success_records_scopes():
    http = mock_http_session(
        payload={"login": "me", "scopes": ["chat:read", "chat:edit"], "expires_in": 100}
    )
    provider = StaticTokenProvider("abc", http)
    seen: list[bool] = []
    provider.authenticated.subscribe(seen.append)

    assert await provider.authenticate() is True
    assert provider.is_authenticated() is True
    assert provider.permission_scope == frozenset({"chat:read", "chat:edit"})
    assert provider.login == "me"
    assert seen == [True]
    args, kwargs = http.get.call_args
    assert args[0] == TOKEN_VALIDATION_URL
    assert kwargs["headers"] == {"Authorization": "OAuth abc"}


@pytest.mark.asyncio
async def test_authenticate_rejected_token():
    provider = StaticTokenProvider("bad", mock_http_session(status=401))
    seen: list[bool] = []
    provider.authenticated.subscribe(seen.append)
    assert await provider.authenticate() is False
    assert provider.is_authenticated() is False
    assert seen == [False]


@pytest.mark.asyncio
async def test_authenticate_unexpected_payload_is_failure():
    provider = StaticTokenProvider("abc", mock_http_session(payload=["nope"]))
    assert await provider.authenticate() is False


@pytest.mark.asyncio
async def test_authenticate_network_error_raises_and_notifies():
    http = mock_http_session(error=aiohttp.ClientConnectionError("down"))
    provider = StaticTokenProvider("abc", http)
    seen: list[bool] = []
    provider.authenticated.subscribe(seen.append)
    with pytest.raises(NetworkError):
        await provider.authenticate()
    assert seen == [False]

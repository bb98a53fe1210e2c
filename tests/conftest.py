import os

import pytest

# Set test-friendly defaults for constants that affect test performance
os.environ.setdefault("IRC_READ_POLL_INTERVAL", "0.01")
os.environ.setdefault("IRC_HANDSHAKE_TIMEOUT", "1")
os.environ.setdefault("IRC_CONNECT_TIMEOUT", "1")

from tests.fixtures.chat_fixtures import FakeAuthProvider  # noqa: E402


@pytest.fixture
def auth() -> FakeAuthProvider:
    return FakeAuthProvider()

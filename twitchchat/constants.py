"""
Configuration constants for the Twitch chat client

This module contains all configurable constants used throughout the client.
Numeric constants can be overridden by setting an environment variable with
the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Attempts to parse the environment variable as a float. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Server endpoint
TWITCH_IRC_HOST = os.getenv("TWITCH_IRC_HOST", "irc.chat.twitch.tv")
TWITCH_IRC_PORT = _get_env_int("TWITCH_IRC_PORT", 6667)

# Timeouts & polling
IRC_CONNECT_TIMEOUT = _get_env_float(
    "IRC_CONNECT_TIMEOUT", 10.0
)  # Seconds allowed for the TCP connect
IRC_HANDSHAKE_TIMEOUT = _get_env_float(
    "IRC_HANDSHAKE_TIMEOUT", 30.0
)  # Seconds to wait for the server greeting line
IRC_READ_POLL_INTERVAL = _get_env_float(
    "IRC_READ_POLL_INTERVAL", 0.5
)  # One read loop tick; stop requests are honoured at this granularity
IRC_READ_CHUNK_SIZE = _get_env_int("IRC_READ_CHUNK_SIZE", 4096)

# Token validation
TOKEN_VALIDATION_URL = "https://id.twitch.tv/oauth2/validate"
TOKEN_VALIDATION_TIMEOUT = _get_env_int("TOKEN_VALIDATION_TIMEOUT", 30)

# Permission scopes required for chat
SCOPE_CHAT_READ = "chat:read"
SCOPE_CHAT_EDIT = "chat:edit"

# Wire protocol
CAPABILITY_REQUEST = "CAP REQ :twitch.tv/commands twitch.tv/tags twitch.tv/membership"
MESSAGE_CONNECT_SUCCESS = "Welcome, GLHF!"
MESSAGE_LOGIN_FAILED = "Login authentication failed"
MESSAGE_INVALID_FORMAT = "Improperly formatted auth"
USER_MESSAGE_CODE = "PRIVMSG"
USER_JOIN_CODE = "JOIN"
USER_STATE_CODE = "USERSTATE"
SERVER_PING_MESSAGE = "PING :tmi.twitch.tv"
CLIENT_PONG_MESSAGE = "PONG :tmi.twitch.tv"

# Local user color when USERSTATE carries none
DEFAULT_USER_COLOR = "#FFFFFF"

"""Configuration loading utilities."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..errors.internal import ConfigError
from ..logs.logger import logger
from .model import ChatConfig

DEFAULT_CONFIG_FILE = "twitch_chat.conf"

# environment variable -> config key
ENV_OVERRIDES = {
    "TWITCH_CHANNEL": "channel",
    "TWITCH_ACCESS_TOKEN": "access_token",
    "TWITCH_IRC_HOST": "host",
    "TWITCH_IRC_PORT": "port",
    "TWITCH_CHAT_LOG_FILE": "log_file",
}


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.log_event("config", "file_missing", level=logging.DEBUG, path=str(path))
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        logger.log_event(
            "config", "file_invalid", level=logging.ERROR, path=str(path), error=str(e)
        )
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    logger.log_event("config", "file_loaded", level=logging.DEBUG, path=str(path))
    return raw


def load_config(path: str | os.PathLike[str] | None = None) -> ChatConfig:
    """Load settings from the JSON config file, then apply env overrides.

    Args:
        path: Config file; defaults to ``$TWITCH_CHAT_CONF_FILE`` or
            ``twitch_chat.conf``. A missing file is not an error.

    Raises:
        ConfigError: If the file is unreadable or the merged values are invalid.
    """
    path = Path(path or os.environ.get("TWITCH_CHAT_CONF_FILE", DEFAULT_CONFIG_FILE))
    data = _read_file(path)
    for env_key, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_key)
        if value:
            data[field] = value
    try:
        return ChatConfig.model_validate(data)
    except ValidationError as e:
        logger.log_event(
            "config", "validation_failed", level=logging.ERROR, error=str(e)
        )
        raise ConfigError("Invalid configuration", data={"errors": e.errors()}) from e

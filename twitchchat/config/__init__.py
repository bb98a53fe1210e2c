"""Configuration model and loader."""

from .loader import DEFAULT_CONFIG_FILE, load_config  # noqa: F401
from .model import ChatConfig  # noqa: F401

__all__ = ["ChatConfig", "DEFAULT_CONFIG_FILE", "load_config"]

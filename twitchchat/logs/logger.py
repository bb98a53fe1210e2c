"""Logger implementation for the chat client."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO


def _supports_color(stream: TextIO) -> bool:
    try:
        return stream.isatty()
    except (AttributeError, ValueError):  # pragma: no cover
        return False


def _debug_from_env() -> bool:
    return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")


class SimpleFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\x1b[36m",
        logging.INFO: "\x1b[32m",
        logging.WARNING: "\x1b[33m",
        logging.ERROR: "\x1b[31m",
        logging.CRITICAL: "\x1b[35m",
    }
    RESET = "\x1b[0m"

    def __init__(self) -> None:
        super().__init__()
        # Guard against environments where stdout might be replaced.
        self.enable_color = _supports_color(sys.stdout)

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 (simple override)
        msg = record.getMessage()
        # Longest built-in level name: 'CRITICAL' (8 chars).
        raw_level = record.levelname.ljust(8)
        if self.enable_color:
            color = self.LEVEL_COLORS.get(record.levelno, "")
            return f"{color}{raw_level}{self.RESET} {msg}"
        return f"{raw_level} {msg}"


class ChatLogger:
    """Structured event logger.

    Every log line is an *event* identified by ``domain`` and ``action``. The
    human readable text is taken from the event catalog and formatted with the
    keyword context; in debug mode the context is appended as ``k=v`` pairs.
    """

    def __init__(self, name: str = "twitchchat", log_file: str | None = None) -> None:
        self._event_name_width = 28
        self.logger = logging.getLogger(name)
        self.log_file = log_file
        self.logger.handlers.clear()
        self.logger.setLevel(logging.DEBUG if _debug_from_env() else logging.INFO)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(SimpleFormatter())
        self.logger.addHandler(console_handler)

        if log_file:
            self.add_file_handler(log_file)

    def add_file_handler(self, log_file: str) -> None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        self.logger.addHandler(file_handler)
        self.log_file = log_file

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        event_name = f"{domain}_{action}".lower()
        human_text = human
        if human_text is None:
            # Local import to avoid cyclic import issues during module init.
            from .event_catalog import EVENT_TEMPLATES

            template = EVENT_TEMPLATES.get((domain, action))
            if template:
                try:
                    human_text = template.format(**kwargs)
                except (KeyError, IndexError, ValueError):
                    human_text = template
            else:
                human_text = f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
        self._log(level, event_name, human_text, exc_info=exc_info, **kwargs)

    def _log(
        self,
        level: int,
        event_name: str,
        human_text: str,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        channel_o = kwargs.pop("channel", None)
        channel = channel_o if isinstance(channel_o, str) else None
        prefix = self._build_prefix(channel)
        if _debug_from_env():
            msg = self._build_debug_message(event_name, prefix, human_text, kwargs)
        else:
            msg = f"{prefix} {human_text}"
        self.logger.log(level, msg, exc_info=exc_info)

    @staticmethod
    def _build_prefix(channel: str | None) -> str:
        core = f"#{channel}" if channel else "system"
        padded = core.ljust(20)[:20]
        return f"[{padded}]"

    def _build_debug_message(
        self,
        event_name: str,
        prefix: str,
        human_text: str,
        kwargs: dict[str, object],
    ) -> str:
        context = ", ".join(f"{k}={v}" for k, v in kwargs.items())
        width = self._event_name_width
        if len(event_name) <= width:
            ev = event_name.ljust(width)
        else:  # truncate but keep rightmost indicator
            ev = event_name[: width - 1] + "…"
        base = f"{ev} {prefix} {human_text}"
        if context:
            base = f"{base} ({context})"
        return base


logger = ChatLogger()

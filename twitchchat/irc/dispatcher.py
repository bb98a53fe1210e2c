"""Line routing for one chat session."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..constants import CLIENT_PONG_MESSAGE
from ..errors.internal import ParsingError
from ..logs.logger import logger
from .models import LineKind
from .parser import classify_line, decode_chat_message, decode_join, decode_user_state

if TYPE_CHECKING:  # pragma: no cover
    from .session import ChatSession


class IRCDispatcher:
    def __init__(self, session: ChatSession):
        self.session = session

    async def process_incoming_data(self, buffer: str, new_data: str) -> str:
        """Dispatch every complete line in ``buffer + new_data``; return the rest."""
        buffer += new_data
        while "\n" in buffer:
            line, buffer = buffer.split("\n", 1)
            line = line.rstrip("\r")
            if line:
                await self.handle_line(line)
        return buffer

    async def handle_line(self, line: str) -> None:
        kind = classify_line(line, self.session.channel)
        if kind is LineKind.OTHER:
            return
        try:
            if kind is LineKind.CHAT_MESSAGE:
                await self._handle_chat_message(line)
            elif kind is LineKind.JOIN:
                await self._handle_join(line)
            elif kind is LineKind.PING:
                await self._handle_ping()
            elif kind is LineKind.USER_STATE:
                self._handle_user_state(line)
        except ParsingError as e:
            logger.log_event(
                "irc",
                "line_parse_error",
                level=logging.ERROR,
                channel=self.session.channel,
                error=str(e),
                raw=line,
            )

    async def _handle_chat_message(self, line: str) -> None:
        user, content = decode_chat_message(line, self.session.channel)
        logger.log_event(
            "irc",
            "privmsg",
            level=logging.DEBUG,
            human=f"{user.display_name or '?'}: {content}",
            channel=self.session.channel,
        )
        await self.session.events.chat_message_received.emit(user, content)

    async def _handle_join(self, line: str) -> None:
        username = decode_join(line)
        logger.log_event(
            "irc",
            "join",
            level=logging.DEBUG,
            channel=self.session.channel,
            username=username,
        )
        await self.session.events.client_joined.emit(username)

    async def _handle_ping(self) -> None:
        logger.log_event("irc", "ping", level=logging.DEBUG)
        await self.session._send_line(CLIENT_PONG_MESSAGE)  # noqa: SLF001

    def _handle_user_state(self, line: str) -> None:
        if self.session.local_user.has_display_name:
            return
        self.session.cache_local_user(decode_user_state(line))

"""Chat session: connect handshake, read loop and outbound writes."""

from __future__ import annotations

import asyncio
import codecs
import logging
import re
from contextlib import suppress
from dataclasses import replace
from typing import TYPE_CHECKING

from ..constants import (
    CAPABILITY_REQUEST,
    IRC_CONNECT_TIMEOUT,
    IRC_HANDSHAKE_TIMEOUT,
    IRC_READ_CHUNK_SIZE,
    IRC_READ_POLL_INTERVAL,
    MESSAGE_CONNECT_SUCCESS,
    MESSAGE_INVALID_FORMAT,
    MESSAGE_LOGIN_FAILED,
    SCOPE_CHAT_EDIT,
    SCOPE_CHAT_READ,
    TWITCH_IRC_HOST,
    TWITCH_IRC_PORT,
    USER_JOIN_CODE,
    USER_MESSAGE_CODE,
)
from ..errors.internal import ChatNotConnectedError
from ..logs.logger import logger
from .dispatcher import IRCDispatcher
from .events import ChatEvents
from .models import ChatUser, ConnectionState

if TYPE_CHECKING:  # pragma: no cover
    from ..auth.provider import AuthenticationProvider

_LINE_BREAKS = re.compile(r"[\r\n]+")


def normalize_channel(channel: str) -> str:
    return channel.strip().lstrip("#").lower()


class ChatSession:  # pylint: disable=too-many-instance-attributes
    """One Twitch chat connection scoped to a single channel.

    Typical use::

        session = ChatSession(provider)
        session.events.connection_ready.subscribe(on_ready)
        await session.initialize("mychannel")
        if await session.connect_chat():
            await session.write("hello")
        ...
        await session.close()
    """

    def __init__(
        self,
        auth: AuthenticationProvider,
        *,
        host: str = TWITCH_IRC_HOST,
        port: int = TWITCH_IRC_PORT,
    ) -> None:
        self.auth = auth
        self.server = host
        self.port = port
        self.channel = ""
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self.state = ConnectionState.DISCONNECTED
        self.events = ChatEvents()
        self.dispatcher = IRCDispatcher(self)
        self.local_user = ChatUser()
        self.read_task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self._ready_checked = False
        self._disconnect_emitted = True

    def _set_state(self, new_state: ConnectionState) -> None:
        if self.state != new_state:
            logger.log_event(
                "irc",
                "state_change",
                level=logging.DEBUG,
                channel=self.channel,
                old_state=self.state.name,
                new_state=new_state.name,
            )
            self.state = new_state

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.READY and self.writer is not None

    # ---- Initialization ----
    async def initialize(self, channel: str) -> None:
        """Store the channel and check preconditions once authentication is known.

        ``events.connection_ready`` fires exactly once for this call, either
        right away or when the provider reports completion.
        """
        self.channel = normalize_channel(channel)
        self.local_user = ChatUser()
        self._ready_checked = False
        self.auth.authenticated.unsubscribe(self._on_authenticated)
        logger.log_event("irc", "init", level=logging.DEBUG, channel=self.channel)
        if not self.auth.is_authenticated():
            logger.log_event("irc", "waiting_for_auth", channel=self.channel)
            self.auth.authenticated.subscribe(self._on_authenticated)
        else:
            await self._on_authenticated(True)

    async def _on_authenticated(self, success: bool) -> None:
        if self._ready_checked:
            return
        self._ready_checked = True
        self.auth.authenticated.unsubscribe(self._on_authenticated)

        if not success:
            logger.log_event("irc", "ready_auth_failed", level=logging.ERROR)
            await self.events.connection_ready.emit(False)
            return

        scope = self.auth.permission_scope
        if SCOPE_CHAT_READ not in scope or SCOPE_CHAT_EDIT not in scope:
            logger.log_event(
                "irc",
                "ready_missing_scope",
                level=logging.ERROR,
                scopes=",".join(sorted(scope)),
            )
            await self.events.connection_ready.emit(False)
            return

        if not self.channel:
            logger.log_event("irc", "ready_empty_channel", level=logging.ERROR)
            await self.events.connection_ready.emit(False)
            return

        logger.log_event("irc", "ready", channel=self.channel)
        await self.events.connection_ready.emit(True)

    # ---- Connect ----
    async def connect_chat(self) -> bool:
        """Open the connection, run the handshake and start the read loop.

        Returns:
            True when the server greeted us and the read loop is running.
            ``events.connected`` carries the same outcome.
        """
        if self.writer is not None:
            await self.close()
        self.read_task = None
        self._stop_event.clear()
        self._set_state(ConnectionState.CONNECTING)
        logger.log_event(
            "irc",
            "connect_start",
            channel=self.channel,
            server=self.server,
            port=self.port,
        )
        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(self.server, self.port),
                timeout=IRC_CONNECT_TIMEOUT,
            )
            self._set_state(ConnectionState.AUTHENTICATING)
            await self._send_handshake()
            answer = await self._read_greeting()
        except TimeoutError:
            logger.log_event(
                "irc",
                "connect_timeout",
                level=logging.ERROR,
                channel=self.channel,
                timeout=IRC_CONNECT_TIMEOUT,
            )
            return await self._fail_connect()
        except OSError as e:
            logger.log_event(
                "irc",
                "connect_network_error",
                level=logging.ERROR,
                channel=self.channel,
                error=str(e),
                error_type=type(e).__name__,
            )
            return await self._fail_connect()
        if answer is None:
            return await self._fail_connect()

        if not answer:
            logger.log_event("irc", "handshake_empty", level=logging.ERROR)
            return await self._fail_connect()
        if MESSAGE_LOGIN_FAILED in answer:
            logger.log_event("irc", "handshake_login_failed", level=logging.ERROR)
            return await self._fail_connect()
        if MESSAGE_INVALID_FORMAT in answer:
            logger.log_event("irc", "handshake_invalid_format", level=logging.ERROR)
            return await self._fail_connect()
        if MESSAGE_CONNECT_SUCCESS not in answer:
            logger.log_event(
                "irc", "handshake_unexpected", level=logging.ERROR, answer=answer
            )
            return await self._fail_connect()

        self._set_state(ConnectionState.READY)
        self._disconnect_emitted = False
        logger.log_event("irc", "connect_success", channel=self.channel)
        await self.events.connected.emit(True)
        if self.writer is not None:
            self.read_task = asyncio.create_task(self._read_loop())
        return self.read_task is not None

    async def _send_handshake(self) -> None:
        token = self.auth.get_token()
        token = token if token.startswith("oauth:") else f"oauth:{token}"
        await self._send_line(f"PASS {token}")
        await self._send_line(f"NICK {self.channel}")
        await self._send_line(CAPABILITY_REQUEST)
        await self._send_line(f"{USER_JOIN_CODE} #{self.channel}")

    async def _read_greeting(self) -> str | None:
        if self.reader is None:
            raise ChatNotConnectedError(
                "no connection to read the greeting from",
                data={"channel": self.channel},
            )
        try:
            raw = await asyncio.wait_for(
                self.reader.readline(), timeout=IRC_HANDSHAKE_TIMEOUT
            )
        except TimeoutError:
            logger.log_event(
                "irc",
                "handshake_timeout",
                level=logging.ERROR,
                timeout=IRC_HANDSHAKE_TIMEOUT,
            )
            return None
        return raw.decode("utf-8", errors="replace").strip()

    async def _fail_connect(self) -> bool:
        await self._teardown_stream()
        self._set_state(ConnectionState.DISCONNECTED)
        await self.events.connected.emit(False)
        return False

    # ---- Read loop ----
    async def _read_loop(self) -> None:
        buffer = ""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        reason = "closed by client"
        logger.log_event("irc", "read_loop_start", level=logging.DEBUG)
        try:
            while self.reader is not None and not self._stop_event.is_set():
                try:
                    data = await asyncio.wait_for(
                        self.reader.read(IRC_READ_CHUNK_SIZE),
                        timeout=IRC_READ_POLL_INTERVAL,
                    )
                except TimeoutError:
                    continue
                if not data:
                    reason = "connection closed by server"
                    break
                # One read returns everything buffered; all complete lines
                # are dispatched before the next tick.
                buffer = await self.dispatcher.process_incoming_data(
                    buffer, decoder.decode(data)
                )
        except OSError as e:
            reason = str(e) or type(e).__name__
        except Exception as e:  # noqa: BLE001
            reason = f"read loop failed: {type(e).__name__}"
            logger.log_event(
                "irc",
                "read_loop_error",
                level=logging.ERROR,
                exc_info=True,
                channel=self.channel,
                error=str(e),
            )
        finally:
            logger.log_event("irc", "read_loop_stop", level=logging.DEBUG)
        if not self._stop_event.is_set():
            logger.log_event(
                "irc",
                "connection_lost",
                level=logging.WARNING,
                channel=self.channel,
                reason=reason,
            )
            await self._teardown_stream()
            self._set_state(ConnectionState.DISCONNECTED)
            await self._emit_disconnected(reason)

    async def wait_closed(self) -> None:
        """Wait until the read loop has finished."""
        task = self.read_task
        if task is None or task is asyncio.current_task():
            return
        with suppress(asyncio.CancelledError):
            await task

    # ---- Write ----
    async def write(self, message: str) -> None:
        """Send a chat message and echo it locally as the cached local user.

        Raises:
            ChatNotConnectedError: If no connection is open.
        """
        if self.writer is None:
            raise ChatNotConnectedError(
                "cannot write to chat while disconnected",
                data={"channel": self.channel},
            )
        message = _LINE_BREAKS.sub(" ", message)
        await self._send_line(f"{USER_MESSAGE_CODE} #{self.channel} :{message}")
        logger.log_event("irc", "write", level=logging.DEBUG, channel=self.channel)
        await self.events.chat_message_received.emit(replace(self.local_user), message)

    async def _send_line(self, message: str) -> None:
        if self.writer:
            line = f"{message}\r\n"
            self.writer.write(line.encode("utf-8"))
            await self.writer.drain()

    # ---- Local user ----
    def cache_local_user(self, user: ChatUser) -> None:
        """Cache the local user; the first one with a display name wins."""
        if self.local_user.has_display_name:
            return
        if not user.has_display_name:
            logger.log_event("irc", "userstate_missing_name", level=logging.DEBUG)
        self.local_user = user
        logger.log_event(
            "irc",
            "userstate_cached",
            level=logging.DEBUG,
            display_name=user.display_name,
            color=user.color,
        )

    # ---- Teardown ----
    async def close(self) -> None:
        """Stop the read loop, close the connection and emit ``disconnected``."""
        self._stop_event.set()
        task = self.read_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        await self._teardown_stream()
        self._set_state(ConnectionState.DISCONNECTED)
        await self._emit_disconnected("closed by client")

    async def _emit_disconnected(self, reason: str) -> None:
        if self._disconnect_emitted:
            return
        self._disconnect_emitted = True
        logger.log_event("irc", "disconnected", level=logging.INFO, reason=reason)
        await self.events.disconnected.emit(reason)

    async def _teardown_stream(self) -> None:
        writer = self.writer
        self.writer = None
        self.reader = None
        if writer is None:
            return
        try:
            writer.close()
            await writer.wait_closed()
        except OSError as e:
            logger.log_event(
                "irc",
                "connect_network_error",
                level=logging.DEBUG,
                channel=self.channel,
                error=str(e),
                error_type=type(e).__name__,
            )

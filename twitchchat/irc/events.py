"""Typed event channels exposed to chat consumers (e.g. a UI layer)."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from ..logs.logger import logger

Subscriber = Callable[..., Any]


class EventChannel:
    """Ordered observer list for one event.

    Subscribers may be plain callables or coroutine functions. ``emit`` calls
    every subscriber once, in subscription order, awaiting async ones before
    moving on. A failing subscriber is logged and skipped.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: list[Subscriber] = []

    def subscribe(self, handler: Subscriber) -> Subscriber:
        if handler not in self._subscribers:
            self._subscribers.append(handler)
        return handler

    def unsubscribe(self, handler: Subscriber) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    @property
    def subscribers(self) -> tuple[Subscriber, ...]:
        return tuple(self._subscribers)

    def __len__(self) -> int:
        return len(self._subscribers)

    async def emit(self, *args: Any) -> None:
        # Snapshot so handlers may (un)subscribe while being notified.
        for handler in tuple(self._subscribers):
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(*args)
                else:
                    maybe = handler(*args)
                    if inspect.isawaitable(maybe):
                        await maybe
            except Exception as e:  # noqa: BLE001
                logger.log_event(
                    "irc",
                    "subscriber_error",
                    level=logging.ERROR,
                    event=self.name,
                    error=str(e),
                    error_type=type(e).__name__,
                )


@dataclass
class ChatEvents:
    """All events one chat session emits.

    Attributes:
        connection_ready: ``(bool)`` preconditions checked after authentication.
        connected: ``(bool)`` outcome of the connect handshake.
        client_joined: ``(username)`` a user joined the channel.
        chat_message_received: ``(ChatUser, text)`` incoming or locally sent message.
        disconnected: ``(reason)`` the connection ended.
    """

    connection_ready: EventChannel = field(
        default_factory=lambda: EventChannel("connection_ready")
    )
    connected: EventChannel = field(default_factory=lambda: EventChannel("connected"))
    client_joined: EventChannel = field(
        default_factory=lambda: EventChannel("client_joined")
    )
    chat_message_received: EventChannel = field(
        default_factory=lambda: EventChannel("chat_message_received")
    )
    disconnected: EventChannel = field(
        default_factory=lambda: EventChannel("disconnected")
    )

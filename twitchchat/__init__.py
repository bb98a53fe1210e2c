"""Twitch chat client over IRC.

Connects to Twitch's chat server, authenticates with an OAuth token, joins a
single channel and turns the tagged IRC lines into structured chat events.
"""

from .irc import ChatEvents, ChatSession, ChatUser, ConnectionState  # noqa: F401

__all__ = ["ChatEvents", "ChatSession", "ChatUser", "ConnectionState"]

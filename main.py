#!/usr/bin/env python3
"""
Main entry point for the Twitch chat client

Prints the chat of the configured channel and sends every line typed on
stdin as a chat message.
"""

import asyncio
import sys

import aiohttp

from twitchchat.auth import StaticTokenProvider
from twitchchat.config import ChatConfig, load_config
from twitchchat.errors import ConfigError, NetworkError
from twitchchat.irc import ChatSession, ChatUser
from twitchchat.logs import logger


def print_chat_message(user: ChatUser, message: str) -> None:
    print(f"{user.display_name or '(you)'}: {message}")


def print_join(username: str) -> None:
    print(f"* {username} joined")


async def forward_stdin(session: ChatSession) -> None:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    while session.is_connected:
        raw = await reader.readline()
        if not raw:
            break
        line = raw.decode("utf-8", errors="replace").strip()
        if line and session.is_connected:
            await session.write(line)


async def run_chat(config: ChatConfig) -> int:
    async with aiohttp.ClientSession() as http_session:
        provider = StaticTokenProvider(config.access_token, http_session)
        session = ChatSession(provider, host=config.host, port=config.port)
        session.events.chat_message_received.subscribe(print_chat_message)
        session.events.client_joined.subscribe(print_join)

        ready = asyncio.get_running_loop().create_future()
        session.events.connection_ready.subscribe(
            lambda ok: ready.done() or ready.set_result(ok)
        )
        await session.initialize(config.channel)
        await provider.authenticate()
        if not await ready or not await session.connect_chat():
            return 1

        stdin_task = asyncio.create_task(forward_stdin(session))
        try:
            await session.wait_closed()
        finally:
            stdin_task.cancel()
            await session.close()
    return 0


async def main() -> int:
    """Main function"""
    logger.log_event("app", "start")
    config = load_config()
    if config.log_file:
        logger.add_file_handler(config.log_file)
    try:
        return await run_chat(config)
    finally:
        logger.log_event("app", "shutdown")


if __name__ == "__main__":
    # Configuration check mode
    if len(sys.argv) > 1 and sys.argv[1] == "--check-config":
        try:
            checked = load_config()
            logger.log_event("app", "config_check_passed", channel_name=checked.channel)
            sys.exit(0)
        except ConfigError as e:
            logger.log_event("app", "config_check_failed", level=40, error=str(e))
            sys.exit(1)

    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        logger.log_event("app", "interrupted", level=30)
        sys.exit(0)
    except (ConfigError, NetworkError) as e:
        logger.log_event("app", "fatal_error", level=50, error=str(e))
        sys.exit(1)

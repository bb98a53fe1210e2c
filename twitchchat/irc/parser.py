"""Twitch IRC line classification and tag decoding.

Tagged lines look like::

    @badge-info=;color=#FF0000;display-name=Bob :bob!bob@bob.tmi.twitch.tv PRIVMSG #chan :hi

The tag block is decoded through a fixed table mapping each known tag to a
``ChatUser`` attribute and a value kind. Unknown tags are ignored so new tags
introduced by Twitch never break decoding.
"""

from __future__ import annotations

from enum import Enum

from ..constants import (
    DEFAULT_USER_COLOR,
    SERVER_PING_MESSAGE,
    USER_JOIN_CODE,
    USER_MESSAGE_CODE,
    USER_STATE_CODE,
)
from ..errors.internal import ParsingError
from .models import ChatUser, LineKind


class TagKind(Enum):
    TEXT = "text"
    NUMBER = "number"


# tag name -> (ChatUser attribute, kind); order is the encoding order.
TAG_FIELDS: dict[str, tuple[str, TagKind]] = {
    "badge-info": ("badge_info", TagKind.TEXT),
    "badges": ("badges", TagKind.TEXT),
    "bits": ("bits", TagKind.TEXT),
    "client-nonce": ("client_nonce", TagKind.TEXT),
    "color": ("color", TagKind.TEXT),
    "display-name": ("display_name", TagKind.TEXT),
    "emotes": ("emotes", TagKind.TEXT),
    "emote-only": ("emote_only", TagKind.NUMBER),
    "first-msg": ("first_msg", TagKind.NUMBER),
    "flags": ("flags", TagKind.TEXT),
    "id": ("id", TagKind.TEXT),
    "mod": ("mod", TagKind.NUMBER),
    "returning-chatter": ("returning_chatter", TagKind.NUMBER),
    "room-id": ("room_id", TagKind.NUMBER),
    "subscriber": ("subscriber", TagKind.NUMBER),
    "tmi-sent-ts": ("tmi_sent_ts", TagKind.NUMBER),
    "turbo": ("turbo", TagKind.NUMBER),
    "user-id": ("user_id", TagKind.NUMBER),
    "user-type": ("user_type", TagKind.TEXT),
    "vip": ("vip", TagKind.NUMBER),
}

# Lookup by the hyphen-free, lower-cased key ("badge-info" -> "badgeinfo").
_FIELDS_BY_KEY: dict[str, tuple[str, TagKind]] = {
    name.replace("-", ""): target for name, target in TAG_FIELDS.items()
}

_ESCAPES = {"s": " ", ":": ";", "\\": "\\", "r": "\r", "n": "\n"}
_REVERSE_ESCAPES = {" ": "\\s", ";": "\\:", "\\": "\\\\", "\r": "\\r", "\n": "\\n"}


def _targets(line: str, command: str, channel: str) -> bool:
    """True when ``line`` carries ``command`` for exactly ``#channel``."""
    marker = f"{command} #{channel}"
    start = line.find(marker)
    while start != -1:
        end = start + len(marker)
        if end == len(line) or line[end] == " ":
            return True
        start = line.find(marker, start + 1)
    return False


def classify_line(line: str, channel: str) -> LineKind:
    """Route a raw line. Precedence: PRIVMSG, JOIN, PING, USERSTATE."""
    if _targets(line, USER_MESSAGE_CODE, channel):
        return LineKind.CHAT_MESSAGE
    if _targets(line, USER_JOIN_CODE, channel):
        return LineKind.JOIN
    if line == SERVER_PING_MESSAGE:
        return LineKind.PING
    if _targets(line, USER_STATE_CODE, channel):
        return LineKind.USER_STATE
    return LineKind.OTHER


def sanitize_content(content: str) -> str:
    """Drop control characters and anything beyond Latin-1 that is not alphanumeric.

    Best effort only: CTCP markers and control sequences go away, extended
    Latin punctuation stays.
    """
    return "".join(c for c in content if c.isalnum() or " " <= c <= "\xff")


def decode_tag_value(value: str) -> int | str:
    """All ASCII digits -> int, anything else -> str.

    Raises:
        ParsingError: If the digits are too long to convert.
    """
    if value.isascii() and value.isdigit():
        try:
            return int(value)
        except ValueError as e:
            raise ParsingError(
                "numeric tag value too long", data={"length": len(value)}
            ) from e
    return value


def unescape_tag_value(value: str) -> str:
    if "\\" not in value:
        return value
    out: list[str] = []
    chars = iter(value)
    for c in chars:
        if c != "\\":
            out.append(c)
            continue
        nxt = next(chars, "")
        # Unknown escapes drop the backslash; a trailing one is dropped.
        out.append(_ESCAPES.get(nxt, nxt))
    return "".join(out)


def escape_tag_value(value: str) -> str:
    return "".join(_REVERSE_ESCAPES.get(c, c) for c in value)


def _split_tag_block(raw_line: str, command: str) -> str:
    parts = [p for p in raw_line.split(f" {command} ", 1) if p]
    if len(parts) != 2:
        raise ParsingError(
            "splitting the line did not result in two parts",
            data={"raw": raw_line, "command": command},
        )
    head = parts[0]
    # Tags carry no raw spaces; what follows the first space is the source.
    tag_block = head.split(" ", 1)[0]
    if not tag_block.startswith("@"):
        return ""
    return tag_block[1:]


def _apply_tag(user: ChatUser, key: str, raw_value: str) -> None:
    target = _FIELDS_BY_KEY.get(key.replace("-", "").lower())
    if target is None:
        return
    attr, kind = target
    if kind is TagKind.NUMBER:
        value = decode_tag_value(raw_value)
        if not isinstance(value, int):
            raise ParsingError(
                f"tag {key!r} expects a number", data={"tag": key, "value": raw_value}
            )
        setattr(user, attr, value)
    else:
        setattr(user, attr, unescape_tag_value(raw_value))


def decode_tags(raw_line: str, command: str = USER_MESSAGE_CODE) -> ChatUser:
    """Decode the tag block of a tagged ``command`` line into a ChatUser.

    Raises:
        ParsingError: If the line does not split into tag and command parts
            or a numeric tag holds a non-numeric value.
    """
    user = ChatUser()
    tag_block = _split_tag_block(raw_line, command)
    for entry in tag_block.split(";"):
        key, sep, raw_value = entry.partition("=")
        if not key or not sep or not raw_value:
            continue
        _apply_tag(user, key, raw_value)
    return user


def encode_tags(user: ChatUser) -> str:
    """Encode the non-empty recognized fields of ``user`` as a tag block (no ``@``)."""
    entries: list[str] = []
    for name, (attr, kind) in TAG_FIELDS.items():
        value = getattr(user, attr)
        if kind is TagKind.NUMBER:
            if value:
                entries.append(f"{name}={value}")
        elif value:
            entries.append(f"{name}={escape_tag_value(value)}")
    return ";".join(entries)


def decode_chat_message(raw_line: str, channel: str) -> tuple[ChatUser, str]:
    """Split a PRIVMSG line into its sender and sanitized content."""
    marker = f"#{channel} :"
    if marker not in raw_line:
        raise ParsingError("message body marker missing", data={"raw": raw_line})
    content = sanitize_content(raw_line.split(marker, 1)[1])
    return decode_tags(raw_line, USER_MESSAGE_CODE), content


def decode_join(raw_line: str) -> str:
    """Username between the leading ':' and the first '!'."""
    if not raw_line.startswith(":") or "!" not in raw_line:
        raise ParsingError("join line without source prefix", data={"raw": raw_line})
    username = raw_line[1:].split("!", 1)[0]
    if not username:
        raise ParsingError("join line with empty username", data={"raw": raw_line})
    return username


def _tag_text(raw_line: str, key: str) -> str | None:
    marker = f"{key}="
    # Anchor on a tag boundary so "display-name=" never matches inside another key.
    for prefix in ("@", ";"):
        idx = raw_line.find(prefix + marker)
        if idx != -1:
            start = idx + len(prefix) + len(marker)
            end = len(raw_line)
            for stop in (";", " "):
                pos = raw_line.find(stop, start)
                if pos != -1:
                    end = min(end, pos)
            return raw_line[start:end]
    return None


def decode_user_state(raw_line: str) -> ChatUser:
    """Local user's display name and color from a USERSTATE line.

    Raises:
        ParsingError: If the line carries no ``display-name`` tag.
    """
    display_name = _tag_text(raw_line, "display-name")
    if display_name is None:
        raise ParsingError("USERSTATE without display-name", data={"raw": raw_line})
    color = _tag_text(raw_line, "color")
    if not color or not color.startswith("#"):
        color = DEFAULT_USER_COLOR
    return ChatUser(display_name=unescape_tag_value(display_name), color=color)


__all__ = [
    "TAG_FIELDS",
    "TagKind",
    "classify_line",
    "decode_chat_message",
    "decode_join",
    "decode_tag_value",
    "decode_tags",
    "decode_user_state",
    "encode_tags",
    "escape_tag_value",
    "sanitize_content",
    "unescape_tag_value",
]

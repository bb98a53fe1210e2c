from __future__ import annotations

from datetime import UTC, datetime

import pytest

from tests.fixtures.chat_fixtures import JOIN_ALICE, PRIVMSG_BOB, USERSTATE_ME
from twitchchat.errors import ParsingError
from twitchchat.irc.models import ChatUser, LineKind
from twitchchat.irc.parser import (
    classify_line,
    decode_chat_message,
    decode_join,
    decode_tag_value,
    decode_tags,
    decode_user_state,
    encode_tags,
    sanitize_content,
    unescape_tag_value,
)


def test_decode_chat_message_basic_tags():
    raw = (
        "@display-name=Bob;color=#FF0000;mod=0;subscriber=1 "
        ":bob!bob@bob.tmi.twitch.tv PRIVMSG #mychannel :Hello world"
    )
    user, content = decode_chat_message(raw, "mychannel")
    assert user.display_name == "Bob"
    assert user.color == "#FF0000"
    assert user.mod == 0
    assert user.subscriber == 1
    assert content == "Hello world"


def test_decode_tags_full_privmsg():
    user = decode_tags(PRIVMSG_BOB)
    assert user.badges == "broadcaster/1"
    assert user.badge_info == ""
    assert user.id == "b34ccfc7-4977-403a-8a94-33c6bac34fb8"
    assert user.room_id == 713936733
    assert user.user_id == 713936733
    assert user.tmi_sent_ts == 1642696567751
    assert user.user_type == ""
    assert user.sent_at == datetime.fromtimestamp(1642696567.751, tz=UTC)


def test_decode_tags_hyphenated_keys_map_to_fields():
    raw = "@badge-info=subscriber/8;returning-chatter=1;first-msg=1 :u!u@u PRIVMSG #c :x"
    user = decode_tags(raw)
    assert user.badge_info == "subscriber/8"
    assert user.returning_chatter == 1
    assert user.first_msg == 1


def test_decode_tags_ignores_unknown_tags_of_any_kind():
    raw = "@new-tag=abc;other-new=42;weird=4x2;display-name=Zed :z!z@z PRIVMSG #c :x"
    user = decode_tags(raw)
    assert user == ChatUser(display_name="Zed")


def test_decode_tags_skips_entries_without_value():
    raw = "@color=;mod;=5;display-name=Amy :a!a@a PRIVMSG #c :x"
    user = decode_tags(raw)
    assert user.color == ""
    assert user.mod == 0
    assert user.display_name == "Amy"


def test_decode_tags_text_field_keeps_digits_verbatim():
    raw = "@display-name=007;bits=100 :a!a@a PRIVMSG #c :x"
    user = decode_tags(raw)
    assert user.display_name == "007"
    assert user.bits == "100"


def test_decode_tags_numeric_field_with_text_value_raises():
    raw = "@mod=yes :a!a@a PRIVMSG #c :x"
    with pytest.raises(ParsingError):
        decode_tags(raw)


def test_decode_tags_oversized_numeric_value_raises():
    raw = f"@tmi-sent-ts={'9' * 5000} :a!a@a PRIVMSG #c :x"
    with pytest.raises(ParsingError):
        decode_tags(raw)


def test_decode_tags_oversized_digits_in_text_field_kept():
    nonce = "9" * 5000
    user = decode_tags(f"@client-nonce={nonce};display-name=Amy :a!a@a PRIVMSG #c :x")
    assert user.client_nonce == nonce
    assert user.display_name == "Amy"


def test_decode_tags_without_command_marker_raises():
    with pytest.raises(ParsingError):
        decode_tags("@color=#FFFFFF :tmi.twitch.tv NOTICE #c :hi")


def test_decode_tags_untagged_line_gives_empty_user():
    assert decode_tags(":a!a@a PRIVMSG #c :hello") == ChatUser()


def test_decode_tags_unescapes_text_values():
    raw = r"@display-name=Some\sName;flags=a\:b\\c :a!a@a PRIVMSG #c :x"
    user = decode_tags(raw)
    assert user.display_name == "Some Name"
    assert user.flags == "a;b\\c"


def test_encode_then_decode_keeps_recognized_fields():
    block = (
        "badges=moderator/1;color=#1E90FF;display-name=Mod\\sGuy;mod=1;"
        "room-id=12;tmi-sent-ts=1700000000000;user-id=34"
    )
    user = decode_tags(f"@{block} :m!m@m PRIVMSG #c :x")
    assert encode_tags(user) == block


@pytest.mark.parametrize(
    ("value", "expected"),
    [("0", 0), ("1642696567751", 1642696567751), ("#FF0000", "#FF0000"), ("12a", "12a"), ("٣", "٣")],
)
def test_decode_tag_value_heuristic(value, expected):
    decoded = decode_tag_value(value)
    assert decoded == expected
    assert type(decoded) is type(expected)


def test_unescape_trailing_backslash_dropped():
    assert unescape_tag_value("abc\\") == "abc"


def test_sanitize_content_removes_control_characters():
    assert sanitize_content("\x01ACTION waves\x01") == "ACTION waves"
    assert sanitize_content("café ¡hola! ümlaut") == "café ¡hola! ümlaut"
    assert sanitize_content("漢字 ok") == "漢字 ok"
    assert sanitize_content("hi ❤") == "hi "


def test_message_body_keeps_colons_and_mentions():
    raw = ":a!a@a PRIVMSG #mychannel :@bob look: #mychannel :twice"
    _, content = decode_chat_message(raw, "mychannel")
    assert content == "@bob look: #mychannel :twice"


def test_decode_join():
    assert decode_join(JOIN_ALICE) == "alice"


@pytest.mark.parametrize("raw", ["alice JOIN #c", ":JOIN #c", ":!x JOIN #c"])
def test_decode_join_malformed(raw):
    with pytest.raises(ParsingError):
        decode_join(raw)


def test_decode_user_state():
    user = decode_user_state(USERSTATE_ME)
    assert user.display_name == "Me"
    assert user.color == "#0000FF"


def test_decode_user_state_default_color():
    raw = "@badges=;color=;display-name=Me :tmi.twitch.tv USERSTATE #mychannel"
    assert decode_user_state(raw).color == "#FFFFFF"


def test_decode_user_state_without_display_name():
    with pytest.raises(ParsingError):
        decode_user_state("@color=#000000 :tmi.twitch.tv USERSTATE #mychannel")


@pytest.mark.parametrize(
    ("line", "kind"),
    [
        (PRIVMSG_BOB, LineKind.CHAT_MESSAGE),
        (JOIN_ALICE, LineKind.JOIN),
        ("PING :tmi.twitch.tv", LineKind.PING),
        (USERSTATE_ME, LineKind.USER_STATE),
        (":tmi.twitch.tv CAP * ACK :twitch.tv/tags", LineKind.OTHER),
        ("PING :tmi.twitch.tv extra", LineKind.OTHER),
        (":x!x@x PRIVMSG #otherchannel :hi", LineKind.OTHER),
        (":x!x@x JOIN #mychannel2", LineKind.OTHER),
    ],
)
def test_classify_line(line, kind):
    assert classify_line(line, "mychannel") is kind


def test_classify_prefers_message_over_join():
    line = ":x!x@x PRIVMSG #mychannel :JOIN #mychannel"
    assert classify_line(line, "mychannel") is LineKind.CHAT_MESSAGE

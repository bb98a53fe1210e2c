import json

import pytest

from twitchchat.config import ChatConfig, load_config
from twitchchat.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in (
        "TWITCH_CHAT_CONF_FILE",
        "TWITCH_CHANNEL",
        "TWITCH_ACCESS_TOKEN",
        "TWITCH_IRC_HOST",
        "TWITCH_IRC_PORT",
        "TWITCH_CHAT_LOG_FILE",
    ):
        monkeypatch.delenv(key, raising=False)


def test_model_normalizes_channel_and_token():
    config = ChatConfig(channel=" #MyChannel ", access_token="oauth:abc")
    assert config.channel == "mychannel"
    assert config.access_token == "abc"
    assert config.host == "irc.chat.twitch.tv"
    assert config.port == 6667


def test_load_from_file(tmp_path):
    path = tmp_path / "chat.conf"
    path.write_text(json.dumps({"channel": "Foo", "access_token": "tok"}), "utf-8")
    config = load_config(path)
    assert config.channel == "foo"
    assert config.access_token == "tok"


def test_env_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "chat.conf"
    path.write_text(json.dumps({"channel": "foo", "access_token": "tok"}), "utf-8")
    monkeypatch.setenv("TWITCH_CHANNEL", "bar")
    monkeypatch.setenv("TWITCH_IRC_PORT", "6697")
    config = load_config(path)
    assert config.channel == "bar"
    assert config.port == 6697


def test_env_only_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("TWITCH_CHAT_CONF_FILE", str(tmp_path / "missing.conf"))
    monkeypatch.setenv("TWITCH_CHANNEL", "envchan")
    monkeypatch.setenv("TWITCH_ACCESS_TOKEN", "oauth:envtok")
    config = load_config()
    assert (config.channel, config.access_token) == ("envchan", "envtok")


def test_missing_token_is_config_error(tmp_path):
    path = tmp_path / "chat.conf"
    path.write_text(json.dumps({"channel": "foo"}), "utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_invalid_json_is_config_error(tmp_path):
    path = tmp_path / "chat.conf"
    path.write_text("{not json", "utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_non_object_json_is_config_error(tmp_path):
    path = tmp_path / "chat.conf"
    path.write_text("[1, 2]", "utf-8")
    with pytest.raises(ConfigError):
        load_config(path)

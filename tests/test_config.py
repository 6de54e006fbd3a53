"""Tests for settings loading."""

from __future__ import annotations

import os
from unittest import mock

import pytest

from ignite_bridge.config import DEFAULT_APP_KEY, BridgeSettings
from ignite_bridge.errors import ConfigError

BASE_ENV = {"BOT_TOKEN": "ignite-token", "DISCORD_BOT_TOKEN": "discord-token"}


class TestFromEnv:
    def test_defaults(self):
        settings = BridgeSettings.from_env(environ=BASE_ENV)
        assert settings.ignite_token == "ignite-token"
        assert settings.discord_token == "discord-token"
        assert settings.app_key == DEFAULT_APP_KEY
        assert settings.ignite_label == "Ignite"
        assert settings.discord_label == "Discord"
        assert settings.json_logs is False

    @pytest.mark.parametrize("missing", ["BOT_TOKEN", "DISCORD_BOT_TOKEN"])
    def test_missing_token(self, missing):
        env = dict(BASE_ENV)
        env[missing] = "  "
        with pytest.raises(ConfigError, match=missing):
            BridgeSettings.from_env(environ=env)

    def test_overrides(self):
        env = dict(
            BASE_ENV,
            IGNITE_APP_KEY="abc",
            IGNITE_WS_URL="wss://ws.example/",
            LOG_LEVEL="debug",
            LOG_FORMAT="json",
            HTTP_TIMEOUT="2.5",
        )
        settings = BridgeSettings.from_env(environ=env)
        assert settings.realtime_url.startswith("wss://ws.example/app/abc?protocol=7&client=python")
        assert settings.log_level == "DEBUG"
        assert settings.json_logs is True
        assert settings.http_timeout == 2.5

    @pytest.mark.parametrize("value", ["soon", "0"])
    def test_bad_timeout(self, value):
        with pytest.raises(ConfigError):
            BridgeSettings.from_env(environ=dict(BASE_ENV, HTTP_TIMEOUT=value))

    def test_tokens_not_in_repr(self):
        settings = BridgeSettings.from_env(environ=BASE_ENV)
        assert "ignite-token" not in repr(settings)
        assert "discord-token" not in repr(settings)

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BOT_TOKEN=from-file\nDISCORD_BOT_TOKEN=also-file\n")
        with mock.patch.dict(os.environ):
            os.environ.pop("BOT_TOKEN", None)
            os.environ.pop("DISCORD_BOT_TOKEN", None)
            settings = BridgeSettings.from_env(env_file)
        assert settings.ignite_token == "from-file"
        assert settings.discord_token == "also-file"

    def test_environment_wins_over_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("BOT_TOKEN=from-file\nDISCORD_BOT_TOKEN=also-file\n")
        with mock.patch.dict(os.environ, {"BOT_TOKEN": "from-env"}):
            settings = BridgeSettings.from_env(env_file)
        assert settings.ignite_token == "from-env"

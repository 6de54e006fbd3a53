"""Tests for the command line entry point."""

from __future__ import annotations

from unittest import mock

import pytest
from typer.testing import CliRunner

from ignite_bridge import cli
from ignite_bridge.errors import DiscordStartupError, IdentityError

ENV = {"BOT_TOKEN": "ignite-token", "DISCORD_BOT_TOKEN": "discord-token"}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    with mock.patch.object(cli, "setup_logging"):
        yield


def failing_loop(exc):
    async def run_main_loop(settings):
        raise exc

    return run_main_loop


@pytest.mark.parametrize(
    "exc",
    [
        DiscordStartupError("Discord client stopped before becoming ready"),
        IdentityError("identity lookup failed"),
    ],
)
def test_startup_failures_exit_nonzero(runner, exc):
    with mock.patch.object(cli, "run_main_loop", failing_loop(exc)):
        result = runner.invoke(cli.app, [], env=ENV)
    assert result.exit_code == 1
    assert not isinstance(result.exception, (DiscordStartupError, IdentityError))


def test_missing_token_exits_nonzero(runner):
    loop = mock.AsyncMock()
    with mock.patch.object(cli, "run_main_loop", loop):
        result = runner.invoke(cli.app, [], env={**ENV, "DISCORD_BOT_TOKEN": ""})
    assert result.exit_code == 1
    loop.assert_not_called()


def test_runs_main_loop_with_settings(runner):
    seen = []

    async def run_main_loop(settings):
        seen.append(settings)

    with mock.patch.object(cli, "run_main_loop", run_main_loop):
        result = runner.invoke(cli.app, [], env=ENV)
    assert result.exit_code == 0
    assert seen[0].ignite_token == "ignite-token"
    assert seen[0].discord_token == "discord-token"

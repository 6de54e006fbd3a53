"""Command line entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import anyio
import discord
import typer

from .config import BridgeSettings
from .errors import ConfigError, DiscordStartupError, IdentityError
from .logging import get_logger, setup_logging
from .loop import run_main_loop

app = typer.Typer(
    name="ignite-bridge",
    help="Relay messages between Ignite Chat and Discord.",
    add_completion=False,
)


@app.command()
def run(
    env_file: Optional[Path] = typer.Option(
        None, "--env-file", help="Read variables from this .env file", exists=True
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override LOG_LEVEL (DEBUG, INFO, ...)"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Log as JSON lines"),
) -> None:
    """Start the bridge."""
    try:
        settings = BridgeSettings.from_env(env_file)
    except ConfigError as exc:
        setup_logging("INFO")
        get_logger(__name__).error("config.invalid", error=str(exc))
        raise typer.Exit(code=1) from exc

    setup_logging(log_level or settings.log_level, json=json_logs or settings.json_logs)
    logger = get_logger(__name__)
    try:
        anyio.run(run_main_loop, settings)
    except IdentityError as exc:
        logger.error("bot.identity_failed", error=str(exc))
        raise typer.Exit(code=1) from exc
    except (discord.LoginFailure, DiscordStartupError) as exc:
        logger.error("bot.discord_start_failed", error=str(exc))
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        logger.info("bot.stopped")


def main() -> None:
    app()

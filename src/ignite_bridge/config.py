"""Process configuration loaded from the environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from . import __version__
from .errors import ConfigError

DEFAULT_APP_KEY = "kuvw5kc9qdwndhhhczoz"
DEFAULT_API_URL = "https://api.ignite-chat.com"
DEFAULT_WS_URL = "wss://ws.ignite-chat.com"
PUSHER_PROTOCOL_VERSION = 7


@dataclass(frozen=True, slots=True)
class BridgeSettings:
    """Settings for one bridge process."""

    ignite_token: str = field(repr=False)
    discord_token: str = field(repr=False)
    app_key: str = DEFAULT_APP_KEY
    api_url: str = DEFAULT_API_URL
    ws_url: str = DEFAULT_WS_URL
    ignite_label: str = "Ignite"
    discord_label: str = "Discord"
    log_level: str = "INFO"
    json_logs: bool = False
    http_timeout: float = 10.0

    @property
    def realtime_url(self) -> str:
        return (
            f"{self.ws_url.rstrip('/')}/app/{self.app_key}"
            f"?protocol={PUSHER_PROTOCOL_VERSION}&client=python&version={__version__}"
        )

    @classmethod
    def from_env(
        cls,
        env_file: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> BridgeSettings:
        """Build settings from environment variables.

        A ``.env`` file is read first (``env_file`` or the one found from the
        working directory); variables already set in the environment win.
        Raises ConfigError when either bot token is missing.
        """
        if environ is None:
            if env_file is not None:
                load_dotenv(env_file)
            else:
                load_dotenv()
            environ = os.environ

        def required(name: str) -> str:
            value = environ.get(name, "").strip()
            if not value:
                raise ConfigError(f"{name} env variable is required")
            return value

        def optional(name: str, default: str) -> str:
            value = environ.get(name, "").strip()
            return value or default

        raw_timeout = optional("HTTP_TIMEOUT", "10")
        try:
            http_timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"HTTP_TIMEOUT must be a number, got {raw_timeout!r}") from None
        if http_timeout <= 0:
            raise ConfigError("HTTP_TIMEOUT must be positive")

        return cls(
            ignite_token=required("BOT_TOKEN"),
            discord_token=required("DISCORD_BOT_TOKEN"),
            app_key=optional("IGNITE_APP_KEY", DEFAULT_APP_KEY),
            api_url=optional("IGNITE_API_URL", DEFAULT_API_URL),
            ws_url=optional("IGNITE_WS_URL", DEFAULT_WS_URL),
            ignite_label=optional("IGNITE_LABEL", "Ignite"),
            discord_label=optional("DISCORD_LABEL", "Discord"),
            log_level=optional("LOG_LEVEL", "INFO").upper(),
            json_logs=optional("LOG_FORMAT", "console").lower() == "json",
            http_timeout=http_timeout,
        )

"""Exception types for the bridge."""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for bridge errors."""


class ConfigError(BridgeError):
    """Required configuration is missing or invalid."""


class IdentityError(BridgeError):
    """The bot could not determine its own Ignite identity."""


class IgniteApiError(BridgeError):
    """An Ignite REST call failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FrameError(BridgeError):
    """A realtime frame could not be decoded."""


class DiscordStartupError(BridgeError):
    """The Discord client stopped before it became ready."""

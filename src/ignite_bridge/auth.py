"""Bot identity and private channel authorization."""

from __future__ import annotations

from .errors import IdentityError, IgniteApiError
from .logging import get_logger
from .rest import IgniteRestClient

logger = get_logger(__name__)


class AuthService:
    def __init__(self, rest: IgniteRestClient) -> None:
        self._rest = rest

    async def fetch_self(self) -> str:
        """Return the bot's own Ignite user id.

        Raises IdentityError on any failure; the bridge cannot run without it.
        """
        try:
            me = await self._rest.get_me()
        except IgniteApiError as exc:
            logger.error("auth.fetch_self_failed", error=str(exc))
            raise IdentityError(f"Failed to fetch bot ID: {exc}") from exc
        logger.info("auth.bot_identity", bot_id=me.id, username=me.username)
        return me.id

    async def sign_channel_auth(self, channel_name: str, socket_id: str) -> str | None:
        """Sign a private channel subscription. Returns None on failure."""
        try:
            return await self._rest.broadcasting_auth(channel_name, socket_id)
        except IgniteApiError as exc:
            logger.error(
                "auth.sign_failed",
                channel=channel_name,
                status_code=exc.status_code,
                error=str(exc),
            )
            return None

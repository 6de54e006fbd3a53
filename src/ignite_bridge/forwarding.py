"""Relays messages and deletions between bridged channels."""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio

from .errors import IgniteApiError
from .logging import get_logger

if TYPE_CHECKING:
    from .client import DiscordBotClient
    from .rest import IgniteRestClient
    from .state import BridgeContext
    from .types import (
        DiscordIncomingMessage,
        GuildJoined,
        MessageCreated,
        MessageDeleted,
    )

logger = get_logger(__name__)

ONBOARDING_MESSAGE = (
    "Hi! I can bridge this channel with a Discord channel. "
    "Type `!bridge <discord-channel-id>` here to start relaying messages."
)


def format_relay(label: str, author: str, content: str) -> str:
    return f"[{label}] {author}: {content}"


def _to_snowflake(value: str) -> int | None:
    return int(value) if value.isdigit() else None


class ForwardingEngine:
    """Moves messages across bridges.

    Bot-authored messages are never relayed; the bridge posts as a bot on
    both platforms, so its own copies cannot trigger another relay.
    """

    def __init__(
        self,
        context: BridgeContext,
        *,
        ignite: IgniteRestClient,
        discord: DiscordBotClient,
        ignite_label: str = "Ignite",
        discord_label: str = "Discord",
    ) -> None:
        self._registry = context.registry
        self._session = context.session
        self._ignite = ignite
        self._discord = discord
        self._ignite_label = ignite_label
        self._discord_label = discord_label

    def discord_target(self, event: MessageCreated) -> str | None:
        """The Discord channel an Ignite message would be relayed to, if any."""
        return self._registry.lookup(event.channel_id)

    async def forward_to_discord(
        self, event: MessageCreated, target: str | None = None
    ) -> None:
        """Relay an Ignite message to its bridged Discord channel.

        ``target`` is the bridged channel as seen when the event arrived;
        it is looked up now when not given.
        """
        message = event.message
        if message.is_bot or message.is_from(self._session.bot_id):
            return
        if not message.content.strip():
            return

        if target is None:
            target = self._registry.lookup(event.channel_id)
        if target is None:
            return
        discord_channel_id = _to_snowflake(target)
        if discord_channel_id is None:
            logger.warning("forward.bad_discord_channel", discord_channel_id=target)
            return

        sent = await self._discord.send_message(
            channel_id=discord_channel_id,
            content=format_relay(self._ignite_label, message.author_name, message.content),
        )
        if sent is None:
            logger.error(
                "forward.to_discord_failed",
                ignite_message_id=message.id,
                discord_channel_id=discord_channel_id,
            )
            return

        self._registry.register_correlation(message.id, str(sent.message_id))
        logger.info(
            "forward.to_discord",
            ignite_message_id=message.id,
            discord_message_id=sent.message_id,
            discord_channel_id=discord_channel_id,
        )

    async def forward_to_ignite(self, message: DiscordIncomingMessage) -> None:
        if message.author_is_bot or not message.content.strip():
            return

        target = self._registry.lookup(str(message.channel_id))
        if target is None:
            return

        try:
            sent = await self._ignite.send_message(
                target,
                format_relay(self._discord_label, message.author_name, message.content),
            )
        except IgniteApiError as exc:
            logger.error(
                "forward.to_ignite_failed",
                discord_message_id=message.message_id,
                ignite_channel_id=target,
                error=str(exc),
            )
            return

        self._registry.register_correlation(sent.id, str(message.message_id))
        logger.info(
            "forward.to_ignite",
            discord_message_id=message.message_id,
            ignite_message_id=sent.id,
            ignite_channel_id=target,
        )

    async def propagate_delete(self, event: MessageDeleted) -> None:
        """Delete the Discord copy of a deleted Ignite message.

        Only Ignite deletions propagate; Discord deletions are not mirrored.
        """
        deleted = event.message
        counterpart = self._registry.lookup_correlation(deleted.id)
        if counterpart is None:
            return

        target = self._registry.lookup(deleted.channel_id)
        discord_channel_id = _to_snowflake(target) if target is not None else None
        discord_message_id = _to_snowflake(counterpart)
        if discord_channel_id is None or discord_message_id is None:
            logger.warning(
                "delete.no_discord_channel",
                ignite_message_id=deleted.id,
                ignite_channel_id=deleted.channel_id,
            )
            return

        ok = await self._discord.delete_message(
            channel_id=discord_channel_id, message_id=discord_message_id
        )
        if not ok:
            logger.error(
                "delete.failed",
                ignite_message_id=deleted.id,
                discord_message_id=discord_message_id,
                discord_channel_id=discord_channel_id,
            )
            return
        logger.info(
            "delete.propagated",
            ignite_message_id=deleted.id,
            discord_message_id=discord_message_id,
        )

    async def onboard_guild(self, event: GuildJoined) -> None:
        """Post bridge instructions to every text channel of a newly joined guild."""
        guild = event.guild
        channels = [c for c in guild.channels if c.is_text]
        logger.info("guild.joined", guild_id=guild.id, name=guild.name, text_channels=len(channels))
        async with anyio.create_task_group() as tg:
            for channel in channels:
                tg.start_soon(self._send_onboarding, channel.channel_id)

    async def _send_onboarding(self, channel_id: str) -> None:
        try:
            await self._ignite.send_message(channel_id, ONBOARDING_MESSAGE)
        except IgniteApiError as exc:
            logger.error("guild.onboarding_failed", channel_id=channel_id, error=str(exc))

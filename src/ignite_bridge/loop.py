"""Main event loop for the bridge."""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio

from .auth import AuthService
from .client import DiscordBotClient
from .commands import CommandProcessor
from .forwarding import ForwardingEngine
from .logging import get_logger
from .realtime import IgniteRealtimeClient
from .rest import IgniteRestClient
from .state import BridgeContext, Session
from .types import (
    DiscordIncomingMessage,
    GuildJoined,
    IgniteEvent,
    MessageCreated,
    MessageDeleted,
)

if TYPE_CHECKING:
    from .config import BridgeSettings

logger = get_logger(__name__)

__all__ = ["EventRouter", "run_main_loop"]


class EventRouter:
    """Sends each decoded event to the component that handles it."""

    def __init__(self, commands: CommandProcessor, forwarding: ForwardingEngine) -> None:
        self._commands = commands
        self._forwarding = forwarding

    async def handle_ignite_event(self, event: IgniteEvent) -> None:
        if isinstance(event, MessageCreated):
            logger.debug(
                "message.created",
                channel_id=event.channel_id,
                message_id=event.message.id,
                author=event.message.author_name,
                is_bot=event.message.is_bot,
            )
            # The bridge is read before commands run, so a !bridge message
            # is not relayed through the bridge it creates. Other command
            # messages in a bridged channel are relayed.
            target = self._forwarding.discord_target(event)
            await self._commands.process(event)
            if target is not None:
                await self._forwarding.forward_to_discord(event, target)
        elif isinstance(event, MessageDeleted):
            await self._forwarding.propagate_delete(event)
        elif isinstance(event, GuildJoined):
            await self._forwarding.onboard_guild(event)
        else:
            logger.info("event.unhandled", event_name=event.name)

    async def handle_discord_message(self, message: DiscordIncomingMessage) -> None:
        try:
            await self._forwarding.forward_to_ignite(message)
        except Exception:
            logger.exception(
                "discord.message_failed",
                channel_id=message.channel_id,
                message_id=message.message_id,
            )


async def run_main_loop(settings: BridgeSettings) -> None:
    """Run the bridge until interrupted.

    Raises IdentityError if the bot's Ignite identity cannot be fetched.
    """
    async with IgniteRestClient(
        settings.ignite_token,
        base_url=settings.api_url,
        timeout=settings.http_timeout,
    ) as rest:
        auth = AuthService(rest)
        bot_id = await auth.fetch_self()
        context = BridgeContext(session=Session(bot_id=bot_id))

        discord_client = DiscordBotClient(settings.discord_token)
        commands = CommandProcessor(context, ignite=rest, discord=discord_client)
        forwarding = ForwardingEngine(
            context,
            ignite=rest,
            discord=discord_client,
            ignite_label=settings.ignite_label,
            discord_label=settings.discord_label,
        )
        router = EventRouter(commands, forwarding)
        discord_client.set_message_handler(router.handle_discord_message)

        realtime = IgniteRealtimeClient(
            settings.realtime_url,
            auth=auth,
            context=context,
            on_event=router.handle_ignite_event,
        )

        try:
            await discord_client.start()
            logger.info(
                "bot.ready",
                ignite_bot_id=bot_id,
                discord_user=discord_client.user.name if discord_client.user else "unknown",
            )
            await realtime.run()
            logger.warning("bot.ignite_inert", state=realtime.state.value)
            # Discord keeps running; restart the process to reconnect
            await anyio.sleep_forever()
        finally:
            await discord_client.close()

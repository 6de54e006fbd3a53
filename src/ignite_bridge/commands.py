"""In-chat ``!commands`` typed in Ignite channels."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import IgniteApiError
from .logging import get_logger
from .types import Command

if TYPE_CHECKING:
    from .client import DiscordBotClient
    from .rest import IgniteRestClient
    from .state import BridgeContext
    from .types import MessageCreated

logger = get_logger(__name__)

KICK_REASON = "Kicked from Ignite Chat via the bridge"


def parse_command(content: str) -> Command | None:
    """Parse a ``!command`` from message content.

    The command name is case-insensitive, arguments are kept as typed.

    Examples:
        "!PING" -> Command("ping")
        "!bridge 1234" -> Command("bridge", ("1234",))
        "hello" -> None
    """
    content = content.strip()
    lowered = content.lower()
    if lowered == "!ping":
        return Command(name="ping")

    args = tuple(content.split(" ")[1:])
    if lowered.startswith("!bridge"):
        return Command(name="bridge", args=args)
    if lowered.startswith("!kick"):
        return Command(name="kick", args=args)
    return None


def _parse_snowflake(value: str | None) -> int | None:
    if not value or not value.isdigit():
        return None
    return int(value)


class CommandProcessor:
    """Runs commands found in Ignite ``message.created`` events."""

    def __init__(
        self,
        context: BridgeContext,
        *,
        ignite: IgniteRestClient,
        discord: DiscordBotClient,
    ) -> None:
        self._registry = context.registry
        self._session = context.session
        self._ignite = ignite
        self._discord = discord

    async def process(self, event: MessageCreated) -> Command | None:
        """Execute the command in ``event``, if any, and return it."""
        if event.message.is_bot or event.message.is_from(self._session.bot_id):
            return None
        command = parse_command(event.message.content)
        if command is None:
            return None

        channel_id = event.channel_id
        logger.info(
            "command.received",
            command=command.name,
            args=list(command.args),
            channel_id=channel_id,
            author=event.message.author_name,
        )
        if command.name == "ping":
            await self._reply(channel_id, "pong")
        elif command.name == "bridge":
            await self._bridge(channel_id, command)
        elif command.name == "kick":
            await self._kick(channel_id, command)
        return command

    async def _reply(self, channel_id: str, content: str) -> None:
        try:
            await self._ignite.send_message(channel_id, content)
        except IgniteApiError as exc:
            logger.error("command.reply_failed", channel_id=channel_id, error=str(exc))

    async def _bridge(self, channel_id: str, command: Command) -> None:
        target_id = _parse_snowflake(command.arg)
        if target_id is None:
            logger.warning("command.bridge_bad_argument", arg=command.arg)
            return

        channel = await self._discord.fetch_text_channel(target_id)
        if channel is None:
            logger.warning("command.bridge_channel_invalid", discord_channel_id=target_id)
            return

        self._registry.register_bridge(channel_id, str(channel.id))
        logger.info(
            "bridge.registered",
            ignite_channel_id=channel_id,
            discord_channel_id=channel.id,
            discord_channel=channel.name,
        )
        await self._reply(
            channel_id, f"Bridged this channel with Discord channel #{channel.name}"
        )

    async def _kick(self, channel_id: str, command: Command) -> None:
        user_id = _parse_snowflake(command.arg)
        if user_id is None:
            logger.warning("command.kick_bad_argument", arg=command.arg)
            return

        # The guild is the one owning the Discord side of this channel's bridge
        bridged = _parse_snowflake(self._registry.lookup(channel_id))
        if bridged is None:
            logger.warning("command.kick_no_guild", ignite_channel_id=channel_id)
            return
        discord_channel = await self._discord.fetch_text_channel(bridged)
        if discord_channel is None:
            logger.warning("command.kick_no_guild", discord_channel_id=bridged)
            return

        kicked = await self._discord.kick_member(
            guild_id=discord_channel.guild.id,
            user_id=user_id,
            reason=KICK_REASON,
        )
        if kicked:
            logger.info(
                "command.kicked", guild_id=discord_channel.guild.id, user_id=user_id
            )

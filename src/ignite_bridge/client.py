"""Discord API client wrapper."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import discord

from .errors import DiscordStartupError
from .logging import get_logger
from .types import DiscordIncomingMessage

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    MessageHandler = Callable[[DiscordIncomingMessage], Coroutine[Any, Any, None]]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SentMessage:
    """Result of sending a message."""

    message_id: int
    channel_id: int


def to_incoming(message: discord.Message) -> DiscordIncomingMessage:
    return DiscordIncomingMessage(
        guild_id=message.guild.id if message.guild else None,
        channel_id=message.channel.id,
        message_id=message.id,
        content=message.content,
        author_id=message.author.id,
        author_name=message.author.name,
        author_is_bot=message.author.bot,
    )


class DiscordBotClient:
    """Wrapper around the Pycord client for the bridge.

    Lookups and mutations never raise on Discord API errors; they return
    None/False so callers can log and move on.
    """

    def __init__(self, token: str) -> None:
        self._token = token
        self._message_handler: MessageHandler | None = None
        # Defer client creation until inside async context
        self._bot: discord.Client | None = None
        self._ready_event: asyncio.Event | None = None
        self._start_task: asyncio.Task[None] | None = None

    def _ensure_bot(self) -> discord.Client:
        """Create the client if not already created. Must be called from async context."""
        if self._bot is not None:
            return self._bot

        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.messages = True
        # Needed to resolve members for !kick
        intents.members = True
        self._bot = discord.Client(
            intents=intents,
            allowed_mentions=discord.AllowedMentions.none(),
        )
        self._ready_event = asyncio.Event()

        @self._bot.event
        async def on_ready() -> None:
            assert self._ready_event is not None
            self._ready_event.set()

        @self._bot.event
        async def on_message(message: discord.Message) -> None:
            if self._message_handler is not None:
                await self._message_handler(to_incoming(message))

        return self._bot

    @property
    def user(self) -> discord.ClientUser | None:
        """Get the bot user."""
        if self._bot is None:
            return None
        return self._bot.user

    def set_message_handler(self, handler: MessageHandler) -> None:
        self._message_handler = handler

    async def start(self) -> None:
        """Start the bot and wait until ready."""
        bot = self._ensure_bot()
        assert self._ready_event is not None

        async def _run_bot() -> None:
            try:
                await bot.start(self._token)
            except asyncio.CancelledError:
                pass
            except RuntimeError as e:
                # Suppress "Session is closed" error during shutdown
                if "Session is closed" not in str(e):
                    raise

        self._start_task = asyncio.create_task(_run_bot(), name="discord-bot-start")
        ready = asyncio.create_task(self._ready_event.wait())
        done, _ = await asyncio.wait(
            {self._start_task, ready}, return_when=asyncio.FIRST_COMPLETED
        )
        if ready not in done:
            ready.cancel()
            # login failed before ready; surface the error
            self._start_task.result()
            raise DiscordStartupError("Discord client stopped before becoming ready")

    async def close(self) -> None:
        """Close the bot connection."""
        if self._bot is not None:
            await self._bot.close()
            if self._start_task is not None and not self._start_task.done():
                self._start_task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._start_task

    async def fetch_text_channel(self, channel_id: int) -> discord.TextChannel | None:
        """Resolve a guild text channel by id, from cache or the API."""
        assert self._bot is not None
        channel = self._bot.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self._bot.fetch_channel(channel_id)
            except discord.HTTPException as exc:
                logger.debug("discord.channel_fetch_failed", channel_id=channel_id, error=str(exc))
                return None

        if not isinstance(channel, discord.TextChannel):
            return None
        return channel

    async def send_message(self, *, channel_id: int, content: str) -> SentMessage | None:
        """Send a message to a text channel."""
        channel = await self.fetch_text_channel(channel_id)
        if channel is None:
            return None

        try:
            message = await channel.send(content=content)
        except discord.HTTPException as exc:
            logger.debug("discord.send_failed", channel_id=channel_id, error=str(exc))
            return None
        return SentMessage(message_id=message.id, channel_id=message.channel.id)

    async def delete_message(self, *, channel_id: int, message_id: int) -> bool:
        """Delete a message."""
        channel = await self.fetch_text_channel(channel_id)
        if channel is None:
            return False

        try:
            message = await channel.fetch_message(message_id)
            await message.delete()
            return True
        except discord.HTTPException as exc:
            logger.debug(
                "discord.delete_failed",
                channel_id=channel_id,
                message_id=message_id,
                error=str(exc),
            )
            return False

    async def kick_member(self, *, guild_id: int, user_id: int, reason: str) -> bool:
        """Kick a user from a guild."""
        assert self._bot is not None
        try:
            user = await self._bot.fetch_user(user_id)
        except discord.HTTPException as exc:
            logger.warning("discord.kick_user_not_found", user_id=user_id, error=str(exc))
            return False

        guild = self._bot.get_guild(guild_id)
        if guild is None:
            logger.warning("discord.kick_guild_not_found", guild_id=guild_id)
            return False

        try:
            member = await guild.fetch_member(user.id)
        except discord.HTTPException as exc:
            logger.warning(
                "discord.kick_member_not_found",
                guild_id=guild_id,
                user_id=user_id,
                error=str(exc),
            )
            return False

        try:
            await member.kick(reason=reason)
        except discord.HTTPException as exc:
            logger.warning(
                "discord.kick_failed", guild_id=guild_id, user_id=user_id, error=str(exc)
            )
            return False
        return True

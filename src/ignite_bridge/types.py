"""Type definitions for both sides of the bridge."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal

import msgspec

# Ignite channel type for plain text channels
IGNITE_TEXT_CHANNEL = 0


class IgniteUser(msgspec.Struct):
    """An Ignite user as embedded in messages and returned by ``/v1/@me``."""

    id: str
    username: str = ""
    name: str | None = None
    is_bot: bool = False

    @property
    def display_name(self) -> str:
        return self.name or self.username or self.id


class IgniteMessage(msgspec.Struct):
    id: str
    channel_id: str = ""
    content: str = ""
    author: IgniteUser | None = None
    # Observed payloads carry the bot flag on ``user`` rather than ``author``
    user: IgniteUser | None = None

    @property
    def is_bot(self) -> bool:
        return any(u is not None and u.is_bot for u in (self.author, self.user))

    def is_from(self, user_id: str) -> bool:
        return any(u is not None and u.id == user_id for u in (self.author, self.user))

    @property
    def author_name(self) -> str:
        for u in (self.author, self.user):
            if u is not None:
                return u.display_name
        return "unknown"


class IgniteDeletedMessage(msgspec.Struct):
    id: str
    channel_id: str


class IgniteChannelRef(msgspec.Struct):
    id: str


class IgniteGuildChannel(msgspec.Struct):
    channel_id: str
    name: str = ""
    type: int = IGNITE_TEXT_CHANNEL
    parent_id: str | None = None

    @property
    def is_text(self) -> bool:
        return self.type == IGNITE_TEXT_CHANNEL


class IgniteGuild(msgspec.Struct):
    id: str
    name: str = ""
    channels: list[IgniteGuildChannel] = msgspec.field(default_factory=list)
    roles: list[dict[str, Any]] = msgspec.field(default_factory=list)


class IgniteAuthResponse(msgspec.Struct):
    auth: str | None = None


# Domain events decoded from the realtime stream. The union is closed:
# anything not recognized becomes UnknownEvent.


class MessageCreated(msgspec.Struct, frozen=True):
    message: IgniteMessage
    channel: IgniteChannelRef | None = None

    name: ClassVar[str] = "message.created"

    @property
    def channel_id(self) -> str:
        if self.message.channel_id:
            return self.message.channel_id
        return self.channel.id if self.channel is not None else ""


class MessageDeleted(msgspec.Struct, frozen=True):
    message: IgniteDeletedMessage

    name: ClassVar[str] = "message.deleted"


class GuildJoined(msgspec.Struct, frozen=True):
    guild: IgniteGuild

    name: ClassVar[str] = "guild.joined"


class UnknownEvent(msgspec.Struct, frozen=True):
    name: str
    data: Any = None


IgniteEvent = MessageCreated | MessageDeleted | GuildJoined | UnknownEvent


@dataclass(frozen=True, slots=True)
class DiscordIncomingMessage:
    """Incoming message from Discord."""

    guild_id: int | None
    channel_id: int
    message_id: int
    content: str
    author_id: int
    author_name: str
    author_is_bot: bool = False


@dataclass(frozen=True, slots=True)
class Command:
    """A ``!command`` parsed from Ignite message content."""

    name: Literal["ping", "bridge", "kick"]
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def arg(self) -> str | None:
        return self.args[0] if self.args else None

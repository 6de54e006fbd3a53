"""Test configuration and fixtures."""

from __future__ import annotations

import itertools
from types import SimpleNamespace

import msgspec
import pytest

from ignite_bridge.client import SentMessage
from ignite_bridge.errors import IgniteApiError
from ignite_bridge.state import BridgeContext, Session
from ignite_bridge.types import IgniteMessage, IgniteUser, MessageCreated

BOT_ID = "900"


class FakeIgnite:
    """Records Ignite REST calls."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail_send = False
        self._ids = itertools.count(7000)

    async def send_message(self, channel_id: str, content: str) -> IgniteMessage:
        if self.fail_send:
            raise IgniteApiError("POST failed", status_code=500)
        self.sent.append((channel_id, content))
        return IgniteMessage(id=str(next(self._ids)), channel_id=channel_id, content=content)


class FakeDiscord:
    """Stands in for DiscordBotClient with an in-memory set of text channels."""

    def __init__(self) -> None:
        self.channels: dict[int, SimpleNamespace] = {}
        self.sent: list[tuple[int, str]] = []
        self.deleted: list[tuple[int, int]] = []
        self.kicked: list[tuple[int, int, str]] = []
        self.fail_send = False
        self._ids = itertools.count(5000)

    def add_text_channel(self, channel_id: int, name: str, guild_id: int = 1) -> SimpleNamespace:
        channel = SimpleNamespace(id=channel_id, name=name, guild=SimpleNamespace(id=guild_id))
        self.channels[channel_id] = channel
        return channel

    async def fetch_text_channel(self, channel_id: int):
        return self.channels.get(channel_id)

    async def send_message(self, *, channel_id: int, content: str) -> SentMessage | None:
        if self.fail_send or channel_id not in self.channels:
            return None
        self.sent.append((channel_id, content))
        return SentMessage(message_id=next(self._ids), channel_id=channel_id)

    async def delete_message(self, *, channel_id: int, message_id: int) -> bool:
        if channel_id not in self.channels:
            return False
        self.deleted.append((channel_id, message_id))
        return True

    async def kick_member(self, *, guild_id: int, user_id: int, reason: str) -> bool:
        self.kicked.append((guild_id, user_id, reason))
        return True


@pytest.fixture
def context() -> BridgeContext:
    return BridgeContext(session=Session(bot_id=BOT_ID))


@pytest.fixture
def ignite() -> FakeIgnite:
    return FakeIgnite()


@pytest.fixture
def discord_client() -> FakeDiscord:
    return FakeDiscord()


def make_created(
    content: str,
    *,
    channel_id: str = "100",
    message_id: str = "1001",
    name: str | None = "Test User",
    username: str = "test",
    is_bot: bool = False,
    author_id: str = "42",
    with_user: bool = True,
) -> MessageCreated:
    author = IgniteUser(id=author_id, username=username, name=name)
    user = None
    if with_user:
        user = IgniteUser(id=author_id, username=username, is_bot=is_bot)
    return MessageCreated(
        message=IgniteMessage(
            id=message_id,
            channel_id=channel_id,
            content=content,
            author=author,
            user=user,
        )
    )


def frame(event: str, data: object) -> str:
    """Encode a realtime frame with the payload double-encoded as Pusher does."""
    return msgspec.json.encode({"event": event, "data": msgspec.json.encode(data).decode()}).decode()

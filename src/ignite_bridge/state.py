"""In-memory bridge state shared by every event handler.

Nothing here is persisted; a restart forgets all bridges. All mutation
happens on the event loop thread between awaits, so no locking is used.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class Session:
    """Realtime connection state for one process."""

    bot_id: str
    socket_id: str | None = None
    heartbeat_interval_ms: int | None = None

    def reset(self) -> None:
        """Forget connection-scoped values; the bot id is kept."""
        self.socket_id = None
        self.heartbeat_interval_ms = None


class BridgeRegistry:
    """Symmetric channel pairings and message correlations.

    Identifiers from both platforms share one key space; Discord snowflakes
    are stored as decimal strings.
    """

    def __init__(self) -> None:
        self._channels: dict[str, str] = {}
        self._messages: dict[str, str] = {}

    def register_bridge(self, a: str, b: str) -> None:
        # Per-key overwrite: a previous partner of ``a`` or ``b`` keeps its
        # stale reverse link.
        self._channels[a] = b
        self._channels[b] = a

    def lookup(self, channel_id: str) -> str | None:
        return self._channels.get(channel_id)

    def register_correlation(self, msg_a: str, msg_b: str) -> None:
        self._messages[msg_a] = msg_b
        self._messages[msg_b] = msg_a

    def lookup_correlation(self, message_id: str) -> str | None:
        return self._messages.get(message_id)


@dataclass(slots=True)
class BridgeContext:
    """Process-wide state handed to every component."""

    session: Session
    registry: BridgeRegistry = field(default_factory=BridgeRegistry)

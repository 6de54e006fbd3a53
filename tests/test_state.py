"""Tests for the in-memory bridge state."""

from __future__ import annotations

from ignite_bridge.state import BridgeRegistry, Session


class TestBridgeRegistry:
    def test_bridge_is_symmetric(self):
        registry = BridgeRegistry()
        registry.register_bridge("C1", "D1")
        assert registry.lookup("C1") == "D1"
        assert registry.lookup("D1") == "C1"

    def test_unknown_channel(self):
        assert BridgeRegistry().lookup("nope") is None

    def test_overwrite_keeps_stale_reverse_link(self):
        """Re-bridging a channel does not clear its old partner's link."""
        registry = BridgeRegistry()
        registry.register_bridge("a", "b")
        registry.register_bridge("a", "c")
        assert registry.lookup("a") == "c"
        assert registry.lookup("c") == "a"
        assert registry.lookup("b") == "a"

    def test_correlation_is_symmetric(self):
        registry = BridgeRegistry()
        registry.register_correlation("m-ignite", "m-discord")
        assert registry.lookup_correlation("m-ignite") == "m-discord"
        assert registry.lookup_correlation("m-discord") == "m-ignite"
        assert registry.lookup_correlation("other") is None

    def test_channels_and_messages_are_separate(self):
        registry = BridgeRegistry()
        registry.register_bridge("1", "2")
        assert registry.lookup_correlation("1") is None


class TestSession:
    def test_reset_keeps_bot_id(self):
        session = Session(bot_id="b1", socket_id="s1", heartbeat_interval_ms=30000)
        session.reset()
        assert session.bot_id == "b1"
        assert session.socket_id is None
        assert session.heartbeat_interval_ms is None

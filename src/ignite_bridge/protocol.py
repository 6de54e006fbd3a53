"""Pusher wire protocol: frame decoding and control frame encoding.

Frames are JSON objects ``{"event": ..., "data": ..., "channel": ...}``.
``data`` is itself a JSON document encoded as a string, so payloads are
decoded twice.
"""

from __future__ import annotations

from typing import Any

import msgspec

from .errors import FrameError
from .types import GuildJoined, IgniteEvent, MessageCreated, MessageDeleted, UnknownEvent

CONNECTION_ESTABLISHED = "pusher:connection_established"
PING = "pusher:ping"
SUBSCRIBE = "pusher:subscribe"
SUBSCRIPTION_SUCCEEDED = "pusher_internal:subscription_succeeded"

# Pusher's documented default when the server omits activity_timeout
DEFAULT_ACTIVITY_TIMEOUT = 120


class Frame(msgspec.Struct):
    event: str
    data: Any = None
    channel: str | None = None

    @property
    def is_system(self) -> bool:
        # pusher_internal:* shares the namespace
        return self.event.startswith("pusher")


class ConnectionEstablished(msgspec.Struct):
    socket_id: str
    activity_timeout: int = DEFAULT_ACTIVITY_TIMEOUT

    @property
    def heartbeat_interval_ms(self) -> int:
        # A non-positive timeout would turn the heartbeat into a busy loop
        timeout = self.activity_timeout
        if timeout <= 0:
            timeout = DEFAULT_ACTIVITY_TIMEOUT
        return timeout * 1000


_EVENT_TYPES: dict[str, type[MessageCreated | MessageDeleted | GuildJoined]] = {
    MessageCreated.name: MessageCreated,
    MessageDeleted.name: MessageDeleted,
    GuildJoined.name: GuildJoined,
}

_frame_decoder = msgspec.json.Decoder(Frame)
_established_decoder = msgspec.json.Decoder(ConnectionEstablished)
_event_decoders = {name: msgspec.json.Decoder(tp) for name, tp in _EVENT_TYPES.items()}


def decode_frame(raw: str | bytes) -> Frame:
    try:
        return _frame_decoder.decode(raw)
    except msgspec.DecodeError as exc:
        raise FrameError(f"invalid frame: {exc}") from exc


def _payload_bytes(frame: Frame) -> bytes:
    if frame.data is None:
        raise FrameError(f"{frame.event} frame has no data")
    if isinstance(frame.data, str):
        return frame.data.encode()
    # Some servers send data as an object instead of an encoded string
    return msgspec.json.encode(frame.data)


def decode_connection_established(frame: Frame) -> ConnectionEstablished:
    try:
        return _established_decoder.decode(_payload_bytes(frame))
    except msgspec.DecodeError as exc:
        raise FrameError(f"invalid {frame.event} payload: {exc}") from exc


def decode_event(frame: Frame) -> IgniteEvent:
    """Decode a domain frame into one of the known event types.

    Unrecognized event names come back as UnknownEvent with the raw data.
    Raises FrameError when a recognized event carries a malformed payload.
    """
    decoder = _event_decoders.get(frame.event)
    if decoder is None:
        return UnknownEvent(name=frame.event, data=frame.data)
    try:
        return decoder.decode(_payload_bytes(frame))
    except msgspec.DecodeError as exc:
        raise FrameError(f"invalid {frame.event} payload: {exc}") from exc


def _encode(frame: dict[str, Any]) -> str:
    return msgspec.json.encode(frame).decode()


def ping_frame() -> str:
    return _encode({"event": PING})


def subscribe_frame(channel: str, auth: str) -> str:
    return _encode({"event": SUBSCRIBE, "data": {"channel": channel, "auth": auth}})


def private_bot_channel(bot_id: str) -> str:
    return f"private-bot.{bot_id}"

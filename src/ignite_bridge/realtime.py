"""Ignite realtime (Pusher protocol) client."""

from __future__ import annotations

import enum
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol

import anyio
import websockets

from .errors import FrameError
from .logging import get_logger
from .protocol import (
    CONNECTION_ESTABLISHED,
    SUBSCRIPTION_SUCCEEDED,
    Frame,
    decode_connection_established,
    decode_event,
    decode_frame,
    ping_frame,
    private_bot_channel,
    subscribe_frame,
)

if TYPE_CHECKING:
    from anyio.abc import TaskGroup

    from .auth import AuthService
    from .state import BridgeContext
    from .types import IgniteEvent

    EventHandler = Callable[[IgniteEvent], Awaitable[None]]

logger = get_logger(__name__)


class ConnectionState(enum.Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    SUBSCRIBED = "subscribed"
    DISCONNECTED = "disconnected"


class FrameSender(Protocol):
    async def send(self, message: str) -> None: ...


class IgniteRealtimeClient:
    """Holds the websocket to Ignite and turns frames into domain events.

    Lifecycle: connect, wait for ``pusher:connection_established``, start
    the heartbeat, subscribe to the bot's private channel, then dispatch
    every domain frame to ``on_event``. When the socket closes the client
    is disconnected for good; there is no reconnect.
    """

    def __init__(
        self,
        url: str,
        *,
        auth: AuthService,
        context: BridgeContext,
        on_event: EventHandler,
    ) -> None:
        self._url = url
        self._auth = auth
        self._session = context.session
        self._on_event = on_event
        self._ws: FrameSender | None = None
        self._task_group: TaskGroup | None = None
        self._heartbeat_scope: anyio.CancelScope | None = None
        self.state = ConnectionState.CONNECTING

    async def run(self) -> None:
        """Connect and process frames until the connection goes away."""
        logger.info("realtime.connecting", url=self._url)
        try:
            # Keep-alive is the pusher:ping heartbeat, not websocket pings
            async with websockets.connect(self._url, ping_interval=None) as ws:
                async with anyio.create_task_group() as tg:
                    self.attach(ws, tg)
                    logger.info("realtime.connected")
                    try:
                        async for raw in ws:
                            # One task per frame: a stuck REST or gateway
                            # call only holds up its own event
                            tg.start_soon(self.handle_frame, raw)
                    except websockets.ConnectionClosedError as exc:
                        logger.error("realtime.closed", error=str(exc))
                    finally:
                        self.mark_disconnected()
        except (OSError, TimeoutError, websockets.WebSocketException) as exc:
            logger.error("realtime.error", error=str(exc))
        finally:
            self.mark_disconnected()

    def attach(self, ws: FrameSender, task_group: TaskGroup) -> None:
        self._ws = ws
        self._task_group = task_group
        self.state = ConnectionState.CONNECTED

    def mark_disconnected(self) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            return
        self.state = ConnectionState.DISCONNECTED
        if self._heartbeat_scope is not None:
            self._heartbeat_scope.cancel()
        self._ws = None
        self._session.reset()
        logger.warning("realtime.disconnected")

    async def handle_frame(self, raw: str | bytes) -> None:
        try:
            frame = decode_frame(raw)
        except FrameError as exc:
            logger.warning("realtime.bad_frame", error=str(exc))
            return

        if frame.is_system:
            logger.debug("realtime.system_event", frame_event=frame.event)
            if frame.event == CONNECTION_ESTABLISHED:
                await self._on_connection_established(frame)
            elif frame.event == SUBSCRIPTION_SUCCEEDED:
                logger.info("realtime.subscription_confirmed", channel=frame.channel)
            return

        try:
            event = decode_event(frame)
        except FrameError as exc:
            logger.warning("realtime.bad_event", frame_event=frame.event, error=str(exc))
            return

        logger.debug("realtime.event", frame_event=frame.event, channel=frame.channel)
        try:
            await self._on_event(event)
        except Exception:
            logger.exception("realtime.handler_failed", frame_event=frame.event)

    async def _on_connection_established(self, frame: Frame) -> None:
        try:
            info = decode_connection_established(frame)
        except FrameError as exc:
            logger.error("realtime.bad_handshake", error=str(exc))
            return

        self._session.socket_id = info.socket_id
        self._session.heartbeat_interval_ms = info.heartbeat_interval_ms
        logger.info(
            "realtime.socket_id",
            socket_id=info.socket_id,
            activity_timeout=info.activity_timeout,
        )
        self.start_heartbeat(info.heartbeat_interval_ms / 1000)
        await self.subscribe(private_bot_channel(self._session.bot_id))

    def start_heartbeat(self, interval: float) -> None:
        """Send ``pusher:ping`` every ``interval`` seconds. Pongs are not checked."""
        if self._task_group is None:
            raise RuntimeError("realtime client is not attached to a connection")
        if interval <= 0:
            raise ValueError(f"heartbeat interval must be positive, got {interval}")
        if self._heartbeat_scope is not None:
            self._heartbeat_scope.cancel()
        self._heartbeat_scope = anyio.CancelScope()
        self._task_group.start_soon(self._heartbeat, interval, self._heartbeat_scope)

    async def _heartbeat(self, interval: float, scope: anyio.CancelScope) -> None:
        with scope:
            while True:
                await anyio.sleep(interval)
                if self._ws is None:
                    return
                try:
                    await self._ws.send(ping_frame())
                except websockets.ConnectionClosed:
                    return
                logger.debug("realtime.heartbeat_sent")

    async def subscribe(self, channel: str) -> bool:
        """Authorize and subscribe to a private channel."""
        socket_id = self._session.socket_id
        if socket_id is None or self._ws is None:
            logger.error("realtime.subscribe_without_socket", channel=channel)
            return False

        auth = await self._auth.sign_channel_auth(channel, socket_id)
        if auth is None:
            return False

        # the connection may have dropped while signing
        if self._ws is None:
            return False
        try:
            await self._ws.send(subscribe_frame(channel, auth))
        except websockets.ConnectionClosed:
            logger.error("realtime.subscribe_failed", channel=channel)
            return False

        self.state = ConnectionState.SUBSCRIBED
        logger.info("realtime.subscribed", channel=channel)
        return True

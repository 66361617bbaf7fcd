"""
WebSocket connection management.

Handles connection lifecycle, automatic reconnection, and message routing.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK

from ..core import ConnectionState, ConnectionStateMachine, EventBus, EventType
from ..logging_config import get_logger
from .codec import MessageCodec, ProtocolError

logger = get_logger(__name__)

MessageHandler = Callable[[Dict[str, Any]], None]
ConnectFactory = Callable[[str], Awaitable[Any]]


class ConnectionManager:
    """
    Owns the socket lifecycle.

    Connects, routes inbound messages to handlers registered per action,
    and schedules a reconnection attempt after every closure. There is no
    retry limit; only ``stop()`` ends the cycle.
    """

    def __init__(
        self,
        url: str,
        event_bus: EventBus,
        codec: Optional[MessageCodec] = None,
        reconnect_delay: float = 3.0,
        connect: Optional[ConnectFactory] = None,
    ):
        self._url = url
        self._event_bus = event_bus
        self._codec = codec or MessageCodec()
        self._reconnect_delay = reconnect_delay
        self._connect = connect or websockets.connect
        self._state_machine = ConnectionStateMachine(event_bus)

        self._websocket: Optional[Any] = None
        self._message_handlers: Dict[str, MessageHandler] = {}
        self._session_task: Optional[asyncio.Task] = None
        self._writer_task: Optional[asyncio.Task] = None
        self._outbound: Optional[asyncio.Queue] = None
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._connection_attempts = 0
        self._stopped = True

    @property
    def state(self) -> ConnectionState:
        """Get current connection state."""
        return self._state_machine.current_state

    @property
    def state_machine(self) -> ConnectionStateMachine:
        return self._state_machine

    @property
    def is_connected(self) -> bool:
        """Commands are only transmitted in this state."""
        return self._state_machine.is_connected and self._outbound is not None

    @property
    def reconnect_scheduled(self) -> bool:
        return self._reconnect_handle is not None

    def on_connected(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` every time the socket becomes connected."""
        self._state_machine.on_transition_to(ConnectionState.CONNECTED, lambda transition: callback())

    def register_handler(self, action: str, handler: MessageHandler) -> None:
        """Register a handler for an inbound action."""
        self._message_handlers[action] = handler
        logger.debug(f"Registered handler for {action}")

    def unregister_handler(self, action: str) -> None:
        """Unregister a handler for an inbound action."""
        self._message_handlers.pop(action, None)

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def start(self) -> None:
        """Begin connecting. Must be called from within the running event loop."""
        self._stopped = False
        self._begin_connect()

    async def stop(self) -> None:
        """Stop retrying and close the socket."""
        self._stopped = True

        if self._reconnect_handle:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None

        websocket = self._websocket

        if self._session_task and not self._session_task.done():
            self._session_task.cancel()
            try:
                await self._session_task
            except asyncio.CancelledError:
                pass
        self._session_task = None

        if websocket is not None:
            try:
                await websocket.close()
            except Exception as e:
                logger.warning(f"Error closing websocket: {e}")

        self._teardown()

        if self._state_machine.transition_to(ConnectionState.DISCONNECTED):
            self._event_bus.emit(EventType.DISCONNECTED, {"reconnecting": False})
        logger.info("Connection manager stopped")

    def _begin_connect(self) -> None:
        self._reconnect_handle = None
        if self._stopped:
            return
        loop = asyncio.get_running_loop()
        self._session_task = loop.create_task(self._run_session())

    async def _run_session(self) -> None:
        """One connection attempt, from connecting until closure."""
        self._connection_attempts += 1
        self._state_machine.transition_to(ConnectionState.CONNECTING)
        self._event_bus.emit(EventType.CONNECTING, {"url": self._url, "attempt": self._connection_attempts})

        try:
            logger.info(f"Connecting to {self._url} (attempt {self._connection_attempts})")
            websocket = await self._connect(self._url)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Connection failed: {e}")
            self._on_transport_error(e)
            self._on_closed()
            return

        self._websocket = websocket
        self._outbound = asyncio.Queue()
        self._writer_task = asyncio.create_task(self._write_messages(websocket, self._outbound))
        self._connection_attempts = 0

        logger.info("Connected to game server")
        self._state_machine.transition_to(ConnectionState.CONNECTED)
        self._event_bus.emit(EventType.CONNECTED, {"url": self._url})

        try:
            async for frame in websocket:
                self._handle_frame(frame)
        except ConnectionClosedOK:
            pass
        except (ConnectionClosed, OSError) as e:
            logger.warning(f"Connection lost: {e}")
            self._on_transport_error(e)
        finally:
            self._teardown()

        logger.info("Disconnected from game server")
        self._on_closed()

    def _on_transport_error(self, error: BaseException) -> None:
        if self._state_machine.transition_to(ConnectionState.ERROR, {"error": str(error)}):
            self._event_bus.emit(EventType.CONNECTION_ERROR, {"error": str(error)})

    def _on_closed(self) -> None:
        """Closure by any cause: go disconnected and schedule the next attempt."""
        self._state_machine.transition_to(ConnectionState.DISCONNECTED)
        reconnecting = not self._stopped
        self._event_bus.emit(EventType.DISCONNECTED, {"reconnecting": reconnecting})

        if reconnecting:
            logger.info(f"Reconnecting in {self._reconnect_delay:.1f}s")
            loop = asyncio.get_running_loop()
            self._reconnect_handle = loop.call_later(self._reconnect_delay, self._begin_connect)

    def _teardown(self) -> None:
        if self._writer_task:
            self._writer_task.cancel()
            self._writer_task = None
        self._outbound = None
        self._websocket = None

    # =========================================================================
    # SENDING
    # =========================================================================

    def send_nowait(self, message: Dict[str, Any]) -> bool:
        """
        Queue a message for transmission on the open socket.

        Returns:
            True if the message was accepted, False if it was dropped
            because the connection is not in the connected state.
        """
        if not self.is_connected:
            logger.debug(f"Dropping {message.get('action')}: not connected")
            return False

        self._outbound.put_nowait(self._codec.encode(message))
        return True

    async def _write_messages(self, websocket: Any, queue: asyncio.Queue) -> None:
        """Drain the outbound queue in order until the socket goes away."""
        while True:
            frame = await queue.get()
            try:
                await websocket.send(frame)
            except (ConnectionClosed, OSError) as e:
                # The receive loop observes the closure and drives the transition
                logger.warning(f"Failed to send message: {e}")
                return

    # =========================================================================
    # RECEIVING
    # =========================================================================

    def _handle_frame(self, frame: Any) -> None:
        """Decode a frame and route it to its handler."""
        try:
            message = self._codec.decode(frame)
        except ProtocolError as e:
            logger.warning(f"Dropping malformed message: {e}")
            return

        action = message["action"]
        handler = self._message_handlers.get(action)

        if handler is None:
            logger.info(f"Unknown message: {action}")
            self._event_bus.emit(EventType.UNKNOWN_MESSAGE, {"action": action})
            return

        try:
            handler(message)
        except Exception:
            logger.exception(f"Error in message handler for {action}")

"""
User-facing status: connection indicator and transient status messages.

The board only holds state; ``rendering.ui_renderer`` draws it.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..core import ConnectionState, Event, EventBus, EventType
from ..logging_config import get_logger

logger = get_logger(__name__)


class MessageKind(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    text: str
    kind: MessageKind


class StatusBoard:
    """Connection status and the current status message."""

    def __init__(self, on_change: Optional[Callable[[], None]] = None, info_seconds: float = 3.0):
        self.on_change = on_change
        self.info_seconds = info_seconds

        self.connection_state = ConnectionState.DISCONNECTED
        self.connection_text = "Connecting..."
        self.message: Optional[StatusMessage] = None

        self._clear_handle: Optional[asyncio.TimerHandle] = None

    def set_connection_status(self, state: ConnectionState, text: str) -> None:
        self.connection_state = state
        self.connection_text = text
        self._changed()

    def show_message(self, text: str, kind: MessageKind = MessageKind.INFO) -> None:
        """Show a message; info messages clear themselves after ``info_seconds``."""
        self._cancel_clear()
        self.message = StatusMessage(text, MessageKind(kind))

        if self.message.kind == MessageKind.INFO:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._clear_handle = loop.call_later(self.info_seconds, self.clear_message)

        self._changed()

    def clear_message(self) -> None:
        self._cancel_clear()
        self.message = None
        self._changed()

    def close(self) -> None:
        self._cancel_clear()

    def _cancel_clear(self) -> None:
        if self._clear_handle:
            self._clear_handle.cancel()
            self._clear_handle = None

    def _changed(self) -> None:
        if self.on_change:
            self.on_change()


def bind_status_events(board: StatusBoard, event_bus: EventBus, default_username: str) -> None:
    """Keep the board in sync with connection and world events."""

    def on_connecting(event: Event) -> None:
        board.set_connection_status(ConnectionState.CONNECTING, "Connecting...")
        board.show_message("Connecting to game server...", MessageKind.INFO)

    def on_connected(event: Event) -> None:
        board.set_connection_status(ConnectionState.CONNECTED, "Connected")
        board.show_message("Connected to server!", MessageKind.SUCCESS)

    def on_disconnected(event: Event) -> None:
        board.set_connection_status(ConnectionState.DISCONNECTED, "Disconnected")
        if event.data.get("reconnecting"):
            board.show_message("Disconnected from server. Reconnecting...", MessageKind.ERROR)

    def on_error(event: Event) -> None:
        board.set_connection_status(ConnectionState.ERROR, "Connection Error")
        board.show_message("Failed to connect to server. Retrying...", MessageKind.ERROR)

    def on_joined(event: Event) -> None:
        username = event.data.get("username") or default_username
        board.show_message(f"Welcome to the game, {username}!", MessageKind.SUCCESS)

    def on_join_failed(event: Event) -> None:
        board.show_message(f"Failed to join game: {event.data.get('error')}", MessageKind.ERROR)

    def on_player_joined(event: Event) -> None:
        board.show_message(f"{event.data.get('username')} joined the game!", MessageKind.INFO)

    def on_player_left(event: Event) -> None:
        username = event.data.get("username") or "Player"
        board.show_message(f"{username} left the game.", MessageKind.INFO)

    event_bus.subscribe(EventType.CONNECTING, on_connecting)
    event_bus.subscribe(EventType.CONNECTED, on_connected)
    event_bus.subscribe(EventType.DISCONNECTED, on_disconnected)
    event_bus.subscribe(EventType.CONNECTION_ERROR, on_error)
    event_bus.subscribe(EventType.GAME_JOINED, on_joined)
    event_bus.subscribe(EventType.JOIN_FAILED, on_join_failed)
    event_bus.subscribe(EventType.PLAYER_JOINED, on_player_joined)
    event_bus.subscribe(EventType.PLAYER_LEFT, on_player_left)

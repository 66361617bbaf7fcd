"""
Connection state machine.

Tracks the lifecycle of the server connection and validates transitions.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional
from dataclasses import dataclass

from .event_bus import EventBus, EventType
from ..logging_config import get_logger

logger = get_logger(__name__)


class ConnectionState(str, Enum):
    """Connection lifecycle states."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass
class StateTransition:
    """Represents a state transition."""
    from_state: ConnectionState
    to_state: ConnectionState
    data: Optional[dict]


class ConnectionStateMachine:
    """Manages connection state transitions."""

    # Valid state transitions
    VALID_TRANSITIONS: Dict[ConnectionState, List[ConnectionState]] = {
        ConnectionState.DISCONNECTED: [ConnectionState.CONNECTING],
        ConnectionState.CONNECTING: [ConnectionState.CONNECTED, ConnectionState.ERROR, ConnectionState.DISCONNECTED],
        ConnectionState.CONNECTED: [ConnectionState.ERROR, ConnectionState.DISCONNECTED],
        ConnectionState.ERROR: [ConnectionState.DISCONNECTED],
    }

    def __init__(self, event_bus: Optional[EventBus] = None):
        self._current_state = ConnectionState.DISCONNECTED
        self._previous_state: Optional[ConnectionState] = None
        self._transition_listeners: Dict[ConnectionState, List[Callable]] = {}
        self._any_transition_listeners: List[Callable] = []
        self._event_bus = event_bus

    @property
    def current_state(self) -> ConnectionState:
        """Get the current state."""
        return self._current_state

    @property
    def previous_state(self) -> Optional[ConnectionState]:
        """Get the previous state."""
        return self._previous_state

    @property
    def is_connected(self) -> bool:
        return self._current_state == ConnectionState.CONNECTED

    def can_transition_to(self, state: ConnectionState) -> bool:
        """Check if transition to given state is valid."""
        valid_states = self.VALID_TRANSITIONS.get(self._current_state, [])
        return state in valid_states

    def transition_to(self, state: ConnectionState, data: Optional[dict] = None) -> bool:
        """
        Transition to a new state.

        Args:
            state: The state to transition to
            data: Optional data passed to listeners

        Returns:
            True if transition was successful, False otherwise
        """
        if not self.can_transition_to(state):
            logger.debug(f"Ignoring transition {self._current_state.value} -> {state.value}")
            return False

        self._previous_state = self._current_state
        self._current_state = state

        transition = StateTransition(
            from_state=self._previous_state,
            to_state=state,
            data=data
        )

        for listener in self._transition_listeners.get(state, []):
            try:
                listener(transition)
            except Exception:
                logger.exception("Error in state transition listener")

        for listener in self._any_transition_listeners:
            try:
                listener(transition)
            except Exception:
                logger.exception("Error in any-transition listener")

        if self._event_bus:
            self._event_bus.emit(
                EventType.STATE_CHANGED,
                {
                    "from": self._previous_state.value,
                    "to": state.value,
                    "data": data
                },
                "state_machine"
            )

        return True

    def on_transition_to(self, state: ConnectionState, callback: Callable[[StateTransition], None]) -> None:
        """Register a callback for transitions to a specific state."""
        if state not in self._transition_listeners:
            self._transition_listeners[state] = []
        self._transition_listeners[state].append(callback)

    def on_any_transition(self, callback: Callable[[StateTransition], None]) -> None:
        """Register a callback for any state transition."""
        self._any_transition_listeners.append(callback)

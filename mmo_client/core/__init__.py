"""Core systems for the game client."""

from .event_bus import EventBus, EventType, Event
from .state_machine import ConnectionStateMachine, ConnectionState, StateTransition

__all__ = [
    "EventBus",
    "EventType",
    "Event",
    "ConnectionStateMachine",
    "ConnectionState",
    "StateTransition",
]

"""HUD state and styling."""

from .colors import Colors
from .status import MessageKind, StatusBoard, StatusMessage, bind_status_events

__all__ = [
    "Colors",
    "MessageKind",
    "StatusBoard",
    "StatusMessage",
    "bind_status_events",
]

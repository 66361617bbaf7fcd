"""Network layer for WebSocket communication."""

from .codec import MessageCodec, ProtocolError
from .connection import ConnectionManager
from .handlers import MessageHandlers, register_all_handlers
from .message_sender import MessageSender

__all__ = [
    "ConnectionManager",
    "MessageCodec",
    "MessageHandlers",
    "MessageSender",
    "ProtocolError",
    "register_all_handlers",
]

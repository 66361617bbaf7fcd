"""
Message sender for client-to-server communication.

Provides typed methods for every outbound command. Commands issued while
the connection is not in the connected state are dropped.
"""

from .. import protocol
from ..logging_config import get_logger
from ..protocol import Direction
from .connection import ConnectionManager

logger = get_logger(__name__)


class MessageSender:
    """Sends messages to the server with proper formatting."""

    def __init__(self, connection: ConnectionManager):
        self.connection = connection

    def join_game(self, username: str) -> bool:
        """Send join request."""
        sent = self.connection.send_nowait(protocol.join_game(username))
        if sent:
            logger.info(f"Joining game as {username}")
        return sent

    def move(self, direction: Direction) -> bool:
        """Send move command."""
        return self.connection.send_nowait(protocol.move(direction))

    def stop(self) -> bool:
        """Send stop command."""
        return self.connection.send_nowait(protocol.stop())

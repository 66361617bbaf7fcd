"""
Message handlers for server-to-client events.

Each handler validates one inbound action and reconciles it into the
session state. Handlers are synchronous, so a draw pass never observes a
partially applied update.
"""

from typing import Any, Dict

from pydantic import ValidationError

from ..core import EventBus, EventType
from ..game.client_state import SessionState
from ..logging_config import get_logger
from ..protocol import Action, JoinGameResult, PlayerJoined, PlayerLeft, PlayersMoved
from .connection import ConnectionManager

logger = get_logger(__name__)


class MessageHandlers:
    """Container for all message handlers."""

    def __init__(self, game_state: SessionState, event_bus: EventBus):
        self.game_state = game_state
        self.event_bus = event_bus

    def handle_join_game(self, message: Dict[str, Any]) -> None:
        """Handle the reply to our join request."""
        try:
            result = JoinGameResult.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Malformed join_game reply: {e}")
            return

        if not result.success:
            error = result.error or "Unknown error"
            logger.error(f"Failed to join game: {error}")
            self.event_bus.emit(EventType.JOIN_FAILED, {"error": error})
            return

        self.game_state.apply_join(result.player_id, result.players, result.avatars)

        player = self.game_state.local_player
        logger.info(f"Joined game as {result.player_id} ({len(result.players)} players online)")
        self.event_bus.emit(EventType.GAME_JOINED, {
            "player_id": result.player_id,
            "username": player.username if player else None,
        })

    def handle_players_moved(self, message: Dict[str, Any]) -> None:
        """Handle a batch of player updates."""
        try:
            update = PlayersMoved.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Malformed players_moved: {e}")
            return

        self.game_state.merge_players(update.players)
        self.event_bus.emit(EventType.PLAYERS_MOVED, {"player_ids": list(update.players)})

    def handle_player_joined(self, message: Dict[str, Any]) -> None:
        """Handle player joined event."""
        try:
            joined = PlayerJoined.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Malformed player_joined: {e}")
            return

        logger.info(f"Player joined: {joined.player.username}")
        self.game_state.add_player(joined.player, joined.avatar)
        self.event_bus.emit(EventType.PLAYER_JOINED, {
            "player_id": joined.player.id,
            "username": joined.player.username,
        })

    def handle_player_left(self, message: Dict[str, Any]) -> None:
        """Handle player left event."""
        try:
            left = PlayerLeft.model_validate(message)
        except ValidationError as e:
            logger.warning(f"Malformed player_left: {e}")
            return

        player = self.game_state.remove_player(left.player_id)
        if player is None:
            logger.debug(f"player_left for unknown player {left.player_id}")
            return

        logger.info(f"Player left: {player.username}")
        self.event_bus.emit(EventType.PLAYER_LEFT, {
            "player_id": player.id,
            "username": player.username,
        })


def register_all_handlers(
    connection: ConnectionManager,
    game_state: SessionState,
    event_bus: EventBus,
) -> MessageHandlers:
    """Create and register all message handlers with the connection manager."""
    handlers = MessageHandlers(game_state, event_bus)

    connection.register_handler(Action.JOIN_GAME.value, handlers.handle_join_game)
    connection.register_handler(Action.PLAYERS_MOVED.value, handlers.handle_players_moved)
    connection.register_handler(Action.PLAYER_JOINED.value, handlers.handle_player_joined)
    connection.register_handler(Action.PLAYER_LEFT.value, handlers.handle_player_left)

    logger.info("All message handlers registered")
    return handlers

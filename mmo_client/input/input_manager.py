"""
Input handling for the client.

Maps movement keys to directions and turns key presses into move/stop
commands. Key-repeat events for a key that is already held send nothing.
"""

from typing import Dict, Optional, Set

import pygame

from ..config import KeyBindings
from ..logging_config import get_logger
from ..network.message_sender import MessageSender
from ..protocol import Direction

logger = get_logger(__name__)

KEY_NAMES: Dict[str, int] = {
    "up": pygame.K_UP,
    "down": pygame.K_DOWN,
    "left": pygame.K_LEFT,
    "right": pygame.K_RIGHT,
    "w": pygame.K_w,
    "a": pygame.K_a,
    "s": pygame.K_s,
    "d": pygame.K_d,
    "i": pygame.K_i,
    "j": pygame.K_j,
    "k": pygame.K_k,
    "l": pygame.K_l,
}


class InputController:
    """Translates movement keys into commands for the server."""

    def __init__(self, key_bindings: KeyBindings, sender: MessageSender):
        self.sender = sender

        # Physical key -> held flag
        self.keys_pressed: Dict[int, bool] = {}

        self._setup_key_mapping(key_bindings)

    def _setup_key_mapping(self, key_bindings: KeyBindings) -> None:
        """Setup key to direction mapping from config."""
        self.key_map: Dict[int, Direction] = {}

        bindings = {
            Direction.UP: key_bindings.move_up,
            Direction.DOWN: key_bindings.move_down,
            Direction.LEFT: key_bindings.move_left,
            Direction.RIGHT: key_bindings.move_right,
        }
        for direction, key_names in bindings.items():
            for key_name in key_names:
                key = self._key_name_to_code(key_name)
                if key is None:
                    logger.warning(f"Unknown key binding '{key_name}' for {direction.value}")
                    continue
                self.key_map[key] = direction

    @staticmethod
    def _key_name_to_code(key_name: str) -> Optional[int]:
        """Convert key name to pygame key code."""
        return KEY_NAMES.get(key_name.lower())

    def direction_for(self, key: int) -> Optional[Direction]:
        return self.key_map.get(key)

    def held_directions(self) -> Set[Direction]:
        """Directions with at least one bound key held."""
        return {self.key_map[key] for key, held in self.keys_pressed.items() if held}

    def process_event(self, event: pygame.event.Event) -> bool:
        """
        Handle a pygame event.

        Returns:
            True if the event was a movement key and has been consumed
        """
        if event.type == pygame.KEYDOWN:
            return self.handle_key_down(event.key)
        if event.type == pygame.KEYUP:
            return self.handle_key_up(event.key)
        return False

    def handle_key_down(self, key: int) -> bool:
        direction = self.direction_for(key)
        if direction is None:
            return False

        # Only send move command if this key wasn't already pressed
        if not self.keys_pressed.get(key):
            self.keys_pressed[key] = True
            self.sender.move(direction)
        return True

    def handle_key_up(self, key: int) -> bool:
        direction = self.direction_for(key)
        if direction is None:
            return False

        self.keys_pressed[key] = False

        if not self.held_directions():
            self.sender.stop()
        return True

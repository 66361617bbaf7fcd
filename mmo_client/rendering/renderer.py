"""
Main renderer orchestrator.

Runs one draw pass: background world image scrolled by the camera, every
visible player with its username label, then the HUD overlay.
"""

from typing import Dict, List, Optional

import pygame

from ..config import ClientConfig
from ..game.client_state import SessionState
from ..logging_config import get_logger
from ..protocol import Player
from ..ui.colors import Colors
from .sprite_manager import SpriteManager
from .ui_renderer import UIRenderer, clean_text

logger = get_logger(__name__)

LABEL_GAP = 5


class Renderer:
    """
    Draws the world and its players onto the screen surface.

    Players are drawn in ascending id order. A player is skipped for the
    frame when its avatar, frame set or frame is unknown, when its frame
    image is still loading, or when it is outside the viewport plus the
    cull margin.
    """

    def __init__(
        self,
        screen: pygame.Surface,
        game_state: SessionState,
        sprite_manager: SpriteManager,
        config: ClientConfig,
        ui_renderer: Optional[UIRenderer] = None,
    ):
        self.screen = screen
        self.game_state = game_state
        self.sprite_manager = sprite_manager
        self.ui_renderer = ui_renderer

        self.world_image = config.world.image
        self.avatar_size = config.game.avatar_size
        self.cull_margin = config.game.cull_margin
        self.label_width = config.game.label_width
        self.label_height = config.game.label_height

        # Cached label resources (created once, reused across frames)
        self.label_font = pygame.font.Font(None, config.game.label_font_size)
        self._label_background = pygame.Surface((self.label_width, self.label_height), pygame.SRCALPHA)
        self._label_background.fill(Colors.LABEL_BG)
        self._label_cache: Dict[str, pygame.Surface] = {}

        logger.info(f"Renderer initialized: {screen.get_width()}x{screen.get_height()}")

    def render(self) -> List[str]:
        """
        Render one frame.

        Returns:
            Ids of the players that were drawn
        """
        # 1. Clear
        self.screen.fill(Colors.BACKGROUND)

        # 2. Background, sampled at the camera offset
        self._render_world()

        # 3-6. Players and labels
        drawn = [player.id for player in self.game_state.sorted_players() if self.render_player(player)]

        # 7. HUD
        if self.ui_renderer:
            self.ui_renderer.render()

        return drawn

    def _render_world(self) -> None:
        background = self.sprite_manager.get_surface(self.world_image)
        if background is None:
            return

        camera = self.game_state.camera
        area = pygame.Rect(int(camera.x), int(camera.y), camera.screen_width, camera.screen_height)
        self.screen.blit(background, (0, 0), area)

    def render_player(self, player: Player) -> bool:
        """Draw one player. Returns False if the player was skipped."""
        avatar = self.game_state.avatars.get(player.avatar) if player.avatar else None
        if avatar is None:
            return False

        frames = avatar.frames_for(player.facing)
        if not frames or player.animation_frame >= len(frames):
            return False

        camera = self.game_state.camera
        screen_x, screen_y = camera.world_to_screen(player.x, player.y)
        if not camera.is_on_screen(screen_x, screen_y, margin=self.cull_margin):
            return False

        image = self.sprite_manager.get_scaled(frames[player.animation_frame], self.avatar_size)
        if image is None:
            return False

        # Bottom-center of the avatar sits on the player's position
        width, height = image.get_size()
        self.screen.blit(image, (round(screen_x - width / 2), round(screen_y - height)))

        self._render_label(player.username, screen_x, screen_y - height - LABEL_GAP)
        return True

    def _render_label(self, username: str, x: float, bottom: float) -> None:
        """Username on a semi-opaque box whose bottom-center is (x, bottom)."""
        box = self._label_background.get_rect(midbottom=(round(x), round(bottom)))
        self.screen.blit(self._label_background, box)

        text = self._label_cache.get(username)
        if text is None:
            text = self.label_font.render(clean_text(username), True, Colors.TEXT_WHITE)
            self._label_cache[username] = text
        self.screen.blit(text, text.get_rect(center=box.center))

    def handle_resize(self, screen: pygame.Surface) -> None:
        """Handle window resize."""
        self.screen = screen
        if self.ui_renderer:
            self.ui_renderer.handle_resize(screen)
        logger.info(f"Window resized to {screen.get_width()}x{screen.get_height()}")

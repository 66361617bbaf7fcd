"""
Camera management.

Keeps the viewport centered on the local player, clamped to the world bounds,
and handles coordinate transformations.
"""

from typing import Tuple


def clamp_axis(center: float, viewport: float, world: float) -> float:
    """
    Top-left offset on one axis for a viewport centered on ``center``.

    Clamped to ``[0, world - viewport]``; 0 when the world is smaller than
    the viewport.
    """
    return max(0.0, min(center - viewport / 2, world - viewport))


class Camera:
    """
    Game camera that follows the player.

    ``x``/``y`` are the world coordinates of the viewport's top-left corner.
    The camera snaps to its target; there is no interpolation.
    """

    def __init__(self, screen_width: int, screen_height: int, world_width: int, world_height: int):
        self.screen_width = screen_width
        self.screen_height = screen_height
        self.world_width = world_width
        self.world_height = world_height

        self.x: float = 0.0
        self.y: float = 0.0

    def follow(self, player_x: float, player_y: float) -> None:
        """Center on a world position, clamped to the world bounds."""
        self.x = clamp_axis(player_x, self.screen_width, self.world_width)
        self.y = clamp_axis(player_y, self.screen_height, self.world_height)

    def world_to_screen(self, world_x: float, world_y: float) -> Tuple[float, float]:
        """Convert world coordinates to screen coordinates."""
        return (world_x - self.x, world_y - self.y)

    def screen_to_world(self, screen_x: float, screen_y: float) -> Tuple[float, float]:
        """Convert screen coordinates to world coordinates."""
        return (screen_x + self.x, screen_y + self.y)

    def is_on_screen(self, screen_x: float, screen_y: float, margin: int = 0) -> bool:
        """Check if a screen position lies within the viewport grown by ``margin``."""
        return (-margin <= screen_x <= self.screen_width + margin and
                -margin <= screen_y <= self.screen_height + margin)

    def handle_resize(self, width: int, height: int) -> None:
        """Handle window resize."""
        self.screen_width = width
        self.screen_height = height

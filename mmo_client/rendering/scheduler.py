"""
Frame scheduler.

Runs once per display refresh for the whole session and is the only thing
that draws. A tick draws only when the session has a redraw pending.
"""

import asyncio
from typing import Callable, Optional

import pygame

from ..game.client_state import SessionState
from ..logging_config import get_logger
from .renderer import Renderer

logger = get_logger(__name__)


class FrameScheduler:
    """Redraw-on-demand loop driven by the frame clock."""

    def __init__(
        self,
        game_state: SessionState,
        renderer: Renderer,
        fps: int = 60,
        present: Optional[Callable[[], None]] = None,
    ):
        self.game_state = game_state
        self.renderer = renderer
        self.fps = fps
        self._present = present or pygame.display.flip
        self._running = False
        self.frames_drawn = 0

    @property
    def running(self) -> bool:
        return self._running

    def tick(self) -> bool:
        """
        Draw if a redraw is pending.

        The flag is cleared before drawing so that a redraw requested while
        the pass runs is kept for the next tick.

        Returns:
            True if a frame was drawn and presented
        """
        if not self.game_state.consume_redraw():
            return False

        try:
            self.renderer.render()
            self._present()
        except Exception:
            # A bad frame is dropped; the next redraw request tries again
            logger.exception("Error in draw pass")
            return False
        self.frames_drawn += 1
        return True

    async def run(self) -> None:
        """Tick once per frame until ``stop()`` is called."""
        self._running = True
        interval = 1.0 / self.fps
        logger.info(f"Frame scheduler started at {self.fps} fps")

        while self._running:
            self.tick()
            await asyncio.sleep(interval)

        logger.info(f"Frame scheduler stopped after {self.frames_drawn} frames")

    def stop(self) -> None:
        self._running = False

"""
Game client.

Wires the connection, session state, input, HUD and renderers together
and runs the window loop. The server is authoritative for every player
position; the client only renders what it is told and sends intents.
"""

import asyncio
from typing import Optional

import pygame

from .config import ClientConfig
from .core.event_bus import Event, EventBus, EventType
from .game.client_state import SessionState
from .input.input_manager import InputController
from .logging_config import get_logger
from .network.codec import MessageCodec
from .network.connection import ConnectFactory, ConnectionManager
from .network.handlers import register_all_handlers
from .network.message_sender import MessageSender
from .rendering.renderer import Renderer
from .rendering.scheduler import FrameScheduler
from .rendering.sprite_manager import SpriteManager
from .rendering.ui_renderer import UIRenderer
from .ui.status import StatusBoard, bind_status_events

logger = get_logger(__name__)


class GameClient:
    """
    One game session.

    Every collaborator is created here and owned by the session, so two
    clients in the same process never share state.
    """

    def __init__(self, config: ClientConfig, connect: Optional[ConnectFactory] = None):
        pygame.init()
        self.config = config

        flags = pygame.RESIZABLE if config.display.resizable else 0
        self.screen = pygame.display.set_mode((config.display.width, config.display.height), flags)
        pygame.display.set_caption(config.display.title)

        self.event_bus = EventBus()
        self.game_state = SessionState(
            self.screen.get_width(),
            self.screen.get_height(),
            config.world.width,
            config.world.height,
        )

        # HUD
        self.status_board = StatusBoard(
            on_change=self.game_state.request_redraw,
            info_seconds=config.game.info_message_seconds,
        )
        bind_status_events(self.status_board, self.event_bus, config.game.username)

        # Network
        self.connection = ConnectionManager(
            config.server.url,
            self.event_bus,
            codec=MessageCodec(config.server.codec),
            reconnect_delay=config.server.reconnect_delay,
            connect=connect,
        )
        self.handlers = register_all_handlers(self.connection, self.game_state, self.event_bus)
        self.sender = MessageSender(self.connection)
        self.connection.on_connected(self._join_game)

        # Input
        self.input = InputController(config.key_bindings, self.sender)

        # Rendering
        self.sprite_manager = SpriteManager(config.world.assets_dir, on_ready=self._on_resource_ready)
        self.ui_renderer = UIRenderer(self.screen, self.game_state, self.status_board)
        self.renderer = Renderer(self.screen, self.game_state, self.sprite_manager, config, self.ui_renderer)
        self.scheduler = FrameScheduler(self.game_state, self.renderer, config.display.fps)

        self.event_bus.subscribe(EventType.STATE_CHANGED, self._log_state_change)

        self._running = False
        self._scheduler_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    def _join_game(self) -> None:
        self.sender.join_game(self.config.game.username)

    def _on_resource_ready(self, resource: str) -> None:
        self.game_state.request_redraw()

    def _log_state_change(self, event: Event) -> None:
        logger.debug(f"Connection state: {event.data.get('from')} -> {event.data.get('to')}")

    # =========================================================================
    # WINDOW EVENTS
    # =========================================================================

    def handle_event(self, event: pygame.event.Event) -> bool:
        """
        Handle one window event.

        Returns:
            False when the window asked to close
        """
        if event.type == pygame.QUIT:
            return False

        if event.type == pygame.VIDEORESIZE:
            self.handle_resize(event.w, event.h)
        elif event.type in (pygame.KEYDOWN, pygame.KEYUP):
            self.input.process_event(event)

        return True

    def handle_resize(self, width: int, height: int) -> None:
        """Adopt a new viewport size and redraw."""
        surface = pygame.display.get_surface()
        if surface is not None:
            self.screen = surface
        self.renderer.handle_resize(self.screen)
        self.game_state.resize_viewport(width, height)
        logger.debug(f"Viewport resized to {width}x{height}")

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    async def run(self) -> None:
        """Main loop: pump window events until the window is closed."""
        self._running = True
        interval = 1.0 / self.config.display.fps

        logger.info(f"Starting client as {self.config.game.username}")
        self.sprite_manager.request(self.config.world.image)
        self.connection.start()
        self._scheduler_task = asyncio.create_task(self.scheduler.run())

        try:
            while self._running:
                for event in pygame.event.get():
                    if not self.handle_event(event):
                        self._running = False
                await asyncio.sleep(interval)
        finally:
            await self.shutdown()

    def stop(self) -> None:
        """Ask the main loop to exit after the current iteration."""
        self._running = False

    async def shutdown(self) -> None:
        """Stop the scheduler and connection and release every resource."""
        logger.info("Shutting down client...")
        self._running = False

        self.scheduler.stop()
        try:
            if self._scheduler_task is not None:
                await self._scheduler_task
        except Exception:
            logger.exception("Frame scheduler failed")
        finally:
            self._scheduler_task = None
            try:
                await self.connection.stop()
            finally:
                self.status_board.close()
                await self.sprite_manager.close()
                pygame.quit()

        logger.info("Client shutdown complete")

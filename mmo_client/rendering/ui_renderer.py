"""
UI renderer.

Draws the HUD on top of the world: loading screen, connection indicator,
player info panel and the current status message.
"""

from typing import Tuple

import pygame

from ..game.client_state import SessionState
from ..ui.colors import MESSAGE_COLORS, STATUS_COLORS, Colors
from ..ui.status import StatusBoard

PADDING = 8


def clean_text(text: str) -> str:
    """Strip characters the font renderer rejects (NUL)."""
    return text.replace("\x00", "")


class UIRenderer:
    """Renders the HUD overlay."""

    def __init__(self, screen: pygame.Surface, game_state: SessionState, status_board: StatusBoard):
        self.screen = screen
        self.game_state = game_state
        self.status_board = status_board

        # Fonts
        self.font = pygame.font.Font(None, 22)
        self.title_font = pygame.font.Font(None, 48)

    def render(self) -> None:
        """Render the overlay for the current state."""
        if not self.game_state.joined:
            self._render_loading_screen()
        else:
            self._render_player_info()
        self._render_connection_status()
        self._render_status_message()

    def handle_resize(self, screen: pygame.Surface) -> None:
        self.screen = screen

    def _render_loading_screen(self) -> None:
        self.screen.fill(Colors.LOADING_BG)
        width, height = self.screen.get_size()

        title = self.title_font.render("Loading game...", True, Colors.TEXT_WHITE)
        self.screen.blit(title, title.get_rect(center=(width // 2, height // 2 - 20)))

        hint = self.font.render(self.status_board.connection_text, True, Colors.TEXT_GRAY)
        self.screen.blit(hint, hint.get_rect(center=(width // 2, height // 2 + 20)))

    def _render_player_info(self) -> None:
        info = self.game_state.info
        position = f"{info.position[0]}, {info.position[1]}" if info.position else "-"
        lines = [
            f"Player: {info.username or '-'}",
            f"Position: {position}",
            f"Players online: {info.online}",
        ]
        surfaces = [self.font.render(clean_text(line), True, Colors.TEXT_WHITE) for line in lines]

        panel_width = max(s.get_width() for s in surfaces) + PADDING * 2
        panel_height = sum(s.get_height() for s in surfaces) + PADDING * 2
        self._blit_panel((PADDING, PADDING), (panel_width, panel_height), Colors.PANEL_BG)

        y = PADDING * 2
        for surface in surfaces:
            self.screen.blit(surface, (PADDING * 2, y))
            y += surface.get_height()

    def _render_connection_status(self) -> None:
        board = self.status_board
        text = self.font.render(board.connection_text, True, Colors.TEXT_WHITE)

        dot_radius = 5
        panel_width = text.get_width() + dot_radius * 2 + PADDING * 3
        panel_height = text.get_height() + PADDING * 2
        x = self.screen.get_width() - panel_width - PADDING
        self._blit_panel((x, PADDING), (panel_width, panel_height), Colors.PANEL_BG)

        center_y = PADDING + panel_height // 2
        color = STATUS_COLORS.get(board.connection_state.value, Colors.STATUS_DISCONNECTED)
        pygame.draw.circle(self.screen, color, (x + PADDING + dot_radius, center_y), dot_radius)
        self.screen.blit(text, text.get_rect(midleft=(x + PADDING * 2 + dot_radius * 2, center_y)))

    def _render_status_message(self) -> None:
        message = self.status_board.message
        if message is None:
            return

        text = self.font.render(clean_text(message.text), True, Colors.TEXT_WHITE)
        panel_width = text.get_width() + PADDING * 4
        panel_height = text.get_height() + PADDING * 2
        width, height = self.screen.get_size()
        x = (width - panel_width) // 2
        y = height - panel_height - PADDING * 2

        self._blit_panel((x, y), (panel_width, panel_height), MESSAGE_COLORS[message.kind.value])
        self.screen.blit(text, text.get_rect(center=(x + panel_width // 2, y + panel_height // 2)))

    def _blit_panel(self, pos: Tuple[int, int], size: Tuple[int, int], color: Tuple[int, ...]) -> None:
        panel = pygame.Surface(size, pygame.SRCALPHA)
        panel.fill(color)
        self.screen.blit(panel, pos)

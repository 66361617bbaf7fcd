"""
Client-side session state.

Mirrors the server's roster and avatar table. Mutated only by inbound
messages (see ``network.handlers``) and read by the render path.
"""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from ..protocol import Avatar, Player
from ..rendering.camera import Camera


@dataclass(frozen=True)
class PlayerInfo:
    """What the info panel shows."""
    username: Optional[str]
    position: Optional[Tuple[int, int]]
    online: int


class SessionState:
    """
    State of one game session.

    Every change to visible state goes through ``_after_change`` which
    refreshes the cached local position, the camera and the info panel and
    flags a redraw.
    """

    def __init__(self, viewport_width: int, viewport_height: int, world_width: int, world_height: int):
        # Player identity, assigned by an accepted join
        self.local_player_id: Optional[str] = None
        self.joined: bool = False

        # Roster and avatar table
        self.players: Dict[str, Player] = {}
        self.avatars: Dict[str, Avatar] = {}

        self.local_position: Tuple[float, float] = (0.0, 0.0)
        self.camera = Camera(viewport_width, viewport_height, world_width, world_height)
        self.info = PlayerInfo(username=None, position=None, online=0)

        self.needs_redraw: bool = True

    @property
    def local_player(self) -> Optional[Player]:
        if self.local_player_id is None:
            return None
        return self.players.get(self.local_player_id)

    @property
    def online_count(self) -> int:
        return len(self.players)

    def sorted_players(self) -> List[Player]:
        """Roster in draw order (ascending player id)."""
        return [self.players[player_id] for player_id in sorted(self.players)]

    # =========================================================================
    # RECONCILIATION
    # =========================================================================

    def apply_join(
        self,
        player_id: Optional[str],
        players: Mapping[str, Player],
        avatars: Mapping[str, Avatar],
    ) -> None:
        """Replace the roster and avatar table with a join snapshot."""
        self.local_player_id = player_id
        self.players = dict(players)
        self.avatars = dict(avatars)
        self.joined = True
        self._after_change()

    def merge_players(self, updates: Mapping[str, Player]) -> None:
        """Overwrite the updated players wholesale; leave every other entry untouched."""
        self.players.update(updates)
        self._after_change()

    def add_player(self, player: Player, avatar: Optional[Avatar] = None) -> None:
        """Insert a player and, if its avatar is unknown, the avatar."""
        self.players[player.id] = player
        if avatar is not None and avatar.name not in self.avatars:
            self.avatars[avatar.name] = avatar
        self._after_change()

    def remove_player(self, player_id: str) -> Optional[Player]:
        """Remove a player; unknown ids are a no-op returning None."""
        player = self.players.pop(player_id, None)
        if player is not None:
            self._after_change()
        return player

    # =========================================================================
    # DERIVED STATE
    # =========================================================================

    def resize_viewport(self, width: int, height: int) -> None:
        self.camera.handle_resize(width, height)
        self.update_camera()
        self.request_redraw()

    def update_local_position(self) -> None:
        player = self.local_player
        if player is not None:
            self.local_position = (player.x, player.y)

    def update_camera(self) -> None:
        if self.local_player_id is None:
            return
        self.camera.follow(*self.local_position)

    def update_info(self) -> None:
        player = self.local_player
        if player is None:
            self.info = PlayerInfo(username=None, position=None, online=self.online_count)
            return
        self.info = PlayerInfo(
            username=player.username,
            position=(round(player.x), round(player.y)),
            online=self.online_count,
        )

    def request_redraw(self) -> None:
        self.needs_redraw = True

    def consume_redraw(self) -> bool:
        """Return and clear the redraw-pending flag."""
        pending = self.needs_redraw
        self.needs_redraw = False
        return pending

    def _after_change(self) -> None:
        self.update_local_position()
        self.update_camera()
        self.update_info()
        self.request_redraw()

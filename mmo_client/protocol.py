"""
Wire protocol definitions.

Every frame is a structured record with a string ``action`` discriminator.
Using Pydantic models for structure and validation of inbound payloads.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Action(str, Enum):
    # Client to Server (join_game is also the server's reply)
    JOIN_GAME = "join_game"
    MOVE = "move"
    STOP = "stop"

    # Server to Client
    PLAYERS_MOVED = "players_moved"
    PLAYER_JOINED = "player_joined"
    PLAYER_LEFT = "player_left"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


class Facing:
    """Facing names used as keys of an avatar's frame table."""
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    DEFAULT = SOUTH


# --- Entities ---


class Player(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True, allow_inf_nan=False)

    id: str
    username: str = ""
    x: float = 0.0
    y: float = 0.0
    facing: str = Facing.DEFAULT
    animation_frame: int = Field(default=0, ge=0, alias="animationFrame")
    avatar: Optional[str] = None


class Avatar(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    frames: Dict[str, list[str]] = Field(default_factory=dict)

    def frames_for(self, facing: str) -> Optional[list[str]]:
        """Frame set for a facing; the default facing's set when the facing has none registered."""
        frames = self.frames.get(facing)
        if frames is None:
            frames = self.frames.get(Facing.DEFAULT)
        return frames


# --- Inbound payload schemas ---


class JoinGameResult(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    success: bool
    player_id: Optional[str] = Field(default=None, alias="playerId")
    players: Dict[str, Player] = Field(default_factory=dict)
    avatars: Dict[str, Avatar] = Field(default_factory=dict)
    error: Optional[str] = None


class PlayersMoved(BaseModel):
    players: Dict[str, Player]


class PlayerJoined(BaseModel):
    player: Player
    avatar: Optional[Avatar] = None


class PlayerLeft(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    player_id: str = Field(alias="playerId")


# --- Outbound builders ---


def join_game(username: str) -> Dict[str, Any]:
    return {"action": Action.JOIN_GAME.value, "username": username}


def move(direction: Direction) -> Dict[str, Any]:
    return {"action": Action.MOVE.value, "direction": Direction(direction).value}


def stop() -> Dict[str, Any]:
    return {"action": Action.STOP.value}

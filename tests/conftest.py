"""
Shared test fixtures.

pygame runs headless: the dummy SDL drivers are selected before pygame is
imported anywhere in the test session.
"""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

import asyncio
import base64
import io
import json
from typing import Any, List

import pygame
import pytest

from mmo_client.config import ClientConfig
from mmo_client.core import EventBus, EventType
from mmo_client.game.client_state import SessionState
from mmo_client.protocol import Avatar, Player

_CLOSE = object()


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self):
        self.sent: List[Any] = []
        self.closed = False
        self._inbound: asyncio.Queue = asyncio.Queue()

    def feed(self, message: dict) -> None:
        """Queue a message as if the server had sent it."""
        self._inbound.put_nowait(json.dumps(message))

    def feed_raw(self, frame: Any) -> None:
        self._inbound.put_nowait(frame)

    def fail(self, error: BaseException) -> None:
        """Make the receive loop raise ``error``."""
        self._inbound.put_nowait(error)

    def server_close(self) -> None:
        """End the message stream cleanly."""
        self._inbound.put_nowait(_CLOSE)

    def sent_messages(self) -> List[dict]:
        return [json.loads(frame) for frame in self.sent]

    async def send(self, frame: Any) -> None:
        self.sent.append(frame)

    async def close(self) -> None:
        self.closed = True
        self._inbound.put_nowait(_CLOSE)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self._inbound.get()
        if item is _CLOSE:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item


class FakeConnector:
    """Connect factory handing out FakeWebSockets; can be told to refuse."""

    def __init__(self):
        self.urls: List[str] = []
        self.sockets: List[FakeWebSocket] = []
        self.refuse = 0

    async def __call__(self, url: str) -> FakeWebSocket:
        self.urls.append(url)
        if self.refuse:
            self.refuse -= 1
            raise OSError("Connection refused")
        websocket = FakeWebSocket()
        self.sockets.append(websocket)
        return websocket

    @property
    def latest(self) -> FakeWebSocket:
        return self.sockets[-1]


async def settle(rounds: int = 10) -> None:
    """Let background tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class EventRecorder:
    """Records every emitted event of the given types."""

    def __init__(self, event_bus: EventBus, *event_types: EventType):
        self.events = []
        for event_type in event_types or list(EventType):
            event_bus.subscribe(event_type, self.events.append)

    def types(self) -> List[EventType]:
        return [event.type for event in self.events]

    def of(self, event_type: EventType):
        return [event for event in self.events if event.type == event_type]


def make_png_data_url(width: int = 16, height: int = 32, color=(255, 0, 0, 255)) -> str:
    """Encode a solid-color PNG as a data URL."""
    surface = pygame.Surface((width, height), pygame.SRCALPHA)
    surface.fill(color)
    buffer = io.BytesIO()
    pygame.image.save(surface, buffer, "png")
    payload = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{payload}"


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def pygame_display():
    """Headless display surface."""
    pygame.init()
    screen = pygame.display.set_mode((800, 600))
    yield screen
    pygame.quit()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def config(tmp_path):
    """Default configuration with assets resolved under tmp_path."""
    config = ClientConfig()
    config.world.assets_dir = str(tmp_path)
    config.display.width = 800
    config.display.height = 600
    return config


@pytest.fixture
def game_state():
    """Session with an 800x600 viewport into a 2048x2048 world."""
    return SessionState(800, 600, 2048, 2048)


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def avatar():
    return Avatar(
        name="knight",
        frames={
            "south": ["knight_s0.png", "knight_s1.png"],
            "north": ["knight_n0.png"],
        },
    )


@pytest.fixture
def alice():
    return Player(id="p1", username="alice", x=1000, y=1000, facing="south", animationFrame=0, avatar="knight")


@pytest.fixture
def bob():
    return Player(id="p2", username="bob", x=1100, y=1050, facing="north", animationFrame=0, avatar="knight")


@pytest.fixture
def join_payload():
    """Successful join_game reply as the server sends it."""
    return {
        "action": "join_game",
        "success": True,
        "playerId": "p1",
        "players": {
            "p1": {"id": "p1", "username": "alice", "x": 1000, "y": 1000,
                   "facing": "south", "animationFrame": 0, "avatar": "knight"},
            "p2": {"id": "p2", "username": "bob", "x": 1100, "y": 1050,
                   "facing": "north", "animationFrame": 0, "avatar": "knight"},
        },
        "avatars": {
            "knight": {"name": "knight", "frames": {"south": ["knight_s0.png"], "north": ["knight_n0.png"]}},
        },
    }

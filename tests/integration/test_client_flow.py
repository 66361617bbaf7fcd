"""
End-to-end client flows against an in-memory server.

The client is wired exactly as in production; only the socket factory is
replaced and pygame runs on the dummy video driver.
"""

import asyncio

import pygame
import pytest
import pytest_asyncio

from conftest import settle
from mmo_client.client import GameClient
from mmo_client.core import ConnectionState
from mmo_client.ui.status import MessageKind

pytestmark = pytest.mark.integration


@pytest_asyncio.fixture
async def client(config, connector):
    config.server.reconnect_delay = 0.01
    config.game.username = "alice"
    client = GameClient(config, connect=connector)
    yield client
    await client.shutdown()


async def connect_and_join(client, connector, join_payload):
    client.connection.start()
    await settle()
    connector.latest.feed(join_payload)
    await settle()


def key(event_type, code):
    return pygame.event.Event(event_type, key=code)


class TestJoinFlow:

    @pytest.mark.asyncio
    async def test_join_sent_on_connect(self, client, connector):
        client.connection.start()
        await settle()

        assert connector.latest.sent_messages() == [{"action": "join_game", "username": "alice"}]
        assert client.status_board.connection_state == ConnectionState.CONNECTED

    @pytest.mark.asyncio
    async def test_join_reply_populates_world(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)

        state = client.game_state
        assert state.joined
        assert state.local_player_id == "p1"
        assert state.online_count == 2
        assert (state.camera.x, state.camera.y) == (1000 - 400, 1000 - 300)
        assert client.status_board.message.text == "Welcome to the game, alice!"

    @pytest.mark.asyncio
    async def test_join_rejected(self, client, connector):
        client.connection.start()
        await settle()
        connector.latest.feed({"action": "join_game", "success": False, "error": "Server full"})
        await settle()

        assert not client.game_state.joined
        assert client.status_board.message.text == "Failed to join game: Server full"
        assert client.status_board.message.kind == MessageKind.ERROR


class TestPlayingFlow:

    @pytest.mark.asyncio
    async def test_movement_keys_send_commands(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)
        websocket = connector.latest

        client.handle_event(key(pygame.KEYDOWN, pygame.K_RIGHT))
        client.handle_event(key(pygame.KEYDOWN, pygame.K_RIGHT))
        client.handle_event(key(pygame.KEYUP, pygame.K_RIGHT))
        await settle()

        assert websocket.sent_messages()[1:] == [
            {"action": "move", "direction": "right"},
            {"action": "stop"},
        ]

    @pytest.mark.asyncio
    async def test_server_moves_local_player(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)
        client.game_state.consume_redraw()

        connector.latest.feed({
            "action": "players_moved",
            "players": {"p1": {"id": "p1", "username": "alice", "x": 1100, "y": 1000,
                               "facing": "east", "animationFrame": 1, "avatar": "knight"}},
        })
        await settle()

        state = client.game_state
        assert state.local_position == (1100, 1000)
        assert state.camera.x == 1100 - 400
        assert state.info.position == (1100, 1000)
        assert state.needs_redraw

    @pytest.mark.asyncio
    async def test_players_come_and_go(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)

        connector.latest.feed({
            "action": "player_joined",
            "player": {"id": "p3", "username": "carol", "x": 10, "y": 10, "avatar": "knight"},
        })
        await settle()
        assert client.status_board.message.text == "carol joined the game!"
        assert client.game_state.online_count == 3

        connector.latest.feed({"action": "player_left", "playerId": "p2"})
        await settle()
        assert client.status_board.message.text == "bob left the game."
        assert set(client.game_state.players) == {"p1", "p3"}

    @pytest.mark.asyncio
    async def test_resize_updates_viewport(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)
        client.game_state.consume_redraw()

        client.handle_event(pygame.event.Event(pygame.VIDEORESIZE, w=640, h=480, size=(640, 480)))

        assert client.game_state.camera.screen_width == 640
        assert client.game_state.camera.x == 1000 - 320
        assert client.game_state.needs_redraw


class TestReconnectFlow:

    @pytest.mark.asyncio
    async def test_reconnect_rejoins_and_replaces_roster(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)

        connector.latest.server_close()
        await settle()
        assert client.status_board.message.text == "Disconnected from server. Reconnecting..."
        assert not client.sender.move("up")

        await asyncio.sleep(0.05)
        assert len(connector.sockets) == 2
        assert connector.latest.sent_messages() == [{"action": "join_game", "username": "alice"}]

        connector.latest.feed({
            "action": "join_game",
            "success": True,
            "playerId": "p7",
            "players": {"p7": {"id": "p7", "username": "alice", "x": 200, "y": 200, "avatar": "knight"}},
            "avatars": join_payload["avatars"],
        })
        await settle()

        assert client.game_state.local_player_id == "p7"
        assert set(client.game_state.players) == {"p7"}

    @pytest.mark.asyncio
    async def test_unreachable_server_keeps_retrying(self, client, connector):
        connector.refuse = 3

        client.connection.start()
        await asyncio.sleep(0.1)

        assert len(connector.urls) == 4
        assert client.connection.state == ConnectionState.CONNECTED


class TestMainLoop:

    @pytest.mark.asyncio
    async def test_quit_event_shuts_down(self, client, connector):
        task = asyncio.create_task(client.run())
        await asyncio.sleep(0.05)

        assert client.running
        assert connector.latest.sent_messages()[0]["action"] == "join_game"
        assert client.scheduler.frames_drawn >= 1

        pygame.event.post(pygame.event.Event(pygame.QUIT))
        await asyncio.wait_for(task, 1)

        assert not client.running
        assert connector.latest.closed
        assert client.connection.state == ConnectionState.DISCONNECTED


class TestFailureContainment:

    @pytest.mark.asyncio
    async def test_nul_username_keeps_drawing(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)
        client.scheduler.tick()

        connector.latest.feed({
            "action": "player_joined",
            "player": {"id": "p3", "username": "car\x00ol", "x": 1010, "y": 1010, "avatar": "knight"},
        })
        await settle()

        assert client.status_board.message.text == "car\x00ol joined the game!"
        assert client.scheduler.tick() is True

    @pytest.mark.asyncio
    async def test_non_finite_coordinates_dropped(self, client, connector, join_payload):
        await connect_and_join(client, connector, join_payload)

        connector.latest.feed_raw(
            '{"action":"players_moved","players":{"p1":{"id":"p1","username":"alice","x":1e400,"y":1000}}}'
        )
        connector.latest.feed({
            "action": "players_moved",
            "players": {"p1": {"id": "p1", "username": "alice", "x": 1200, "y": 1000}},
        })
        await settle()

        assert client.game_state.players["p1"].x == 1200
        assert client.game_state.info.position == (1200, 1000)
        assert client.game_state.camera.x == 1200 - 400

    @pytest.mark.asyncio
    async def test_shutdown_after_scheduler_failure(self, client, connector, caplog):
        async def broken_scheduler():
            raise RuntimeError("scheduler crashed")

        client.connection.start()
        await settle()
        websocket = connector.latest
        client._scheduler_task = asyncio.create_task(broken_scheduler())
        await settle()

        await client.shutdown()

        assert "Frame scheduler failed" in caplog.text
        assert websocket.closed
        assert client.connection.state == ConnectionState.DISCONNECTED
        assert not pygame.get_init()

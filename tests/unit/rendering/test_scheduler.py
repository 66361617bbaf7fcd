"""
Tests for the redraw-on-demand frame scheduler.
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from mmo_client.rendering.scheduler import FrameScheduler


@pytest.fixture
def renderer():
    return MagicMock()


@pytest.fixture
def present():
    return MagicMock()


class TestFrameScheduler:

    def test_tick_draws_when_pending(self, game_state, renderer, present):
        scheduler = FrameScheduler(game_state, renderer, present=present)

        assert scheduler.tick() is True

        renderer.render.assert_called_once()
        present.assert_called_once()
        assert scheduler.frames_drawn == 1

    def test_tick_idle_without_request(self, game_state, renderer, present):
        scheduler = FrameScheduler(game_state, renderer, present=present)
        scheduler.tick()

        assert scheduler.tick() is False
        assert renderer.render.call_count == 1

    def test_many_requests_one_frame(self, game_state, renderer, present):
        scheduler = FrameScheduler(game_state, renderer, present=present)
        scheduler.tick()

        for _ in range(5):
            game_state.request_redraw()
        scheduler.tick()
        scheduler.tick()

        assert renderer.render.call_count == 2

    def test_request_during_draw_kept_for_next_tick(self, game_state, renderer, present):
        """The flag is cleared before drawing, so a request made mid-pass survives."""
        renderer.render.side_effect = game_state.request_redraw
        scheduler = FrameScheduler(game_state, renderer, present=present)

        scheduler.tick()

        assert game_state.needs_redraw
        assert scheduler.tick() is True

    @pytest.mark.asyncio
    async def test_run_until_stopped(self, game_state, renderer, present):
        scheduler = FrameScheduler(game_state, renderer, fps=200, present=present)
        task = asyncio.create_task(scheduler.run())

        await asyncio.sleep(0.02)
        assert scheduler.running
        game_state.request_redraw()
        await asyncio.sleep(0.02)
        scheduler.stop()
        await asyncio.wait_for(task, 1)

        assert not scheduler.running
        assert renderer.render.call_count == 2


class TestDrawFailures:
    """A failing draw pass never ends the scheduler."""

    def test_failed_draw_is_logged_and_skipped(self, game_state, renderer, present, caplog):
        renderer.render.side_effect = ValueError("A null character was found in the text")
        scheduler = FrameScheduler(game_state, renderer, present=present)

        assert scheduler.tick() is False

        present.assert_not_called()
        assert scheduler.frames_drawn == 0
        assert "Error in draw pass" in caplog.text

    def test_next_request_draws_again(self, game_state, renderer, present):
        renderer.render.side_effect = [ValueError("bad frame"), None]
        scheduler = FrameScheduler(game_state, renderer, present=present)
        scheduler.tick()

        game_state.request_redraw()

        assert scheduler.tick() is True
        assert scheduler.frames_drawn == 1

    @pytest.mark.asyncio
    async def test_run_survives_failing_draw(self, game_state, renderer, present):
        renderer.render.side_effect = RuntimeError("boom")
        scheduler = FrameScheduler(game_state, renderer, fps=200, present=present)
        task = asyncio.create_task(scheduler.run())

        await asyncio.sleep(0.02)
        assert not task.done()

        renderer.render.side_effect = None
        game_state.request_redraw()
        await asyncio.sleep(0.02)
        scheduler.stop()
        await asyncio.wait_for(task, 1)

        assert scheduler.frames_drawn == 1

"""tests for the minimap widget and its wiring into the tui app."""

import pytest

from canvas_chat.app import CanvasChatApp
from canvas_chat.core.client import MockClient
from canvas_chat.core.models import DEFAULT_NODE_ID, Point
from canvas_chat.core.viewport import ViewportTransform
from canvas_chat.widgets.minimap import (
    NODE_STYLE,
    SELECTED_STYLE,
    VIEWPORT_STYLE,
    MinimapClicked,
    draw_minimap,
)


class TestDrawMinimap:
    """tests for drawing the overview grid."""

    def test_viewport_outline(self, store):
        # visible area (0, 0, 1280, 800) -> minimap (50, 50, 64, 40) -> cells 8..19, 4..7
        grid = draw_minimap(ViewportTransform().minimap(store.nodes))
        assert grid[4][8] == ("┌", VIEWPORT_STYLE)
        assert grid[4][19] == ("┐", VIEWPORT_STYLE)
        assert grid[7][8] == ("└", VIEWPORT_STYLE)
        assert grid[7][19] == ("┘", VIEWPORT_STYLE)
        assert grid[5][8][0] == "│"

    def test_node_drawn_as_block(self, store):
        # default node (600, 400, 400, 200) -> minimap (80, 70, 20, 10) -> cells 13..16, 5..6
        grid = draw_minimap(ViewportTransform().minimap(store.nodes))
        assert grid[5][13] == ("█", NODE_STYLE)
        assert grid[6][16] == ("█", NODE_STYLE)
        assert grid[5][12][0] == " "

    def test_selected_node_highlighted(self, store):
        grid = draw_minimap(ViewportTransform().minimap(store.nodes), selected_id=DEFAULT_NODE_ID)
        assert grid[5][13] == ("█", SELECTED_STYLE)

    def test_far_nodes_are_clipped(self):
        vp = ViewportTransform(x=100000, y=100000)
        grid = draw_minimap(vp.minimap([]), cols=10, rows=4)
        assert len(grid) == 4
        assert all(len(row) == 10 for row in grid)
        assert all(ch == " " for row in grid for ch, _ in row)


class TestMinimapInApp:
    """tests for the minimap and zoom reset, driven through a pilot."""

    @pytest.mark.asyncio
    async def test_click_centers_view(self, temp_dir):
        app = CanvasChatApp(client=MockClient(delay=0), history_path=temp_dir / "h.json")
        async with app.run_test() as pilot:
            app.query_one("#minimap").post_message(MinimapClicked(Point(3000, 2000)))
            await pilot.pause()
            rect = app.viewport.visible_rect()
            assert rect.center == pytest.approx((3000, 2000))

    @pytest.mark.asyncio
    async def test_zoom_reset_key(self, temp_dir):
        app = CanvasChatApp(client=MockClient(delay=0), history_path=temp_dir / "h.json")
        async with app.run_test() as pilot:
            app.query_one("#canvas").focus()
            await pilot.pause()
            await pilot.press("minus")
            await pilot.press("minus")
            assert app.viewport.scale == pytest.approx(0.8)
            await pilot.press("0")
            assert app.viewport.scale == pytest.approx(1.0)

"""tests for the character-map canvas view and the tui app."""

import pytest

from canvas_chat.app import CanvasChatApp
from canvas_chat.core.client import MockClient
from rich.style import Style

from canvas_chat.core.models import DEFAULT_NODE_ID, Node, NodeKind
from canvas_chat.core.viewport import ViewportTransform
from canvas_chat.core.store import CanvasStore
from canvas_chat.widgets.canvas_view import CURVE_STYLE, agent_style, node_at, node_cells, rasterize


def chars(grid):
    return ["".join(ch for ch, _ in row) for row in grid]


class TestRasterize:
    """tests for drawing the canvas onto a grid."""

    def test_node_box(self, store):
        vp = ViewportTransform()
        grid = rasterize(store, vp, 160, 50)
        # default node: 400x200 at (600, 400) -> cells 75..125, 25..37
        assert node_cells(vp, store.nodes[0]) == (75, 25, 125, 37)
        assert grid[25][75][0] == "┌"
        assert grid[25][125][0] == "┐"
        assert grid[37][75][0] == "└"
        assert grid[37][125][0] == "┘"
        assert grid[30][75][0] == "│"
        assert chars(grid)[26][76:].startswith("> Agent 1")
        assert grid[25][75][1] == "#3b82f6"

    def test_selected_node_is_bold(self, store):
        store.select_node(DEFAULT_NODE_ID)
        grid = rasterize(store, ViewportTransform(), 160, 50)
        assert grid[25][75][1] == "bold #3b82f6"

    def test_label_uses_first_line_of_content(self, store):
        store.update_node_content(DEFAULT_NODE_ID, "first line\nsecond line")
        grid = rasterize(store, ViewportTransform(), 160, 50)
        assert chars(grid)[26][76:].startswith("> first line")

    def test_connections_drawn(self, chat_store):
        grid = rasterize(chat_store, ViewportTransform(), 160, 80)
        assert any("·" in row for row in chars(grid))

    def test_pan_moves_drawing(self, store):
        vp = ViewportTransform(x=-80, y=-160)
        grid = rasterize(store, vp, 160, 50)
        assert grid[15][65][0] == "┌"

    def test_offscreen_is_clipped(self, store):
        grid = rasterize(store, ViewportTransform(), 10, 5)
        assert len(grid) == 5
        assert all(len(row) == 10 for row in grid)
        assert all(ch == " " for row in chars(grid) for ch in row)

    def test_unreadable_agent_color_is_unstyled(self):
        store = CanvasStore(nodes=[Node(id="a", kind=NodeKind.INPUT, x=600, y=400, width=400,
                                        agent_color="banana")])
        grid = rasterize(store, ViewportTransform(), 160, 50)
        assert grid[25][75] == ("┌", "")

    def test_every_style_parses(self, chat_store):
        grid = rasterize(chat_store, ViewportTransform(), 160, 80)
        styles = {style for row in grid for _, style in row if style}
        assert CURVE_STYLE in styles
        for style in styles:
            Style.parse(style)

    def test_node_at(self, store):
        vp = ViewportTransform()
        assert node_at(store, vp, 80, 30).id == DEFAULT_NODE_ID
        assert node_at(store, vp, 0, 0) is None


class TestApp:
    """tests for the textual app, driven through a pilot."""

    @pytest.mark.asyncio
    async def test_branch_key(self, temp_dir):
        app = CanvasChatApp(client=MockClient(delay=0), history_path=temp_dir / "h.json")
        async with app.run_test() as pilot:
            app.query_one("#canvas").focus()
            await pilot.pause()
            await pilot.press("b")
            assert len(app.store.nodes) == 2
            assert len(app.store.connections) == 1

    @pytest.mark.asyncio
    async def test_prompt_gets_reply(self, temp_dir):
        client = MockClient(responses={"hi": "hello back"}, delay=0)
        app = CanvasChatApp(client=client, history_path=temp_dir / "h.json")
        async with app.run_test() as pilot:
            prompt = app.query_one("#prompt")
            prompt.focus()
            prompt.value = "hi there"
            await pilot.pause()
            await pilot.press("enter")
            await app.workers.wait_for_complete()
            await pilot.pause()

            replies = [n for n in app.store.nodes if n.kind == NodeKind.RESPONSE]
            assert [n.content for n in replies] == ["hello back"]
            assert app.store.get_node(DEFAULT_NODE_ID).content == "hi there"

    @pytest.mark.asyncio
    async def test_save_and_reset(self, temp_dir):
        app = CanvasChatApp(client=MockClient(delay=0), history_path=temp_dir / "h.json")
        async with app.run_test() as pilot:
            app.query_one("#canvas").focus()
            await pilot.pause()
            await pilot.press("b")
            await pilot.press("ctrl+s")
            assert len(app.library.list()) == 1
            await pilot.press("r")
            assert [n.id for n in app.store.nodes] == [DEFAULT_NODE_ID]


class TestAgentStyle:

    @pytest.mark.parametrize("color", ["#10b981", "red", "rgb(1,2,3)"])
    def test_readable_colors_pass_through(self, color):
        assert agent_style(color) == color

    @pytest.mark.parametrize("color", [None, "", "banana", "#444", "#zzzzzz"])
    def test_unreadable_colors_dropped(self, color):
        assert agent_style(color) == ""

"""minimap widget: the whole canvas at a glance.

nodes are drawn as solid blocks, the part of the canvas currently on
screen as an outline. click to jump there.
"""

from __future__ import annotations

from typing import Optional

from rich.text import Text
from textual import events
from textual.message import Message
from textual.widgets import Static

from ..core.models import Point, Rect
from ..core.store import CanvasStore
from ..core.viewport import MinimapLayout, ViewportTransform, minimap_to_canvas


# --- configuration ---

MAP_CELL_WIDTH = 6.0    # minimap pixels per column
MAP_CELL_HEIGHT = 12.0  # minimap pixels per row
MAP_COLS = 40
MAP_ROWS = 13
NODE_STYLE = "grey50"
SELECTED_STYLE = "bold cyan"
VIEWPORT_STYLE = "white"


class MinimapClicked(Message):
    """message emitted when the minimap is clicked; carries the canvas point."""

    def __init__(self, canvas_point: Point) -> None:
        self.canvas_point = canvas_point
        super().__init__()


def _cell_box(r: Rect) -> tuple[int, int, int, int]:
    left = int(r.x // MAP_CELL_WIDTH)
    top = int(r.y // MAP_CELL_HEIGHT)
    right = int((r.x + r.width) // MAP_CELL_WIDTH)
    bottom = int((r.y + r.height) // MAP_CELL_HEIGHT)
    return left, top, right, bottom


def draw_minimap(
    layout: MinimapLayout,
    selected_id: Optional[str] = None,
    cols: int = MAP_COLS,
    rows: int = MAP_ROWS,
) -> list[list[tuple[str, str]]]:
    """nodes first, then the viewport outline on top."""
    grid = [[(" ", "") for _ in range(cols)] for _ in range(rows)]

    def put(col: int, row: int, char: str, style: str) -> None:
        if 0 <= col < cols and 0 <= row < rows:
            grid[row][col] = (char, style)

    for node_id, rect in layout.nodes.items():
        style = SELECTED_STYLE if node_id == selected_id else NODE_STYLE
        left, top, right, bottom = _cell_box(rect)
        for row in range(top, bottom + 1):
            for col in range(left, right + 1):
                put(col, row, "█", style)

    left, top, right, bottom = _cell_box(layout.viewport)
    for col in range(left, right + 1):
        put(col, top, "─", VIEWPORT_STYLE)
        put(col, bottom, "─", VIEWPORT_STYLE)
    for row in range(top, bottom + 1):
        put(left, row, "│", VIEWPORT_STYLE)
        put(right, row, "│", VIEWPORT_STYLE)
    put(left, top, "┌", VIEWPORT_STYLE)
    put(right, top, "┐", VIEWPORT_STYLE)
    put(left, bottom, "└", VIEWPORT_STYLE)
    put(right, bottom, "┘", VIEWPORT_STYLE)

    return grid


class Minimap(Static):
    """scaled-down overview of every node plus the visible area."""

    DEFAULT_CSS = """
    Minimap {
        width: 42;
        height: 15;
        border: solid $surface-lighten-2;
    }
    """

    def __init__(self, store: CanvasStore, viewport: ViewportTransform, **kwargs) -> None:
        super().__init__(**kwargs)
        self.store = store
        self.viewport = viewport

    def render(self) -> Text:
        layout = self.viewport.minimap(self.store.nodes)
        text = Text()
        for i, row in enumerate(draw_minimap(layout, self.store.selected_node_id)):
            if i:
                text.append("\n")
            for char, style in row:
                text.append(char, style=style or None)
        return text

    def on_click(self, event: events.Click) -> None:
        """center the main view on the clicked spot."""
        p = Point((event.x + 0.5) * MAP_CELL_WIDTH, (event.y + 0.5) * MAP_CELL_HEIGHT)
        self.post_message(MinimapClicked(minimap_to_canvas(p)))

    def refresh_canvas(self, store: CanvasStore) -> None:
        """update with new canvas state."""
        self.store = store
        self.refresh()

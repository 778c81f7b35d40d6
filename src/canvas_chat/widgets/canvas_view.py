"""canvas view widget: the canvas drawn as a character map.

each terminal cell stands for CELL_WIDTH x CELL_HEIGHT screen pixels, so
the same viewport math the browser uses drives the terminal too.
"""

from __future__ import annotations

from typing import Optional

from rich.color import Color, ColorParseError
from rich.text import Text
from textual import events
from textual.message import Message
from textual.widget import Widget

from ..core.interaction import InteractionController
from ..core.models import Node, NodeKind, Point
from ..core.router import route_all
from ..core.store import CanvasStore
from ..core.viewport import ViewportTransform


# --- configuration ---

CELL_WIDTH = 8.0    # screen pixels per column
CELL_HEIGHT = 16.0  # screen pixels per row
CURVE_SAMPLES = 48
WHEEL_STEP = 100.0  # wheel delta per scroll tick

CURVE_STYLE = "grey27"  # fallback when a curve color is not a rich color

KIND_GLYPH = {
    NodeKind.INPUT: ">",
    NodeKind.RESPONSE: "*",
    NodeKind.LOADING: "…",
}

Cell = tuple[str, str]  # (char, style)


class NodeClicked(Message):
    """message emitted when a node is clicked in the view."""

    def __init__(self, node_id: Optional[str]) -> None:
        self.node_id = node_id
        super().__init__()


def _cell_of(viewport: ViewportTransform, canvas_point: Point) -> tuple[int, int]:
    sx, sy = viewport.canvas_to_screen(canvas_point)
    return int(sx // CELL_WIDTH), int(sy // CELL_HEIGHT)


def node_cells(viewport: ViewportTransform, node: Node) -> tuple[int, int, int, int]:
    """(left, top, right, bottom) cell box of a node, inclusive."""
    r = node.bounds
    left, top = _cell_of(viewport, Point(r.x, r.y))
    right, bottom = _cell_of(viewport, Point(r.x + r.width, r.y + r.height))
    return left, top, max(right, left + 1), max(bottom, top + 1)


def agent_style(color: Optional[str]) -> str:
    """a node's agent color as a rich style, or no style if rich can't read it."""
    if not color:
        return ""
    try:
        Color.parse(color)
    except ColorParseError:
        return ""
    return color


def _label(node: Node) -> str:
    text = node.content.strip().split("\n")[0] if node.content.strip() else (node.model or node.kind.value)
    return f"{KIND_GLYPH[node.kind]} {text}"


def rasterize(
    store: CanvasStore,
    viewport: ViewportTransform,
    cols: int,
    rows: int,
) -> list[list[Cell]]:
    """draw connections, then node boxes, onto a cols x rows grid."""
    grid: list[list[Cell]] = [[(" ", "") for _ in range(cols)] for _ in range(rows)]

    def put(col: int, row: int, char: str, style: str) -> None:
        if 0 <= col < cols and 0 <= row < rows:
            grid[row][col] = (char, style)

    for curve in route_all(store.connections, store.nodes).values():
        for i in range(CURVE_SAMPLES + 1):
            col, row = _cell_of(viewport, curve.point_at(i / CURVE_SAMPLES))
            put(col, row, "·", agent_style(curve.color) or CURVE_STYLE)

    for node in store.nodes:
        left, top, right, bottom = node_cells(viewport, node)
        style = agent_style(node.agent_color)
        if node.id == store.selected_node_id:
            style = f"bold {style}".strip()

        for col in range(left + 1, right):
            put(col, top, "─", style)
            put(col, bottom, "─", style)
            for row in range(top + 1, bottom):
                put(col, row, " ", "")
        for row in range(top + 1, bottom):
            put(left, row, "│", style)
            put(right, row, "│", style)
        put(left, top, "┌", style)
        put(right, top, "┐", style)
        put(left, bottom, "└", style)
        put(right, bottom, "┘", style)

        label = _label(node)[: max(0, right - left - 1)]
        for i, char in enumerate(label):
            put(left + 1 + i, top + 1, char, style)

    return grid


def node_at(store: CanvasStore, viewport: ViewportTransform, col: int, row: int) -> Optional[Node]:
    """topmost node whose box covers a cell."""
    for node in reversed(store.nodes):
        left, top, right, bottom = node_cells(viewport, node)
        if left <= col <= right and top <= row <= bottom:
            return node
    return None


class CanvasView(Widget):
    """pannable, zoomable character map of the canvas."""

    can_focus = True

    DEFAULT_CSS = """
    CanvasView {
        width: 1fr;
        height: 1fr;
        border: solid $surface-lighten-2;
    }
    """

    def __init__(self, store: CanvasStore, viewport: ViewportTransform, **kwargs) -> None:
        super().__init__(**kwargs)
        self.store = store
        self.viewport = viewport
        self.controller = InteractionController(store, viewport)

    def render(self) -> Text:
        cols, rows = self.size.width, self.size.height
        text = Text()
        for i, row in enumerate(rasterize(self.store, self.viewport, cols, rows)):
            if i:
                text.append("\n")
            for char, style in row:
                text.append(char, style=style or None)
        return text

    def on_resize(self, event: events.Resize) -> None:
        self.viewport.resize(event.size.width * CELL_WIDTH, event.size.height * CELL_HEIGHT)

    def _screen_point(self, event: events.MouseEvent) -> Point:
        return Point(event.x * CELL_WIDTH, event.y * CELL_HEIGHT)

    def on_mouse_down(self, event: events.MouseDown) -> None:
        node = node_at(self.store, self.viewport, event.x, event.y)
        # a node's top border is its drag handle
        handle = node is not None and node_cells(self.viewport, node)[1] == event.y
        self.controller.pointer_down(self._screen_point(event), node.id if handle else None)
        self.capture_mouse()
        self.post_message(NodeClicked(node.id if node else None))

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if self.controller.gesture is None:
            return
        self.controller.pointer_move(self._screen_point(event))
        self.refresh()

    def on_mouse_up(self, event: events.MouseUp) -> None:
        self.controller.pointer_up()
        self.release_mouse()

    def on_mouse_scroll_down(self, event: events.MouseScrollDown) -> None:
        self.controller.wheel(self._screen_point(event), 0.0, WHEEL_STEP, modifier=event.ctrl)
        self.refresh()

    def on_mouse_scroll_up(self, event: events.MouseScrollUp) -> None:
        self.controller.wheel(self._screen_point(event), 0.0, -WHEEL_STEP, modifier=event.ctrl)
        self.refresh()

    def refresh_canvas(self, store: CanvasStore) -> None:
        """point at a (possibly new) store and redraw."""
        self.store = store
        self.controller.store = store
        self.refresh()

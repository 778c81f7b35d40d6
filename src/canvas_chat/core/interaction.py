"""pointer and wheel handling.

a gesture is either dragging one node by its handle or panning the
canvas. node drags work in canvas units (pointer delta / scale); pans
work in screen pixels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from .models import Point
from .store import CanvasStore
from .viewport import ZOOM_SENSITIVITY, ViewportTransform


@dataclass
class Gesture:
    """state of the gesture in progress."""

    mode: Literal["node", "pan"]
    pointer_start: Point
    last_pointer: Point
    node_id: Optional[str] = None
    node_start: Optional[Point] = None


class InteractionController:
    """maps raw input events onto the viewport and the store."""

    def __init__(self, store: CanvasStore, viewport: ViewportTransform):
        self.store = store
        self.viewport = viewport
        self.gesture: Optional[Gesture] = None

    @property
    def is_panning(self) -> bool:
        return self.gesture is not None and self.gesture.mode == "pan"

    @property
    def dragging_node_id(self) -> Optional[str]:
        if self.gesture is None or self.gesture.mode != "node":
            return None
        return self.gesture.node_id

    def pointer_down(self, screen_point: Point, node_id: Optional[str] = None) -> None:
        """start a gesture.

        pass the node id when the press landed on a node's drag handle;
        anything else pans.
        """
        p = Point(*screen_point)
        node = self.store.get_node(node_id) if node_id else None
        if node is not None:
            self.gesture = Gesture("node", p, p, node.id, node.position)
        else:
            self.gesture = Gesture("pan", p, p)

    def pointer_move(self, screen_point: Point) -> None:
        g = self.gesture
        if g is None:
            return
        p = Point(*screen_point)

        if g.mode == "node":
            scale = self.viewport.scale
            dx = (p.x - g.pointer_start.x) / scale
            dy = (p.y - g.pointer_start.y) / scale
            # no-op if the node was deleted mid-drag
            self.store.update_node_position(g.node_id, g.node_start.x + dx, g.node_start.y + dy)
        else:
            self.viewport.pan_by(p.x - g.last_pointer.x, p.y - g.last_pointer.y)

        g.last_pointer = p

    def pointer_up(self) -> None:
        self.gesture = None

    def wheel(self, screen_point: Point, delta_x: float, delta_y: float, modifier: bool = False) -> None:
        """ctrl/cmd + wheel zooms at the cursor; plain wheel pans."""
        if modifier:
            self.viewport.zoom_at(Point(*screen_point), -delta_y * ZOOM_SENSITIVITY)
        else:
            self.viewport.pan_by(-delta_x, -delta_y)

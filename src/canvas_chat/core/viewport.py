"""pan/zoom transform between screen pixels and canvas units.

screen = canvas * scale + pan. pan is in screen pixels; scale is
applied on top of it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .models import Node, Point, Rect


# --- configuration ---

MIN_SCALE = 0.2
MAX_SCALE = 3.0
ZOOM_SENSITIVITY = 0.001  # scale change per wheel delta unit
DEFAULT_VIEWPORT_SIZE = (1280.0, 800.0)
MINIMAP_SCALE = 0.05
MINIMAP_OFFSET = 50.0


def clamp_scale(scale: float) -> float:
    return min(max(MIN_SCALE, scale), MAX_SCALE)


@dataclass
class MinimapLayout:
    """node boxes and the visible area, projected into minimap space."""

    nodes: dict[str, Rect]
    viewport: Rect


def minimap_to_canvas(p: Point, scale: float = MINIMAP_SCALE, offset: float = MINIMAP_OFFSET) -> Point:
    """inverse of the minimap projection."""
    return Point((p[0] - offset) / scale, (p[1] - offset) / scale)


class ViewportTransform:
    """current pan offset, zoom scale and on-screen size."""

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        scale: float = 1.0,
        width: float = DEFAULT_VIEWPORT_SIZE[0],
        height: float = DEFAULT_VIEWPORT_SIZE[1],
    ):
        self.x = x
        self.y = y
        self.scale = clamp_scale(scale)
        self.width = width
        self.height = height

    def __repr__(self) -> str:
        return f"ViewportTransform(x={self.x}, y={self.y}, scale={self.scale})"

    @property
    def pan(self) -> Point:
        return Point(self.x, self.y)

    def pan_by(self, dx: float, dy: float) -> None:
        """shift by screen-space deltas."""
        self.x += dx
        self.y += dy

    def zoom_at(self, screen_point: Point, delta_scale: float) -> None:
        """zoom by `delta_scale`, keeping the canvas point under the cursor put."""
        sx, sy = screen_point
        canvas_x = (sx - self.x) / self.scale
        canvas_y = (sy - self.y) / self.scale

        self.scale = clamp_scale(self.scale + delta_scale)
        self.x = sx - canvas_x * self.scale
        self.y = sy - canvas_y * self.scale

    def zoom_to(self, screen_point: Point, scale: float) -> None:
        """zoom to an absolute scale around a screen point."""
        self.zoom_at(screen_point, scale - self.scale)

    def screen_to_canvas(self, p: Point) -> Point:
        return Point((p[0] - self.x) / self.scale, (p[1] - self.y) / self.scale)

    def canvas_to_screen(self, p: Point) -> Point:
        return Point(p[0] * self.scale + self.x, p[1] * self.scale + self.y)

    def center_at(self, canvas_point: Point) -> None:
        """pan so a canvas point sits in the middle of the viewport."""
        cx, cy = canvas_point
        self.x = self.width / 2 - cx * self.scale
        self.y = self.height / 2 - cy * self.scale

    def center_on(self, node: Node) -> None:
        """pan so the node's center sits in the middle of the viewport."""
        self.center_at(node.bounds.center)

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def visible_rect(self) -> Rect:
        """the part of the canvas currently on screen."""
        left, top = self.screen_to_canvas(Point(0, 0))
        return Rect(left, top, self.width / self.scale, self.height / self.scale)

    def minimap(
        self,
        nodes: Iterable[Node],
        scale: float = MINIMAP_SCALE,
        offset: float = MINIMAP_OFFSET,
    ) -> MinimapLayout:
        """project nodes and the visible area into a small overview."""
        def project(r: Rect) -> Rect:
            return Rect(r.x * scale + offset, r.y * scale + offset, r.width * scale, r.height * scale)

        return MinimapLayout(
            nodes={n.id: project(n.bounds) for n in nodes},
            viewport=project(self.visible_rect()),
        )

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "scale": self.scale, "width": self.width, "height": self.height}

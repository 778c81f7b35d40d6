"""turn a connection into a cubic curve between its two nodes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Union

from .models import NEUTRAL_CONNECTION_COLOR, Connection, Node, Point


# --- configuration ---

LEFT_ANCHOR_NUDGE = 40.0  # a `left` target anchors this far below the node's top


@dataclass(frozen=True)
class Curve:
    """cubic bezier in canvas space."""

    start: Point
    c1: Point
    c2: Point
    end: Point
    color: str = NEUTRAL_CONNECTION_COLOR

    def point_at(self, t: float) -> Point:
        """evaluate the curve at t in [0, 1]."""
        u = 1 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        return Point(
            a * self.start.x + b * self.c1.x + c * self.c2.x + d * self.end.x,
            a * self.start.y + b * self.c1.y + c * self.c2.y + d * self.end.y,
        )

    def to_svg_path(self) -> str:
        s, c1, c2, e = self.start, self.c1, self.c2, self.end
        return f"M {s.x:g} {s.y:g} C {c1.x:g} {c1.y:g}, {c2.x:g} {c2.y:g}, {e.x:g} {e.y:g}"


def source_anchor(node: Node, side: Optional[str]) -> Point:
    """where an edge leaves its source node."""
    w, h = node.size
    if side == "right":
        return Point(node.x + w, node.y + h / 2)
    if side == "left":
        return Point(node.x, node.y + h / 2)
    # bottom, top and unset all leave from the bottom middle
    return Point(node.x + w / 2, node.y + h)


def target_anchor(node: Node, side: Optional[str]) -> Point:
    """where an edge enters its target node."""
    w, _ = node.size
    if side == "left":
        return Point(node.x, node.y + LEFT_ANCHOR_NUDGE)
    return Point(node.x + w / 2, node.y)


NodeLookup = Union[Mapping[str, Node], Iterable[Node]]


def route(connection: Connection, nodes: NodeLookup) -> Optional[Curve]:
    """curve for a connection, or None if either end is missing."""
    if not isinstance(nodes, Mapping):
        by_id: dict[str, Node] = {}
        for n in nodes:
            by_id.setdefault(n.id, n)
        nodes = by_id

    source = nodes.get(connection.from_id)
    target = nodes.get(connection.to_id)
    if source is None or target is None:
        return None

    start = source_anchor(source, connection.from_anchor)
    end = target_anchor(target, connection.to_anchor)
    color = connection.color or NEUTRAL_CONNECTION_COLOR

    if connection.from_anchor == "right" and connection.to_anchor == "left":
        # side-by-side branch: horizontal s-curve
        half = abs(end.x - start.x) * 0.5
        return Curve(start, Point(start.x + half, start.y), Point(end.x - half, end.y), end, color)

    # reply chain: vertical s-curve
    half = abs(end.y - start.y) * 0.5
    return Curve(start, Point(start.x, start.y + half), Point(end.x, end.y - half), end, color)


def route_all(connections: Iterable[Connection], nodes: Iterable[Node]) -> dict[str, Curve]:
    """curves for every drawable connection, keyed by connection id."""
    by_id: dict[str, Node] = {}
    for n in nodes:
        by_id.setdefault(n.id, n)
    curves = {}
    for conn in connections:
        curve = route(conn, by_id)
        if curve is not None:
            curves[conn.id] = curve
    return curves

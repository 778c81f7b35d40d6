"""collision-avoiding placement for new nodes.

a bounded local search biased toward the direction the new node grows
in: branches stay in their horizontal lane, replies in their vertical
lane. it is best effort; after MAX_ATTEMPTS the last candidate is
returned even if it still overlaps something.
"""

from __future__ import annotations

import math
from typing import Iterable, Literal

from .models import Node, Point, Rect, Size


# --- configuration ---

OVERLAP_BUFFER = 20.0  # default padding for plain overlap tests
SEARCH_BUFFER = 50.0   # padding and lane gap used while searching
MAX_ATTEMPTS = 100
LANE_GROUP = 5         # candidates tried in a lane before stepping outward
SPIRAL_ANGLE_STEP = 0.5  # radians per attempt
SPIRAL_RADIUS_STEP = 50.0

Bias = Literal["right", "bottom", "any"]


def check_collision(a: Rect, b: Rect, buffer: float = OVERLAP_BUFFER) -> bool:
    """True if the padded boxes intersect on both axes."""
    return (
        a.x < b.x + b.width + buffer
        and a.x + a.width + buffer > b.x
        and a.y < b.y + b.height + buffer
        and a.y + a.height + buffer > b.y
    )


def collides(point: Point, size: Size, existing: Iterable[Node], buffer: float = SEARCH_BUFFER) -> bool:
    """True if a box of `size` at `point` hits any existing node."""
    box = Rect(point.x, point.y, size.width, size.height)
    return any(check_collision(box, node.bounds, buffer) for node in existing)


def candidate(preferred: Point, size: Size, attempt: int, bias: Bias, buffer: float = SEARCH_BUFFER) -> Point:
    """the position to try on a given (1-based) attempt."""
    if bias == "right":
        # stack above/below in the current column, then step one column right
        column = (attempt - 1) // LANE_GROUP
        row = (attempt - 1) % LANE_GROUP
        dy = math.ceil(row / 2) * (size.height + buffer) * (1 if row % 2 == 0 else -1)
        return Point(preferred.x + column * (size.width + buffer), preferred.y + dy)

    if bias == "bottom":
        # spread left/right in the current row, then step one row down
        row = (attempt - 1) // LANE_GROUP
        column = (attempt - 1) % LANE_GROUP
        dx = math.ceil(column / 2) * (size.width + buffer) * (1 if column % 2 == 0 else -1)
        return Point(preferred.x + dx, preferred.y + row * (size.height + buffer))

    # archimedean spiral
    angle = attempt * SPIRAL_ANGLE_STEP
    radius = attempt * SPIRAL_RADIUS_STEP
    return Point(preferred.x + math.cos(angle) * radius, preferred.y + math.sin(angle) * radius)


def place(
    preferred: Point,
    size: Size,
    existing: Iterable[Node],
    bias: Bias = "any",
    buffer: float = SEARCH_BUFFER,
    max_attempts: int = MAX_ATTEMPTS,
) -> Point:
    """find a spot near `preferred` where a box of `size` fits.

    returns `preferred` untouched if it is already free. otherwise tries
    up to `max_attempts` candidates and returns the first free one, or
    the last one tried if none was free.
    """
    existing = list(existing)
    preferred = Point(*preferred)
    size = Size(*size)

    if not collides(preferred, size, existing, buffer):
        return preferred

    tried = preferred
    for attempt in range(1, max_attempts + 1):
        tried = candidate(preferred, size, attempt, bias, buffer)
        if not collides(tried, size, existing, buffer):
            return tried

    return tried

"""tests for collision-avoiding placement."""

import math

import pytest

from canvas_chat.core.models import Node, NodeKind, Point, Rect, Size
from canvas_chat.core.placement import (
    MAX_ATTEMPTS,
    SEARCH_BUFFER,
    candidate,
    check_collision,
    collides,
    place,
)


def box(node_id, x, y, w=100.0, h=100.0):
    return Node(id=node_id, kind=NodeKind.RESPONSE, x=x, y=y, width=w, height=h)


class TestCheckCollision:

    def test_far_apart(self):
        assert not check_collision(Rect(0, 0, 100, 100), Rect(500, 500, 100, 100))

    def test_within_buffer(self):
        """a gap smaller than the buffer still counts."""
        assert check_collision(Rect(0, 0, 100, 100), Rect(110, 0, 100, 100), buffer=20)
        assert not check_collision(Rect(0, 0, 100, 100), Rect(130, 0, 100, 100), buffer=20)

    def test_overlap_on_one_axis_only(self):
        assert not check_collision(Rect(0, 0, 100, 100), Rect(0, 400, 100, 100))


class TestPlace:
    """tests for place()."""

    def test_free_point_is_returned_unchanged(self):
        existing = [box("a", 1000, 1000)]
        assert place(Point(0, 0), Size(100, 100), existing, "bottom") == (0, 0)

    def test_empty_canvas(self):
        assert place(Point(7, 9), Size(450, 200), [], "any") == (7, 9)

    def test_bottom_bias_clears_blocker(self):
        """a blocked spot moves somewhere that no longer overlaps."""
        a = box("a", 0, 0)
        result = place(Point(0, 0), Size(100, 100), [a], "bottom")
        assert result != (0, 0)
        assert not collides(result, Size(100, 100), [a], SEARCH_BUFFER)

    @pytest.mark.parametrize("bias", ["right", "bottom", "any"])
    def test_result_is_free_when_space_exists(self, bias):
        existing = [box("a", 0, 0), box("b", 0, 150), box("c", 150, 0)]
        result = place(Point(0, 0), Size(100, 100), existing, bias)
        assert not collides(result, Size(100, 100), existing)

    def test_right_bias_stays_in_column_first(self):
        """a branch prefers moving along its column over moving right."""
        a = box("a", 0, 0)
        result = place(Point(0, 0), Size(100, 100), [a], "right")
        assert result.x == 0
        assert result.y == -150

    def test_bottom_bias_stays_in_row_first(self):
        a = box("a", 0, 0)
        result = place(Point(0, 0), Size(100, 100), [a], "bottom")
        assert result.y == 0
        assert result.x == -150

    def test_gives_up_after_max_attempts(self):
        """a hopelessly crowded canvas returns the last tried candidate."""
        wall = [box("wall", -100000, -100000, 200000, 200000)]
        result = place(Point(0, 0), Size(100, 100), wall, "right")
        assert result == candidate(Point(0, 0), Size(100, 100), MAX_ATTEMPTS, "right")
        assert collides(result, Size(100, 100), wall)

    def test_custom_attempt_limit(self):
        wall = [box("wall", -100000, -100000, 200000, 200000)]
        result = place(Point(0, 0), Size(100, 100), wall, "any", max_attempts=3)
        assert result == candidate(Point(0, 0), Size(100, 100), 3, "any")

    def test_accepts_plain_tuples(self):
        assert place((5, 5), (10, 10), [], "any") == Point(5, 5)


class TestCandidates:
    """tests for the search pattern."""

    def test_right_lane_order(self):
        size = Size(100, 100)
        ys = [candidate(Point(0, 0), size, n, "right").y for n in range(1, 6)]
        assert ys == [0, -150, 150, -300, 300]
        xs = {candidate(Point(0, 0), size, n, "right").x for n in range(1, 6)}
        assert xs == {0}
        # sixth attempt steps one column right
        assert candidate(Point(0, 0), size, 6, "right") == (150, 0)

    def test_bottom_lane_order(self):
        size = Size(100, 100)
        xs = [candidate(Point(0, 0), size, n, "bottom").x for n in range(1, 6)]
        assert xs == [0, -150, 150, -300, 300]
        assert candidate(Point(0, 0), size, 6, "bottom") == (0, 150)

    def test_spiral(self):
        p = candidate(Point(10, 20), Size(100, 100), 4, "any")
        assert p.x == pytest.approx(10 + math.cos(2.0) * 200)
        assert p.y == pytest.approx(20 + math.sin(2.0) * 200)

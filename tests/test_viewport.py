"""tests for the pan/zoom transform."""

import pytest

from canvas_chat.core.models import Node, NodeKind, Point, Rect
from canvas_chat.core.viewport import (
    MAX_SCALE,
    MIN_SCALE,
    ViewportTransform,
    clamp_scale,
    minimap_to_canvas,
)


class TestZoom:
    """tests for zoom_at."""

    def test_zoom_in_at_cursor(self):
        """zooming 1 -> 2 at (400, 300) from the origin pans to (-400, -300)."""
        vp = ViewportTransform()
        vp.zoom_at(Point(400, 300), 1.0)
        assert vp.scale == 2.0
        assert vp.pan == (-400, -300)

    @pytest.mark.parametrize("delta", [0.5, -0.3, 1.7, -0.75])
    def test_point_under_cursor_stays_put(self, delta):
        vp = ViewportTransform(x=37, y=-12, scale=1.3)
        cursor = Point(512, 288)
        before = vp.screen_to_canvas(cursor)
        vp.zoom_at(cursor, delta)
        after = vp.screen_to_canvas(cursor)
        assert after.x == pytest.approx(before.x)
        assert after.y == pytest.approx(before.y)

    def test_clamped_high(self):
        vp = ViewportTransform()
        vp.zoom_at(Point(0, 0), 10)
        assert vp.scale == MAX_SCALE

    def test_clamped_low(self):
        vp = ViewportTransform()
        vp.zoom_at(Point(100, 100), -10)
        assert vp.scale == MIN_SCALE

    def test_clamped_zoom_still_anchors_cursor(self):
        vp = ViewportTransform(x=10, y=10)
        cursor = Point(300, 200)
        before = vp.screen_to_canvas(cursor)
        vp.zoom_at(cursor, -5)
        assert vp.screen_to_canvas(cursor).x == pytest.approx(before.x)

    def test_zoom_to(self):
        vp = ViewportTransform()
        vp.zoom_to(Point(0, 0), 0.5)
        assert vp.scale == pytest.approx(0.5)
        assert vp.pan == (0, 0)

    def test_initial_scale_is_clamped(self):
        assert ViewportTransform(scale=99).scale == MAX_SCALE
        assert clamp_scale(0.01) == MIN_SCALE


class TestTransform:

    def test_screen_canvas_inverse(self):
        vp = ViewportTransform(x=-250, y=80, scale=0.8)
        p = Point(123, 456)
        back = vp.canvas_to_screen(vp.screen_to_canvas(p))
        assert back.x == pytest.approx(p.x)
        assert back.y == pytest.approx(p.y)

    def test_pan_by(self):
        vp = ViewportTransform()
        vp.pan_by(10, -20)
        vp.pan_by(5, 5)
        assert vp.pan == (15, -15)

    def test_center_on_unmeasured_node(self):
        """an unmeasured response is centered using its default 450x200."""
        vp = ViewportTransform(width=1280, height=800)
        vp.center_on(Node(id="a", kind=NodeKind.RESPONSE, x=0, y=0))
        assert vp.pan == (415, 300)

    def test_center_on_respects_scale(self):
        vp = ViewportTransform(scale=2, width=1000, height=1000)
        node = Node(id="a", kind=NodeKind.INPUT, x=100, y=100, width=200, height=200)
        vp.center_on(node)
        center = vp.canvas_to_screen(node.bounds.center)
        assert center == (500, 500)

    def test_center_at(self):
        vp = ViewportTransform(scale=0.5, width=1000, height=800)
        vp.center_at(Point(2000, 1000))
        assert vp.pan == (0, -100)
        assert vp.canvas_to_screen(Point(2000, 1000)) == (500, 400)

    def test_visible_rect(self):
        vp = ViewportTransform(x=-100, y=-50, scale=2, width=1280, height=800)
        assert vp.visible_rect() == Rect(50, 25, 640, 400)


class TestMinimap:

    def test_viewport_rect_accounts_for_scale(self):
        vp = ViewportTransform(x=-100, y=-50, scale=2, width=1280, height=800)
        layout = vp.minimap([])
        assert layout.viewport.x == pytest.approx(52.5)
        assert layout.viewport.y == pytest.approx(51.25)
        assert layout.viewport.width == pytest.approx(32)
        assert layout.viewport.height == pytest.approx(20)

    def test_nodes_projected(self):
        vp = ViewportTransform()
        node = Node(id="a", kind=NodeKind.INPUT, x=1000, y=2000, width=400, height=200)
        layout = vp.minimap([node])
        assert layout.nodes["a"] == Rect(100, 150, 20, 10)

    def test_to_dict(self):
        vp = ViewportTransform(x=1, y=2, scale=1.5, width=300, height=200)
        assert vp.to_dict() == {"x": 1, "y": 2, "scale": 1.5, "width": 300, "height": 200}

    def test_minimap_to_canvas_inverts_projection(self):
        vp = ViewportTransform()
        node = Node(id="a", kind=NodeKind.INPUT, x=1000, y=2000, width=400, height=200)
        r = vp.minimap([node]).nodes["a"]
        assert minimap_to_canvas(Point(r.x, r.y)) == pytest.approx((1000, 2000))
        assert minimap_to_canvas(Point(50, 50)) == (0, 0)

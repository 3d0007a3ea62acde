"""Viewport mapping and segment drawing (no display needed)."""

import pytest

from marker_display.core.segment import Segment
from marker_display.rendering.primitives import draw_segments, segments_to_screen
from marker_display.rendering.viewport import MAX_PIXELS_PER_METER, Viewport


class RecordingRenderer:
    def __init__(self):
        self.batches = []

    def draw_line_batch(self, lines):
        self.batches.append(lines)


def test_origin_is_screen_center():
    viewport = Viewport(800, 600, pixels_per_meter=50.0)
    assert viewport.world_to_screen(0.0, 0.0) == (400, 300)


def test_y_axis_points_up():
    viewport = Viewport(800, 600, pixels_per_meter=50.0)
    assert viewport.world_to_screen(1.0, 1.0) == (450, 250)


def test_screen_to_world_inverts():
    viewport = Viewport(800, 600, pixels_per_meter=40.0, center_x=2.0, center_y=-1.0)
    sx, sy = viewport.world_to_screen(3.5, 0.25)
    assert viewport.screen_to_world(sx, sy) == pytest.approx((3.5, 0.25))


def test_zoom_is_clamped():
    viewport = Viewport(800, 600, pixels_per_meter=4000.0)
    viewport.zoom(10.0)
    assert viewport.pixels_per_meter == MAX_PIXELS_PER_METER


def test_pan_moves_center():
    viewport = Viewport(800, 600, pixels_per_meter=50.0)
    viewport.pan(50, -100)
    assert (viewport.center_x, viewport.center_y) == pytest.approx((1.0, 2.0))


def test_draw_segments_batches_screen_lines():
    viewport = Viewport(200, 100, pixels_per_meter=10.0)
    renderer = RecordingRenderer()
    segments = [Segment(0.0, 0.0, 1.0, 0.0, (255, 0, 0)),
                Segment(0.0, 0.0, 0.0, 1.0, (0, 255, 0))]

    draw_segments(renderer, viewport, segments, width=2)

    assert renderer.batches == [[
        ((100, 50), (110, 50), (255, 0, 0), 2),
        ((100, 50), (100, 40), (0, 255, 0), 2),
    ]]


def test_empty_snapshot():
    assert segments_to_screen([], Viewport(10, 10)) == []

"""
Drawing of marker segments.
"""

from typing import List, Sequence

from marker_display.core.segment import Segment
from marker_display.rendering.renderer import Renderer, ScreenLine
from marker_display.rendering.viewport import Viewport


def segments_to_screen(segments: Sequence[Segment], viewport: Viewport,
                       width: int = 1) -> List[ScreenLine]:
    """Convert static-frame segments into screen-space line tuples."""
    return [
        (viewport.world_to_screen(s.x1, s.y1),
         viewport.world_to_screen(s.x2, s.y2),
         s.color,
         width)
        for s in segments
    ]


def draw_segments(renderer: Renderer, viewport: Viewport,
                  segments: Sequence[Segment], width: int = 1) -> None:
    """
    Draw segments in a single batch.

    Args:
        renderer: Renderer instance
        viewport: World -> screen mapping
        segments: Snapshot from the marker cache
        width: Line width in pixels
    """
    renderer.draw_line_batch(segments_to_screen(segments, viewport, width))

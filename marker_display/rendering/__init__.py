"""Rendering components for marker display."""

from marker_display.rendering.renderer import Renderer, PygameRenderer
from marker_display.rendering.viewport import Viewport
from marker_display.rendering.primitives import draw_segments, segments_to_screen

__all__ = [
    "Renderer",
    "PygameRenderer",
    "Viewport",
    "draw_segments",
    "segments_to_screen",
]

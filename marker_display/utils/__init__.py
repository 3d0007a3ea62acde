"""Utility components for marker display."""

from marker_display.utils.logging import setup_logging, get_logger
from marker_display.utils.color import parse_color, rgb_from_normalized

__all__ = [
    "setup_logging",
    "get_logger",
    "parse_color",
    "rgb_from_normalized",
]

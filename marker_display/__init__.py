"""
Marker Display - live top-down view of visualization markers.

This package provides a marker display server where:
- Markers arrive on topics, from any number of concurrent producers
- Every marker is resolved into one static frame through a transform tree
- Arrows, cubes, cube lists, line strips and line lists become 2D segments
- Markers with a lifetime disappear on their own
- Producers talk to the server through MarkerClient
"""

from marker_display.core.geometry import Transform
from marker_display.core.marker import Marker, MarkerAction, MarkerArray, MarkerType, make_marker
from marker_display.core.marker_cache import MarkerCache
from marker_display.core.segment import Segment
from marker_display.listener import MarkersListener
from marker_display.node import MarkerNode
from marker_display.client import MarkerClient

__version__ = "1.0.0"
__all__ = [
    "Transform",
    "Marker",
    "MarkerAction",
    "MarkerArray",
    "MarkerType",
    "make_marker",
    "MarkerCache",
    "Segment",
    "MarkersListener",
    "MarkerNode",
    "MarkerClient",
]

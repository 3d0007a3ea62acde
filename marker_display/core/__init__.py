"""Core components: geometry, marker messages, projection, cache and lifetimes."""

from marker_display.core.geometry import Pose, Quaternion, Transform, Vector3
from marker_display.core.marker import (
    ColorRGBA,
    Header,
    Marker,
    MarkerAction,
    MarkerArray,
    MarkerType,
)
from marker_display.core.segment import MarkerKey, RenderedMarker, Segment
from marker_display.core.projector import project_marker
from marker_display.core.marker_cache import MarkerCache
from marker_display.core.scheduler import LifetimeScheduler, Scheduler

__all__ = [
    "Pose",
    "Quaternion",
    "Transform",
    "Vector3",
    "ColorRGBA",
    "Header",
    "Marker",
    "MarkerAction",
    "MarkerArray",
    "MarkerType",
    "MarkerKey",
    "RenderedMarker",
    "Segment",
    "project_marker",
    "MarkerCache",
    "LifetimeScheduler",
    "Scheduler",
]

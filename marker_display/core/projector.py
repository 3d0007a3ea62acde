"""
Shape projector: converts one marker into 2D line segments.

Every point is taken from the marker's local frame through the composed
transform (header frame -> static frame, then marker pose) and projected
orthographically onto the static frame's x/y plane.

Pure functions only: no shared state, no I/O.
"""

import logging
import math
from typing import Callable, Dict, List, Sequence

import numpy as np

from marker_display.core.geometry import Transform, Vector3
from marker_display.core.marker import Marker, MarkerType
from marker_display.core.segment import RGB, Segment
from marker_display.utils.color import rgb_from_normalized

logger = logging.getLogger(__name__)

# Below this roll/pitch (radians) a cube is treated as lying flat on the floor
FLAT_CUBE_EPSILON = 1e-4

# Zero-point arrows draw their head wings at 45 degrees from the shaft
ARROW_HEAD_ANGLE = math.pi / 4.0


def marker_color(marker: Marker) -> RGB:
    """8-bit RGB of a marker (alpha is ignored)."""
    return rgb_from_normalized(marker.color.r, marker.color.g, marker.color.b)


def segments_from_strips(strips: Sequence[np.ndarray], color: RGB) -> List[Segment]:
    """
    Create segments from broken lines.

    Args:
        strips: Sequence of (N, >=2) point arrays; each strip of N points
                yields N-1 segments between consecutive points.
        color: RGB color applied to every segment
    """
    segments: List[Segment] = []
    for strip in strips:
        for p1, p2 in zip(strip[:-1], strip[1:]):
            segments.append(Segment(float(p1[0]), float(p1[1]),
                                    float(p2[0]), float(p2[1]), color))
    return segments


def _local_points(points: Sequence[Vector3]) -> np.ndarray:
    return np.array([[p.x, p.y, p.z] for p in points], dtype=np.float64).reshape(-1, 3)


def _head_wings(tip: np.ndarray, shaft_angle: float, half_angle: float,
                length: float, color: RGB) -> List[Segment]:
    segments = []
    for angle in (shaft_angle + math.pi - half_angle, shaft_angle + math.pi + half_angle):
        segments.append(Segment(
            float(tip[0]), float(tip[1]),
            float(tip[0] + length * math.cos(angle)),
            float(tip[1] + length * math.sin(angle)),
            color,
        ))
    return segments


def project_arrow(marker: Marker, iso: Transform, color: RGB) -> List[Segment]:
    """
    Arrow as shaft + two head wings (3 segments).

    Two construction modes:
      - no points: pose/orientation define the arrow, scale.x is the length
        and scale.y the head width.
      - two points: tail and tip; scale.x is the head width, scale.y the head
        length.
    Any other point count yields nothing.
    """
    if not marker.points:
        tail, tip = iso.transform_points([[0.0, 0.0, 0.0], [marker.scale.x, 0.0, 0.0]])
        shaft_angle = math.atan2(tip[1] - tail[1], tip[0] - tail[0])
        half_angle = ARROW_HEAD_ANGLE
        length = marker.scale.y / 2.0 / math.cos(ARROW_HEAD_ANGLE)
    elif len(marker.points) == 2:
        tail, tip = iso.transform_points(_local_points(marker.points))
        shaft_angle = math.atan2(tip[1] - tail[1], tip[0] - tail[0])
        half_angle = math.atan2(marker.scale.y, 2.0 * marker.scale.x)
        length = math.hypot(marker.scale.x, marker.scale.y)
    else:
        logger.debug(f"Arrow {marker.ns}/{marker.id} has {len(marker.points)} points "
                     f"(expected 0 or 2), skipping")
        return []

    shaft = Segment(float(tail[0]), float(tail[1]), float(tip[0]), float(tip[1]), color)
    return [shaft] + _head_wings(tip, shaft_angle, half_angle, length, color)


def cube_segments(scale: Vector3, offset: Vector3, iso: Transform,
                  color: RGB) -> List[Segment]:
    """
    Edges of one box centered at offset (marker-local coordinates).

    A box whose composed orientation is flat on the floor only shows its top
    face (4 segments); otherwise all 12 edges are drawn.
    """
    w, l, h = scale.x / 2.0, scale.y / 2.0, scale.z / 2.0
    pw, mw = offset.x + w, offset.x - w
    pl, ml = offset.y + l, offset.y - l
    ph, mh = offset.z + h, offset.z - h

    roll, pitch, _ = iso.euler_angles()
    if abs(roll) < FLAT_CUBE_EPSILON and abs(pitch) < FLAT_CUBE_EPSILON:
        top = iso.transform_points([
            [pw, pl, ph], [pw, ml, ph], [mw, ml, ph], [mw, pl, ph], [pw, pl, ph],
        ])
        return segments_from_strips([top], color)

    top = iso.transform_points([
        [pw, pl, ph], [pw, ml, ph], [mw, ml, ph], [mw, pl, ph], [pw, pl, ph],
    ])
    bottom = iso.transform_points([
        [pw, pl, mh], [pw, ml, mh], [mw, ml, mh], [mw, pl, mh], [pw, pl, mh],
    ])
    # Vertical edges join the matching top/bottom corners
    verticals = [np.array([top[i], bottom[i]]) for i in range(4)]
    return segments_from_strips([top, bottom] + verticals, color)


def project_cube(marker: Marker, iso: Transform, color: RGB) -> List[Segment]:
    return cube_segments(marker.scale, Vector3(), iso, color)


def project_cube_list(marker: Marker, iso: Transform, color: RGB) -> List[Segment]:
    """One box per point, each point used as the box center."""
    segments: List[Segment] = []
    for point in marker.points:
        segments.extend(cube_segments(marker.scale, point, iso, color))
    return segments


def project_line_strip(marker: Marker, iso: Transform, color: RGB) -> List[Segment]:
    if len(marker.points) < 2:
        return []
    return segments_from_strips([iso.transform_points(_local_points(marker.points))], color)


def project_line_list(marker: Marker, iso: Transform, color: RGB) -> List[Segment]:
    """
    Independent lines from consecutive point pairs.

    An odd point count leaves the last point unpaired: it is dropped (with a
    warning) and the remaining pairs are still drawn.
    """
    points = marker.points
    if len(points) % 2:
        logger.warning(f"LINE_LIST {marker.ns}/{marker.id} has an odd number of points "
                       f"({len(points)}), ignoring the last one")
        points = points[:-1]
    if not points:
        return []

    world = iso.transform_points(_local_points(points))
    return segments_from_strips([world[i:i + 2] for i in range(0, len(world), 2)], color)


_PROJECTORS: Dict[int, Callable[[Marker, Transform, RGB], List[Segment]]] = {
    MarkerType.ARROW: project_arrow,
    MarkerType.CUBE: project_cube,
    MarkerType.CUBE_LIST: project_cube_list,
    MarkerType.LINE_STRIP: project_line_strip,
    MarkerType.LINE_LIST: project_line_list,
}


def is_supported(marker_type: int) -> bool:
    return marker_type in _PROJECTORS


def project_marker(marker: Marker, transform: Transform) -> List[Segment]:
    """
    Project a marker into the static plane.

    Args:
        marker: Marker message
        transform: Transform from the marker's header frame to the static frame

    Returns:
        Ordered list of colored segments; empty for unsupported shape types
    """
    projector = _PROJECTORS.get(marker.type)
    if projector is None:
        return []

    iso = transform * Transform.from_pose(marker.pose)
    return projector(marker, iso, marker_color(marker))

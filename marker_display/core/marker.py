"""
Marker message types (visualization_msgs/Marker shaped) and their JSON codec.

Producers publish markers as JSON objects; from_dict() is the single place
where wire payloads are validated and turned into typed messages.

Accepted shorthand on the wire:
  - vectors as {"x", "y", "z"} objects or [x, y, z] lists
  - quaternions as {"x", "y", "z", "w"} objects or [x, y, z, w] lists
  - times/durations as float seconds or {"secs"/"sec", "nsecs"/"nsec"/"nanosec"}
  - type/action as integer codes or case-insensitive names
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Mapping, Optional, Tuple, Union

from marker_display.core.geometry import Pose, Quaternion, Vector3


class MarkerType(IntEnum):
    """Shape codes, identical to visualization_msgs/Marker."""
    ARROW = 0
    CUBE = 1
    SPHERE = 2
    CYLINDER = 3
    LINE_STRIP = 4
    LINE_LIST = 5
    CUBE_LIST = 6
    SPHERE_LIST = 7
    POINTS = 8
    TEXT_VIEW_FACING = 9
    MESH_RESOURCE = 10
    TRIANGLE_LIST = 11


class MarkerAction(IntEnum):
    """Action codes. MODIFY shares ADD's value (create or replace)."""
    ADD = 0
    MODIFY = 0
    DELETE = 2
    DELETEALL = 3


_ACTION_ALIASES = {
    'add': MarkerAction.ADD,
    'modify': MarkerAction.ADD,
    'delete': MarkerAction.DELETE,
    'deleteall': MarkerAction.DELETEALL,
    'delete_all': MarkerAction.DELETEALL,
}


@dataclass(frozen=True)
class ColorRGBA:
    """Normalized (0.0-1.0) color channels."""
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0

    def to_dict(self) -> dict:
        return {'r': self.r, 'g': self.g, 'b': self.b, 'a': self.a}


@dataclass(frozen=True)
class Header:
    frame_id: str = ""
    stamp: float = 0.0  # seconds; 0 = "latest available transform"


@dataclass(frozen=True)
class Marker:
    """One visualization marker."""
    header: Header = Header()
    ns: str = ""
    id: int = 0
    type: int = MarkerType.ARROW
    action: int = MarkerAction.ADD
    pose: Pose = Pose()
    scale: Vector3 = Vector3(1.0, 1.0, 1.0)
    color: ColorRGBA = ColorRGBA()
    points: Tuple[Vector3, ...] = ()
    lifetime: float = 0.0  # seconds; 0 = until deleted

    def to_dict(self) -> dict:
        return {
            'header': {'frame_id': self.header.frame_id, 'stamp': self.header.stamp},
            'ns': self.ns,
            'id': self.id,
            'type': int(self.type),
            'action': int(self.action),
            'pose': self.pose.to_dict(),
            'scale': self.scale.to_dict(),
            'color': self.color.to_dict(),
            'points': [p.to_dict() for p in self.points],
            'lifetime': self.lifetime,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Marker":
        """
        Deserialize from a wire dictionary.

        Raises:
            ValueError: If the payload is not a marker or a field is ill-typed
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Marker must be an object, got {type(data).__name__}")

        header = data.get('header') or {}
        if not isinstance(header, Mapping):
            raise ValueError("Marker 'header' must be an object")

        marker_id = _parse_id(data.get('id', 0))

        pose = data.get('pose') or {}
        if not isinstance(pose, Mapping):
            raise ValueError("Marker 'pose' must be an object")

        points = data.get('points') or []
        if not isinstance(points, (list, tuple)):
            raise ValueError("Marker 'points' must be a list")

        return cls(
            header=Header(
                frame_id=str(header.get('frame_id', '')),
                stamp=parse_time(header.get('stamp', 0.0)),
            ),
            ns=str(data.get('ns', '')),
            id=marker_id,
            type=_parse_type(data.get('type', MarkerType.ARROW)),
            action=_parse_action(data.get('action', MarkerAction.ADD)),
            pose=Pose(
                position=_parse_vector(pose.get('position'), Vector3()),
                orientation=_parse_quaternion(pose.get('orientation')),
            ),
            scale=_parse_vector(data.get('scale'), Vector3(1.0, 1.0, 1.0)),
            color=_parse_color(data.get('color')),
            points=tuple(_parse_vector(p, Vector3()) for p in points),
            lifetime=parse_time(data.get('lifetime', 0.0)),
        )


@dataclass(frozen=True)
class MarkerArray:
    """A batch of markers delivered as one message."""
    markers: Tuple[Marker, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {'markers': [m.to_dict() for m in self.markers]}

    @classmethod
    def from_dict(cls, data: Union[Mapping[str, Any], List]) -> "MarkerArray":
        """
        Deserialize from {"markers": [...]} or a bare list of markers.

        Raises:
            ValueError: If the payload is not a marker batch
        """
        if isinstance(data, Mapping):
            markers = data.get('markers', [])
        else:
            markers = data
        if not isinstance(markers, (list, tuple)):
            raise ValueError("MarkerArray 'markers' must be a list")
        return cls(markers=tuple(Marker.from_dict(m) for m in markers))


def parse_time(value: Any) -> float:
    """
    Parse a time or duration to float seconds.

    Raises:
        ValueError: On an unrecognized or non-finite representation
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise ValueError(f"Invalid time value: {value!r}")
    if isinstance(value, Mapping):
        secs = value.get('secs', value.get('sec', 0))
        nsecs = value.get('nsecs', value.get('nsec', value.get('nanosec', 0)))
    elif isinstance(value, (int, float)):
        secs, nsecs = value, 0
    else:
        raise ValueError(f"Invalid time value: {value!r}")
    try:
        seconds = float(secs) + float(nsecs) * 1e-9
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Invalid time value: {value!r}")
    if not math.isfinite(seconds):
        raise ValueError(f"Time value must be finite: {value!r}")
    return seconds


def _parse_id(value: Any) -> int:
    """Whole-number marker id; fractional floats and booleans are rejected."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValueError(f"Invalid marker id: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid marker id: {value!r}")


def _parse_floats(value: Any, names: Tuple[str, ...], defaults: Tuple[float, ...],
                  what: str) -> Tuple[float, ...]:
    if value is None:
        return defaults
    try:
        if isinstance(value, Mapping):
            return tuple(float(value.get(n, d)) for n, d in zip(names, defaults))
        if isinstance(value, (list, tuple)) and len(value) == len(names):
            return tuple(float(v) for v in value)
    except (TypeError, ValueError):
        pass
    raise ValueError(f"Invalid {what}: {value!r}")


def _parse_vector(value: Any, default: Vector3) -> Vector3:
    x, y, z = _parse_floats(value, ('x', 'y', 'z'),
                            (default.x, default.y, default.z), "vector")
    return Vector3(x, y, z)


def _parse_quaternion(value: Any) -> Quaternion:
    x, y, z, w = _parse_floats(value, ('x', 'y', 'z', 'w'), (0.0, 0.0, 0.0, 1.0),
                               "quaternion")
    return Quaternion(x, y, z, w)


def _parse_color(value: Any) -> ColorRGBA:
    if isinstance(value, (list, tuple)) and len(value) == 3:
        value = list(value) + [1.0]
    r, g, b, a = _parse_floats(value, ('r', 'g', 'b', 'a'), (0.0, 0.0, 0.0, 1.0), "color")
    return ColorRGBA(r, g, b, a)


def _parse_type(value: Any) -> int:
    if isinstance(value, str):
        try:
            return MarkerType[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown marker type: {value!r}")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid marker type: {value!r}")
    try:
        return MarkerType(value)
    except ValueError:
        # Unsupported codes are kept; they simply project to nothing
        return value


def _parse_action(value: Any) -> int:
    if isinstance(value, str):
        action = _ACTION_ALIASES.get(value.strip().lower())
        if action is None:
            raise ValueError(f"Unknown marker action: {value!r}")
        return action
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid marker action: {value!r}")
    try:
        return MarkerAction(value)
    except ValueError:
        return value


def make_marker(ns: str, id: int, type: Union[int, str] = MarkerType.ARROW,
                frame_id: str = "map", action: Union[int, str] = MarkerAction.ADD,
                position: Optional[Tuple[float, float, float]] = None,
                orientation: Optional[Tuple[float, float, float, float]] = None,
                scale: Tuple[float, float, float] = (1.0, 1.0, 1.0),
                color: Tuple[float, float, float] = (1.0, 1.0, 1.0),
                points: Optional[List[Tuple[float, float, float]]] = None,
                lifetime: float = 0.0, stamp: float = 0.0) -> dict:
    """Build a wire dictionary for one marker (used by clients and examples)."""
    return {
        'header': {'frame_id': frame_id, 'stamp': stamp},
        'ns': ns,
        'id': id,
        'type': type if isinstance(type, str) else int(type),
        'action': action if isinstance(action, str) else int(action),
        'pose': {
            'position': list(position or (0.0, 0.0, 0.0)),
            'orientation': list(orientation or (0.0, 0.0, 0.0, 1.0)),
        },
        'scale': list(scale),
        'color': list(color),
        'points': [list(p) for p in (points or [])],
        'lifetime': lifetime,
    }

"""
Transform commands: feed and inspect the transform tree.
"""

from typing import List, Optional

from marker_display.commands.base import register_command
from marker_display.core.geometry import Transform
from marker_display.core.marker import parse_time
from marker_display.tf.buffer import TransformLookupError


def _parse_vector(values, size: int, name: str) -> List[float]:
    if not isinstance(values, (list, tuple)) or len(values) != size:
        raise ValueError(f"'{name}' must be a list of {size} numbers, got {values!r}")
    return [float(v) for v in values]


@register_command
def set_transform(node, parent: str, child: str,
                  translation: Optional[list] = None,
                  rotation: Optional[list] = None,
                  stamp=0.0, static: bool = False) -> dict:
    """
    Publish the transform from child to parent.

    Args:
        node: MarkerNode instance
        parent: Parent frame
        child: Child frame
        translation: [x, y, z] of child origin in parent (default origin)
        rotation: [x, y, z, w] quaternion (default identity)
        stamp: Time in seconds (or {"secs", "nsecs"}); ignored for static transforms
        static: Valid at every time

    Returns:
        Response with status
    """
    transform = Transform(
        _parse_vector(translation if translation is not None else [0.0, 0.0, 0.0],
                      3, "translation"),
        _parse_vector(rotation if rotation is not None else [0.0, 0.0, 0.0, 1.0],
                      4, "rotation"),
    )
    node.tf_buffer.set_transform(parent, child, transform,
                                 stamp=parse_time(stamp), static=bool(static))
    return {"status": "success", "parent": parent, "child": child}


@register_command
def list_frames(node) -> dict:
    """List known frames and their parents."""
    return {
        "status": "success",
        "static_frame": node.static_frame,
        "frames": node.tf_buffer.frames(),
    }


@register_command
def lookup_transform(node, source: str, target: Optional[str] = None,
                     stamp=0.0) -> dict:
    """
    Resolve a transform (target defaults to the static frame).

    Returns:
        Response with translation and rotation, or an error if unavailable
    """
    target = target or node.static_frame
    try:
        transform = node.tf_buffer.lookup_transform(source, target, parse_time(stamp))
    except TransformLookupError as e:
        return {"status": "error", "message": str(e)}
    return {
        "status": "success",
        "source": source,
        "target": target,
        "translation": transform.translation.tolist(),
        "rotation": transform.rotation.tolist(),
    }

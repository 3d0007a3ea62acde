"""
Marker cache inspection commands.
"""

from marker_display.commands.base import register_command


@register_command
def get_lines(node) -> dict:
    """Current renderable segments (what the display draws)."""
    segments = node.listener.get_lines()
    return {
        "status": "success",
        "count": len(segments),
        "lines": [s.to_dict() for s in segments],
    }


@register_command
def list_markers(node) -> dict:
    """Namespace -> ids of the markers currently visible."""
    namespaces = node.cache.namespaces()
    return {
        "status": "success",
        "count": sum(len(ids) for ids in namespaces.values()),
        "namespaces": namespaces,
    }


@register_command
def clear_markers(node) -> dict:
    """Remove every marker (same effect as a DELETEALL message)."""
    node.cache.clear()
    return {"status": "success"}

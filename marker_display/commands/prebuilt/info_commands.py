"""
Server introspection commands.
"""

from marker_display.commands.base import get_registry, register_command


@register_command(name="help")
def help_command(node) -> dict:
    """List available commands with their parameters."""
    return {"status": "success", "commands": get_registry().describe()}

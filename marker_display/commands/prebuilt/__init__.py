"""
Prebuilt commands for the marker display server.

Topic publishing, transform tree access, marker cache inspection and help.
"""

# Import all command modules to trigger registration
from marker_display.commands.prebuilt import topic_commands
from marker_display.commands.prebuilt import transform_commands
from marker_display.commands.prebuilt import marker_commands
from marker_display.commands.prebuilt import info_commands

__all__ = [
    "topic_commands",
    "transform_commands",
    "marker_commands",
    "info_commands",
]

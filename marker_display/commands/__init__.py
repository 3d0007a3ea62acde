"""
Command system for the marker display server.

Commands are registered using the @register_command decorator and loaded
from the prebuilt/ submodule on import.
"""

from marker_display.commands.base import (
    Command,
    CommandRegistry,
    register_command,
    get_registry,
)

# Import prebuilt commands to register them
from marker_display.commands import prebuilt

__all__ = [
    "Command",
    "CommandRegistry",
    "register_command",
    "get_registry",
]

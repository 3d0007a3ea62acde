"""
Command registry for the marker display server.

A command line on the socket is a JSON object {"action": name, ...params}.
Handlers are plain functions taking the MarkerNode first and the params as
keyword arguments:

    @register_command
    def clear_markers(node):
        '''Remove every marker.'''
        node.cache.clear()

Returning None means success; returning a dict without "status" gets
"status": "success" added. Raising ValueError produces an error response.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Response = Dict[str, Any]


@dataclass(frozen=True)
class Command:
    """A registered handler and what clients need to know to call it."""
    name: str
    handler: Callable[..., Optional[Response]]
    summary: str = ""
    params: tuple = ()

    @classmethod
    def from_function(cls, name: str, fn: Callable) -> "Command":
        doc = inspect.getdoc(fn) or ""
        signature = inspect.signature(fn)
        # First parameter is always the node
        params = tuple(signature.parameters)[1:]
        return cls(name, fn, doc.splitlines()[0] if doc else "", params)

    def to_dict(self) -> dict:
        return {"name": self.name, "summary": self.summary, "params": list(self.params)}


class CommandRegistry:
    """Action name -> Command."""

    def __init__(self):
        self._commands: Dict[str, Command] = {}

    def register(self, name: str, handler: Callable) -> Command:
        if name in self._commands:
            logger.warning(f"Command '{name}' is being re-registered")
        command = Command.from_function(name, handler)
        self._commands[name] = command
        logger.debug(f"Registered command: {name}{command.params}")
        return command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def execute(self, action: str, node: Any, **params) -> Response:
        """
        Run the handler for action against node.

        Args:
            action: Command name
            node: MarkerNode instance
            **params: Command parameters

        Returns:
            Response dictionary with a 'status' key. Errors other than bad
            parameters and ValueError propagate to the caller.
        """
        command = self._commands.get(action)
        if command is None:
            return {
                "status": "error",
                "message": f"Unknown command: {action}",
                "available_commands": self.list_commands(),
            }

        try:
            result = command.handler(node, **params)
        except TypeError as e:
            return {"status": "error", "message": f"Invalid parameters for '{action}': {e}"}
        except ValueError as e:
            return {"status": "error", "message": str(e)}

        if result is None:
            return {"status": "success"}
        result.setdefault("status", "success")
        return result

    def list_commands(self) -> List[str]:
        return sorted(self._commands)

    def describe(self) -> List[dict]:
        """Name, one-line summary and parameters of every command."""
        return [self._commands[name].to_dict() for name in self.list_commands()]


_registry = CommandRegistry()


def get_registry() -> CommandRegistry:
    """The process-wide registry the server dispatches through."""
    return _registry


def register_command(func: Callable = None, *, name: str = None) -> Callable:
    """
    Register a function in the global registry, under its own name or `name`.

    Usable bare (@register_command) or with arguments
    (@register_command(name="...")). The function is returned unchanged.
    """
    def decorator(fn: Callable) -> Callable:
        _registry.register(name or fn.__name__, fn)
        return fn

    if func is not None:
        return decorator(func)
    return decorator

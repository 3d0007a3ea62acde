"""
Logging setup for the marker display server.

Records go to stdout and, when one can be opened, to a log file.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

# Tried in order when no log file is given
DEFAULT_LOG_FILES = (
    "/var/log/marker_display.log",
    "/tmp/marker_display.log",
)

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _writable_default() -> Optional[str]:
    for candidate in map(Path, DEFAULT_LOG_FILES):
        try:
            candidate.parent.mkdir(parents=True, exist_ok=True)
            candidate.touch(exist_ok=True)
        except OSError:
            continue
        return str(candidate)
    return None


def _handler(handler: logging.Handler, level: int, fmt: str) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logging(verbose: bool = False,
                  log_file: Optional[str] = None,
                  log_format: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger for the server process.

    Args:
        verbose: DEBUG instead of INFO
        log_file: Log file path; None picks the first writable default,
                  "" logs to stdout only.
        log_format: Format string for both sinks

    Returns:
        The package logger
    """
    level = logging.DEBUG if verbose else logging.INFO
    fmt = log_format or DEFAULT_LOG_FORMAT

    handlers: List[logging.Handler] = [_handler(logging.StreamHandler(sys.stdout), level, fmt)]

    path = _writable_default() if log_file is None else log_file
    if path:
        try:
            handlers.append(_handler(logging.FileHandler(path), level, fmt))
        except OSError as e:
            print(f"Warning: file logging disabled, cannot open {path}: {e}", file=sys.stderr)

    logging.basicConfig(level=level, format=fmt, handlers=handlers, force=True)

    package_logger = logging.getLogger("marker_display")
    package_logger.setLevel(level)
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__."""
    return logging.getLogger(name)

"""
Drawing backend for the marker display.

Isolates drawing behind the Renderer interface so the server loop only
deals with segments and screen coordinates.
"""

import logging
import os
from typing import List, Optional, Protocol, Tuple

import pygame

logger = logging.getLogger(__name__)

ScreenLine = Tuple[Tuple[int, int], Tuple[int, int], Tuple[int, int, int], int]


class Renderer(Protocol):
    """Protocol for rendering backends."""

    def init(self) -> None:
        """Open the display."""
        ...

    def get_size(self) -> Tuple[int, int]:
        """Current (width, height) in pixels."""
        ...

    def clear(self, color: Tuple[int, int, int]) -> None:
        """Fill the frame with one RGB color."""
        ...

    def draw_line_batch(self, lines: List[ScreenLine]) -> None:
        """Draw many (start, end, color, width) lines."""
        ...

    def flip(self) -> None:
        """Present the finished frame."""
        ...

    def tick(self, fps: int) -> float:
        """Wait out the frame budget; returns elapsed seconds."""
        ...

    def get_events(self) -> List:
        """Drain the input event queue."""
        ...

    def quit(self) -> None:
        """Close the display."""
        ...


class PygameRenderer:
    """Windowed pygame renderer."""

    def __init__(self, width: int = 1024, height: int = 768,
                 caption: str = "Marker Display"):
        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.width: int = width
        self.height: int = height
        self.caption = caption

    def init(self) -> None:
        """Initialize pygame and open a resizable window."""
        os.environ.setdefault("DISPLAY", ":0")

        pygame.init()
        sdl_version = pygame.get_sdl_version()
        logger.info(f"SDL version {sdl_version[0]}.{sdl_version[1]}.{sdl_version[2]} detected")

        self.screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        pygame.display.set_caption(self.caption)

        self.clock = pygame.time.Clock()
        self.width, self.height = self.screen.get_size()
        logger.info(f"Display initialized: {self.width}x{self.height}")

    def get_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def handle_resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

    def clear(self, color: Tuple[int, int, int]) -> None:
        if self.screen:
            self.screen.fill(color)

    def draw_line_batch(self, lines: List[ScreenLine]) -> None:
        """
        Draw many opaque lines.

        Args:
            lines: List of (start, end, color, width) tuples
        """
        if not self.screen or not lines:
            return
        for start, end, color, width in lines:
            pygame.draw.line(self.screen, color[:3], start, end, width)

    def flip(self) -> None:
        pygame.display.flip()

    def tick(self, fps: int) -> float:
        if self.clock:
            return self.clock.tick(fps) / 1000.0
        return 0.0

    def get_events(self) -> List:
        return pygame.event.get()

    def quit(self) -> None:
        pygame.quit()

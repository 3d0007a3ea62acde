"""
Viewport: static-frame meters <-> screen pixels.

World +x points right and +y points up; screen y grows downward.
"""

from dataclasses import dataclass
from typing import Tuple

MIN_PIXELS_PER_METER = 1.0
MAX_PIXELS_PER_METER = 5000.0


@dataclass
class Viewport:
    """Pan/zoom state of the 2D view."""
    width: int
    height: int
    pixels_per_meter: float = 50.0
    center_x: float = 0.0  # World point shown at the screen center
    center_y: float = 0.0

    def world_to_screen(self, x: float, y: float) -> Tuple[int, int]:
        sx = self.width / 2 + (x - self.center_x) * self.pixels_per_meter
        sy = self.height / 2 - (y - self.center_y) * self.pixels_per_meter
        return (round(sx), round(sy))

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        x = self.center_x + (sx - self.width / 2) / self.pixels_per_meter
        y = self.center_y - (sy - self.height / 2) / self.pixels_per_meter
        return (x, y)

    def zoom(self, factor: float) -> None:
        """Scale around the screen center, clamped to a sane range."""
        self.pixels_per_meter = max(MIN_PIXELS_PER_METER,
                                    min(MAX_PIXELS_PER_METER, self.pixels_per_meter * factor))

    def pan(self, dx_pixels: float, dy_pixels: float) -> None:
        """Move the view by a screen-space offset."""
        self.center_x += dx_pixels / self.pixels_per_meter
        self.center_y -= dy_pixels / self.pixels_per_meter

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

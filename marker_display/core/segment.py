"""
Renderable value types produced by the shape projector and held by the cache.

All types are immutable; the cache replaces entries wholesale on update.
"""

from dataclasses import dataclass
from typing import NamedTuple, Tuple

RGB = Tuple[int, int, int]


class MarkerKey(NamedTuple):
    """Identity of one logical marker: ids are only unique within a namespace."""
    namespace: str
    id: int


@dataclass(frozen=True)
class Segment:
    """A 2D colored line in the static reference plane."""
    x1: float
    y1: float
    x2: float
    y2: float
    color: RGB = (255, 255, 255)

    @property
    def start(self) -> Tuple[float, float]:
        return (self.x1, self.y1)

    @property
    def end(self) -> Tuple[float, float]:
        return (self.x2, self.y2)

    def to_dict(self) -> dict:
        return {
            'x1': self.x1,
            'y1': self.y1,
            'x2': self.x2,
            'y2': self.y2,
            'color': list(self.color),
        }


@dataclass(frozen=True)
class RenderedMarker:
    """
    Projected geometry of one marker, as stored in the cache.

    generation is assigned by the cache on every upsert and identifies this
    particular version of the key (used by lifetime expiry).
    """
    key: MarkerKey
    segments: Tuple[Segment, ...] = ()
    generation: int = 0

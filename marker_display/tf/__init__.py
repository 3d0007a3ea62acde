"""Transform tree (frame -> static frame resolution)."""

from marker_display.tf.buffer import (
    TransformBuffer,
    TransformResolver,
    TransformLookupError,
    FrameNotFoundError,
    ConnectivityError,
    ExtrapolationError,
)

__all__ = [
    "TransformBuffer",
    "TransformResolver",
    "TransformLookupError",
    "FrameNotFoundError",
    "ConnectivityError",
    "ExtrapolationError",
]

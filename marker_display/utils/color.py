"""
Color conversion utilities.

Markers carry normalized float channels (0.0-1.0); the renderer works with
8-bit RGB tuples. Display colors from config may be given as:
- HEX: "#RRGGBB"
- RGB tuple/list: [R, G, B] with values 0-255
"""

import re
from typing import List, Sequence, Tuple, Union

# Type aliases
RGB = Tuple[int, int, int]
ColorInput = Union[str, List, Tuple]

# Regex for hex color codes
HEX_COLOR_PATTERN = re.compile(r'^#?([0-9a-fA-F]{6})$')


def _clamp_byte(value: int) -> int:
    return max(0, min(255, value))


def rgb_from_normalized(r: float, g: float, b: float) -> RGB:
    """
    Convert a normalized float color to 8-bit RGB.

    Channels are scaled by 255 and truncated toward zero (not rounded),
    then clamped to 0-255.

    Examples:
        >>> rgb_from_normalized(1.0, 0.0, 0.0)
        (255, 0, 0)
        >>> rgb_from_normalized(0.5, 0.999, 0.0)
        (127, 254, 0)
    """
    return (
        _clamp_byte(int(r * 255.0)),
        _clamp_byte(int(g * 255.0)),
        _clamp_byte(int(b * 255.0)),
    )


def parse_color(color: ColorInput) -> RGB:
    """
    Parse a display color (hex string or 0-255 list) to an RGB tuple.

    Raises:
        ValueError: If color format is invalid or unrecognized

    Examples:
        >>> parse_color("#FF8000")
        (255, 128, 0)
        >>> parse_color([20, 20, 20])
        (20, 20, 20)
    """
    if isinstance(color, str):
        match = HEX_COLOR_PATTERN.match(color.strip())
        if not match:
            raise ValueError(f"Invalid color format: {color}")
        hex_value = match.group(1)
        return (int(hex_value[0:2], 16), int(hex_value[2:4], 16), int(hex_value[4:6], 16))

    if isinstance(color, (list, tuple)):
        if len(color) < 3:
            raise ValueError(f"Color must have at least 3 components, got {len(color)}")
        values: Sequence = color[:3]
        return (_clamp_byte(int(values[0])), _clamp_byte(int(values[1])),
                _clamp_byte(int(values[2])))

    raise ValueError(f"Unsupported color type: {type(color).__name__}")

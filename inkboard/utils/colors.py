"""
Color helpers for item colors stored as CSS hex strings.
"""
from typing import Tuple

DEFAULT_COLOR = "#000"


def hex_to_rgb(hex_color: str) -> Tuple[float, float, float]:
    """
    Convert a ``#rgb`` or ``#rrggbb`` string to an RGB tuple in the 0-1 range.

    Args:
        hex_color: Color string, with or without the leading '#'

    Returns:
        (r, g, b) floats in [0, 1]

    Raises:
        ValueError: If the string is not a valid 3 or 6 digit hex color
    """
    digits = (hex_color or DEFAULT_COLOR).lstrip("#")
    value = int(digits, 16)

    if len(digits) == 3:
        r = (value >> 8) & 0xF
        g = (value >> 4) & 0xF
        b = value & 0xF
        return r / 15, g / 15, b / 15

    if len(digits) == 6:
        r = (value >> 16) & 0xFF
        g = (value >> 8) & 0xFF
        b = value & 0xFF
        return r / 255, g / 255, b / 255

    raise ValueError(f"Invalid hex color: {hex_color!r}")

"""
Red-to-green color ramp for building scores.

    value 0.0  -> (255,  50, 0)
    value 0.5  -> (255, 255, 0)
    value 1.0  -> (151, 255, 0)
"""

import math
from typing import Tuple

RGB = Tuple[float, float, float]


def clamp_unit(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def building_color(value: float) -> RGB:
    """Map a color value in [0, 1] to an (r, g, b) triple. Out-of-range values are clamped."""
    v = clamp_unit(value)
    if v < 0.5:
        return (255.0, 50 + v * 2 * 205, 0.0)
    return ((1 - v) * 2 * 104 + 151, 255.0, 0.0)


def rgb_to_hex(rgb: RGB) -> str:
    r, g, b = (min(max(int(math.floor(c)), 0), 255) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def building_color_hex(value: float) -> str:
    return rgb_to_hex(building_color(value))

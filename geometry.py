# geometry.py
# Small point / color helpers shared by the field, the stepper and the renderer.

from __future__ import annotations
import math
import string

FALLBACK_RGB = (255, 255, 255)


def _clamp(x, a, b):
    return a if x < a else (b if x > b else x)


def dist(a, b) -> float:
    dx = float(a[0] - b[0])
    dy = float(a[1] - b[1])
    return math.hypot(dx, dy)


def normalize_landmark(lm, width: float, height: float) -> tuple[float, float]:
    """Mirrored camera space [0,1] -> canvas pixels (x is flipped like a mirror)."""
    return ((1.0 - float(lm[0])) * width, float(lm[1]) * height)


def hex_to_rgba(hex_color, alpha: float) -> tuple[int, int, int, float]:
    """
    '#RRGGBB' -> (r, g, b, alpha).

    Channels come from fixed two-digit slices. Anything that is not a 6-digit
    hex string falls back to FALLBACK_RGB; this never raises.
    """
    try:
        s = str(hex_color)
        if len(s) != 7 or s[0] != "#" or not all(c in string.hexdigits for c in s[1:]):
            raise ValueError(s)
        r = int(s[1:3], 16)
        g = int(s[3:5], 16)
        b = int(s[5:7], 16)
    except ValueError:
        r, g, b = FALLBACK_RGB
    return (r, g, b, float(alpha))


def rgba_to_bgr(rgba) -> tuple[float, float, float]:
    """Premultiplied BGR for drawing onto a float layer."""
    r, g, b, a = rgba
    a = _clamp(float(a), 0.0, 1.0)
    return (b * a, g * a, r * a)

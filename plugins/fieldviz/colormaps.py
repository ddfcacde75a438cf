"""
Colormaps for Field Visualization

Maps normalized values t in [0, 1] to RGB colors. A colormap is any
callable ``t -> (r, g, b)``; the renderer accepts one wherever a
layer can be recolored (contours, vector arrows, 2D wave heat map).

For per-pixel rendering a colormap is baked into a (256, 3) uint8
lookup table with ``build_lut`` and applied to whole arrays with
``apply_colormap``.
"""

import colorsys
import math

import numpy as np


def _clamp_t(t):
    if not math.isfinite(t):
        return 0.5
    return min(1.0, max(0.0, t))


def _mix(c0, c1, s):
    return tuple(int(round(a + (b - a) * s)) for a, b in zip(c0, c1))


def diverging(low, mid, high):
    """
    Build a two-sided colormap that meets at ``mid`` for t = 0.5.

    Args:
        low: RGB color at t = 0
        mid: RGB color at t = 0.5 (shared by both halves)
        high: RGB color at t = 1

    Returns:
        Callable mapping t in [0, 1] to an (r, g, b) tuple
    """
    def colormap(t):
        t = _clamp_t(t)
        if t < 0.5:
            return _mix(low, mid, t * 2.0)
        return _mix(mid, high, (t - 0.5) * 2.0)

    colormap.low = tuple(low)
    colormap.mid = tuple(mid)
    colormap.high = tuple(high)
    return colormap


# Blue (negative) -> dark neutral (zero) -> green (positive)
scientific = diverging((10, 10, 192), (30, 30, 30), (10, 175, 20))


def from_stops(stops):
    """
    Build a colormap by interpolating between color stops.

    Args:
        stops: List of (position, (r, g, b)) where position is [0, 1]
    """
    positions = [s[0] for s in stops]
    colors = [s[1] for s in stops]

    def colormap(t):
        t = _clamp_t(t)
        for j in range(len(positions) - 1):
            if positions[j] <= t <= positions[j + 1]:
                span = positions[j + 1] - positions[j]
                frac = 0 if span == 0 else (t - positions[j]) / span
                return _mix(colors[j], colors[j + 1], frac)
        return tuple(colors[-1])

    return colormap


def contour_color(t, alpha=0.4):
    """Hue ramp used for iso-contours: green for high levels, blue for low.

    Equivalent to hsla(120 + (1 - t) * 100, 50%, 40%, alpha).
    """
    t = _clamp_t(t)
    hue = (120.0 + (1.0 - t) * 100.0) / 360.0
    r, g, b = colorsys.hls_to_rgb(hue, 0.40, 0.50)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)),
            int(round(alpha * 255)))


# --- Colormap Definitions ---

thermal = from_stops([
    (0.00, (0, 0, 20)),
    (0.20, (0, 0, 120)),
    (0.40, (30, 80, 180)),
    (0.50, (60, 180, 80)),
    (0.60, (200, 200, 30)),
    (0.80, (240, 80, 0)),
    (1.00, (255, 255, 255)),
])

ocean = from_stops([
    (0.00, (0, 2, 15)),
    (0.25, (5, 20, 80)),
    (0.50, (10, 80, 160)),
    (0.75, (40, 180, 220)),
    (1.00, (200, 250, 255)),
])

# Orange (positive charge) / cobalt (negative charge) around the background
polarity = diverging((21, 101, 192), (10, 10, 15), (230, 81, 0))


# Registry of all colormaps
COLORMAPS = {
    "scientific": scientific,
    "thermal": thermal,
    "ocean": ocean,
    "polarity": polarity,
}

COLORMAP_ORDER = list(COLORMAPS.keys())


def get_colormap(name):
    """Get a colormap callable by name."""
    return COLORMAPS[name]


def build_lut(colormap, n=256):
    """Sample a colormap callable into an (n, 3) uint8 lookup table."""
    lut = np.zeros((n, 3), dtype=np.uint8)
    for i in range(n):
        lut[i] = colormap(i / (n - 1))[:3]
    return lut


def apply_colormap(field, lut):
    """
    Apply a colormap LUT to a 2D float field.

    Args:
        field: 2D numpy array with values in [0, 1]
        lut: (256, 3) uint8 colormap lookup table

    Returns:
        (H, W, 3) uint8 RGB image
    """
    field = np.nan_to_num(field, nan=0.5, posinf=1.0, neginf=0.0)
    indices = (np.clip(field, 0, 1) * (len(lut) - 1)).astype(np.intp)
    return lut[indices]

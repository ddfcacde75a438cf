"""
Iso-Contour Extraction (Marching Squares)

Turns a rectangular grid of scalar samples into line segments at a
fixed number of evenly spaced iso-levels. Segments are emitted per
cell and are not joined into polylines; each can be drawn on its own.

Corner bit order (screen coordinates, y pointing down):

    bit 0 (1): v00 at (x,     y)
    bit 1 (2): v10 at (x + s, y)
    bit 2 (4): v11 at (x + s, y + s)
    bit 3 (8): v01 at (x,     y + s)

With y pointing up this reads bottom-left, bottom-right, top-right,
top-left. A bit is set when the corner value is >= the level.

The 16-entry segment table is fixed. The two saddle cases (5 and 10)
always split along the same diagonal; they are never resolved from the
cell-center value.
"""

import math

import numpy as np

from .colormaps import contour_color


VALUE_LIMIT = 1e6
DEFAULT_LEVELS = 12

# Edge crossing points as a function of the cell origin (x, y), cell
# size s and the four interpolation fractions along each edge.
_EDGE_POINTS = {
    "top": lambda x, y, s, f: (x + f["top"] * s, y),
    "right": lambda x, y, s, f: (x + s, y + f["right"] * s),
    "bottom": lambda x, y, s, f: (x + f["bottom"] * s, y + s),
    "left": lambda x, y, s, f: (x, y + f["left"] * s),
}

# Topology index -> segments, each segment an (edge, edge) pair
SEGMENT_TABLE = (
    (),                                          # 0: all below
    (("left", "top"),),                          # 1
    (("top", "right"),),                         # 2
    (("left", "right"),),                        # 3
    (("right", "bottom"),),                      # 4
    (("left", "top"), ("right", "bottom")),      # 5: saddle
    (("top", "bottom"),),                        # 6
    (("left", "bottom"),),                       # 7
    (("bottom", "left"),),                       # 8
    (("bottom", "top"),),                        # 9
    (("top", "right"), ("bottom", "left")),      # 10: saddle
    (("bottom", "right"),),                      # 11
    (("right", "left"),),                        # 12
    (("right", "top"),),                         # 13
    (("top", "left"),),                          # 14
    (),                                          # 15: all above
)


class ScalarGrid:
    """Scalar samples V[row][col] taken every ``resolution`` pixels.

    Samples are sanitized on construction: non-finite values become 0
    and everything is clamped to [-1e6, 1e6].
    """

    def __init__(self, values, resolution=8, width=None, height=None):
        try:
            values = np.asarray(values, dtype=np.float64)
        except (TypeError, ValueError):
            # Ragged rows or non-numeric samples: nothing to contour
            values = np.zeros((0, 0), dtype=np.float64)
        if values.ndim != 2:
            values = np.zeros((0, 0), dtype=np.float64)
        values = np.where(np.isfinite(values), values, 0.0)
        self.values = np.clip(values, -VALUE_LIMIT, VALUE_LIMIT)
        self.resolution = resolution if resolution > 0 else 1
        rows, cols = self.values.shape
        self.width = width if width is not None else cols * self.resolution
        self.height = height if height is not None else rows * self.resolution

    @classmethod
    def from_sampler(cls, sampler, width, height, resolution=8):
        """Sample ``sampler(x, y)`` on a grid covering a width x height surface.

        rows = ceil(height / resolution), cols = ceil(width / resolution);
        sample (row j, col i) is taken at pixel (i * resolution, j * resolution).
        """
        if resolution <= 0:
            resolution = 1
        rows = max(0, math.ceil(height / resolution))
        cols = max(0, math.ceil(width / resolution))
        values = np.zeros((rows, cols), dtype=np.float64)
        for j in range(rows):
            y = j * resolution
            for i in range(cols):
                values[j, i] = sampler(i * resolution, y)
        return cls(values, resolution=resolution, width=width, height=height)

    @classmethod
    def from_array(cls, field, resolution=8):
        """Wrap an already sampled (rows, cols) array, e.g. a solver's potential."""
        return cls(np.array(field, dtype=np.float64), resolution=resolution)

    @property
    def shape(self):
        return self.values.shape

    def value_range(self):
        """Return (min, max) over all samples, (0.0, 0.0) for an empty grid."""
        if self.values.size == 0:
            return 0.0, 0.0
        return float(self.values.min()), float(self.values.max())


def contour_levels(min_v, max_v, level_count=DEFAULT_LEVELS):
    """Return the level_count - 1 thresholds evenly spaced strictly inside (min_v, max_v)."""
    try:
        level_count = int(level_count)
    except (TypeError, ValueError, OverflowError):
        return []
    if max_v == min_v or level_count < 2:
        return []
    span = max_v - min_v
    return [min_v + span * i / level_count for i in range(1, level_count)]


def classify_cells(values, level):
    """Compute the 4-bit topology index of every cell for one level.

    Returns:
        (rows - 1, cols - 1) uint8 array
    """
    v00 = values[:-1, :-1]
    v10 = values[:-1, 1:]
    v01 = values[1:, :-1]
    v11 = values[1:, 1:]
    idx = (v00 >= level).astype(np.uint8)
    idx |= (v10 >= level).astype(np.uint8) << 1
    idx |= (v11 >= level).astype(np.uint8) << 2
    idx |= (v01 >= level).astype(np.uint8) << 3
    return idx


def _fraction(level, a, b):
    # A zero difference is replaced by 1: finite, if meaningless, position.
    d = b - a
    d = np.where(d == 0, 1.0, d)
    return (level - a) / d


def cell_segments(x, y, size, index, fractions):
    """Return the segments of one cell for a topology index."""
    segments = []
    for edge_a, edge_b in SEGMENT_TABLE[index]:
        p0 = _EDGE_POINTS[edge_a](x, y, size, fractions)
        p1 = _EDGE_POINTS[edge_b](x, y, size, fractions)
        if p0 != p1:
            segments.append((p0, p1))
    return segments


def compute_contours(grid, level_count=DEFAULT_LEVELS):
    """
    Extract iso-contour segments from a scalar grid.

    Args:
        grid: ScalarGrid
        level_count: Number of bands; level_count - 1 levels are produced

    Returns:
        List of (level, segments) in ascending level order, where
        segments is a list of ((x0, y0), (x1, y1)) in pixel coordinates,
        ordered by row then column. Empty for flat grids and grids with
        fewer than 2x2 samples.
    """
    values = grid.values
    rows, cols = values.shape
    if rows < 2 or cols < 2:
        return []

    min_v, max_v = grid.value_range()
    levels = contour_levels(min_v, max_v, level_count)
    if not levels:
        return []

    size = grid.resolution
    v00 = values[:-1, :-1]
    v10 = values[:-1, 1:]
    v01 = values[1:, :-1]
    v11 = values[1:, 1:]

    result = []
    for level in levels:
        idx = classify_cells(values, level)
        # np.nonzero walks row-major: rows, then columns
        js, is_ = np.nonzero((idx != 0) & (idx != 15))
        if len(js) == 0:
            result.append((level, []))
            continue

        a00 = v00[js, is_]
        a10 = v10[js, is_]
        a01 = v01[js, is_]
        a11 = v11[js, is_]
        top = _fraction(level, a00, a10).tolist()
        bottom = _fraction(level, a01, a11).tolist()
        left = _fraction(level, a00, a01).tolist()
        right = _fraction(level, a10, a11).tolist()
        cases = idx[js, is_].tolist()

        segments = []
        for k, (j, i) in enumerate(zip(js.tolist(), is_.tolist())):
            fractions = {"top": top[k], "bottom": bottom[k],
                         "left": left[k], "right": right[k]}
            segments.extend(cell_segments(i * size, j * size, size, cases[k], fractions))
        result.append((level, segments))
    return result


def level_color(level, min_v, max_v, colormap=None, alpha=0.4):
    """RGBA color for a contour level normalized over [min_v, max_v]."""
    span = max_v - min_v
    t = (level - min_v) / span if span else 0.5
    if colormap is None:
        return contour_color(t, alpha)
    r, g, b = colormap(t)[:3]
    return (r, g, b, int(round(alpha * 255)))

#!/usr/bin/env python3
"""
Test script for iso-contour extraction.

Verifies:
1. ScalarGrid sanitizing and sampling dimensions
2. Level generation and degenerate grids
3. Fixed marching-squares table (empty cases, saddles)
4. No zero-length segments, deterministic output
5. Single point charge gives nested, monotonically ordered contours
"""

import math

import numpy as np

from fieldviz.contours import (
    SEGMENT_TABLE, ScalarGrid, cell_segments, classify_cells,
    compute_contours, contour_levels, level_color,
)
from fieldviz.sources import ChargeSystem


def test_grid_sanitizes_samples():
    """Non-finite samples become 0, everything clamps to +/-1e6."""
    print("Testing ScalarGrid sanitizing...")
    grid = ScalarGrid([[np.nan, np.inf], [1e9, -1e9]], resolution=4)
    assert grid.values.tolist() == [[0.0, 0.0], [1e6, -1e6]], f"Bad clamp: {grid.values}"
    assert grid.value_range() == (-1e6, 1e6)

    empty = ScalarGrid([1.0, 2.0, 3.0])
    assert empty.shape == (0, 0), "1D input should become an empty grid"
    assert empty.value_range() == (0.0, 0.0)
    print("  ✓ ScalarGrid sanitizing working correctly")


def test_from_sampler_dimensions():
    """rows = ceil(height / res), cols = ceil(width / res)."""
    print("Testing ScalarGrid.from_sampler...")
    seen = []

    def sampler(x, y):
        seen.append((x, y))
        return x + 1000 * y

    grid = ScalarGrid.from_sampler(sampler, width=100, height=50, resolution=8)
    assert grid.shape == (7, 13), f"Wrong shape: {grid.shape}"
    assert grid.values[2, 3] == 3 * 8 + 1000 * 2 * 8, "Sample (row 2, col 3) taken at wrong pixel"
    assert seen[0] == (0, 0) and seen[1] == (8, 0), "Sampling should walk rows, then columns"

    field = np.arange(12.0).reshape(3, 4)
    wrapped = ScalarGrid.from_array(field, resolution=5)
    field[0, 0] = 99.0
    assert wrapped.values[0, 0] == 0.0, "from_array should copy the input"
    assert (wrapped.width, wrapped.height) == (20, 15)
    print("  ✓ from_sampler working correctly")


def test_levels_strictly_inside_range():
    print("Testing contour_levels...")
    levels = contour_levels(0.0, 12.0, 12)
    assert len(levels) == 11, f"Expected 11 levels, got {len(levels)}"
    assert levels == sorted(levels), "Levels should ascend"
    assert all(0.0 < lv < 12.0 for lv in levels), "Levels must be strictly inside (min, max)"
    assert math.isclose(levels[0], 1.0) and math.isclose(levels[-1], 11.0)
    assert contour_levels(3.0, 3.0, 12) == [], "Flat range yields no levels"
    print("  ✓ contour_levels working correctly")


def test_flat_grid_has_no_contours():
    print("Testing flat grid...")
    grid = ScalarGrid(np.full((10, 10), 42.0))
    for count in (0, 1, 2, 12, 50):
        assert compute_contours(grid, count) == [], f"Flat grid produced contours for {count}"
    print("  ✓ Flat grid working correctly")


def test_small_grids_have_no_contours():
    print("Testing grids smaller than 2x2...")
    assert compute_contours(ScalarGrid(np.zeros((0, 0)))) == []
    assert compute_contours(ScalarGrid([[0.0, 1.0, 2.0]])) == []
    assert compute_contours(ScalarGrid([[0.0], [5.0]])) == []
    print("  ✓ Small grids working correctly")


def test_malformed_inputs_give_empty_results():
    print("Testing malformed inputs...")
    ragged = ScalarGrid([[1.0, 2.0], [3.0]])
    assert ragged.shape == (0, 0), f"Ragged rows should give an empty grid, got {ragged.shape}"
    assert compute_contours(ragged) == []

    junk = ScalarGrid([["a", "b"], ["c", "d"]])
    assert compute_contours(junk) == []

    grid = ScalarGrid([[0.0, 1.0], [2.0, 3.0]])
    assert len(compute_contours(grid, 12.0)) == 11, "Float level counts are truncated to int"
    assert len(compute_contours(grid, 4.7)) == 3
    assert compute_contours(grid, float("nan")) == []
    assert compute_contours(grid, None) == []
    print("  ✓ Malformed inputs handled correctly")


def test_empty_table_cases():
    """Index 0 and 15 never produce segments."""
    print("Testing table cases 0 and 15...")
    assert SEGMENT_TABLE[0] == () and SEGMENT_TABLE[15] == ()
    assert len(SEGMENT_TABLE) == 16
    fractions = {"top": 0.3, "bottom": 0.6, "left": 0.2, "right": 0.9}
    assert cell_segments(0, 0, 8, 0, fractions) == []
    assert cell_segments(0, 0, 8, 15, fractions) == []

    values = np.array([[1.0, 2.0], [3.0, 4.0]])
    assert classify_cells(values, 0.5)[0, 0] == 15, "All corners above -> 15"
    assert classify_cells(values, 9.0)[0, 0] == 0, "All corners below -> 0"
    for index in range(1, 15):
        expected = 2 if index in (5, 10) else 1
        assert len(SEGMENT_TABLE[index]) == expected, f"Case {index} segment count"
    print("  ✓ Empty cases working correctly")


def test_corner_bit_order():
    print("Testing corner bit order...")
    # v00 top-left, v10 top-right, v01 bottom-left, v11 bottom-right
    assert classify_cells(np.array([[1.0, 0.0], [0.0, 0.0]]), 0.5)[0, 0] == 1
    assert classify_cells(np.array([[0.0, 1.0], [0.0, 0.0]]), 0.5)[0, 0] == 2
    assert classify_cells(np.array([[0.0, 0.0], [0.0, 1.0]]), 0.5)[0, 0] == 4
    assert classify_cells(np.array([[0.0, 0.0], [1.0, 0.0]]), 0.5)[0, 0] == 8
    print("  ✓ Corner bit order working correctly")


def test_saddles_use_fixed_diagonal():
    print("Testing saddle cases...")
    # Case 5: v00 and v11 above
    grid = ScalarGrid([[1.0, 0.0], [0.0, 1.0]], resolution=8)
    contours = compute_contours(grid, 2)
    assert len(contours) == 1
    level, segments = contours[0]
    assert level == 0.5
    assert segments == [((0.0, 4.0), (4.0, 0.0)), ((8.0, 4.0), (4.0, 8.0))], f"Case 5: {segments}"

    # Case 10: v10 and v01 above
    grid = ScalarGrid([[0.0, 1.0], [1.0, 0.0]], resolution=8)
    _, segments = compute_contours(grid, 2)[0]
    assert segments == [((4.0, 0.0), (8.0, 4.0)), ((4.0, 8.0), (0.0, 4.0))], f"Case 10: {segments}"
    print("  ✓ Saddle cases working correctly")


def test_no_zero_length_segments():
    print("Testing for degenerate segments...")
    rng = np.random.default_rng(7)
    grids = [
        ScalarGrid(rng.normal(size=(30, 40)), resolution=5),
        # Integer ramp: samples land exactly on levels
        ScalarGrid(np.add.outer(np.arange(13.0), np.zeros(6)), resolution=4),
    ]
    for grid in grids:
        for _, segments in compute_contours(grid, 12):
            for p0, p1 in segments:
                assert p0 != p1, f"Zero-length segment at {p0}"
    print("  ✓ No degenerate segments")


def test_segments_stay_inside_grid_and_are_deterministic():
    print("Testing segment bounds and ordering...")
    rng = np.random.default_rng(3)
    grid = ScalarGrid(rng.random((12, 9)), resolution=10)
    first = compute_contours(grid, 8)
    second = compute_contours(grid, 8)
    assert first == second, "Output should be deterministic"
    assert [lv for lv, _ in first] == sorted(lv for lv, _ in first)
    max_x, max_y = (9 - 1) * 10, (12 - 1) * 10
    for _, segments in first:
        for p in (pt for seg in segments for pt in seg):
            assert -1e-9 <= p[0] <= max_x + 1e-9 and -1e-9 <= p[1] <= max_y + 1e-9, f"{p} out of grid"
    print("  ✓ Segment bounds working correctly")


def test_level_color():
    print("Testing level colors...")
    low = level_color(0.0, 0.0, 10.0)
    high = level_color(10.0, 0.0, 10.0)
    assert low[3] == high[3] == 102, "Contours should be 40% opaque"
    assert low[2] > low[1], f"Low levels should lean blue: {low}"
    assert high[1] > high[2], f"High levels should lean green: {high}"
    custom = level_color(5.0, 0.0, 10.0, colormap=lambda t: (int(t * 200), 0, 0))
    assert custom == (100, 0, 0, 102), f"Override colormap ignored: {custom}"
    print("  ✓ Level colors working correctly")


def test_single_charge_contours_are_nested():
    """Higher potential levels sit closer to a lone positive charge."""
    print("Testing single-charge contours...")
    cs = ChargeSystem()
    cs.add(100, 100, 3e-9)
    grid = ScalarGrid.from_sampler(cs.potential_at, 200, 200, resolution=8)
    contours = compute_contours(grid, 12)
    assert len(contours) == 11, f"Expected 11 levels, got {len(contours)}"

    mean_radii = []
    for level, segments in contours:
        assert segments, f"Level {level:.1f} should have segments"
        radii = [math.hypot((p0[0] + p1[0]) / 2 - 100, (p0[1] + p1[1]) / 2 - 100)
                 for p0, p1 in segments]
        mean_radii.append(sum(radii) / len(radii))

    for outer, inner in zip(mean_radii, mean_radii[1:]):
        assert inner < outer, f"Contour radii not monotonic: {mean_radii}"
    print("  ✓ Single-charge contours working correctly")


if __name__ == "__main__":
    print("\n=== Testing Contour Extraction ===\n")

    test_grid_sanitizes_samples()
    test_from_sampler_dimensions()
    test_levels_strictly_inside_range()
    test_flat_grid_has_no_contours()
    test_small_grids_have_no_contours()
    test_malformed_inputs_give_empty_results()
    test_empty_table_cases()
    test_corner_bit_order()
    test_saddles_use_fixed_diagonal()
    test_no_zero_length_segments()
    test_segments_stay_inside_grid_and_are_deterministic()
    test_level_color()
    test_single_charge_contours_are_nested()

    print("\n✓ All tests passed!\n")

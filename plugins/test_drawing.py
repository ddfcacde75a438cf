#!/usr/bin/env python3
"""
Test script for the drawing primitives.

Runs headless on the SDL dummy video driver.

Verifies:
1. Arrow length is capped at max_length
2. Charge glyph radius stays within [10, 20]
3. Particle trails brighten and thicken toward the head
4. Material shading only where epsilon_r > 1.01
5. Energy graph is scaled against the window maximum
6. Non-finite positions draw nothing instead of failing
7. Colormap LUT cache stays bounded
"""

import math
import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import numpy as np

from fieldviz import drawing
from fieldviz.drawing import (
    arrow_tip, charge_radius, draw_arrow, draw_energy_graph, draw_wave_1d,
    energy_points, material_alpha, trail_style,
)
from fieldviz.palette import COLORS
from fieldviz.renderer import FieldRenderer
from fieldviz.sources import ChargeSystem, PointCharge, Trajectory, WaveStrip
from fieldviz.surface import RenderSurface


BLACK = (0, 0, 0)


def _blank(width=100, height=100):
    target = RenderSurface(width, height)
    target.surface.fill(BLACK)
    return target


def _pixel(target, x, y):
    return tuple(target.surface.get_at((x, y)))[:3]


def test_arrow_length_is_capped():
    print("Testing arrow length cap...")
    for dx, expected in [(1000, (40.0, 50.0)), (1e12, (40.0, 50.0)), (5, (15.0, 50.0))]:
        tip = arrow_tip(10, 50, dx, 0, max_length=30)
        assert math.isclose(tip[0], expected[0]) and math.isclose(tip[1], expected[1]), \
            f"|d|={dx}: tip {tip}, expected {expected}"
    tip = arrow_tip(0, 0, 3, 4, max_length=30, scale=2.0)
    assert math.isclose(tip[0], 6.0) and math.isclose(tip[1], 8.0), f"Scaled tip {tip}"
    assert arrow_tip(0, 0, 0.5, 0) is None, "Sub-pixel arrows are skipped"
    assert arrow_tip(0, 0, float("nan"), 1) is None
    assert arrow_tip(float("inf"), 0, 10, 0) is None

    target = _blank()
    red = (255, 0, 0)
    draw_arrow(target, 10, 50, 5000, 0, red, max_length=30)
    pixels = target.to_array()
    red_x = np.nonzero(np.all(pixels[:, :, :] == red, axis=2))[1]
    assert red_x.size > 0, "Arrow should be drawn"
    assert red_x.max() <= 41, f"Arrow reached x={red_x.max()}, past its 30 px cap"
    print("  ✓ Arrow cap working correctly")


def test_charge_radius_bounds():
    print("Testing charge radius...")
    assert charge_radius(0.0) == 10
    assert charge_radius(1e-9) == 10, "Small charges use the minimum radius"
    assert math.isclose(charge_radius(3e-9), 12.0)
    assert math.isclose(charge_radius(-3e-9), 12.0), "Radius follows |q|"
    assert charge_radius(1e-8) == 20
    assert charge_radius(1.0) == 20, "Large charges use the maximum radius"
    for q in np.linspace(-1e-7, 1e-7, 41):
        assert 10 <= charge_radius(q) <= 20, f"Radius out of range for q={q}"
    print("  ✓ Charge radius working correctly")


def test_trail_grows_toward_head():
    print("Testing trail styling...")
    n = 40
    styles = [trail_style(i, n, trail_width=4) for i in range(1, n)]
    alphas = [a for a, _ in styles]
    widths = [w for _, w in styles]
    assert all(a1 > a0 for a0, a1 in zip(alphas, alphas[1:])), "Opacity should rise with recency"
    assert all(w1 >= w0 for w0, w1 in zip(widths, widths[1:])), "Width should not shrink"
    assert widths[-1] > widths[0], "Head segments should be thicker than tail segments"
    assert alphas[-1] <= 0.6
    print("  ✓ Trail styling working correctly")


def test_material_alpha():
    print("Testing material shading opacity...")
    assert material_alpha(1.0) is None
    assert material_alpha(1.01) is None, "Threshold is exclusive"
    assert material_alpha(float("nan")) is None
    assert math.isclose(material_alpha(4.0), 0.2)
    assert material_alpha(10.0) == 0.25, "Opacity caps at 0.25"
    print("  ✓ Material opacity working correctly")


def test_slab_shading_pixels():
    print("Testing slab shading on the surface...")
    wave = WaveStrip(num_cells=100, source_position=10)
    wave.set_slab(50, 70, 4.0)
    wave.set_slab(20, 30, 1.005)

    target = _blank()
    draw_wave_1d(target, wave, y_offset=50, height=60)

    shaded = _pixel(target, 60, 25)
    assert shaded != BLACK, "Cells with epsilon_r = 4 should be shaded"
    assert abs(shaded[2] - round(COLORS["cobalt_blue"][2] * 0.2)) <= 3, f"Shade {shaded}"
    assert _pixel(target, 25, 25) == BLACK, "epsilon_r = 1.005 should not be shaded"
    assert _pixel(target, 85, 25) == BLACK, "Vacuum cells should not be shaded"
    print("  ✓ Slab shading working correctly")


def test_energy_graph_scaling():
    print("Testing energy graph scaling...")
    points = energy_points([1, 2, 3, 4, 2], 10, 10, 80, 60)
    peak_x, peak_y = points[3]
    assert math.isclose(peak_x, 70.0) and math.isclose(peak_y, 10 + 0.15 * 60), \
        f"Peak at {points[3]}, expected (70, 19)"
    assert math.isclose(points[0][1], 10 + 60 - 0.25 * 51)
    scaled = energy_points([100, 200, 300, 400, 200], 10, 10, 80, 60)
    assert all(math.isclose(a[1], b[1]) for a, b in zip(points, scaled)), \
        "Only the ratio to the window maximum matters"

    target = _blank(120, 100)
    draw_energy_graph(target, [1, 2, 3, 4, 2], 10, 10, 80, 60)
    column = target.to_array()[:, 70]
    orange_y = np.nonzero(np.all(column == COLORS["cadmium_orange"], axis=1))[0]
    assert orange_y.size > 0, "Graph line should cross x = 70"
    assert 17 <= orange_y.min() <= 21, f"Peak drawn at y={orange_y.min()}, expected ~19"
    print("  ✓ Energy graph scaling working correctly")


def test_non_finite_positions_draw_nothing():
    print("Testing non-finite positions...")
    renderer = FieldRenderer(160, 120, rng=0)
    renderer.clear()

    charges = ChargeSystem([PointCharge(float("nan"), 10, 1e-9),
                            PointCharge(40, float("inf"), -1e-9),
                            PointCharge(80, 60, 1e-9)])
    renderer.draw_charges(charges)

    particle = Trajectory()
    for _ in range(10):
        particle.update(0.05)
    particle.trajectory.append((float("nan"), 0.0))
    particle.x = float("nan")
    renderer.draw_particle(particle)

    strip = WaveStrip(num_cells=50, source_position=10)
    strip.update(0.5)
    strip.source_position = float("nan")
    renderer.draw_wave_1d(strip)

    drawing.draw_indicator_glow(renderer.target, float("inf"), 10, 20, COLORS["wave"])
    drawing.draw_indicator_glow(renderer.target, 10, 10, float("nan"), COLORS["wave"])
    assert renderer.surface.get_size() == (160, 120)
    print("  ✓ Non-finite positions handled correctly")


def test_lut_cache_is_bounded():
    print("Testing colormap LUT cache...")
    drawing._lut_for.cache_clear()
    target = _blank(40, 30)
    ez = np.ones((8, 6))
    for k in range(40):
        drawing.draw_wave_2d(target, ez, colormap=lambda t, k=k: (k, k, k))
    assert drawing._lut_for.cache_info().currsize <= 16, "Fresh colormaps must not pile up"

    cmap = lambda t: (0, 0, 0)
    drawing.draw_wave_2d(target, ez, colormap=cmap)
    hits = drawing._lut_for.cache_info().hits
    drawing.draw_wave_2d(target, ez, colormap=cmap)
    assert drawing._lut_for.cache_info().hits == hits + 1, "Reused colormap should hit the cache"
    print("  ✓ LUT cache working correctly")


if __name__ == "__main__":
    print("\n=== Testing Drawing Primitives ===\n")

    test_arrow_length_is_capped()
    test_charge_radius_bounds()
    test_trail_grows_toward_head()
    test_material_alpha()
    test_slab_shading_pixels()
    test_energy_graph_scaling()
    test_non_finite_positions_draw_nothing()
    test_lut_cache_is_bounded()

    print("\n✓ All tests passed!\n")

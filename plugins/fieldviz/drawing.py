"""
Drawing Primitives for the Field Renderer

Stateless routines that paint one visual element onto a RenderSurface:
arrows and vector fields, charge glyphs, iso-contours, flow dashes,
particles with trails, wave strips, the 2D wave heat map, the energy
graph and the small field-indicator dials.

Translucent elements are drawn into the surface's per-pixel-alpha
scratch layer and composited in one blit, the same way the viewer HUD
is drawn over the canvas.
"""

import functools
import math

import numpy as np
import pygame
from scipy.ndimage import gaussian_filter, zoom

from .colormaps import apply_colormap, build_lut, scientific
from .contours import level_color
from .palette import COLORS, blend, with_alpha


ARROW_HEAD = 5
CHARGE_RADIUS_MIN = 10
CHARGE_RADIUS_MAX = 20
CHARGE_RADIUS_SCALE = 4e9   # radius per coulomb (4 px per nC)

_fonts = {}
_glow_sprites = {}


def _font(size, bold=False):
    key = (int(size), bold)
    if key not in _fonts:
        if not pygame.font.get_init():
            pygame.font.init()
        _fonts[key] = pygame.font.SysFont("menlo", max(6, int(size)), bold=bold)
    return _fonts[key]


def _width(w):
    return max(1, int(round(w)))


def _finite(*values):
    return all(math.isfinite(v) for v in values)


def draw_text(target, text, pos, color, size=11, bold=False, align="center"):
    """Blit a text label; ``align`` is "center", "left" or "right" about pos."""
    surf = _font(size, bold).render(text, True, color)
    x, y = pos
    if align == "center":
        x -= surf.get_width() / 2
    elif align == "right":
        x -= surf.get_width()
    target.surface.blit(surf, (int(x), int(y - surf.get_height() / 2)))


def _dashed_hline(surface, color, x0, x1, y, dash=4, gap=4):
    x = x0
    while x < x1:
        pygame.draw.line(surface, color, (x, y), (min(x + dash, x1), y))
        x += dash + gap


# ── Glow ─────────────────────────────────────────────────────────────────

def _glow_sprite(radius, color, intensity):
    """Radial falloff sprite, premultiplied for additive blending.

    Opacity runs 1 -> 0x44/255 -> 0 at r = 0, 0.5, 1 (in units of the
    radius) and is scaled by intensity * 0.3.
    """
    key = (radius, tuple(color[:3]), round(intensity, 3))
    sprite = _glow_sprites.get(key)
    if sprite is not None:
        return sprite

    size = 2 * radius
    c = np.arange(size, dtype=np.float32) + 0.5 - radius
    r = np.sqrt(c[:, None] ** 2 + c[None, :] ** 2) / radius
    alpha = np.interp(r, [0.0, 0.5, 1.0], [1.0, 0x44 / 255.0, 0.0]).astype(np.float32)
    alpha = gaussian_filter(alpha, max(0.5, radius * 0.05))
    alpha *= intensity * 0.3
    rgb = alpha[:, :, None] * np.asarray(color[:3], dtype=np.float32)
    sprite = pygame.surfarray.make_surface(np.clip(rgb, 0, 255).astype(np.uint8))
    _glow_sprites[key] = sprite
    return sprite


def draw_indicator_glow(target, x, y, radius, color, intensity=1.0):
    """Soft LED-style glow, added onto whatever is underneath."""
    if not _finite(x, y, radius):
        return
    radius = int(round(radius))
    if radius < 1 or intensity <= 0:
        return
    sprite = _glow_sprite(radius, color, intensity)
    target.surface.blit(sprite, (int(x) - radius, int(y) - radius),
                        special_flags=pygame.BLEND_RGB_ADD)


# ── Arrows and vector fields ─────────────────────────────────────────────

def arrow_tip(x, y, dx, dy, max_length=30, scale=1.0):
    """End point of an arrow from (x, y) along (dx, dy), or None if too short.

    The drawn length is min(max_length, |d| * scale), so huge magnitudes
    never produce arrows longer than max_length.
    """
    length = math.hypot(dx, dy)
    if length < 1 or not _finite(length, x, y):
        return None
    k = min(max_length, length * scale) / length
    return x + dx * k, y + dy * k


def draw_arrow(target, x, y, dx, dy, color=None, max_length=30, scale=1.0):
    """Line with a filled head; drawn length is min(max_length, |d| * scale)."""
    color = color or COLORS["vector_field"]
    tip = arrow_tip(x, y, dx, dy, max_length, scale)
    if tip is None:
        return

    end_x, end_y = tip
    angle = math.atan2(dy, dx)

    pygame.draw.line(target.surface, color, (x, y), (end_x, end_y), 2)
    head = [
        (end_x, end_y),
        (end_x - ARROW_HEAD * math.cos(angle - math.pi / 6),
         end_y - ARROW_HEAD * math.sin(angle - math.pi / 6)),
        (end_x - ARROW_HEAD * math.cos(angle + math.pi / 6),
         end_y - ARROW_HEAD * math.sin(angle + math.pi / 6)),
    ]
    pygame.draw.polygon(target.surface, color, head)


def draw_vector_field(target, vectors, colormap=None, max_length=30, scale=1.0):
    """Arrow per sample; with a colormap, color follows log10(|E| + 1)."""
    if not vectors:
        return
    mags = [getattr(v, "magnitude", None) or math.hypot(v.ex, v.ey) for v in vectors]
    finite = [m for m in mags if math.isfinite(m)]
    max_mag = max(finite + [1e-10])
    denom = math.log10(max_mag + 1) or 1.0

    for v, mag in zip(vectors, mags):
        color = COLORS["vector_field"]
        if colormap is not None and math.isfinite(mag):
            color = colormap(min(1.0, math.log10(mag + 1) / denom))[:3]
        draw_arrow(target, v.x, v.y, v.ex, v.ey, color, max_length, scale)


# ── Charges ──────────────────────────────────────────────────────────────

def charge_radius(charge):
    return min(CHARGE_RADIUS_MAX,
               max(CHARGE_RADIUS_MIN, abs(charge) * CHARGE_RADIUS_SCALE))


def draw_charge(target, x, y, charge, radius=16):
    """Instrument-style charge glyph colored by sign."""
    if not _finite(x, y, radius):
        return
    positive = charge >= 0
    color = COLORS["positive"] if positive else COLORS["negative"]
    surface = target.surface
    r = int(round(radius))

    draw_indicator_glow(target, x, y, r * 3, color, 0.5)

    layer = target.layer()
    pygame.draw.circle(layer, with_alpha(color, 0x40 / 255), (x, y), r + 4, 1)
    target.composite(layer)

    # Bevelled body: dark at the rims, lighter across the middle
    dark = COLORS["surface_dark"]
    for dy in range(-r, r + 1):
        half = math.sqrt(max(0, r * r - dy * dy))
        shade = blend(dark, COLORS["bevel"], 1.0 - abs(dy) / max(r, 1))
        pygame.draw.line(surface, shade, (x - half, y + dy), (x + half, y + dy))
    pygame.draw.circle(surface, color, (x, y), r, 2)

    # LED dot
    pygame.draw.circle(surface, color, (x, y - r + 4), 2)
    draw_text(target, "+" if positive else "−", (x, y + 1), color,
              size=r * 0.9, bold=True)


def draw_charge_system(target, charge_system):
    for c in getattr(charge_system, "charges", ()):
        draw_charge(target, c.x, c.y, c.charge, charge_radius(c.charge))


# ── Contours ─────────────────────────────────────────────────────────────

def draw_contours(target, contours, min_v, max_v, colormap=None):
    """Stroke every segment of every level with its translucent level color."""
    if not contours:
        return
    layer = target.layer()
    for level, segments in contours:
        color = level_color(level, min_v, max_v, colormap)
        for p0, p1 in segments:
            pygame.draw.line(layer, color, p0, p1, 1)
    target.composite(layer)


# ── Flow ─────────────────────────────────────────────────────────────────

def polarity_color(from_positive):
    return COLORS["field_line_pos"] if from_positive else COLORS["field_line_neg"]


def draw_flow_lines(target, field_lines, marks, dash_length=6):
    """Faint static paths, then one short dash per flow mark."""
    layer = target.layer()
    drew_path = False
    for line in field_lines or ():
        points = line.points
        if len(points) < 2:
            continue
        color = with_alpha(polarity_color(line.from_positive), 0x15 / 255)
        pygame.draw.lines(layer, color, False, points, 1)
        drew_path = True
    if drew_path:
        target.composite(layer)

    for mark in marks:
        p0, p1 = mark.dash(dash_length)
        pygame.draw.line(target.surface, polarity_color(mark.from_positive), p0, p1, 2)


# ── Particle ─────────────────────────────────────────────────────────────

def to_screen(target, x, y, scale=100):
    """World meters (y up, origin at center) to surface pixels."""
    return target.width / 2 + x * scale, target.height / 2 - y * scale


def trail_style(i, n, trail_width=2):
    """(opacity, line width) of trail segment i of n; both grow toward the head."""
    recency = i / n
    return recency * 0.6, _width(trail_width * recency + 0.5)


def draw_particle(target, particle, scale=100, radius=10, trail_width=2):
    """Particle glyph with a trail that brightens and thickens toward the head."""
    green = COLORS["phosphor_green"]
    trail = list(getattr(particle, "trajectory", ()))
    n = len(trail)
    if n > 1:
        layer = target.layer()
        for i in range(1, n):
            p0 = to_screen(target, trail[i - 1][0], trail[i - 1][1], scale)
            p1 = to_screen(target, trail[i][0], trail[i][1], scale)
            if not _finite(*p0, *p1):
                continue
            alpha, width = trail_style(i, n, trail_width)
            pygame.draw.line(layer, with_alpha(green, alpha), p0, p1, width)
        target.composite(layer)

    x, y = to_screen(target, particle.x, particle.y, scale)
    if not _finite(x, y):
        return
    draw_indicator_glow(target, x, y, radius * 3, green, 0.5)
    pygame.draw.circle(target.surface, COLORS["surface_dark"], (x, y), radius)
    pygame.draw.circle(target.surface, green, (x, y), radius, 2)
    pygame.draw.circle(target.surface, COLORS["phosphor_green_bright"], (x, y), 3)


# ── Waves ────────────────────────────────────────────────────────────────

def material_alpha(epsilon):
    """Shading opacity for a cell, or None where epsilon_r <= 1.01."""
    if not math.isfinite(epsilon) or epsilon <= 1.01:
        return None
    return min(0.25, (epsilon - 1) / 15)


def draw_wave_1d(target, wave, y_offset, height, show_e=True, show_h=True):
    """Ez and Hy curves over a strip, shading cells with epsilon_r > 1."""
    cells = int(wave.num_cells)
    if cells < 1:
        return
    ez, hy = wave.normalized_fields()
    ez = np.nan_to_num(np.asarray(ez, dtype=np.float64))
    hy = np.nan_to_num(np.asarray(hy, dtype=np.float64))
    n = min(cells, len(ez), len(hy))
    dx = target.width / cells
    surface = target.surface

    layer = target.layer()
    for i, eps in enumerate(wave.epsilon_r):
        alpha = material_alpha(eps)
        if alpha is not None:
            rect = pygame.Rect(int(i * dx), int(y_offset - height / 2),
                               max(1, math.ceil(dx)), int(height))
            layer.fill(with_alpha(COLORS["cobalt_blue"], alpha), rect)

    e_points = [(i * dx, y_offset - ez[i] * height * 0.4) for i in range(n)]
    if show_e and n > 1:
        fill = e_points + [(target.width, y_offset), (0, y_offset)]
        pygame.draw.polygon(layer, with_alpha(COLORS["wave"], 0x08 / 255), fill)
    target.composite(layer)

    _dashed_hline(surface, COLORS["grid_major"], 0, target.width, y_offset)

    if show_e and n > 1:
        pygame.draw.lines(surface, COLORS["wave"], False, e_points, 2)

    if show_h and n > 1:
        h_points = [(i * dx, y_offset - hy[i] * height * 0.4) for i in range(n)]
        pygame.draw.lines(surface, COLORS["wave_magnetic"], False, h_points, 1)

    # Source indicator
    sx = wave.source_position * dx
    sy = y_offset + height * 0.45
    if not _finite(sx, sy):
        return
    draw_indicator_glow(target, sx, sy, 20, COLORS["cadmium_orange"], 0.6)
    pygame.draw.circle(surface, COLORS["cadmium_orange"], (sx, sy), 6)
    draw_text(target, "SOURCE", (sx, sy + 18), COLORS["text_dim"], size=9, bold=True)


@functools.lru_cache(maxsize=16)
def _lut_for(colormap):
    return build_lut(colormap)


def draw_wave_2d(target, ez, colormap=None, smooth=False):
    """Heat map of a 2D Ez snapshot indexed ez[i][j] (i along x).

    Values map through (Ez / max|Ez| + 1) / 2. With ``smooth`` the field
    is bilinearly upsampled to the surface before coloring, otherwise
    every cell is a flat block.
    """
    field = np.nan_to_num(np.asarray(ez, dtype=np.float64))
    if field.ndim != 2 or field.size == 0 or target.width == 0 or target.height == 0:
        return
    max_e = max(float(np.max(np.abs(field))), 1e-10)
    normalized = (field / max_e + 1.0) / 2.0

    if smooth:
        nx, ny = normalized.shape
        normalized = zoom(normalized, (target.width / nx, target.height / ny), order=1)

    lut = _lut_for(colormap or scientific)
    heat = pygame.surfarray.make_surface(apply_colormap(normalized, lut))
    if heat.get_size() != target.size:
        heat = pygame.transform.scale(heat, target.size)
    target.surface.blit(heat, (0, 0))


# ── Readouts ─────────────────────────────────────────────────────────────

def _energy_value(entry):
    value = getattr(entry, "total", entry)
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    return value if math.isfinite(value) else 0.0


def energy_points(values, x, y, width, height):
    """Graph vertices; the window maximum reaches 85% of the box height."""
    max_energy = max(list(values) + [1e-30])
    dx = width / (len(values) - 1)
    return [(x + i * dx, y + height - (v / max_energy) * height * 0.85)
            for i, v in enumerate(values)]


def draw_energy_graph(target, history, x, y, width, height):
    """Scrolling line graph, each sample scaled against the window maximum."""
    surface = target.surface
    box = pygame.Rect(int(x), int(y), int(width), int(height))
    surface.fill(COLORS["surface_dark"], box)
    pygame.draw.rect(surface, COLORS["grid_major"], box, 1)

    values = [_energy_value(e) for e in history]
    if len(values) < 2:
        return

    orange = COLORS["cadmium_orange"]
    points = energy_points(values, x, y, width, height)

    layer = target.layer()
    pygame.draw.polygon(layer, with_alpha(orange, 0x15 / 255),
                        points + [(x + width, y + height), (x, y + height)])
    target.composite(layer)
    pygame.draw.lines(surface, orange, False, points, 2)
    draw_text(target, "ENERGY", (x + 8, y + 12), orange, size=9, bold=True, align="left")


def draw_magnetic_field_indicator(target, bz, x, y, size=30):
    """Dial showing Bz: a cross for into the page, a dot for out of it."""
    blue = COLORS["cobalt_blue"]
    surface = target.surface
    pygame.draw.circle(surface, COLORS["surface_dark"], (x, y), size)
    pygame.draw.circle(surface, blue, (x, y), size, 1)

    if bz > 0:
        d = size * 0.4
        pygame.draw.line(surface, blue, (x - d, y - d), (x + d, y + d), 2)
        pygame.draw.line(surface, blue, (x + d, y - d), (x - d, y + d), 2)
    elif bz < 0:
        pygame.draw.circle(surface, blue, (x, y), 5)

    draw_text(target, f"B = {abs(bz):.2f} T", (x, y + size + 18), blue, size=11, bold=True)


def draw_electric_field_indicator(target, ex, ey, x, y):
    mag = math.hypot(ex, ey)
    if mag < 1e-10 or not math.isfinite(mag):
        return
    green = COLORS["phosphor_green"]
    draw_indicator_glow(target, x, y, 35, green, 0.3)
    draw_arrow(target, x, y, ex * 25 / mag, ey * 25 / mag, green, 40)
    draw_text(target, f"E = {mag:.1e} V/m", (x, y + 40), green, size=11, bold=True)


def draw_axes(target, scale=100):
    """Center axes with ticks every half meter."""
    surface = target.surface
    cx, cy = target.width / 2, target.height / 2
    major = COLORS["grid_major"]
    pygame.draw.line(surface, major, (0, cy), (target.width, cy))
    pygame.draw.line(surface, major, (cx, 0), (cx, target.height))

    for i in range(-5, 6):
        if i == 0:
            continue
        tx = cx + i * scale * 0.5
        pygame.draw.line(surface, major, (tx, cy - 3), (tx, cy + 3))
        draw_text(target, f"{i * 0.5:.1f}", (tx, cy + 14), COLORS["text_dim"], size=9)

    draw_text(target, "x (m)", (target.width - 30, cy - 10), COLORS["phosphor_green"], size=9)
    draw_text(target, "y (m)", (cx + 20, 14), COLORS["phosphor_green"], size=9)

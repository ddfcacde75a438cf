"""
Render Surface with Parallax Grid

Owns the off-screen pygame surface the renderer draws into, tracks the
pointer position normalized to [0, 1] and repaints the background with
a two-tier grid that shifts slightly with the pointer to suggest depth.
"""

import numpy as np
import pygame

from .palette import COLORS, blend


GRID_SPACING = 50
PARALLAX_FACTOR = 0.015
MAJOR_EVERY = 5

# (base alpha, falloff with distance from center)
MINOR_FADE = (0.15, 0.7)
MAJOR_FADE = (0.25, 0.5)


def _size(width, height):
    return max(0, int(width)), max(0, int(height))


class RenderSurface:
    """Backing raster surface, pointer state and background grid."""

    def __init__(self, width, height, grid_spacing=GRID_SPACING,
                 parallax_factor=PARALLAX_FACTOR):
        self.width, self.height = _size(width, height)
        self.grid_spacing = grid_spacing
        self.parallax_factor = parallax_factor
        self.surface = pygame.Surface((self.width, self.height))
        self._layer = None

        # Pointer position for parallax, (0.5, 0.5) when off-surface
        self.mouse_x = 0.5
        self.mouse_y = 0.5

    @property
    def size(self):
        return self.width, self.height

    def resize(self, width, height):
        """Reallocate the backing surface; a no-op for unchanged dimensions."""
        width, height = _size(width, height)
        if (width, height) == (self.width, self.height):
            return
        self.width, self.height = width, height
        self.surface = pygame.Surface((width, height))
        self._layer = None

    # ── Pointer ──────────────────────────────────────────────────────────

    def set_pointer(self, px, py):
        """Record a pointer position given in surface pixels."""
        if self.width <= 0 or self.height <= 0:
            self.pointer_left()
            return
        self.mouse_x = min(1.0, max(0.0, px / self.width))
        self.mouse_y = min(1.0, max(0.0, py / self.height))

    def pointer_left(self):
        self.mouse_x = 0.5
        self.mouse_y = 0.5

    def handle_event(self, event):
        """Track pointer events. Returns True if the event was consumed."""
        if event.type == pygame.MOUSEMOTION:
            self.set_pointer(*event.pos)
            return True
        if event.type == pygame.WINDOWLEAVE:
            self.pointer_left()
            return True
        return False

    def parallax_offset(self):
        """Grid offset in pixels from the pointer's deviation from center."""
        k = self.grid_spacing * self.parallax_factor * 10
        return (self.mouse_x - 0.5) * k, (self.mouse_y - 0.5) * k

    # ── Background ───────────────────────────────────────────────────────

    def clear(self):
        """Fill the background and redraw the parallax grid."""
        self.surface.fill(COLORS["background"])
        self.draw_parallax_grid()

    def draw_parallax_grid(self):
        spacing = self.grid_spacing
        if spacing <= 0:
            return
        offset_x, offset_y = self.parallax_offset()
        self._grid_pass(spacing, spacing, COLORS["grid_minor"], MINOR_FADE,
                        offset_x, offset_y)
        self._grid_pass(spacing * MAJOR_EVERY, spacing, COLORS["grid_major"], MAJOR_FADE,
                        offset_x, offset_y)

    def _grid_pass(self, step, spacing, color, fade, offset_x, offset_y):
        base_alpha, falloff = fade
        bg = COLORS["background"]
        w, h = self.width, self.height
        cx, cy = w / 2, h / 2
        half_w, half_h = max(cx, 1.0), max(cy, 1.0)

        # Vertical lines lean with the vertical offset, and vice versa
        x = step + offset_x
        while x < w + spacing:
            alpha = base_alpha * (1 - abs(x - cx) / half_w * falloff)
            pygame.draw.line(self.surface, blend(bg, color, alpha),
                             (x, 0), (x + offset_y * 0.3, h))
            x += step

        y = step + offset_y
        while y < h + spacing:
            alpha = base_alpha * (1 - abs(y - cy) / half_h * falloff)
            pygame.draw.line(self.surface, blend(bg, color, alpha),
                             (0, y), (w, y + offset_x * 0.3))
            y += step

    # ── Translucent layers ───────────────────────────────────────────────

    def layer(self):
        """Return a cleared per-pixel-alpha scratch surface of the same size."""
        if self._layer is None or self._layer.get_size() != self.surface.get_size():
            self._layer = pygame.Surface(self.surface.get_size(), pygame.SRCALPHA)
        self._layer.fill((0, 0, 0, 0))
        return self._layer

    def composite(self, layer):
        self.surface.blit(layer, (0, 0))

    # ── Export ───────────────────────────────────────────────────────────

    def to_array(self):
        """Current pixels as an (H, W, 3) uint8 array."""
        return np.ascontiguousarray(pygame.surfarray.array3d(self.surface).swapaxes(0, 1))

    def save(self, path):
        pygame.image.save(self.surface, path)

"""
Fixed Palette for the Field Renderer

Laboratory-instrument color scheme. Every color the renderer draws
comes either from here or from a colormap in ``colormaps``.
"""


# Theme colors
COLORS = {
    # Base
    "background": (5, 5, 10),
    "surface_dark": (10, 10, 15),
    "bevel": (30, 30, 38),

    # Accents
    "cadmium_orange": (230, 81, 0),
    "cobalt_blue": (21, 101, 192),
    "phosphor_green": (76, 175, 80),
    "phosphor_green_bright": (102, 187, 106),

    # Field visualization
    "positive": (230, 81, 0),
    "negative": (21, 101, 192),
    "field_line_pos": (76, 175, 80),
    "field_line_neg": (21, 101, 192),
    "vector_field": (76, 175, 80),

    # Wave visualization
    "wave": (76, 175, 80),
    "wave_magnetic": (21, 101, 192),

    # Grid
    "grid_major": (26, 26, 34),
    "grid_minor": (16, 16, 24),

    # Text
    "text_dim": (72, 72, 80),
}


def with_alpha(color, alpha):
    """Return an RGBA tuple; alpha is a float in [0, 1]."""
    a = int(round(max(0.0, min(1.0, alpha)) * 255))
    return (color[0], color[1], color[2], a)


def blend(base, color, alpha):
    """Composite ``color`` over an opaque ``base`` at the given opacity."""
    alpha = max(0.0, min(1.0, alpha))
    return tuple(int(round(b + (c - b) * alpha)) for b, c in zip(base[:3], color[:3]))

"""
Renderer Defaults and Demo Scenes

RENDER_DEFAULTS holds the tunables FieldRenderer starts from; any of
them can be overridden by keyword. SCENES describes the demo scenes the
viewer can show. The "kind" field determines which data source the
viewer builds (charges, wave1d, wave2d, cyclotron).

Charge positions are fractions of the surface size; charges are in
coulombs.
"""

RENDER_DEFAULTS = {
    "arrow_scale": 1.0,
    "arrow_max_length": 30,
    "particle_radius": 10,
    "trail_width": 2,
    "contour_levels": 12,
    "contour_resolution": 8,
    "grid_spacing": 50,
    "parallax_factor": 0.015,
    "max_flow_particles": 500,
    "dash_length": 6,
    "wave_smoothing": False,
}

SCENES = {
    # =====================================================================
    # ELECTROSTATICS
    # =====================================================================
    "dipole": {
        "kind": "charges",
        "name": "Dipole",
        "description": "Opposite charges with flowing field lines",
        "charges": [(0.35, 0.5, 2e-9), (0.65, 0.5, -2e-9)],
        "contours": True, "flow": True, "vectors": False,
    },
    "single": {
        "kind": "charges",
        "name": "Point Charge",
        "description": "Lone positive charge, concentric equipotentials",
        "charges": [(0.5, 0.5, 3e-9)],
        "contours": True, "flow": True, "vectors": False,
    },
    "quadrupole": {
        "kind": "charges",
        "name": "Quadrupole",
        "description": "Alternating charges on a square",
        "charges": [(0.38, 0.38, 2e-9), (0.62, 0.38, -2e-9),
                    (0.62, 0.62, 2e-9), (0.38, 0.62, -2e-9)],
        "contours": True, "flow": True, "vectors": False,
    },
    "vectors": {
        "kind": "charges",
        "name": "Field Vectors",
        "description": "Dipole field as log-colored arrows",
        "charges": [(0.4, 0.5, 2e-9), (0.6, 0.5, -1e-9)],
        "contours": False, "flow": False, "vectors": True,
        "colormap": "thermal",
    },

    # =====================================================================
    # WAVES
    # =====================================================================
    "wave1d": {
        "kind": "wave1d",
        "name": "Wave Strip",
        "description": "Pulse train entering a dielectric slab",
        "num_cells": 200, "source": 20,
        "slab": (110, 160, 4.0),
    },
    "wave2d": {
        "kind": "wave2d",
        "name": "Wave Sheet",
        "description": "Circular wave from a point source",
        "nx": 120, "ny": 90,
        "colormap": "scientific", "smooth": True,
    },

    # =====================================================================
    # PARTICLES
    # =====================================================================
    "cyclotron": {
        "kind": "cyclotron",
        "name": "Cyclotron",
        "description": "Charged particle orbiting in a uniform B field",
        "radius": 1.5, "omega": 1.2, "bz": 0.5,
    },
}

SCENE_ORDER = list(SCENES.keys())


def get_scene(key):
    """Get a scene dict by key, or None."""
    return SCENES.get(key)


def list_scenes():
    """Return list of (key, name, description) tuples."""
    return [(k, SCENES[k]["name"], SCENES[k]["description"]) for k in SCENE_ORDER]

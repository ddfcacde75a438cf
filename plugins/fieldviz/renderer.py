"""
Field Renderer

Facade the host application drives once per animation frame:

    renderer.tick(dt)            advance animation time and flow particles
    renderer.clear()             background + parallax grid
    renderer.draw_contours(...)  one draw call per visual layer
    ...

Data flows one way: the renderer reads charge systems, waves, field
lines and trajectories, and never writes to them. Everything runs on
the caller's thread inside the frame callback.
"""

import math
import time

from . import drawing
from .contours import ScalarGrid, compute_contours
from .flow import FlowParticleSystem
from .presets import RENDER_DEFAULTS
from .surface import RenderSurface


class AnimationState:
    """Accumulated animation time, threaded through tick() calls."""

    def __init__(self):
        self.anim_time = 0.0
        self.frames = 0

    def advance(self, dt):
        self.anim_time += dt
        self.frames += 1


class FrameClock:
    """Wall-clock source for frame deltas.

    No clamping: a long pause (e.g. a hidden window) yields one large
    delta and particles jump ahead accordingly.
    """

    def __init__(self, time_fn=time.monotonic):
        self.time_fn = time_fn
        self.last_time = time_fn()

    def delta(self):
        now = self.time_fn()
        dt = now - self.last_time
        self.last_time = now
        return max(0.0, dt)


class FieldRenderer:
    def __init__(self, width=900, height=700, rng=None, **settings):
        """
        Args:
            width, height: Surface size in pixels
            rng: Random source for flow particle seeding (Generator or int seed)
            **settings: Overrides for RENDER_DEFAULTS keys; unknown keys are ignored
        """
        self.settings = dict(RENDER_DEFAULTS)
        self.settings.update({k: v for k, v in settings.items() if k in RENDER_DEFAULTS})
        s = self.settings

        self.target = RenderSurface(width, height,
                                    grid_spacing=s["grid_spacing"],
                                    parallax_factor=s["parallax_factor"])
        self.flow = FlowParticleSystem(rng=rng, max_particles=s["max_flow_particles"])
        self.state = AnimationState()
        self.clock = FrameClock()

    @property
    def width(self):
        return self.target.width

    @property
    def height(self):
        return self.target.height

    @property
    def surface(self):
        return self.target.surface

    # ── Frame lifecycle ──────────────────────────────────────────────────

    def tick(self, dt=None):
        """Advance animation state by ``dt`` seconds (wall-clock delta if None).

        Call at most once per frame. Returns the dt actually applied.
        """
        if dt is None:
            dt = self.clock.delta()
        elif not math.isfinite(dt) or dt < 0:
            dt = 0.0
        self.state.advance(dt)
        self.flow.advance(dt)
        return dt

    def clear(self):
        self.target.clear()

    def resize(self, width, height):
        self.target.resize(width, height)

    def handle_event(self, event):
        return self.target.handle_event(event)

    # ── Layers ───────────────────────────────────────────────────────────

    def draw_charges(self, charge_system):
        drawing.draw_charge_system(self.target, charge_system)

    def draw_vector_field(self, vectors, colormap=None):
        drawing.draw_vector_field(self.target, vectors, colormap,
                                  max_length=self.settings["arrow_max_length"],
                                  scale=self.settings["arrow_scale"])

    def sample_potential(self, charge_system, resolution=None):
        """Sample ``charge_system.potential_at`` over the whole surface."""
        resolution = resolution or self.settings["contour_resolution"]
        return ScalarGrid.from_sampler(charge_system.potential_at,
                                       self.width, self.height, resolution)

    def draw_contours(self, charge_system=None, resolution=None, colormap=None, grid=None):
        """Draw equipotential contours and return the (level, segments) list.

        Pass a prebuilt ``grid`` to skip resampling a static field.
        """
        if grid is None:
            if charge_system is None:
                return []
            grid = self.sample_potential(charge_system, resolution)
        contours = compute_contours(grid, self.settings["contour_levels"])
        min_v, max_v = grid.value_range()
        drawing.draw_contours(self.target, contours, min_v, max_v, colormap)
        return contours

    def draw_flow_lines(self, field_lines):
        """Faint paths plus animated dashes; reseeds on a new field-line set."""
        self.flow.sync(field_lines)
        drawing.draw_flow_lines(self.target, field_lines, self.flow.draw_points(),
                                dash_length=self.settings["dash_length"])

    def draw_wave_1d(self, wave, y_offset=None, height=None, show_e=True, show_h=True):
        if y_offset is None:
            y_offset = self.height / 2
        if height is None:
            height = self.height * 0.6
        drawing.draw_wave_1d(self.target, wave, y_offset, height, show_e, show_h)

    def draw_wave_2d(self, wave, colormap=None, smooth=None):
        if smooth is None:
            smooth = self.settings["wave_smoothing"]
        drawing.draw_wave_2d(self.target, getattr(wave, "ez", wave), colormap, smooth)

    def draw_particle(self, particle, scale=100):
        drawing.draw_particle(self.target, particle, scale,
                              radius=self.settings["particle_radius"],
                              trail_width=self.settings["trail_width"])

    def draw_energy_graph(self, history, x=None, y=None, width=200, height=80):
        if x is None:
            x = 20
        if y is None:
            y = self.height - height - 20
        drawing.draw_energy_graph(self.target, history, x, y, width, height)

    def draw_field_indicators(self, bz=None, e_field=None):
        """Magnetic dial top-right, electric readout below it."""
        x = self.width - 70
        if bz is not None:
            drawing.draw_magnetic_field_indicator(self.target, bz, x, 60)
        if e_field is not None:
            drawing.draw_electric_field_indicator(self.target, e_field[0], e_field[1],
                                                  x, 170)

    def draw_axes(self, scale=100):
        drawing.draw_axes(self.target, scale)

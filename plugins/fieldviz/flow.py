"""
Flow Particle System

Visualizes field-line flow with short dashes that travel along
precomputed polylines instead of drawing the lines solid. Every
particle is bound to one field line and carries a normalized path
position in [0, 1) plus its own speed, so marks on neighbouring lines
never move in lockstep.

Particles are independent: no collisions, no interaction. The pool is
regenerated wholesale whenever a new set of field lines arrives.
"""

import math

import numpy as np


MAX_PER_LINE = 8
POINTS_PER_PARTICLE = 15
SPEED_MIN = 0.3
SPEED_SPAN = 0.4
DEFAULT_MAX_PARTICLES = 500


class FieldLine:
    """Ordered polyline traced from a source, plus the source polarity."""

    def __init__(self, points, from_positive=True):
        self.points = [(float(p[0]), float(p[1])) for p in points]
        self.from_positive = bool(from_positive)

    def __len__(self):
        return len(self.points)


class FlowParticle:
    __slots__ = ("line", "position", "speed")

    def __init__(self, line, position, speed):
        self.line = line
        self.position = position
        self.speed = speed

    @property
    def from_positive(self):
        return self.line.from_positive


class FlowMark:
    """Interpolated draw point for one particle in the current frame."""

    __slots__ = ("x", "y", "angle", "from_positive")

    def __init__(self, x, y, angle, from_positive):
        self.x = x
        self.y = y
        self.angle = angle
        self.from_positive = from_positive

    def dash(self, length):
        """Endpoints of a dash of the given length centered on the mark."""
        hx = math.cos(self.angle) * length / 2
        hy = math.sin(self.angle) * length / 2
        return (self.x - hx, self.y - hy), (self.x + hx, self.y + hy)


def particles_for_line(point_count):
    """Number of particles spawned on a line with ``point_count`` points."""
    if point_count < 2:
        return 0
    return min(MAX_PER_LINE, math.ceil(point_count / POINTS_PER_PARTICLE))


def _line_points(line):
    points = getattr(line, "points", None)
    return points if points is not None else []


class FlowParticleSystem:
    """Owns the particle pool and advances it once per frame."""

    def __init__(self, rng=None, max_particles=DEFAULT_MAX_PARTICLES):
        """
        Args:
            rng: numpy Generator (or int seed) used for phase and speed;
                 pass a seeded one for reproducible placement
            max_particles: Upper bound on the pool size
        """
        if rng is None or isinstance(rng, (int, np.integer)):
            rng = np.random.default_rng(rng)
        self.rng = rng
        self.max_particles = max_particles
        self.particles = []
        self._source = None

    def __len__(self):
        return len(self.particles)

    def seed(self, field_lines):
        """Replace the whole pool with fresh particles for ``field_lines``."""
        self.particles = []
        self._source = field_lines
        for line in field_lines or ():
            count = particles_for_line(len(_line_points(line)))
            for _ in range(count):
                if len(self.particles) >= self.max_particles:
                    return
                self.particles.append(FlowParticle(
                    line,
                    float(self.rng.random()),
                    SPEED_MIN + float(self.rng.random()) * SPEED_SPAN,
                ))

    def sync(self, field_lines):
        """Reseed if the pool is empty or ``field_lines`` is a new set."""
        if field_lines is not self._source or not self.particles:
            self.seed(field_lines)

    def advance(self, dt):
        """Move every particle by speed * dt, wrapping back into [0, 1)."""
        if not math.isfinite(dt) or dt <= 0:
            return
        for particle in self.particles:
            particle.position += particle.speed * dt
            if particle.position >= 1.0:
                particle.position %= 1.0

    def draw_points(self):
        """Return one FlowMark per particle on a drawable line."""
        marks = []
        for particle in self.particles:
            mark = mark_at(particle.line, particle.position)
            if mark is not None:
                marks.append(mark)
        return marks


def mark_at(line, position):
    """Interpolate position and tangent at a normalized path position."""
    points = _line_points(line)
    n = len(points)
    if n < 2:
        return None
    scaled = position * (n - 1)
    idx = min(int(math.floor(scaled)), n - 1)
    next_idx = min(idx + 1, n - 1)
    t = scaled - idx

    x0, y0 = points[idx]
    x1, y1 = points[next_idx]
    x = x0 + (x1 - x0) * t
    y = y0 + (y1 - y0) * t
    angle = math.atan2(y1 - y0, x1 - x0)
    return FlowMark(x, y, angle, bool(getattr(line, "from_positive", True)))

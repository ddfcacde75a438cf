"""
Reference Field Sources

Small analytic producers of the data the renderer consumes: a point
charge system (potential, field vectors, traced field lines), 1D and 2D
wave snapshots and a charged-particle trajectory. They exist to drive
the demo viewer and the tests; real solvers plug in through the same
attributes.

Interfaces the renderer reads:
    charge system   .charges (items with x, y, charge), .potential_at(x, y)
    1D wave         .num_cells, .epsilon_r, .source_position, .normalized_fields()
    2D wave         .ez as an (nx, ny) array
    particle        .x, .y, .trajectory (sequence of (x, y))
    field lines     items with .points and .from_positive
"""

import math
from collections import deque

import numpy as np

from .flow import FieldLine


COULOMB_K = 8.9875e9
PIXELS_PER_METER = 100.0


class PointCharge:
    def __init__(self, x, y, charge):
        self.x = x
        self.y = y
        self.charge = charge


class FieldVector:
    __slots__ = ("x", "y", "ex", "ey", "magnitude")

    def __init__(self, x, y, ex, ey):
        self.x = x
        self.y = y
        self.ex = ex
        self.ey = ey
        self.magnitude = math.hypot(ex, ey)


class ChargeSystem:
    """Point charges in surface pixel coordinates (y down)."""

    def __init__(self, charges=None, scale=PIXELS_PER_METER):
        self.charges = list(charges or [])
        self.scale = scale

    def add(self, x, y, charge):
        self.charges.append(PointCharge(x, y, charge))

    def potential_at(self, x, y):
        v = 0.0
        for c in self.charges:
            r = math.hypot(x - c.x, y - c.y) / self.scale
            v += COULOMB_K * c.charge / max(r, 1e-9)
        return v

    def field_at(self, x, y):
        ex = ey = 0.0
        for c in self.charges:
            dx = (x - c.x) / self.scale
            dy = (y - c.y) / self.scale
            r2 = dx * dx + dy * dy
            if r2 < 1e-12:
                continue
            k = COULOMB_K * c.charge / (r2 * math.sqrt(r2))
            ex += k * dx
            ey += k * dy
        return ex, ey

    def sample_vectors(self, width, height, spacing=40):
        vectors = []
        for y in range(spacing // 2, int(height), spacing):
            for x in range(spacing // 2, int(width), spacing):
                vectors.append(FieldVector(x, y, *self.field_at(x, y)))
        return vectors

    def trace_field_lines(self, width, height, lines_per_charge=12, step=4.0,
                          max_steps=400, start_radius=12.0):
        """Trace field lines out of every charge with simple Euler steps.

        Lines from positive charges follow E, lines from negative charges
        follow -E. A line stops when it leaves the surface or reaches
        another charge.
        """
        lines = []
        for src in self.charges:
            if src.charge == 0:
                continue
            direction = 1.0 if src.charge > 0 else -1.0
            for k in range(lines_per_charge):
                theta = 2 * math.pi * k / lines_per_charge
                x = src.x + start_radius * math.cos(theta)
                y = src.y + start_radius * math.sin(theta)
                points = [(x, y)]
                for _ in range(max_steps):
                    ex, ey = self.field_at(x, y)
                    mag = math.hypot(ex, ey)
                    if mag == 0 or not math.isfinite(mag):
                        break
                    x += direction * step * ex / mag
                    y += direction * step * ey / mag
                    if not (0 <= x <= width and 0 <= y <= height):
                        break
                    points.append((x, y))
                    if any(c is not src and math.hypot(x - c.x, y - c.y) < start_radius
                           for c in self.charges):
                        break
                lines.append(FieldLine(points, from_positive=src.charge > 0))
        return lines


class WaveStrip:
    """1D snapshot of Ez / Hy on a line of cells with a material profile."""

    def __init__(self, num_cells=200, source_position=20):
        self.num_cells = num_cells
        self.source_position = source_position
        self.ez = np.zeros(num_cells)
        self.hy = np.zeros(num_cells)
        self.epsilon_r = np.ones(num_cells)

    def set_slab(self, start, end, epsilon):
        self.epsilon_r[start:end] = epsilon

    def update(self, t, wavelength=40.0, speed=60.0):
        """Analytic traveling pulse train leaving the source cell."""
        cells = np.arange(self.num_cells, dtype=np.float64)
        # Slower phase velocity inside dielectric
        n = np.sqrt(self.epsilon_r)
        optical = np.cumsum(n) - np.cumsum(n)[self.source_position]
        phase = 2 * np.pi * (np.abs(optical) - speed * t) / wavelength
        front = np.abs(cells - self.source_position) <= speed * t
        self.ez = np.where(front, np.sin(phase), 0.0)
        self.hy = np.where(front, np.sin(phase) / n, 0.0)

    def normalized_fields(self):
        peak = max(float(np.max(np.abs(self.ez))), float(np.max(np.abs(self.hy))), 1e-10)
        return self.ez / peak, self.hy / peak


class WaveSheet:
    """2D snapshot of Ez on an (nx, ny) grid, indexed ez[i][j]."""

    def __init__(self, nx=120, ny=90):
        self.nx = nx
        self.ny = ny
        self.ez = np.zeros((nx, ny))

    def update(self, t, source=None, wavelength=14.0, speed=30.0):
        sx, sy = source if source is not None else (self.nx / 2, self.ny / 2)
        I, J = np.ogrid[:self.nx, :self.ny]
        r = np.sqrt((I - sx) ** 2 + (J - sy) ** 2)
        decay = 1.0 / np.sqrt(1.0 + r)
        self.ez = np.where(r <= speed * t,
                           np.sin(2 * np.pi * (r - speed * t) / wavelength) * decay,
                           0.0)


class Trajectory:
    """Charged particle circling in a uniform Bz field (meters, y up)."""

    def __init__(self, radius=1.5, omega=1.2, bz=0.5, history=240):
        self.radius = radius
        self.omega = omega
        self.bz = bz
        self.phase = 0.0
        self.x = radius
        self.y = 0.0
        self.trajectory = deque(maxlen=history)
        self.energy_history = deque(maxlen=history)

    def update(self, dt):
        self.phase += self.omega * dt
        # Slow radial drift keeps the trail from retracing itself
        r = self.radius * (1.0 + 0.15 * math.sin(self.phase * 0.21))
        self.x = r * math.cos(self.phase)
        self.y = r * math.sin(self.phase)
        self.trajectory.append((self.x, self.y))
        self.energy_history.append(0.5 * (self.omega * r) ** 2)

    @property
    def velocity(self):
        return (-self.omega * self.y, self.omega * self.x)

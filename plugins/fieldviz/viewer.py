"""
Interactive Pygame Viewer for Field Visualization

Shows the demo scenes (point charges, wave strip, wave sheet,
cyclotron orbit) through FieldRenderer at 60 fps. The renderer draws
into its own off-screen surface; the viewer blits it to the window and
adds the HUD.

Controls:
  SPACE       Pause / Resume
  1-9         Switch scene
  C           Toggle contours
  L           Toggle flow lines
  V           Toggle vector arrows
  A           Toggle axes (cyclotron)
  S           Save screenshot
  H           Toggle HUD overlay
  Q / ESC     Quit
  Mouse       Parallax grid follows the pointer
"""

import os
import time

import numpy as np
import pygame

from .colormaps import COLORMAPS
from .presets import SCENE_ORDER, get_scene
from .renderer import FieldRenderer
from .sources import ChargeSystem, Trajectory, WaveSheet, WaveStrip


class Viewer:
    def __init__(self, width=900, height=700, start_scene="dipole", rng=None):
        self.width = width
        self.height = height
        self.running = True
        self.paused = False
        self.show_hud = True
        self.show_axes = True
        self.fps_history = []

        self.renderer = FieldRenderer(width, height, rng=rng)

        # Scene state (built in _apply_scene)
        self.scene_key = start_scene
        self.scene = None
        self.scene_time = 0.0
        self.charge_system = None
        self.field_lines = []
        self.vectors = []
        self.potential_grid = None
        self.wave = None
        self.particle = None

        self.hud_font = None
        if get_scene(start_scene) is None:
            start_scene = SCENE_ORDER[0]
        self._apply_scene(start_scene)

    def _apply_scene(self, key):
        """Build the data source for a scene; unknown keys are ignored."""
        scene = get_scene(key)
        if scene is None:
            return
        self.scene_key = key
        self.scene = dict(scene)
        self.scene_time = 0.0
        self.charge_system = None
        self.field_lines = []
        self.vectors = []
        self.potential_grid = None
        self.wave = None
        self.particle = None

        kind = scene["kind"]
        w, h = self.renderer.width, self.renderer.height
        if kind == "charges":
            cs = ChargeSystem()
            for fx, fy, q in scene["charges"]:
                cs.add(fx * w, fy * h, q)
            self.charge_system = cs
            if scene.get("flow"):
                self.field_lines = cs.trace_field_lines(w, h)
            if scene.get("vectors"):
                self.vectors = cs.sample_vectors(w, h)
            # Static field: sample the potential once per scene/size
            self.potential_grid = self.renderer.sample_potential(cs)
        elif kind == "wave1d":
            self.wave = WaveStrip(scene["num_cells"], scene["source"])
            start, end, eps = scene["slab"]
            self.wave.set_slab(start, end, eps)
        elif kind == "wave2d":
            self.wave = WaveSheet(scene["nx"], scene["ny"])
        elif kind == "cyclotron":
            self.particle = Trajectory(scene["radius"], scene["omega"], scene["bz"])

    def step(self, dt):
        """Advance the scene's data source and the renderer by dt seconds."""
        self.renderer.tick(dt)
        self.scene_time += dt
        kind = self.scene["kind"]
        if kind in ("wave1d", "wave2d"):
            self.wave.update(self.scene_time)
        elif kind == "cyclotron":
            self.particle.update(dt)

    def render_scene(self):
        """Draw the current scene into the renderer surface."""
        r = self.renderer
        scene = self.scene
        kind = scene["kind"]
        colormap = COLORMAPS.get(scene.get("colormap"))

        r.clear()
        if kind == "charges":
            if scene.get("contours"):
                r.draw_contours(grid=self.potential_grid)
            if self.vectors:
                r.draw_vector_field(self.vectors, colormap)
            if self.field_lines:
                r.draw_flow_lines(self.field_lines)
            r.draw_charges(self.charge_system)
        elif kind == "wave1d":
            r.draw_wave_1d(self.wave)
        elif kind == "wave2d":
            r.draw_wave_2d(self.wave, colormap, smooth=scene.get("smooth"))
        elif kind == "cyclotron":
            if self.show_axes:
                r.draw_axes()
            r.draw_particle(self.particle)
            r.draw_field_indicators(bz=self.particle.bz)
            r.draw_energy_graph(self.particle.energy_history)
        return r.surface

    def _toggle(self, key):
        if self.scene["kind"] == "charges":
            self.scene[key] = not self.scene.get(key)
            if key == "flow" and self.scene[key] and not self.field_lines:
                self.field_lines = self.charge_system.trace_field_lines(
                    self.renderer.width, self.renderer.height)
            if key == "vectors":
                self.vectors = (self.charge_system.sample_vectors(
                    self.renderer.width, self.renderer.height) if self.scene[key] else [])
            if key == "flow" and not self.scene[key]:
                self.field_lines = []

    def _draw_hud(self, screen, fps):
        if not self.show_hud:
            return

        line = (f"{self.scene['name']}  |  t = {self.scene_time:6.2f}s  |  "
                f"Particles: {len(self.renderer.flow)}  |  "
                f"{self.renderer.width}x{self.renderer.height}  |  FPS: {fps:.0f}")
        if self.paused:
            line = "[PAUSED]  " + line

        padding = 6
        bg_height = 24
        bg_surface = pygame.Surface((self.renderer.width, bg_height), pygame.SRCALPHA)
        bg_surface.fill((0, 0, 0, 140))
        screen.blit(bg_surface, (0, 0))

        text_surface = self.hud_font.render(line, True, (210, 215, 225))
        screen.blit(text_surface, (padding + 4, padding))

    def _save_screenshot(self):
        screenshots_dir = os.path.join(
            os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
            "screenshots"
        )
        os.makedirs(screenshots_dir, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        path = os.path.join(screenshots_dir, f"field_{self.scene_key}_{timestamp}.png")
        self.renderer.target.save(path)
        self.renderer.target.save(os.path.join(screenshots_dir, "latest.png"))
        print(f"[fieldviz] Screenshot saved: {path}")

    def run(self):
        """Main viewer loop."""
        pygame.init()

        screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
        pygame.display.set_caption("Field Visualization")
        clock = pygame.time.Clock()
        self.hud_font = pygame.font.SysFont("menlo", 13)

        self.renderer.clock.delta()

        while self.running:
            frame_start = time.time()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    continue
                if event.type == pygame.KEYDOWN:
                    self._handle_keydown(event)
                    continue
                if event.type == pygame.VIDEORESIZE:
                    self.width, self.height = event.w, event.h
                    screen = pygame.display.set_mode((self.width, self.height), pygame.RESIZABLE)
                    self.renderer.resize(self.width, self.height)
                    self._apply_scene(self.scene_key)
                    continue
                self.renderer.handle_event(event)

            # Wall-clock delta, discarded while paused
            dt = self.renderer.clock.delta()
            if not self.paused:
                self.step(dt)

            screen.blit(self.render_scene(), (0, 0))

            frame_time = time.time() - frame_start
            self.fps_history.append(frame_time)
            if len(self.fps_history) > 30:
                self.fps_history.pop(0)
            avg_fps = 1.0 / max(np.mean(self.fps_history), 0.001)
            self._draw_hud(screen, avg_fps)

            pygame.display.flip()
            clock.tick(60)

        pygame.quit()

    def _handle_keydown(self, event):
        key = event.key

        if key in (pygame.K_q, pygame.K_ESCAPE):
            self.running = False

        elif key == pygame.K_SPACE:
            self.paused = not self.paused

        elif key == pygame.K_h:
            self.show_hud = not self.show_hud

        elif key == pygame.K_a:
            self.show_axes = not self.show_axes

        elif key == pygame.K_c:
            self._toggle("contours")

        elif key == pygame.K_l:
            self._toggle("flow")

        elif key == pygame.K_v:
            self._toggle("vectors")

        elif key == pygame.K_s:
            self._save_screenshot()

        # Scene selection (1-9)
        elif pygame.K_1 <= key <= pygame.K_9:
            idx = key - pygame.K_1
            if idx < len(SCENE_ORDER):
                self._apply_scene(SCENE_ORDER[idx])

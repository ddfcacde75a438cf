"""
Field Visualization Viewer - Entry Point

Usage:
    python -m fieldviz [scene] [--window WxH] [--snap N] [--list]

Examples:
    python -m fieldviz
    python -m fieldviz quadrupole
    python -m fieldviz wave2d --window 1200x800
    python -m fieldviz cyclotron --snap 240

Scene kinds:
    charges     - equipotential contours, flow particles, field vectors
    wave1d      - Ez / Hy strip with a dielectric slab
    wave2d      - Ez heat map from a point source
    cyclotron   - particle orbit with trail, B dial and energy graph

Use --list to see all available scenes.
"""

import os
import sys

from .presets import SCENE_ORDER, list_scenes


def snap(scene, width, height, steps):
    """Headless mode: run N frames off-screen, save a PNG, exit."""
    os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
    from PIL import Image
    from .viewer import Viewer

    screenshots_dir = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "screenshots"
    )
    os.makedirs(screenshots_dir, exist_ok=True)

    scenes_to_snap = [scene] if scene != "all" else SCENE_ORDER

    for key in scenes_to_snap:
        # Fixed seed so repeated snaps are identical
        viewer = Viewer(width=width, height=height, start_scene=key, rng=0)
        print(f"  {key}: rendering {steps} frames...", end="", flush=True)
        for _ in range(steps):
            viewer.step(1 / 60)
        viewer.render_scene()

        img = Image.fromarray(viewer.renderer.target.to_array())
        path = os.path.join(screenshots_dir, f"field_{key}.png")
        img.save(path)
        img.save(os.path.join(screenshots_dir, "latest.png"))
        print(f" saved: {path}")


def main():
    scene = "dipole"
    win_w, win_h = 900, 700
    snap_steps = 0

    args = sys.argv[1:]
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--window" and i + 1 < len(args):
            parts = args[i + 1].split("x")
            win_w, win_h = int(parts[0]), int(parts[1])
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_steps = int(args[i + 1])
            i += 2
        elif arg == "--list":
            print("\nAvailable scenes:")
            for key, name, desc in list_scenes():
                print(f"    {key:16s} {name:20s} {desc}")
            print()
            return
        elif arg in ("--help", "-h"):
            print(__doc__)
            return
        elif arg in SCENE_ORDER or arg == "all":
            scene = arg
            i += 1
        else:
            print(f"[fieldviz] Unknown argument: {arg}")
            print(f"[fieldviz] Use --list to see available scenes")
            return

    if snap_steps > 0:
        print(f"[fieldviz] Headless snap mode: {scene} @ {win_w}x{win_h}, {snap_steps} frames")
        snap(scene, win_w, win_h, snap_steps)
        return

    print(f"[fieldviz] Starting Field Visualization Viewer")
    print(f"  Scene: {scene}")
    print(f"  Window: {win_w}x{win_h}")
    print()

    from .viewer import Viewer
    viewer = Viewer(width=win_w, height=win_h, start_scene=scene)
    viewer.run()


if __name__ == "__main__":
    main()

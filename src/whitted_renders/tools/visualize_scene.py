"""
Scene layout diagram: where the spheres, lights, floor tile and camera
frustum sit, seen from above (x-z) and from the side (z-y).
"""
import sys

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Circle, Polygon, Rectangle

from whitted_renders import constants
from whitted_renders.environment import ResourceError
from whitted_renders.scene import build_default_scene

FRUSTUM_LENGTH = 35.0


def _frustum(half_angle):
    """Triangle from the camera at the origin out along -z."""
    spread = FRUSTUM_LENGTH * np.tan(half_angle)
    return [(0.0, 0.0), (-spread, -FRUSTUM_LENGTH), (spread, -FRUSTUM_LENGTH)]


def draw_layout(scene, fov=constants.DEFAULT_FOV, aspect_ratio=4.0 / 3.0):
    """
    Build the layout figure.

    Args:
        scene: Scene to draw
        fov: Vertical field of view (radians)
        aspect_ratio: Image width / height, widens the top-down frustum

    Returns:
        matplotlib Figure with two axes (top-down, side)
    """
    fig = plt.figure(figsize=(14, 6))
    ax_top = fig.add_subplot(1, 2, 1)
    ax_side = fig.add_subplot(1, 2, 2)

    half_v = fov / 2.0
    half_h = np.arctan(np.tan(half_v) * aspect_ratio)

    # Camera frustums; points are (horizontal, depth) in each view
    ax_top.add_patch(Polygon([(x, z) for x, z in _frustum(half_h)],
                             closed=True, color="gold", alpha=0.15))
    ax_side.add_patch(Polygon([(z, y) for y, z in _frustum(half_v)],
                              closed=True, color="gold", alpha=0.15))

    if scene.checkerboard:
        x_lo, x_hi = constants.FLOOR_X_RANGE
        z_lo, z_hi = constants.FLOOR_Z_RANGE
        ax_top.add_patch(Rectangle((x_lo, z_lo), x_hi - x_lo, z_hi - z_lo,
                                   facecolor="none", edgecolor="gray", hatch="xx"))
        ax_side.plot([z_lo, z_hi], [constants.FLOOR_Y, constants.FLOOR_Y],
                     color="gray", linewidth=3)

    for sphere in scene.spheres:
        cx, cy, cz = sphere.center
        color = tuple(np.clip(sphere.material.diffuse_color, 0.0, 1.0))
        ax_top.add_patch(Circle((cx, cz), sphere.radius, color=color, alpha=0.7))
        ax_side.add_patch(Circle((cz, cy), sphere.radius, color=color, alpha=0.7))

    for light in scene.lights:
        lx, ly, lz = light.position
        ax_top.plot(lx, lz, marker="*", color="orange", markersize=8 + 4 * light.intensity)
        ax_side.plot(lz, ly, marker="*", color="orange", markersize=8 + 4 * light.intensity)

    ax_top.plot(0.0, 0.0, marker="^", color="black")
    ax_side.plot(0.0, 0.0, marker=">", color="black")

    ax_top.set_title("Top down (x-z)")
    ax_top.set_xlabel("x")
    ax_top.set_ylabel("z")
    ax_side.set_title("Side (z-y)")
    ax_side.set_xlabel("z")
    ax_side.set_ylabel("y")
    for ax in (ax_top, ax_side):
        ax.set_aspect("equal")
        ax.autoscale_view()
        ax.grid(True, alpha=0.3)

    fig.tight_layout()
    return fig


def save_layout(scene, path, fov=constants.DEFAULT_FOV, aspect_ratio=4.0 / 3.0):
    """Draw the layout and write it to path."""
    fig = draw_layout(scene, fov=fov, aspect_ratio=aspect_ratio)
    try:
        fig.savefig(path)
    except (OSError, ValueError) as exc:
        raise ResourceError(f"Cannot write layout {path}: {exc}") from exc
    finally:
        plt.close(fig)


if __name__ == "__main__":
    output = sys.argv[1] if len(sys.argv) > 1 else "layout.png"
    save_layout(build_default_scene(), output)
    print(f"Saved {output}")

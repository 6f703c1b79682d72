"""
Ray-geometry intersection calculations for the Whitted renderer.

This module contains the intersection solvers for the two primitive kinds in
the scene: spheres and the bounded checkerboard floor tile.
"""
import numpy as np
from whitted_renders import constants
from whitted_renders.utils import batch_compatible
from whitted_renders.vectors import dot


@batch_compatible
def ray_sphere_intersect(ray_origins, ray_directions, center, radius):
    """
    Geometric ray-sphere intersection.

    A sphere whose center projects behind the origin (tca < 0) is rejected
    outright, even when the origin lies inside it.

    Args:
        ray_origins: (3,) or (N, 3) origin points
        ray_directions: (N, 3) array of unit ray directions
        center: (3,) sphere center
        radius: Sphere radius

    Returns:
        tuple: (distance, hit) arrays of shape (N,); distance is inf where hit is False
    """
    L = np.asarray(center, dtype=float) - ray_origins
    tca = dot(L, ray_directions)
    d2 = dot(L, L) - tca**2
    r2 = radius * radius

    n_rays = ray_directions.shape[0]
    hit = np.broadcast_to((tca >= 0) & (d2 <= r2), (n_rays,)).copy()
    t = np.full(n_rays, np.inf)

    if np.any(hit):
        tca_h = np.broadcast_to(tca, (n_rays,))[hit]
        thc = np.sqrt(r2 - np.broadcast_to(d2, (n_rays,))[hit])
        t0 = tca_h - thc
        t1 = tca_h + thc
        # Origin inside the sphere: the far root is the visible one
        t0 = np.where(t0 < 0, t1, t0)

        valid = t0 >= 0
        sub_hit = hit[hit]
        sub_hit[~valid] = False
        hit[hit] = sub_hit
        t[hit] = t0[valid]

    return t, hit


def checker_parity(x, z):
    """Tile parity (0 or 1) of floor points: (floor(x/2) + floor(z/2)) mod 2."""
    return (np.floor(0.5 * np.asarray(x)) + np.floor(0.5 * np.asarray(z))).astype(int) % 2


@batch_compatible
def intersect_checkerboard(ray_origins, ray_directions):
    """
    Intersection with the checkerboard floor tile at y = FLOOR_Y.

    Only rays that are not near-horizontal are tested, and only hits inside
    the tile bounds FLOOR_X_RANGE x FLOOR_Z_RANGE are accepted.

    Args:
        ray_origins: (3,) or (N, 3) origin points
        ray_directions: (N, 3) array of unit ray directions

    Returns:
        tuple: (distance, diffuse_color) with shapes (N,) and (N, 3);
        distance is inf where the tile is missed
    """
    n_rays = ray_directions.shape[0]
    origins = np.broadcast_to(ray_origins, ray_directions.shape)
    dy = ray_directions[:, 1]

    t = np.full(n_rays, np.inf)
    colors = np.zeros((n_rays, 3))

    steep = np.abs(dy) > constants.FLOOR_MIN_DIR_Y
    if not np.any(steep):
        return t, colors

    d = np.full(n_rays, -1.0)
    d[steep] = -(origins[steep, 1] - constants.FLOOR_Y) / dy[steep]

    ahead = d > 0
    hit_x = np.where(ahead, origins[:, 0] + d * ray_directions[:, 0], np.nan)
    hit_z = np.where(ahead, origins[:, 2] + d * ray_directions[:, 2], np.nan)

    x_lo, x_hi = constants.FLOOR_X_RANGE
    z_lo, z_hi = constants.FLOOR_Z_RANGE
    with np.errstate(invalid='ignore'):
        on_tile = ahead & (hit_x > x_lo) & (hit_x < x_hi) & (hit_z > z_lo) & (hit_z < z_hi)

    if np.any(on_tile):
        t[on_tile] = d[on_tile]
        palette = np.array(constants.FLOOR_COLORS)
        colors[on_tile] = palette[checker_parity(hit_x[on_tile], hit_z[on_tile])]

    return t, colors

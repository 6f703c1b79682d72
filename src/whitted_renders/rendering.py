"""
Data structures and interfaces for the Whitted rendering pipeline.
"""
from dataclasses import dataclass

import numpy as np

from whitted_renders import constants
from whitted_renders.intersections import intersect_checkerboard, ray_sphere_intersect
from whitted_renders.scene import Material
from whitted_renders.vectors import dot, norm, normalize, offset_origin, reflect


@dataclass
class HitRecord:
    """Closest intersection of a single ray with the scene."""
    distance: float
    point: np.ndarray  # (3,)
    normal: np.ndarray  # (3,) unit, outward
    material: Material


@dataclass
class HitResult:
    """
    Result of batched ray-scene intersection.

    Rows where ``hit`` is False carry NaN geometry and zeroed material data.

    Attributes:
        hit: Whether the ray hit anything closer than the far plane (N,)
        distance: Distance to hit point (N,), inf on a miss
        point: 3D coordinates of hit point (N, 3)
        normal: Outward unit surface normal at hit point (N, 3)
        diffuse_color: Material diffuse color (N, 3)
        albedo: Material (kd, ks, kr, kt) weights (N, 4)
        specular_exponent: Material Phong exponent (N,)
        refractive_index: Material index of refraction (N,)
    """
    hit: np.ndarray
    distance: np.ndarray
    point: np.ndarray
    normal: np.ndarray
    diffuse_color: np.ndarray
    albedo: np.ndarray
    specular_exponent: np.ndarray
    refractive_index: np.ndarray

    def __post_init__(self):
        """Validate array shapes."""
        if self.distance.ndim != 1:
            raise ValueError(f"distance must be 1D array, got shape {self.distance.shape}")

        n_rays = self.distance.shape[0]
        expected = {
            'hit': (n_rays,),
            'point': (n_rays, 3),
            'normal': (n_rays, 3),
            'diffuse_color': (n_rays, 3),
            'albedo': (n_rays, 4),
            'specular_exponent': (n_rays,),
            'refractive_index': (n_rays,),
        }
        for name, shape in expected.items():
            actual = getattr(self, name).shape
            if actual != shape:
                raise ValueError(f"{name} must have shape {shape}, got {actual}")

    def __len__(self):
        return self.distance.shape[0]

    def record(self, index):
        """Single-ray view of row ``index``, or None if that ray missed."""
        if not self.hit[index]:
            return None
        material = Material(
            albedo=self.albedo[index],
            diffuse_color=self.diffuse_color[index],
            specular_exponent=self.specular_exponent[index],
            refractive_index=self.refractive_index[index],
        )
        return HitRecord(
            distance=float(self.distance[index]),
            point=self.point[index].copy(),
            normal=self.normal[index].copy(),
            material=material,
        )


class HitSelector:
    """
    Responsible for determining which surface each ray hits first.

    Spheres are scanned linearly; the checkerboard floor is then accepted
    only where it is closer than the nearest sphere.
    """

    def __init__(self, scene):
        """
        Args:
            scene: Scene whose spheres, materials and floor are queried
        """
        self.scene = scene

    def select(self, ray_origins, ray_directions):
        """
        Find the closest intersection for each ray.

        Args:
            ray_origins: (3,) or (N, 3) origin points
            ray_directions: (N, 3) array of unit ray directions

        Returns:
            HitResult for all rays
        """
        ray_directions = np.atleast_2d(np.asarray(ray_directions, dtype=float))
        n_rays = ray_directions.shape[0]
        ray_origins = np.broadcast_to(np.asarray(ray_origins, dtype=float), ray_directions.shape)

        table = self.scene.material_table
        sphere_dist = np.full(n_rays, np.inf)
        sphere_idx = np.full(n_rays, -1)

        for i in range(table.radii.shape[0]):
            t, hit = ray_sphere_intersect(ray_origins, ray_directions,
                                          table.centers[i], table.radii[i])
            closer = hit & (t < sphere_dist)
            sphere_dist[closer] = t[closer]
            sphere_idx[closer] = i

        distance = sphere_dist
        point = np.full((n_rays, 3), np.nan)
        normal = np.full((n_rays, 3), np.nan)
        diffuse_color = np.zeros((n_rays, 3))
        albedo = np.zeros((n_rays, 4))
        specular_exponent = np.zeros(n_rays)
        refractive_index = np.ones(n_rays)

        on_sphere = sphere_idx >= 0
        if np.any(on_sphere):
            idx = sphere_idx[on_sphere]
            p = ray_origins[on_sphere] + sphere_dist[on_sphere, None] * ray_directions[on_sphere]
            point[on_sphere] = p
            normal[on_sphere] = normalize(p - table.centers[idx])
            diffuse_color[on_sphere] = table.diffuse_color[idx]
            albedo[on_sphere] = table.albedo[idx]
            specular_exponent[on_sphere] = table.specular_exponent[idx]
            refractive_index[on_sphere] = table.refractive_index[idx]

        if self.scene.checkerboard:
            t_floor, floor_colors = intersect_checkerboard(ray_origins, ray_directions)
            on_floor = t_floor < sphere_dist
            if np.any(on_floor):
                distance = np.where(on_floor, t_floor, sphere_dist)
                point[on_floor] = (ray_origins[on_floor]
                                   + t_floor[on_floor, None] * ray_directions[on_floor])
                normal[on_floor] = np.array([0.0, 1.0, 0.0])
                diffuse_color[on_floor] = floor_colors[on_floor]
                albedo[on_floor] = np.array(constants.FLOOR_ALBEDO)
                specular_exponent[on_floor] = constants.FLOOR_SPECULAR_EXPONENT
                refractive_index[on_floor] = constants.FLOOR_REFRACTIVE_INDEX

        hit = distance < constants.FAR_PLANE

        # Anything beyond the far plane has escaped the scene
        escaped = ~hit
        distance = np.where(hit, distance, np.inf)
        point[escaped] = np.nan
        normal[escaped] = np.nan
        diffuse_color[escaped] = 0.0
        albedo[escaped] = 0.0
        specular_exponent[escaped] = 0.0
        refractive_index[escaped] = 1.0

        return HitResult(
            hit=hit,
            distance=distance,
            point=point,
            normal=normal,
            diffuse_color=diffuse_color,
            albedo=albedo,
            specular_exponent=specular_exponent,
            refractive_index=refractive_index,
        )

    def select_one(self, ray_origin, ray_direction):
        """
        Closest intersection of a single ray.

        Returns:
            HitRecord, or None if the ray escapes the scene
        """
        hits = self.select(np.asarray(ray_origin, dtype=float)[None, :],
                           np.asarray(ray_direction, dtype=float)[None, :])
        return hits.record(0)


class MaterialSystem:
    """
    Responsible for direct illumination at hit points.

    Each light is tested with a shadow probe; occluded lights contribute
    nothing (hard shadows), visible ones add Lambert diffuse and Phong
    specular intensity.
    """

    def __init__(self, scene, hit_selector=None):
        """
        Args:
            scene: Scene whose lights illuminate the hits
            hit_selector: HitSelector used for shadow probes
        """
        self.scene = scene
        self.hit_selector = hit_selector or HitSelector(scene)

    def is_occluded(self, points, normals, light_position):
        """
        Shadow probe toward a point light.

        Returns:
            (N,) bool, True where something lies strictly between the
            (offset) hit point and the light
        """
        to_light = np.asarray(light_position, dtype=float) - points
        light_distance = norm(to_light)
        light_dirs = normalize(to_light)

        shadow_origins = offset_origin(points, normals, light_dirs)
        probe = self.hit_selector.select(shadow_origins, light_dirs)

        occluded = np.zeros(points.shape[0], dtype=bool)
        if np.any(probe.hit):
            blocker_distance = norm(probe.point[probe.hit] - shadow_origins[probe.hit])
            occluded[probe.hit] = blocker_distance < light_distance[probe.hit]
        return occluded

    def direct_lighting(self, points, normals, view_dirs, specular_exponents):
        """
        Accumulate diffuse and specular light intensity.

        Args:
            points: (N, 3) hit points
            normals: (N, 3) outward unit normals
            view_dirs: (N, 3) directions of the rays that produced the hits
            specular_exponents: (N,) Phong exponents

        Returns:
            tuple: (diffuse_intensity, specular_intensity), both (N,)
        """
        n_hits = points.shape[0]
        diffuse = np.zeros(n_hits)
        specular = np.zeros(n_hits)

        for light in self.scene.lights:
            light_dirs = normalize(np.asarray(light.position) - points)
            lit = ~self.is_occluded(points, normals, light.position)
            if not np.any(lit):
                continue

            lambert = np.maximum(0.0, dot(light_dirs, normals))
            mirror = np.maximum(0.0, dot(reflect(light_dirs, normals), view_dirs))
            phong = np.power(mirror, specular_exponents)

            diffuse[lit] += light.intensity * lambert[lit]
            specular[lit] += light.intensity * phong[lit]

        return diffuse, specular

import functools

import numpy as np

from whitted_renders import constants
from whitted_renders.environment import EnvironmentMap
from whitted_renders.rendering import HitSelector, MaterialSystem
from whitted_renders.vectors import normalize, offset_origin, reflect, refract


def primary_ray_directions(width, height, fov):
    """
    Pinhole camera rays through pixel centers.

    The camera sits at the origin looking down -Z with +Y up. Row 0 is the
    top of the image.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        fov: Vertical field of view (radians)

    Returns:
        (height, width, 3) array of unit directions
    """
    tan_half_fov = np.tan(fov / 2.0)
    i = np.arange(width)
    j = np.arange(height)

    x = (2.0 * (i + 0.5) / width - 1.0) * tan_half_fov * width / height
    y = -(2.0 * (j + 0.5) / height - 1.0) * tan_half_fov
    px, py = np.meshgrid(x, y)

    ray_dirs = np.stack([px, py, -np.ones_like(px)], axis=-1)
    return normalize(ray_dirs)


def tone_map(framebuffer):
    """
    Convert linear radiance to 8-bit color.

    Pixels whose brightest component exceeds 1 are scaled down as a whole,
    preserving hue. The result is then clamped to [0, 1] and quantized.
    No gamma correction is applied.

    Args:
        framebuffer: (..., 3) float radiance

    Returns:
        (..., 3) uint8 array
    """
    framebuffer = np.asarray(framebuffer, dtype=float)
    peak = np.max(framebuffer, axis=-1, keepdims=True)
    scaled = np.where(peak > 1.0, framebuffer / np.maximum(peak, 1.0), framebuffer)
    return (255.0 * np.clip(scaled, 0.0, 1.0)).astype(np.uint8)


class Renderer:
    def __init__(self, scene, environment=None, width=constants.DEFAULT_WIDTH,
                 height=constants.DEFAULT_HEIGHT, fov=constants.DEFAULT_FOV,
                 max_depth=constants.MAX_DEPTH):
        """
        Initialize a Whitted ray tracer for a fixed scene.

        The scene and environment map are treated as read-only for the
        lifetime of the renderer.

        Args:
            scene: Scene to render
            environment: EnvironmentMap for escaping rays. Defaults to a solid
                map of constants.BACKGROUND_COLOR.
            width: Default image width in pixels
            height: Default image height in pixels
            fov: Default field of view (radians)
            max_depth: Deepest recursion level that is still shaded; rays
                deeper than this return the environment color
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")

        self.scene = scene
        self.environment = environment if environment is not None else EnvironmentMap.solid()
        self.width = width
        self.height = height
        self.fov = fov
        self.max_depth = max_depth

        self.hit_selector = HitSelector(scene)
        self.material_system = MaterialSystem(scene, self.hit_selector)

        # Number of cast_ray invocations since construction
        self.ray_cast_calls = 0

    def cast_ray(self, ray_origins, ray_directions, depth=0):
        """
        Radiance arriving along each ray.

        Vectorized for N rays: one invocation shades the whole batch and
        recurses once for all reflected and once for all refracted rays.

        Args:
            ray_origins: (3,) or (N, 3) origin points
            ray_directions: (3,) or (N, 3) unit directions
            depth: Recursion level of these rays (0 for primary rays)

        Returns:
            (3,) or (N, 3) radiance
        """
        is_single = np.ndim(ray_directions) == 1
        ray_directions = np.atleast_2d(np.asarray(ray_directions, dtype=float))
        ray_origins = np.broadcast_to(np.asarray(ray_origins, dtype=float), ray_directions.shape)

        self.ray_cast_calls += 1

        if depth > self.max_depth:
            colors = self.environment.sample(ray_directions)
        else:
            colors = self._shade(ray_origins, ray_directions, depth)

        return colors[0] if is_single else colors

    def _trace_secondary(self, ray_origins, ray_directions, depth):
        # Children past the depth limit would only sample the environment
        if depth > self.max_depth:
            return self.environment.sample(ray_directions)
        return self.cast_ray(ray_origins, ray_directions, depth)

    def _shade(self, ray_origins, ray_directions, depth):
        hits = self.hit_selector.select(ray_origins, ray_directions)

        # Misses keep the background
        colors = self.environment.sample(ray_directions)
        mask = hits.hit
        if not np.any(mask):
            return colors

        incident = ray_directions[mask]
        points = hits.point[mask]
        normals = hits.normal[mask]
        albedo = hits.albedo[mask]

        reflect_dirs = normalize(reflect(incident, normals))
        refract_dirs = normalize(refract(incident, normals, hits.refractive_index[mask]))
        reflect_origins = offset_origin(points, normals, reflect_dirs)
        refract_origins = offset_origin(points, normals, refract_dirs)

        reflect_colors = self._trace_secondary(reflect_origins, reflect_dirs, depth + 1)
        refract_colors = self._trace_secondary(refract_origins, refract_dirs, depth + 1)

        diffuse, specular = self.material_system.direct_lighting(
            points, normals, incident, hits.specular_exponent[mask])

        colors[mask] = (hits.diffuse_color[mask] * (diffuse * albedo[:, 0])[:, None]
                        + (specular * albedo[:, 1])[:, None]
                        + reflect_colors * albedo[:, 2, None]
                        + refract_colors * albedo[:, 3, None])
        return colors

    def render_framebuffer(self, width=None, height=None, fov=None,
                           batch_size=constants.DEFAULT_BATCH_SIZE):
        """
        Trace one primary ray per pixel.

        Args:
            width: Image width in pixels (defaults to self.width)
            height: Image height in pixels (defaults to self.height)
            fov: Field of view in radians (defaults to self.fov)
            batch_size: Number of pixels traced per vectorized batch

        Returns:
            (height, width, 3) float64 linear radiance, owned by the caller
        """
        width = self.width if width is None else width
        height = self.height if height is None else height
        fov = self.fov if fov is None else fov
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        flat_ray_dirs = primary_ray_directions(width, height, fov).reshape(-1, 3)
        ray_origin = np.array([0.0, 0.0, 0.0])

        framebuffer = np.empty_like(flat_ray_dirs)
        for start in range(0, flat_ray_dirs.shape[0], batch_size):
            stop = start + batch_size
            framebuffer[start:stop] = self.cast_ray(ray_origin, flat_ray_dirs[start:stop])

        return framebuffer.reshape(height, width, 3)

    @functools.lru_cache(maxsize=8)
    def _render_cached(self, width, height, fov):
        """Internal cached render call using hashable arguments."""
        return tone_map(self.render_framebuffer(width, height, fov))

    def render(self, width=None, height=None, fov=None):
        """
        Render the scene to an 8-bit image.

        Returns:
            (height, width, 3) uint8 array
        """
        width = self.width if width is None else width
        height = self.height if height is None else height
        fov = self.fov if fov is None else fov
        return self._render_cached(int(width), int(height), float(fov))

"""
Environment map sampling for rays that escape the scene.

The map is an equirectangular image indexed by the spherical coordinates of
the ray direction. It is loaded once, before rendering, and only read after.
"""
import numpy as np
import PIL.Image
from whitted_renders import constants
from whitted_renders.utils import batch_compatible


class ResourceError(RuntimeError):
    """An input or output resource could not be opened, decoded or created."""


def direction_to_uv(directions):
    """
    Spherical (u, v) coordinates of unit directions.

    u = 0.5 + atan2(dz, dx) / 2pi, v = 0.5 - asin(dy) / pi

    Returns:
        tuple: (u, v) arrays in [0, 1]
    """
    directions = np.asarray(directions, dtype=float)
    dx, dy, dz = directions[..., 0], directions[..., 1], directions[..., 2]
    u = 0.5 + np.arctan2(dz, dx) / (2.0 * np.pi)
    v = 0.5 - np.arcsin(np.clip(dy, -1.0, 1.0)) / np.pi
    return u, v


class EnvironmentMap:
    """
    Panoramic background radiance.

    Attributes:
        pixels: (height, width, 3) float array with components in [0, 1]
    """

    def __init__(self, pixels):
        pixels = np.array(pixels, dtype=float)
        if pixels.ndim != 3 or pixels.shape[2] != 3:
            raise ValueError(f"Environment map must be (H, W, 3), got shape {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("Environment map must not be empty")
        self.pixels = pixels
        self.pixels.setflags(write=False)

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    @classmethod
    def from_file(cls, path):
        """
        Decode an image file into an environment map.

        Raises:
            ResourceError: If the file cannot be opened or decoded
        """
        try:
            with PIL.Image.open(path) as image:
                rgb = np.asarray(image.convert("RGB"), dtype=float)
        except (OSError, PIL.UnidentifiedImageError) as exc:
            raise ResourceError(f"Cannot load environment map {path}: {exc}") from exc
        return cls(rgb / 255.0)

    @classmethod
    def from_array(cls, pixels):
        """Wrap an (H, W, 3) array; uint8 data is rescaled to [0, 1]."""
        pixels = np.asarray(pixels)
        if pixels.dtype == np.uint8:
            pixels = pixels / 255.0
        return cls(pixels)

    @classmethod
    def solid(cls, color=None):
        """A 1x1 map that returns the same color for every direction."""
        color = constants.BACKGROUND_COLOR if color is None else color
        return cls(np.asarray(color, dtype=float).reshape(1, 1, 3))

    @batch_compatible
    def sample(self, directions):
        """
        Background radiance seen along each direction.

        Args:
            directions: (3,) or (N, 3) unit directions

        Returns:
            (3,) or (N, 3) colors
        """
        u, v = direction_to_uv(directions)
        cols = np.clip((u * self.width).astype(int), 0, self.width - 1)
        rows = np.clip((v * self.height).astype(int), 0, self.height - 1)
        return self.pixels[rows, cols]

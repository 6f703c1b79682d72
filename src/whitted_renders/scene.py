"""
Scene model for the Whitted renderer: materials, spheres, point lights.

All scene objects are immutable once constructed. A Scene is built once by
the caller and shared read-only by every intersection and shading call.
"""
from dataclasses import dataclass, field
from functools import cached_property

import numpy as np


def _as_tuple(values, length, name):
    values = tuple(float(v) for v in values)
    if len(values) != length:
        raise ValueError(f"{name} must have {length} components, got {len(values)}")
    return values


@dataclass(frozen=True)
class Material:
    """
    Surface description for Phong/Whitted shading.

    Attributes:
        albedo: (kd, ks, kr, kt) weights for the diffuse, specular, reflected
            and refracted contributions. They need not sum to 1.
        diffuse_color: RGB diffuse color
        specular_exponent: Phong exponent
        refractive_index: Index of refraction of the material
    """
    albedo: tuple = (1.0, 0.0, 0.0, 0.0)
    diffuse_color: tuple = (0.0, 0.0, 0.0)
    specular_exponent: float = 0.0
    refractive_index: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "albedo", _as_tuple(self.albedo, 4, "albedo"))
        object.__setattr__(self, "diffuse_color",
                           _as_tuple(self.diffuse_color, 3, "diffuse_color"))
        object.__setattr__(self, "specular_exponent", float(self.specular_exponent))
        object.__setattr__(self, "refractive_index", float(self.refractive_index))
        if self.refractive_index <= 0:
            raise ValueError(f"refractive_index must be positive, got {self.refractive_index}")


@dataclass(frozen=True)
class Sphere:
    center: tuple
    radius: float
    material: Material

    def __post_init__(self):
        object.__setattr__(self, "center", _as_tuple(self.center, 3, "center"))
        object.__setattr__(self, "radius", float(self.radius))
        if self.radius <= 0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")


@dataclass(frozen=True)
class Light:
    position: tuple
    intensity: float

    def __post_init__(self):
        object.__setattr__(self, "position", _as_tuple(self.position, 3, "position"))
        object.__setattr__(self, "intensity", float(self.intensity))
        if self.intensity <= 0:
            raise ValueError(f"Light intensity must be positive, got {self.intensity}")


@dataclass(frozen=True)
class MaterialTable:
    """Per-sphere material properties laid out as arrays for gathering by index."""
    centers: np.ndarray  # (S, 3)
    radii: np.ndarray  # (S,)
    albedo: np.ndarray  # (S, 4)
    diffuse_color: np.ndarray  # (S, 3)
    specular_exponent: np.ndarray  # (S,)
    refractive_index: np.ndarray  # (S,)


@dataclass(frozen=True)
class Scene:
    """
    Ordered spheres and lights, plus the checkerboard floor toggle.

    Attributes:
        spheres: Spheres tested in order by the linear-scan intersection
        lights: Point lights used for direct illumination
        checkerboard: Whether the bounded checkerboard floor tile is present
    """
    spheres: tuple = field(default_factory=tuple)
    lights: tuple = field(default_factory=tuple)
    checkerboard: bool = True

    def __post_init__(self):
        object.__setattr__(self, "spheres", tuple(self.spheres))
        object.__setattr__(self, "lights", tuple(self.lights))

    @cached_property
    def material_table(self):
        """Sphere geometry and materials as (S, ...) arrays."""
        spheres = self.spheres
        return MaterialTable(
            centers=np.array([s.center for s in spheres], dtype=float).reshape(-1, 3),
            radii=np.array([s.radius for s in spheres], dtype=float),
            albedo=np.array([s.material.albedo for s in spheres], dtype=float).reshape(-1, 4),
            diffuse_color=np.array([s.material.diffuse_color for s in spheres],
                                   dtype=float).reshape(-1, 3),
            specular_exponent=np.array([s.material.specular_exponent for s in spheres],
                                       dtype=float),
            refractive_index=np.array([s.material.refractive_index for s in spheres],
                                      dtype=float),
        )


# Stock materials
IVORY = Material(albedo=(0.6, 0.3, 0.1, 0.0), diffuse_color=(0.4, 0.4, 0.3),
                 specular_exponent=50.0, refractive_index=1.0)
GLASS = Material(albedo=(0.0, 0.5, 0.1, 0.8), diffuse_color=(0.6, 0.7, 0.8),
                 specular_exponent=125.0, refractive_index=1.5)
RED_RUBBER = Material(albedo=(0.9, 0.1, 0.0, 0.0), diffuse_color=(0.3, 0.1, 0.1),
                      specular_exponent=10.0, refractive_index=1.0)
MIRROR = Material(albedo=(0.0, 10.0, 0.8, 0.0), diffuse_color=(1.0, 1.0, 1.0),
                  specular_exponent=1425.0, refractive_index=1.0)


def build_default_scene(checkerboard=True):
    """Four spheres (ivory, glass, red rubber, mirror) lit by three lights."""
    spheres = [
        Sphere((-3.0, 0.0, -16.0), 2.0, IVORY),
        Sphere((-1.0, -1.5, -12.0), 2.0, GLASS),
        Sphere((1.5, -0.5, -18.0), 3.0, RED_RUBBER),
        Sphere((7.0, 5.0, -18.0), 4.0, MIRROR),
    ]
    lights = [
        Light((-20.0, 20.0, 20.0), 1.5),
        Light((30.0, 50.0, -25.0), 1.8),
        Light((30.0, 20.0, 30.0), 1.7),
    ]
    return Scene(spheres=spheres, lights=lights, checkerboard=checkerboard)


def build_single_sphere_scene(checkerboard=False):
    """One diffuse-only sphere on the left of the view axis, one light."""
    matte = Material(albedo=(1.0, 0.0, 0.0, 0.0), diffuse_color=(0.4, 0.4, 0.3),
                     specular_exponent=1.0, refractive_index=1.0)
    return Scene(
        spheres=[Sphere((-3.0, 0.0, -16.0), 2.0, matte)],
        lights=[Light((-20.0, 20.0, 20.0), 1.5)],
        checkerboard=checkerboard,
    )

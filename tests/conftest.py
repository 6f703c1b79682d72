"""
Pytest fixtures and configuration for Whitted Renderer tests.

This module provides shared scenes, environment maps and assertion helpers.
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pytest
from whitted_renders.environment import EnvironmentMap
from whitted_renders.scene import (
    Light, Material, Scene, Sphere, build_default_scene, build_single_sphere_scene,
)


@pytest.fixture
def origin():
    """Camera position."""
    return np.array([0.0, 0.0, 0.0])


@pytest.fixture
def default_scene():
    """The four-sphere scene with the checkerboard floor."""
    return build_default_scene()


@pytest.fixture
def single_sphere_scene():
    """One diffuse sphere at (-3, 0, -16), one light, no floor."""
    return build_single_sphere_scene()


@pytest.fixture
def empty_scene():
    """Nothing to hit at all."""
    return Scene(spheres=[], lights=[], checkerboard=False)


@pytest.fixture
def matte():
    """Diffuse-only white material."""
    return Material(albedo=(1.0, 0.0, 0.0, 0.0), diffuse_color=(1.0, 1.0, 1.0),
                    specular_exponent=1.0, refractive_index=1.0)


@pytest.fixture
def sky():
    """Solid background environment."""
    return EnvironmentMap.solid([0.2, 0.7, 0.8])


@pytest.fixture
def gradient_env():
    """4x8 map where every pixel is distinct: (row/10, col/10, 0.5)."""
    rows, cols = np.meshgrid(np.arange(4), np.arange(8), indexing="ij")
    pixels = np.stack([rows / 10.0, cols / 10.0, np.full(rows.shape, 0.5)], axis=-1)
    return EnvironmentMap(pixels)


@pytest.fixture
def standard_rays():
    """Common unit ray directions."""
    return {
        'forward': np.array([0.0, 0.0, -1.0]),
        'back': np.array([0.0, 0.0, 1.0]),
        'up': np.array([0.0, 1.0, 0.0]),
        'down': np.array([0.0, -1.0, 0.0]),
        'right': np.array([1.0, 0.0, 0.0]),
    }


def lit_sphere_scene(material, light_position=(0.0, 0.0, 0.0)):
    """A single sphere at (0, 0, -10) of radius 2 with one unit light."""
    return Scene(
        spheres=[Sphere((0.0, 0.0, -10.0), 2.0, material)],
        lights=[Light(light_position, 1.0)],
        checkerboard=False,
    )


def assert_color_close(actual, expected, rtol=1e-6, atol=1e-6, err_msg=""):
    """Assert that two colors are close, with helpful error messages."""
    np.testing.assert_allclose(
        actual, expected, rtol=rtol, atol=atol,
        err_msg=f"Color mismatch: {err_msg}"
    )


def assert_color_in_range(color, min_val=0.0, max_val=1.0, err_msg=""):
    """Assert that all color components are within valid range."""
    assert np.all(color >= min_val), f"Color below minimum {min_val}: {color} - {err_msg}"
    assert np.all(color <= max_val), f"Color above maximum {max_val}: {color} - {err_msg}"

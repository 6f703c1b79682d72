import numpy as np
import PIL.Image
import pytest
from whitted_renders import constants
from whitted_renders.environment import EnvironmentMap, ResourceError, direction_to_uv


@pytest.mark.parametrize("direction, expected_uv", [
    ([1.0, 0.0, 0.0], (0.5, 0.5)),
    ([0.0, 0.0, 1.0], (0.75, 0.5)),
    ([0.0, 0.0, -1.0], (0.25, 0.5)),
    ([-1.0, 0.0, 0.0], (1.0, 0.5)),
    ([0.0, 1.0, 0.0], (0.5, 0.0)),
    ([0.0, -1.0, 0.0], (0.5, 1.0)),
])
def test_direction_to_uv(direction, expected_uv):
    u, v = direction_to_uv(np.array(direction))
    assert (u, v) == pytest.approx(expected_uv)


def test_uv_stays_in_unit_square():
    rng = np.random.default_rng(7)
    directions = rng.normal(size=(500, 3))
    directions /= np.linalg.norm(directions, axis=1, keepdims=True)
    u, v = direction_to_uv(directions)
    assert np.all((u >= 0.0) & (u <= 1.0))
    assert np.all((v >= 0.0) & (v <= 1.0))


def test_sample_picks_pixel(gradient_env):
    # u = 0.5 -> column 4, v = 0.5 -> row 2
    np.testing.assert_allclose(gradient_env.sample(np.array([1.0, 0.0, 0.0])), [0.2, 0.4, 0.5])
    # Straight up is the top row
    np.testing.assert_allclose(gradient_env.sample(np.array([0.0, 1.0, 0.0])), [0.0, 0.4, 0.5])


def test_sample_clamps_edges(gradient_env):
    # v = 1 and u = 1 land one past the last row/column
    np.testing.assert_allclose(gradient_env.sample(np.array([0.0, -1.0, 0.0])), [0.3, 0.4, 0.5])
    np.testing.assert_allclose(gradient_env.sample(np.array([-1.0, 0.0, 0.0])), [0.2, 0.7, 0.5])


def test_sample_batch(gradient_env, standard_rays):
    directions = np.stack(list(standard_rays.values()))
    colors = gradient_env.sample(directions)
    assert colors.shape == (len(standard_rays), 3)
    for direction, color in zip(directions, colors):
        np.testing.assert_array_equal(gradient_env.sample(direction), color)


def test_solid_default_is_background(standard_rays):
    env = EnvironmentMap.solid()
    assert (env.width, env.height) == (1, 1)
    for direction in standard_rays.values():
        np.testing.assert_allclose(env.sample(direction), constants.BACKGROUND_COLOR)


def test_from_file(tmp_path):
    data = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]],
                     [[10, 20, 30], [40, 50, 60], [70, 80, 90]]], dtype=np.uint8)
    path = tmp_path / "env.png"
    PIL.Image.fromarray(data).save(path)

    env = EnvironmentMap.from_file(path)
    assert (env.width, env.height) == (3, 2)
    np.testing.assert_allclose(env.pixels, data / 255.0)


def test_from_file_converts_grayscale(tmp_path):
    path = tmp_path / "gray.png"
    PIL.Image.fromarray(np.full((2, 2), 51, dtype=np.uint8)).save(path)

    env = EnvironmentMap.from_file(path)
    assert env.pixels.shape == (2, 2, 3)
    np.testing.assert_allclose(env.pixels, 0.2)


def test_from_file_missing(tmp_path):
    with pytest.raises(ResourceError, match="Cannot load"):
        EnvironmentMap.from_file(tmp_path / "nope.png")


def test_from_file_not_an_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("definitely not a png")
    with pytest.raises(ResourceError):
        EnvironmentMap.from_file(path)


def test_from_array_rescales_uint8():
    env = EnvironmentMap.from_array(np.array([[[255, 0, 51]]], dtype=np.uint8))
    np.testing.assert_allclose(env.pixels[0, 0], [1.0, 0.0, 0.2])


def test_pixels_are_read_only_copy():
    source = np.zeros((2, 2, 3))
    env = EnvironmentMap(source)

    with pytest.raises(ValueError):
        env.pixels[0, 0, 0] = 1.0
    source[0, 0, 0] = 1.0
    assert env.pixels[0, 0, 0] == 0.0


@pytest.mark.parametrize("shape", [(2, 2), (2, 2, 4), (0, 2, 3), (2, 0, 3)])
def test_rejects_bad_shape(shape):
    with pytest.raises(ValueError):
        EnvironmentMap(np.zeros(shape))

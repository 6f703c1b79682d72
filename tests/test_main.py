import argparse

import numpy as np
import PIL.Image
import pytest
from whitted_renders.environment import ResourceError
from whitted_renders.core import Renderer
from whitted_renders.main import build_renderer, main, render_to_file, save_image


def _args(**overrides):
    values = dict(envmap=None, width=32, height=24, fov=90.0, no_floor=False, single_sphere=False)
    values.update(overrides)
    return argparse.Namespace(**values)


def test_render_writes_image(tmp_path, capsys):
    output = tmp_path / "out.png"
    assert main(["-o", str(output), "--width", "16", "--height", "12"]) == 0

    with PIL.Image.open(output) as image:
        assert image.size == (16, 12)
        assert image.mode == "RGB"
    assert "Saved" in capsys.readouterr().out


def test_render_uses_environment_map(tmp_path):
    envmap = tmp_path / "red.png"
    PIL.Image.fromarray(np.full((4, 8, 3), [255, 0, 0], dtype=np.uint8)).save(envmap)
    output = tmp_path / "out.png"

    assert main(["-o", str(output), "--envmap", str(envmap), "--width", "16",
                 "--height", "12", "--single-sphere", "--no-floor"]) == 0
    with PIL.Image.open(output) as image:
        assert image.getpixel((15, 0)) == (255, 0, 0)


def test_missing_environment_map(tmp_path, capsys):
    code = main(["-o", str(tmp_path / "out.png"), "--envmap", str(tmp_path / "missing.png"),
                 "--width", "8", "--height", "6"])
    assert code == 1
    assert "Error" in capsys.readouterr().err
    assert not (tmp_path / "out.png").exists()


def test_missing_output_directory(tmp_path, capsys):
    code = main(["-o", str(tmp_path / "no" / "such" / "out.png"), "--width", "8", "--height", "6"])
    assert code == 1
    assert "does not exist" in capsys.readouterr().err


def test_layout(tmp_path):
    output = tmp_path / "layout.png"
    assert main(["--layout", str(output), "--width", "8", "--height", "6"]) == 0
    assert output.stat().st_size > 0


def test_rejects_non_positive_size():
    with pytest.raises(SystemExit):
        main(["--width", "0"])


def test_save_image_unknown_format(tmp_path):
    with pytest.raises(ResourceError):
        save_image(np.zeros((2, 2, 3), dtype=np.uint8), tmp_path / "out.notaformat")


def test_build_renderer_scenes():
    renderer = build_renderer(_args(fov=60.0))
    assert len(renderer.scene.spheres) == 4
    assert renderer.scene.checkerboard
    assert renderer.fov == pytest.approx(np.pi / 3)
    assert (renderer.width, renderer.height) == (32, 24)

    renderer = build_renderer(_args(single_sphere=True, no_floor=True))
    assert len(renderer.scene.spheres) == 1
    assert not renderer.scene.checkerboard


def test_missing_output_directory_fails_before_rendering(tmp_path, single_sphere_scene):
    renderer = Renderer(single_sphere_scene, width=8, height=6)
    with pytest.raises(ResourceError, match="does not exist"):
        render_to_file(renderer, str(tmp_path / "no" / "out.png"))
    assert renderer.ray_cast_calls == 0


class _FakeDemo:
    def __init__(self):
        self.launched = False

    def launch(self):
        self.launched = True


def test_ui_receives_scene_options(tmp_path, monkeypatch):
    envmap = tmp_path / "red.png"
    PIL.Image.fromarray(np.full((2, 2, 3), [255, 0, 0], dtype=np.uint8)).save(envmap)
    received = {}
    demo = _FakeDemo()

    def fake_create_ui(environment=None, single_sphere=False, floor=True):
        received.update(environment=environment, single_sphere=single_sphere, floor=floor)
        return demo

    monkeypatch.setattr("whitted_renders.ui.create_ui", fake_create_ui)
    assert main(["--ui", "--envmap", str(envmap), "--single-sphere", "--no-floor"]) == 0

    assert demo.launched
    assert received["single_sphere"] and not received["floor"]
    np.testing.assert_allclose(received["environment"].pixels, [[[1.0, 0.0, 0.0]] * 2] * 2)


def test_ui_with_missing_environment_map(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr("whitted_renders.ui.create_ui", lambda *args, **kwargs: _FakeDemo())
    assert main(["--ui", "--envmap", str(tmp_path / "missing.png")]) == 1
    assert "Error" in capsys.readouterr().err

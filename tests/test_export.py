import dataclasses

import pytest
from PIL import Image
from PyQt5 import QtGui

from keeper.animation import AnimationController, Phase
from keeper.errors import ExportError
from keeper.export import capture_frames, default_filename, qimage_to_pil, record_gif, save_png
from keeper.pattern import generate_pattern
from tests.conftest import PEACE_TEXT


@pytest.fixture
def breathing(qapp, config):
    controller = AnimationController(96, 96, config=config)
    controller.start(generate_pattern(PEACE_TEXT), run_timer=False)
    yield controller
    controller.stop()


def test_default_filename_uses_milliseconds():
    assert default_filename("png", now=1700000000.25) == "intention-mandala-1700000000250.png"
    assert default_filename(".gif", now=1.0) == "intention-mandala-1000.gif"


def test_qimage_conversion_keeps_colours(qapp):
    image = QtGui.QImage(4, 3, QtGui.QImage.Format_RGB32)
    image.fill(QtGui.QColor(200, 40, 10))
    frame = qimage_to_pil(image)
    assert frame.size == (4, 3)
    assert frame.mode == "RGB"
    assert frame.getpixel((2, 1)) == (200, 40, 10)


def test_save_png(breathing, tmp_path):
    path = save_png(breathing.surface.snapshot(), tmp_path / "out" / default_filename("png", now=1.0))
    with Image.open(path) as image:
        assert image.format == "PNG"
        assert image.size == (96, 96)


def test_save_png_refuses_null_image(qapp, tmp_path):
    with pytest.raises(ExportError):
        save_png(QtGui.QImage(), tmp_path / "empty.png")


def test_capture_frames_leaves_the_live_animation_alone(breathing):
    before = dataclasses.replace(breathing.state)
    frames = capture_frames(breathing, 3, ticks_per_frame=2)
    assert len(frames) == 3
    assert frames[0].tobytes() != frames[-1].tobytes()
    assert breathing.state == before
    assert breathing.phase is Phase.BREATHING


def test_record_gif_keeps_the_live_clock(breathing, tmp_path):
    breathing.tick()
    before = dataclasses.replace(breathing.state)
    record_gif(breathing, tmp_path / "live.gif", fps=20, seconds=1)
    assert breathing.state == before


def test_record_gif(breathing, tmp_path):
    path = record_gif(breathing, tmp_path / "mandala.gif", fps=10, seconds=0.4)
    with Image.open(path) as image:
        assert image.format == "GIF"
        assert image.n_frames >= 2
        assert image.info.get("loop") == 0


def test_recording_needs_a_breathing_pattern(qapp, config, tmp_path):
    idle = AnimationController(32, 32, config=config)
    with pytest.raises(ExportError):
        record_gif(idle, tmp_path / "idle.gif", fps=5, seconds=1)

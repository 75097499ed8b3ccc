"""PNG snapshots and GIF recordings of the animation surface."""

from __future__ import annotations

import time
from pathlib import Path
from typing import List, Optional, Union

from PIL import Image
from PyQt5 import QtGui

from .animation import AnimationController, Phase
from .diagnostics import debug
from .errors import ExportError

PathLike = Union[str, Path]


def default_filename(suffix: str, now: Optional[float] = None) -> str:
    stamp = int((time.time() if now is None else now) * 1000)
    return f"intention-mandala-{stamp}.{suffix.lstrip('.')}"


def qimage_to_pil(image: QtGui.QImage) -> Image.Image:
    converted = image.convertToFormat(QtGui.QImage.Format_RGB32)
    ptr = converted.constBits()
    ptr.setsize(converted.sizeInBytes())
    data = bytes(ptr)
    size = (converted.width(), converted.height())
    frame = Image.frombuffer("RGBA", size, data, "raw", "BGRA", converted.bytesPerLine(), 1)
    return frame.convert("RGB")


def save_png(image: QtGui.QImage, path: PathLike) -> Path:
    target = Path(path)
    if image is None or image.isNull():
        raise ExportError("Nothing to export: the surface is empty")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ExportError(f"Cannot create {target.parent}: {exc}") from exc
    if not image.save(str(target), "PNG"):
        raise ExportError(f"Qt could not write {target}")
    return target


def capture_frames(controller: AnimationController, count: int, ticks_per_frame: int = 1) -> List[Image.Image]:
    """Grab ``count`` frames from a fork of ``controller``.

    The fork starts from the current frame and is advanced synchronously, so
    the live animation keeps its own clock.
    """

    if controller.phase is not Phase.BREATHING or controller.pattern is None:
        raise ExportError("Generate a pattern before recording")
    recorder = controller.fork()
    frames: List[Image.Image] = []
    try:
        for _ in range(max(1, int(count))):
            for _ in range(max(1, int(ticks_per_frame))):
                recorder.tick()
            frames.append(qimage_to_pil(recorder.surface.snapshot()))
    finally:
        recorder.stop()
    return frames


def record_gif(
    controller: AnimationController,
    path: PathLike,
    *,
    fps: int = 20,
    seconds: float = 5.0,
    frame_interval_ms: int = 16,
) -> Path:
    """Record ``seconds`` of animation at ``fps`` and write an endlessly looping GIF."""

    fps = max(1, int(fps))
    count = max(1, int(round(fps * seconds)))
    ticks = max(1, int(round((1000.0 / fps) / max(1, frame_interval_ms))))
    target = Path(path)
    debug(f"recording {count} frames ({ticks} ticks each) to {target}")
    frames = capture_frames(controller, count, ticks)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        frames[0].save(
            str(target),
            save_all=True,
            append_images=frames[1:],
            duration=int(round(1000.0 / fps)),
            loop=0,
        )
    except (OSError, ValueError) as exc:
        raise ExportError(f"Could not write {target}: {exc}") from exc
    return target


__all__ = ["capture_frames", "default_filename", "qimage_to_pil", "record_gif", "save_png"]

"""Widgets showing the animation surface.

:func:`KeeperViewWidget` returns either an OpenGL-backed or a raster widget
with the same API. Both only blit the controller's surface: all drawing
happens in :mod:`keeper.renderer`, so the picture on screen is the exact
image that gets exported.
"""

from __future__ import annotations

import os
from typing import Optional, Tuple

from PyQt5 import QtCore, QtGui, QtWidgets

from ..animation import AnimationController
from ..diagnostics import warn

__all__ = ["KeeperViewWidget", "square_target"]


def square_target(width: int, height: int) -> Tuple[int, int, int]:
    """Left, top and side of the largest centred square fitting ``width x height``."""

    side = max(0, min(width, height))
    return (width - side) // 2, (height - side) // 2, side


def _create_opengl_functions():
    factory = getattr(QtGui, "QOpenGLFunctions", None)
    if factory is None:
        return None, AttributeError("PyQt5.QtGui has no attribute 'QOpenGLFunctions'")
    try:
        functions = factory()
        functions.initializeOpenGLFunctions()
    except Exception as exc:  # pragma: no cover - depends on runtime GL state
        return None, exc
    return functions, None


class _ViewWidgetBase:
    """Common behaviour shared by both backends."""

    def _init_view_widget(self, controller: Optional[AnimationController]) -> None:
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, True)
        self.setMinimumSize(200, 200)
        self.controller: Optional[AnimationController] = None
        if controller is not None:
            self.set_controller(controller)

    def set_controller(self, controller: AnimationController) -> None:
        if self.controller is not None:
            try:
                self.controller.frameRendered.disconnect(self.update)
            except TypeError:
                pass
        self.controller = controller
        controller.frameRendered.connect(self.update)
        self.update()

    def _render_with_painter(self, painter: QtGui.QPainter) -> None:
        painter.fillRect(self.rect(), QtGui.QColor("black"))
        if self.controller is None:
            return
        image = self.controller.surface.image
        if image is None:
            return
        left, top, side = square_target(self.width(), self.height())
        if side <= 0:
            return
        painter.setRenderHint(QtGui.QPainter.SmoothPixmapTransform, True)
        painter.drawImage(QtCore.QRect(left, top, side, side), image)


class _OpenGLViewWidget(QtWidgets.QOpenGLWidget, _ViewWidgetBase):
    """OpenGL-backed widget when the system can create a GL context."""

    def __init__(self, controller: Optional[AnimationController] = None, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QOpenGLWidget.__init__(self, parent)
        self._gl: Optional[object] = None
        self._init_view_widget(controller)

    def initializeGL(self) -> None:  # pragma: no cover - requires GUI context
        self._gl, error = _create_opengl_functions()
        if error is not None:
            warn(f"OpenGL initialisation failed: {error}. Falling back to raster clear handling.")
        if self._gl is not None:
            self._gl.glClearColor(0.0, 0.0, 0.0, 1.0)

    def paintGL(self) -> None:  # pragma: no cover - requires GUI context
        if self._gl is not None:
            try:
                # GL_COLOR_BUFFER_BIT
                self._gl.glClear(0x00004000)
            except Exception:
                pass
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()


class _RasterViewWidget(QtWidgets.QWidget, _ViewWidgetBase):
    """Fallback widget using the raster ``QWidget`` backend."""

    def __init__(self, controller: Optional[AnimationController] = None, parent: Optional[QtWidgets.QWidget] = None) -> None:
        QtWidgets.QWidget.__init__(self, parent)
        self._init_view_widget(controller)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:  # type: ignore[override]
        del event
        painter = QtGui.QPainter(self)
        try:
            self._render_with_painter(painter)
        finally:
            painter.end()


def _should_use_opengl(force_backend: Optional[str]) -> bool:
    if force_backend == "raster":
        return False
    if force_backend == "opengl":
        return True
    env_backend = os.environ.get("KEEPER_FORCE_BACKEND", "").strip().lower()
    if env_backend == "raster":
        return False
    if env_backend == "opengl":
        return True
    if os.environ.get("QT_QPA_PLATFORM", "").strip().lower() == "offscreen":
        return False
    return hasattr(QtWidgets, "QOpenGLWidget")


def KeeperViewWidget(
    controller: Optional[AnimationController] = None,
    parent: Optional[QtWidgets.QWidget] = None,
    *,
    force_backend: Optional[str] = None,
) -> QtWidgets.QWidget:
    """Factory returning the best available view widget.

    ``force_backend`` may be ``"opengl"`` or ``"raster"``; otherwise
    ``KEEPER_FORCE_BACKEND`` decides, then the platform.
    """

    if _should_use_opengl(force_backend):
        try:
            widget = _OpenGLViewWidget(controller, parent)
            setattr(widget, "backend_name", "opengl")
            return widget
        except Exception as exc:
            warn(f"Unable to initialise OpenGL backend ({exc!r}). Using raster widget instead.")
    widget = _RasterViewWidget(controller, parent)
    setattr(widget, "backend_name", "raster")
    return widget

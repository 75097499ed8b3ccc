"""Frame composition and painting.

:func:`compose_frame` is pure: it turns a pattern plus the current render
state into a flat list of drawing items, back to front. :func:`paint_items`
executes such a list on a ``QPainter``. :class:`Surface` owns the persistent
image the frames are composited onto, so the black wash of each frame leaves
a short trail of the previous ones.
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

from PyQt5 import QtCore, QtGui

from .errors import RenderSurfaceError
from .parameters import EngineOptions
from .projection import (
    active_connection_skip,
    active_symmetries,
    lissajous_points,
    project,
    rotate_about,
)

if TYPE_CHECKING:  # pragma: no cover
    from .animation import RenderState
    from .pattern import Pattern

SIGNATURE_LABEL = "INTENTION-HASH:"
INTENTION_LABEL = "INTENTION:"
TEXT_RGB = (149, 165, 166)
TEXT_PADDING = 10


@dataclass
class FillItem:
    width: int
    height: int
    color: QtGui.QColor


@dataclass
class DotItem:
    x: float
    y: float
    r: float
    color: QtGui.QColor
    glow: float = 0.0


@dataclass
class CurveItem:
    x0: float
    y0: float
    cx: float
    cy: float
    x1: float
    y1: float
    color: QtGui.QColor
    width: float = 1.0


@dataclass
class PolylineItem:
    points: List[Tuple[float, float]]
    color: QtGui.QColor
    width: float = 1.0


@dataclass
class TextItem:
    x: float
    y: float
    text: str
    color: QtGui.QColor
    font_size: int
    align: str = "left"


FrameItem = Union[FillItem, DotItem, CurveItem, PolylineItem, TextItem]


def hsla(hue: float, saturation: float, lightness: float, alpha: float = 1.0) -> QtGui.QColor:
    """``QColor`` from a hue in degrees and fractions for the rest."""

    def _unit(value: float) -> float:
        return max(0.0, min(1.0, value))

    return QtGui.QColor.fromHslF((hue % 360.0) / 360.0, _unit(saturation), _unit(lightness), _unit(alpha))


def signature_lines(hex_value: str) -> List[str]:
    """The digest split in two halves, label excluded."""

    return [hex_value[:32], hex_value[32:]]


def wrap_words(text: str, max_chars: int) -> List[str]:
    """Greedy word wrap. A word longer than ``max_chars`` keeps its own line."""

    max_chars = max(1, int(max_chars))
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if len(candidate) > max_chars and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _signature_items(hex_value: str, width: int) -> List[TextItem]:
    font = max(8, width // 60)
    color = QtGui.QColor(*TEXT_RGB, int(0.8 * 255))
    x = width - TEXT_PADDING
    rows = [SIGNATURE_LABEL] + signature_lines(hex_value)
    return [
        TextItem(x, font * (index + 1) + TEXT_PADDING + index * 5, row, color, font, "right")
        for index, row in enumerate(rows)
    ]


def _intention_items(text: str, width: int, height: int) -> List[TextItem]:
    font = max(9, width // 55)
    line_height = font + 3
    max_chars = int((width - TEXT_PADDING * 2) / (font * 0.6))
    lines = wrap_words(text, max_chars)
    color = QtGui.QColor(*TEXT_RGB, int(0.85 * 255))
    y = height - TEXT_PADDING - len(lines) * line_height
    items = [TextItem(TEXT_PADDING, y, INTENTION_LABEL, color, font)]
    for line in lines:
        y += line_height
        items.append(TextItem(TEXT_PADDING, y, line, color, font))
    return items


def compose_frame(
    pattern: "Pattern",
    state: "RenderState",
    options: EngineOptions,
    width: int,
    height: int,
    *,
    pulse: float = 1.0,
    shrink: float = 1.0,
    trail_alpha: float = 0.95,
) -> List[FrameItem]:
    """Drawing items for one frame, back to front."""

    params = pattern.params
    points = pattern.points
    items: List[FrameItem] = [FillItem(width, height, QtGui.QColor(0, 0, 0, int(round(trail_alpha * 255))))]
    if width <= 0 or height <= 0:
        return items

    cx = width / 2.0
    cy = height / 2.0
    scale = min(width, height) / 3.0
    ring_count = params.ring_count
    skip = active_connection_skip(params, state)
    symmetries = active_symmetries(params, state)
    count = len(points)

    for ring in range(ring_count - 1, -1, -1):
        alpha = 0.3 + ring / ring_count * 0.5
        hue = params.base_hue + ring * 30.0 + state.time * params.hue_drift
        curve_pull = 0.85 - ring * 0.03
        base = [
            project(
                point, ring, ring_count, params, state, options,
                pulse=pulse, scale=scale, center=(cx, cy), shrink=shrink,
            )
            for point in points
        ]
        for layer, order in enumerate(symmetries):
            layer_alpha = alpha if layer == 0 else alpha * 0.6
            for sym in range(order):
                angle = 2.0 * math.pi * sym / order
                placed = [rotate_about(p.x, p.y, cx, cy, angle) for p in base]
                for index, point in enumerate(points):
                    x, y = placed[index]
                    depth = base[index].depth_scale
                    point_hue = hue + (point.color_shift - 0.5) * 20.0
                    size = (2 + params.complexity) * pulse * depth * (0.85 + 0.3 * point.size_variance) * shrink
                    glow = 10.0 * pulse * depth * (0.5 + point.glow_strength)
                    items.append(DotItem(x, y, max(0.5, size), hsla(point_hue, 0.7, 0.6, layer_alpha), glow))
                if count < 2:
                    continue
                line_color = hsla(hue, 0.6, 0.5, layer_alpha * 0.5)
                for index in range(count):
                    target = (index + skip) % count
                    if target == index:
                        continue
                    x0, y0 = placed[index]
                    x1, y1 = placed[target]
                    ctrl_x = cx + ((x0 + x1) / 2.0 - cx) * curve_pull
                    ctrl_y = cy + ((y0 + y1) / 2.0 - cy) * curve_pull
                    items.append(CurveItem(x0, y0, ctrl_x, ctrl_y, x1, y1, line_color))

    if options.lissajous:
        radius = scale * 0.9 * pulse * shrink
        angle = state.rotation * 0.5
        curve = [
            rotate_about(cx + lx * radius, cy + ly * radius, cx, cy, angle)
            for lx, ly in lissajous_points(params, state.time, state.style == "evolving")
        ]
        hue = params.base_hue + 180.0 + state.time * params.hue_drift
        items.append(PolylineItem(curve, hsla(hue, 0.6, 0.6, 0.35)))

    center_color = hsla(params.base_hue, 0.8, 0.7)
    items.append(DotItem(cx, cy, 5.0 * pulse * max(shrink, 0.2), center_color, 15.0 * pulse))

    if options.show_signature and pattern.hex:
        items.extend(_signature_items(pattern.hex, width))
    if options.show_intention and pattern.text:
        items.extend(_intention_items(pattern.text, width, height))
    return items


# ---------------------------------------------------------------------------
# Painting


def _text_font(size: int) -> QtGui.QFont:
    font = QtGui.QFont("monospace")
    font.setStyleHint(QtGui.QFont.Monospace)
    font.setPixelSize(max(1, int(size)))
    return font


def paint_items(painter: QtGui.QPainter, items: Sequence[FrameItem]) -> None:
    painter.setRenderHint(QtGui.QPainter.Antialiasing, True)
    painter.setCompositionMode(QtGui.QPainter.CompositionMode_SourceOver)
    for item in items:
        if isinstance(item, FillItem):
            painter.fillRect(QtCore.QRectF(0, 0, item.width, item.height), item.color)
        elif isinstance(item, DotItem):
            center = QtCore.QPointF(item.x, item.y)
            painter.setPen(QtCore.Qt.NoPen)
            if item.glow > 0.0:
                outer = item.r + item.glow
                gradient = QtGui.QRadialGradient(center, outer)
                halo = QtGui.QColor(item.color)
                halo.setAlphaF(item.color.alphaF() * 0.6)
                gradient.setColorAt(0.0, halo)
                gradient.setColorAt(1.0, QtGui.QColor(0, 0, 0, 0))
                painter.setBrush(QtGui.QBrush(gradient))
                painter.drawEllipse(center, outer, outer)
            painter.setBrush(item.color)
            painter.drawEllipse(center, item.r, item.r)
        elif isinstance(item, CurveItem):
            path = QtGui.QPainterPath(QtCore.QPointF(item.x0, item.y0))
            path.quadTo(QtCore.QPointF(item.cx, item.cy), QtCore.QPointF(item.x1, item.y1))
            painter.setBrush(QtCore.Qt.NoBrush)
            painter.setPen(QtGui.QPen(item.color, item.width))
            painter.drawPath(path)
        elif isinstance(item, PolylineItem):
            if len(item.points) < 2:
                continue
            polygon = QtGui.QPolygonF([QtCore.QPointF(x, y) for x, y in item.points])
            painter.setBrush(QtCore.Qt.NoBrush)
            painter.setPen(QtGui.QPen(item.color, item.width))
            painter.drawPolyline(polygon)
        elif isinstance(item, TextItem):
            font = _text_font(item.font_size)
            painter.setFont(font)
            painter.setPen(item.color)
            x = item.x
            if item.align == "right":
                x -= QtGui.QFontMetricsF(font).horizontalAdvance(item.text)
            painter.drawText(QtCore.QPointF(x, item.y), item.text)


@dataclass
class Surface:
    """Persistent opaque image the frames are painted onto."""

    image: Optional[QtGui.QImage] = field(default=None)

    @classmethod
    def acquire(cls, width: int, height: int) -> "Surface":
        surface = cls()
        surface.resize(width, height)
        return surface

    @property
    def width(self) -> int:
        return self.image.width() if self.image is not None else 0

    @property
    def height(self) -> int:
        return self.image.height() if self.image is not None else 0

    def resize(self, width: int, height: int) -> None:
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise RenderSurfaceError(f"Cannot allocate a {width}x{height} surface")
        if self.image is not None and self.width == width and self.height == height:
            return
        image = QtGui.QImage(width, height, QtGui.QImage.Format_RGB32)
        if image.isNull():
            raise RenderSurfaceError(f"Qt refused a {width}x{height} surface")
        image.fill(QtGui.QColor(0, 0, 0))
        self.image = image

    def _require(self) -> QtGui.QImage:
        if self.image is None:
            raise RenderSurfaceError("Surface has not been acquired")
        return self.image

    def paint(self, items: Sequence[FrameItem]) -> None:
        painter = QtGui.QPainter(self._require())
        try:
            paint_items(painter, items)
        finally:
            painter.end()

    def fill_black(self) -> None:
        self._require().fill(QtGui.QColor(0, 0, 0))

    def raw_bytes(self) -> bytes:
        """Pixel bytes in BGRA order (``Format_RGB32`` on little-endian hosts)."""

        image = self._require()
        if image.format() != QtGui.QImage.Format_RGB32:
            image = image.convertToFormat(QtGui.QImage.Format_RGB32)
        ptr = image.constBits()
        ptr.setsize(image.sizeInBytes())
        return bytes(ptr)

    def is_uniform_black(self) -> bool:
        data = self.raw_bytes()
        # colour channels of each 32 bit pixel; the remaining byte is padding
        first = 1 if sys.byteorder == "big" else 0
        return all(not data[offset::4].strip(b"\x00") for offset in range(first, first + 3))

    def snapshot(self) -> QtGui.QImage:
        return self._require().copy()


__all__ = [
    "CurveItem",
    "DotItem",
    "FillItem",
    "FrameItem",
    "INTENTION_LABEL",
    "PolylineItem",
    "SIGNATURE_LABEL",
    "Surface",
    "TextItem",
    "compose_frame",
    "hsla",
    "paint_items",
    "signature_lines",
    "wrap_words",
]

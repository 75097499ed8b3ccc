"""Animation driver: breathing loop and closing dissolve.

Phases run ``IDLE -> BREATHING -> DISSOLVING -> IDLE``. A single controller
owns one surface and at most one running loop; :meth:`start` always stops the
previous loop before anything else.
"""

from __future__ import annotations

import dataclasses
import enum
import math
from dataclasses import dataclass
from typing import Mapping, Optional

from PyQt5 import QtCore

from .config import DEFAULTS, section
from .diagnostics import debug
from .parameters import EngineOptions, ParameterBundle
from .pattern import Pattern
from .renderer import Surface, compose_frame

DISSOLVE_STEPS = 60


class Phase(enum.Enum):
    IDLE = "idle"
    BREATHING = "breathing"
    DISSOLVING = "dissolving"


def breathing_pulse(time: float, amplitude: float) -> float:
    """Two harmonic breath: ``1 + sin(t) A + sin(1.6 t) 0.2 A``."""

    return 1.0 + math.sin(time) * amplitude + math.sin(1.6 * time) * 0.2 * amplitude


@dataclass
class RenderState:
    """Mutable per-pattern clock and rotation accumulators."""

    time: float = 0.0
    rotation: float = 0.0
    spin: float = 0.0
    tilt_clock: float = 0.0
    fold_xw: float = 0.0
    fold_yw: float = 0.0
    fold_zw: float = 0.0
    style: str = "fixed"

    def reset(self) -> None:
        self.time = 0.0
        self.rotation = 0.0
        self.spin = 0.0
        self.tilt_clock = 0.0
        self.fold_xw = 0.0
        self.fold_yw = 0.0
        self.fold_zw = 0.0

    def advance(self, params: ParameterBundle, options: EngineOptions, boost: float = 1.0) -> None:
        """Move every accumulator by one frame; ``boost`` speeds up the rotations."""

        self.time += params.pulse_speed
        self.rotation += params.rotation_speed * boost
        if options.tilt_3d:
            self.spin += params.spin_speed * boost
            self.tilt_clock += params.tilt_speed
        if options.fold_4d:
            xw, yw, zw = params.fold_speeds(options.fold_speed_cap)
            self.fold_xw += xw
            self.fold_yw += yw
            self.fold_zw += zw


class AnimationController(QtCore.QObject):
    """Owns the render state, the surface and the frame timers."""

    frameRendered = QtCore.pyqtSignal()
    phaseChanged = QtCore.pyqtSignal(str)
    dissolved = QtCore.pyqtSignal()

    def __init__(
        self,
        width: int = 600,
        height: int = 600,
        *,
        options: Optional[EngineOptions] = None,
        config: Optional[Mapping[str, object]] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        cfg = config if config is not None else DEFAULTS
        self.config = cfg
        canvas = section(cfg, "canvas")
        animation = section(cfg, "animation")
        self.options = options or EngineOptions.from_config(cfg)
        self.state = RenderState(style=self.options.style)
        self.surface = Surface.acquire(width, height)
        self.pattern: Optional[Pattern] = None
        self.phase = Phase.IDLE
        self.last_pulse = 1.0
        self._trail_alpha = float(canvas.get("trailAlpha", 0.95))
        self._dissolve_trail_alpha = float(canvas.get("dissolveTrailAlpha", 0.35))
        self._dissolve_ms = int(animation.get("dissolveMs", 4000))
        self._dissolve_spin = float(animation.get("dissolveSpin", 0.35))
        self._dissolve_step = 0

        self._frame_timer = QtCore.QTimer(self)
        self._frame_timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._frame_timer.setInterval(max(1, int(canvas.get("frameIntervalMs", 16))))
        self._frame_timer.timeout.connect(self.tick)

        self._dissolve_timer = QtCore.QTimer(self)
        self._dissolve_timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._dissolve_timer.timeout.connect(self.advance_dissolve)

    # ------------------------------------------------------------------ state
    @property
    def is_running(self) -> bool:
        return self._frame_timer.isActive() or self._dissolve_timer.isActive()

    @property
    def dissolve_step(self) -> int:
        return self._dissolve_step

    def _set_phase(self, phase: Phase) -> None:
        if phase is self.phase:
            return
        self.phase = phase
        debug(f"animation phase -> {phase.value}")
        self.phaseChanged.emit(phase.value)

    def set_style(self, style: str) -> None:
        self.state.style = "evolving" if style == "evolving" else "fixed"

    def set_options(self, options: EngineOptions) -> None:
        self.options = options
        self.state.style = options.style

    def resize(self, width: int, height: int) -> None:
        self.surface.resize(width, height)

    def clear(self) -> None:
        """Paint the surface black and tell the views to repaint."""

        self.surface.fill_black()
        self.frameRendered.emit()

    def fork(self) -> "AnimationController":
        """Independent copy continuing from the current frame. It never runs a timer."""

        twin = AnimationController(
            self.surface.width, self.surface.height, options=self.options, config=self.config
        )
        twin.pattern = self.pattern
        twin.state = dataclasses.replace(self.state)
        twin.surface.image = self.surface.snapshot()
        twin.last_pulse = self.last_pulse
        twin._set_phase(self.phase)
        return twin

    # ------------------------------------------------------------------ loop
    def start(self, pattern: Pattern, *, run_timer: bool = True) -> None:
        """Stop whatever runs, reset the clock and start breathing ``pattern``."""

        self.stop()
        self.pattern = pattern
        self.state.reset()
        self._dissolve_step = 0
        self.surface.fill_black()
        self._set_phase(Phase.BREATHING)
        self.render(1.0)
        if run_timer:
            self._frame_timer.start()

    def stop(self) -> None:
        """Cancel every pending frame. Safe to call at any time."""

        if self._frame_timer.isActive():
            self._frame_timer.stop()
        if self._dissolve_timer.isActive():
            self._dissolve_timer.stop()
        self._set_phase(Phase.IDLE)

    def tick(self) -> None:
        if self.phase is not Phase.BREATHING or self.pattern is None:
            return
        params = self.pattern.params
        self.state.advance(params, self.options)
        self.render(breathing_pulse(self.state.time, params.pulse_amplitude))

    def render(self, pulse: float, *, shrink: float = 1.0, trail_alpha: Optional[float] = None) -> None:
        if self.pattern is None:
            return
        self.last_pulse = pulse
        items = compose_frame(
            self.pattern,
            self.state,
            self.options,
            self.surface.width,
            self.surface.height,
            pulse=pulse,
            shrink=shrink,
            trail_alpha=self._trail_alpha if trail_alpha is None else trail_alpha,
        )
        self.surface.paint(items)
        self.frameRendered.emit()

    # ------------------------------------------------------------------ dissolve
    def dissolve(self, duration_ms: Optional[int] = None, *, run_timer: bool = True) -> bool:
        """Begin the closing spiral. Returns False when nothing is breathing."""

        if self.phase is not Phase.BREATHING or self.pattern is None:
            return False
        self._frame_timer.stop()
        self._dissolve_step = 0
        self._set_phase(Phase.DISSOLVING)
        total = self._dissolve_ms if duration_ms is None else int(duration_ms)
        if run_timer:
            self._dissolve_timer.start(max(1, total // DISSOLVE_STEPS))
        return True

    def advance_dissolve(self) -> None:
        if self.phase is not Phase.DISSOLVING or self.pattern is None:
            self._dissolve_timer.stop()
            return
        self._dissolve_step += 1
        progress = self._dissolve_step / DISSOLVE_STEPS
        if self._dissolve_step >= DISSOLVE_STEPS:
            self._dissolve_timer.stop()
            self.surface.fill_black()
            self.frameRendered.emit()
            self._set_phase(Phase.IDLE)
            self.dissolved.emit()
            return
        params = self.pattern.params
        self.state.advance(params, self.options, boost=1.0 + progress * 8.0)
        self.state.rotation += self._dissolve_spin * progress * progress
        shrink = 1.0 - progress
        self.render(
            breathing_pulse(self.state.time, params.pulse_amplitude),
            shrink=shrink,
            trail_alpha=self._dissolve_trail_alpha,
        )

    def finish_dissolve(self) -> None:
        """Run the remaining dissolve steps synchronously."""

        while self.phase is Phase.DISSOLVING:
            self.advance_dissolve()


__all__ = ["AnimationController", "DISSOLVE_STEPS", "Phase", "RenderState", "breathing_pulse"]

"""Meditation session: the controller layer around one animation and its pulse.

The session owns everything the rendering core must not touch: the countdown,
the mute flag and the saved intentions. It enforces the order stop, generate,
start so two loops never paint the same surface.
"""

from __future__ import annotations

from typing import Mapping, Optional

from PyQt5 import QtCore

from .animation import AnimationController, Phase
from .audio import AudioEngine
from .config import load_config, section
from .diagnostics import debug, warn
from .errors import EmptyInputError, PersistenceWriteError
from .history import IntentionHistory
from .pattern import Pattern, generate_pattern


def count_words(text: str) -> int:
    return len(text.split()) if text else 0


def exceeds_word_limit(text: str, limit: int = 50) -> bool:
    return count_words(text) > limit


def format_countdown(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class MeditationSession(QtCore.QObject):
    patternGenerated = QtCore.pyqtSignal(object)
    countdownChanged = QtCore.pyqtSignal(int)
    sessionCompleted = QtCore.pyqtSignal()
    warning = QtCore.pyqtSignal(str)

    def __init__(
        self,
        config: Optional[Mapping[str, object]] = None,
        *,
        controller: Optional[AnimationController] = None,
        audio: Optional[AudioEngine] = None,
        history: Optional[IntentionHistory] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self.config = config if config is not None else load_config()
        canvas = section(self.config, "canvas")
        session = section(self.config, "session")
        size = int(canvas.get("size", 600))
        self.word_limit = int(session.get("wordLimit", 50))
        self.controller = controller or AnimationController(size, size, config=self.config, parent=self)
        self.audio = audio or AudioEngine(self.config, parent=self)
        self.history = history if history is not None else IntentionHistory(limit=int(session.get("historyLimit", 100)))
        self.pattern: Optional[Pattern] = None
        self.remaining_seconds = 0

        self._countdown = QtCore.QTimer(self)
        self._countdown.setInterval(1000)
        self._countdown.timeout.connect(self._on_countdown_tick)
        self.controller.dissolved.connect(self._on_dissolved)

    # ------------------------------------------------------------------ generate
    def generate(self, text: str) -> Pattern:
        """Stop the running pattern, build the new one and start it."""

        if not text or not text.strip():
            raise EmptyInputError()
        self.cancel_timer()
        self.controller.stop()
        self.audio.stop()
        pattern = generate_pattern(text)
        self.pattern = pattern
        self.controller.start(pattern)
        self.audio.start(pattern.digest)
        debug(f"generated {pattern.hex[:12]} ({pattern.params.point_count} points, {pattern.params.ring_count} rings)")
        try:
            self.history.append(pattern.text, pattern.digest)
        except PersistenceWriteError as exc:
            warn(f"Intention not saved: {exc}")
            self.warning.emit(str(exc))
        self.patternGenerated.emit(pattern)
        return pattern

    def toggle_mute(self) -> bool:
        return self.audio.toggle_mute()

    # ------------------------------------------------------------------ timer
    @property
    def timer_active(self) -> bool:
        return self._countdown.isActive()

    def start_timer(self, minutes: float) -> bool:
        if self.pattern is None or self.controller.phase is not Phase.BREATHING:
            return False
        self.cancel_timer()
        self.remaining_seconds = max(1, int(round(float(minutes) * 60)))
        self.countdownChanged.emit(self.remaining_seconds)
        self._countdown.start()
        return True

    def cancel_timer(self) -> None:
        if self._countdown.isActive():
            self._countdown.stop()
        if self.remaining_seconds:
            self.remaining_seconds = 0
            self.countdownChanged.emit(0)

    def _on_countdown_tick(self) -> None:
        self.remaining_seconds = max(0, self.remaining_seconds - 1)
        self.countdownChanged.emit(self.remaining_seconds)
        if self.remaining_seconds <= 0:
            self._countdown.stop()
            self.complete()

    def complete(self, *, run_timers: bool = True) -> bool:
        """End the session: dissolve the picture and fade the pulse together."""

        if not self.controller.dissolve(run_timer=run_timers):
            return False
        self.audio.fade_out()
        return True

    def _on_dissolved(self) -> None:
        self.audio.stop()
        self.sessionCompleted.emit()

    def reset(self) -> None:
        self.cancel_timer()
        self.controller.stop()
        self.audio.stop()
        self.pattern = None
        self.controller.clear()


__all__ = ["MeditationSession", "count_words", "exceeds_word_limit", "format_countdown"]

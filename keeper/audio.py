"""Heartbeat pulse derived from its own bytes of the digest.

The beat rate is a configuration value (7.83 Hz by default) and does not
depend on the digest. Bytes 12 to 15 pick the pitch, the harmonic, the swing
of every other beat and the decay of each hit, so the sound varies with the
intention without sharing a byte with the picture.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional

from PyQt5 import QtCore

try:  # pragma: no cover - optional multimedia support
    from PyQt5 import QtMultimedia
except Exception:  # pragma: no cover - fallback when QtMultimedia unavailable
    QtMultimedia = None  # type: ignore

from .config import DEFAULTS, section
from .diagnostics import debug, warn
from .hashing import DigestLike, byte_at, require_digest
from .parameters import AUDIO_OFFSETS

HARMONIC_RATIOS = (1.5, 4.0 / 3.0, 1.25, 2.0)
PITCH_BEND = 1.4
BEND_SECONDS = 0.06
ATTACK_SECONDS = 0.008
FLOOR = 0.001

Sink = Callable[[bytes], None]


@dataclass(frozen=True)
class AudioParams:
    bass_frequency: float
    harmonic_ratio: float
    swing_ms: float
    decay_seconds: float


def extract_audio_params(value: DigestLike) -> AudioParams:
    data = require_digest(value)
    return AudioParams(
        bass_frequency=60.0 + byte_at(data, AUDIO_OFFSETS["bass_frequency"]) / 256.0 * 80.0,
        harmonic_ratio=HARMONIC_RATIOS[byte_at(data, AUDIO_OFFSETS["harmonic_interval"]) % len(HARMONIC_RATIOS)],
        swing_ms=byte_at(data, AUDIO_OFFSETS["rhythm_offset"]) / 256.0 * 12.0,
        decay_seconds=0.45 + byte_at(data, AUDIO_OFFSETS["decay"]) / 256.0 * 0.3,
    )


def pulse_waveform(params: AudioParams, sample_rate: int = 22050) -> List[float]:
    """One drum-like hit in [-1, 1]: downward pitch bend, sharp attack, exponential decay."""

    sample_rate = max(1000, int(sample_rate))
    length = int((params.decay_seconds + 0.05) * sample_rate)
    start_freq = params.bass_frequency * PITCH_BEND
    decay_span = max(1e-3, params.decay_seconds - ATTACK_SECONDS)
    phase = 0.0
    out: List[float] = []
    for index in range(length):
        t = index / sample_rate
        bend = min(t, BEND_SECONDS) / BEND_SECONDS
        freq = start_freq * (1.0 / PITCH_BEND) ** bend
        phase += 2.0 * math.pi * freq / sample_rate
        if t < ATTACK_SECONDS:
            envelope = 0.9 * t / ATTACK_SECONDS
        else:
            envelope = 0.9 * (FLOOR / 0.9) ** min(1.0, (t - ATTACK_SECONDS) / decay_span)
        tone = math.sin(phase) + 0.15 * math.sin(phase * params.harmonic_ratio)
        out.append(envelope * tone / 1.15)
    return out


def pack_pcm16(samples: List[float], gain: float = 1.0) -> bytes:
    clipped = [int(max(-1.0, min(1.0, s * gain)) * 32767) for s in samples]
    return struct.pack(f"<{len(clipped)}h", *clipped)


def synthesize_pulse(params: AudioParams, sample_rate: int = 22050, gain: float = 0.85) -> bytes:
    """16 bit little-endian mono PCM for a single hit."""

    return pack_pcm16(pulse_waveform(params, sample_rate), gain)


class _QtAudioSink:
    """Push-mode ``QAudioOutput`` wrapper."""

    def __init__(self, sample_rate: int, parent: Optional[QtCore.QObject] = None) -> None:
        if QtMultimedia is None:
            raise RuntimeError("QtMultimedia unavailable")
        format_ = QtMultimedia.QAudioFormat()
        format_.setSampleRate(sample_rate)
        format_.setChannelCount(1)
        format_.setSampleSize(16)
        format_.setCodec("audio/pcm")
        format_.setByteOrder(QtMultimedia.QAudioFormat.LittleEndian)
        format_.setSampleType(QtMultimedia.QAudioFormat.SignedInt)
        info = QtMultimedia.QAudioDeviceInfo.defaultOutputDevice()
        if info.isNull() or not info.isFormatSupported(format_):
            raise RuntimeError("No output device accepts 16 bit mono PCM")
        self._output = QtMultimedia.QAudioOutput(info, format_, parent)
        self._device = self._output.start()
        if self._device is None:
            raise RuntimeError("Audio output could not be started")

    def __call__(self, data: bytes) -> None:  # pragma: no cover - depends on system audio
        self._device.write(data)

    def close(self) -> None:  # pragma: no cover - depends on system audio
        self._output.stop()


class AudioEngine(QtCore.QObject):
    """Fires one pulse per timer tick and streams the mixed result to a sink."""

    mutedChanged = QtCore.pyqtSignal(bool)
    stopped = QtCore.pyqtSignal()

    def __init__(
        self,
        config: Optional[Mapping[str, object]] = None,
        *,
        sink: Optional[Sink] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        audio = section(config if config is not None else DEFAULTS, "audio")
        self.enabled = bool(audio.get("enabled", True))
        self.heartbeat_hz = max(0.1, float(audio.get("heartbeatHz", 7.83)))
        self.sample_rate = int(audio.get("sampleRate", 22050))
        self.master_gain = float(audio.get("masterGain", 0.85))
        self.fade_ms = int(audio.get("fadeMs", 4000))
        self.params: Optional[AudioParams] = None
        self.muted = False
        self.running = False
        self.beat = 0
        self._sink = sink
        self._owns_sink = False
        self._gain = self.master_gain
        self._fade_step = 0.0
        self._pulse: List[float] = []
        self._pending: List[float] = []

        self._timer = QtCore.QTimer(self)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.setInterval(self.interval_ms)
        self._timer.timeout.connect(self.fire)

    # ------------------------------------------------------------------ helpers
    @property
    def interval_ms(self) -> int:
        return max(1, int(round(1000.0 / self.heartbeat_hz)))

    @property
    def samples_per_beat(self) -> int:
        return max(1, int(round(self.sample_rate / self.heartbeat_hz)))

    @property
    def gain(self) -> float:
        return self._gain

    def _ensure_sink(self) -> None:
        if self._sink is not None:
            return
        try:
            self._sink = _QtAudioSink(self.sample_rate, self)
            self._owns_sink = True
        except Exception as exc:  # pragma: no cover - depends on system audio
            warn(f"Audio output unavailable ({exc}); the pulse stays silent.")
            self._sink = None

    # ------------------------------------------------------------------ API
    def start(self, value: DigestLike, *, run_timer: bool = True) -> None:
        if self.running:
            self.stop()
        self.params = extract_audio_params(value)
        self._pulse = pulse_waveform(self.params, self.sample_rate)
        self._pending = []
        self.beat = 0
        self._gain = self.master_gain
        self._fade_step = 0.0
        if self.muted:
            self.muted = False
            self.mutedChanged.emit(False)
        if not self.enabled:
            return
        self._ensure_sink()
        self.running = True
        debug(f"heartbeat {self.heartbeat_hz:.2f} Hz, bass {self.params.bass_frequency:.1f} Hz")
        if run_timer:
            self._timer.start()

    def stop(self) -> None:
        if self._timer.isActive():
            self._timer.stop()
        if not self.running:
            return
        self.running = False
        self._pending = []
        self.stopped.emit()

    def toggle_mute(self) -> bool:
        self.muted = not self.muted
        self.mutedChanged.emit(self.muted)
        return self.muted

    def fade_out(self, duration_ms: Optional[int] = None) -> None:
        """Ramp the gain to zero over ``duration_ms`` and stop."""

        if not self.running:
            return
        duration = self.fade_ms if duration_ms is None else int(duration_ms)
        beats = max(1, duration // self.interval_ms)
        self._fade_step = self._gain / beats

    def next_chunk(self) -> bytes:
        """Mix one more beat into the pending buffer and pop one beat of PCM."""

        size = self.samples_per_beat
        offset = 0
        if self.params is not None and self.beat % 2 == 1:
            offset = int(self.params.swing_ms / 1000.0 * self.sample_rate)
        needed = offset + len(self._pulse)
        if len(self._pending) < max(needed, size):
            self._pending.extend([0.0] * (max(needed, size) - len(self._pending)))
        for index, sample in enumerate(self._pulse):
            self._pending[offset + index] += sample * 0.5
        chunk = self._pending[:size]
        self._pending = self._pending[size:]
        self.beat += 1
        gain = 0.0 if self.muted else self._gain
        # overlapping tails are soft limited instead of clipped
        return pack_pcm16([math.tanh(s) for s in chunk], gain)

    def fire(self) -> None:
        if not self.running:
            return
        data = self.next_chunk()
        if self._sink is not None:
            self._sink(data)
        if self._fade_step > 0.0:
            self._gain = max(0.0, self._gain - self._fade_step)
            if self._gain <= 0.0:
                self.stop()


__all__ = [
    "AudioEngine",
    "AudioParams",
    "HARMONIC_RATIOS",
    "extract_audio_params",
    "pack_pcm16",
    "pulse_waveform",
    "synthesize_pulse",
]

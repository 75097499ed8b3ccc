"""Digest bytes mapped to the visual parameters of a pattern.

Every field of :class:`ParameterBundle` reads one fixed byte offset listed in
``VISUAL_OFFSETS``. Discrete choices use a modulo, continuous ranges use
``byte / 256`` so the upper bound of each interval stays open. The audio
layer reads ``AUDIO_OFFSETS`` and never touches the visual bytes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Mapping, Tuple

from .hashing import DigestLike, byte_at, require_digest

PRIMARY_SYMMETRIES: Tuple[int, ...] = (6, 8, 12, 16)
SECONDARY_SYMMETRIES: Tuple[int, ...] = (3, 5, 7, 9)
# (a, b) frequency pairs of the Lissajous overlay
LISSAJOUS_RATIOS: Tuple[Tuple[int, int], ...] = ((1, 2), (2, 3), (3, 4), (3, 5), (4, 5), (5, 6))

PROJECTION_ORTHOGRAPHIC = 0
PROJECTION_STEREOGRAPHIC = 1
PROJECTION_CYLINDRICAL = 2
PROJECTION_NAMES = {
    PROJECTION_ORTHOGRAPHIC: "orthographic",
    PROJECTION_STEREOGRAPHIC: "stereographic",
    PROJECTION_CYLINDRICAL: "cylindrical",
}

VISUAL_OFFSETS: Dict[str, int] = {
    "point_count": 0,
    "ring_count": 1,
    "primary_symmetry": 2,
    "base_hue": 3,
    "complexity": 4,
    "secondary_symmetry": 5,
    "connection_skip": 6,
    "projection_type": 7,
    "lissajous_ratio": 8,
    "lissajous_delta": 9,
    "pulse_amplitude": 10,
    "pulse_speed": 11,
    "rotation_speed": 16,
    "tilt_amplitude_x": 17,
    "tilt_amplitude_y": 18,
    "tilt_speed": 19,
    "fold_speed_xw": 20,
    "fold_speed_yw": 21,
    "fold_speed_zw": 22,
    "w_scale": 23,
    "spin_speed": 24,
    "skip_evolution_rate": 25,
    "symmetry_evolution_rate": 26,
    "evolution_phase": 27,
    "tilt_phase_x": 28,
    "tilt_phase_y": 29,
    "hue_drift": 30,
}

AUDIO_OFFSETS: Dict[str, int] = {
    "bass_frequency": 12,
    "harmonic_interval": 13,
    "rhythm_offset": 14,
    "decay": 15,
}

RESERVED_OFFSETS = (31,)


def _unit(data: bytes, name: str) -> float:
    """Byte for ``name`` scaled to [0, 1)."""

    return byte_at(data, VISUAL_OFFSETS[name]) / 256.0


def _span(data: bytes, name: str, low: float, width: float) -> float:
    return low + _unit(data, name) * width


def _pick(data: bytes, name: str, table):
    return table[byte_at(data, VISUAL_OFFSETS[name]) % len(table)]


@dataclass(frozen=True)
class ParameterBundle:
    """Everything the renderer needs to know about one digest."""

    point_count: int
    ring_count: int
    primary_symmetry: int
    secondary_symmetry: int
    base_hue: float
    complexity: int
    connection_skip: int
    projection_type: int
    lissajous_a: int
    lissajous_b: int
    lissajous_delta: float
    pulse_amplitude: float
    pulse_speed: float
    rotation_speed: float
    tilt_amplitude_x: float
    tilt_amplitude_y: float
    tilt_speed: float
    tilt_phase_x: float
    tilt_phase_y: float
    spin_speed: float
    fold_speed_xw: float
    fold_speed_yw: float
    fold_speed_zw: float
    w_scale: float
    skip_evolution_rate: float
    symmetry_evolution_rate: float
    evolution_phase: float
    hue_drift: float

    @property
    def projection_name(self) -> str:
        return PROJECTION_NAMES[self.projection_type]

    def fold_speeds(self, cap: float) -> Tuple[float, float, float]:
        """XW, YW and ZW speeds, each clamped to ``cap`` radians per frame."""

        cap = max(0.0, float(cap))
        return (
            min(self.fold_speed_xw, cap),
            min(self.fold_speed_yw, cap),
            min(self.fold_speed_zw, cap),
        )

    def as_dict(self) -> Dict[str, object]:
        return dict(self.__dict__)


def extract_params(value: DigestLike) -> ParameterBundle:
    """Derive the full bundle from a 32 byte digest."""

    data = require_digest(value)
    lissajous_a, lissajous_b = _pick(data, "lissajous_ratio", LISSAJOUS_RATIOS)
    return ParameterBundle(
        point_count=8 + byte_at(data, VISUAL_OFFSETS["point_count"]) % 8,
        ring_count=3 + byte_at(data, VISUAL_OFFSETS["ring_count"]) % 5,
        primary_symmetry=_pick(data, "primary_symmetry", PRIMARY_SYMMETRIES),
        secondary_symmetry=_pick(data, "secondary_symmetry", SECONDARY_SYMMETRIES),
        base_hue=_unit(data, "base_hue") * 360.0,
        complexity=1 + byte_at(data, VISUAL_OFFSETS["complexity"]) % 3,
        connection_skip=1 + byte_at(data, VISUAL_OFFSETS["connection_skip"]) % 7,
        projection_type=byte_at(data, VISUAL_OFFSETS["projection_type"]) % 3,
        lissajous_a=lissajous_a,
        lissajous_b=lissajous_b,
        lissajous_delta=_unit(data, "lissajous_delta") * math.pi,
        pulse_amplitude=_span(data, "pulse_amplitude", 0.05, 0.15),
        pulse_speed=_span(data, "pulse_speed", 0.015, 0.03),
        rotation_speed=_span(data, "rotation_speed", 0.002, 0.006),
        tilt_amplitude_x=_span(data, "tilt_amplitude_x", 0.15, 0.35),
        tilt_amplitude_y=_span(data, "tilt_amplitude_y", 0.15, 0.35),
        tilt_speed=_span(data, "tilt_speed", 0.004, 0.008),
        tilt_phase_x=_unit(data, "tilt_phase_x") * 2.0 * math.pi,
        tilt_phase_y=_unit(data, "tilt_phase_y") * 2.0 * math.pi,
        spin_speed=_span(data, "spin_speed", 0.001, 0.004),
        fold_speed_xw=_span(data, "fold_speed_xw", 0.0005, 0.0025),
        fold_speed_yw=_span(data, "fold_speed_yw", 0.0005, 0.0025),
        fold_speed_zw=_span(data, "fold_speed_zw", 0.0005, 0.0025),
        w_scale=_span(data, "w_scale", 0.3, 0.5),
        skip_evolution_rate=_span(data, "skip_evolution_rate", 0.02, 0.06),
        symmetry_evolution_rate=_span(data, "symmetry_evolution_rate", 0.01, 0.04),
        evolution_phase=_unit(data, "evolution_phase") * 2.0 * math.pi,
        hue_drift=_span(data, "hue_drift", 6.0, 8.0),
    )


@dataclass(frozen=True)
class EngineOptions:
    """Feature switches for one engine instance. Not derived from the digest."""

    parallax: bool = True
    tilt_3d: bool = True
    fold_4d: bool = False
    lissajous: bool = True
    show_signature: bool = True
    show_intention: bool = True
    style: str = "fixed"
    fold_speed_cap: float = 0.003
    perspective_distance: float = 3.0
    fold_distance: float = 2.0

    @property
    def evolving(self) -> bool:
        return self.style == "evolving"

    @classmethod
    def from_config(cls, cfg: Mapping[str, object]) -> "EngineOptions":
        features = cfg.get("features", {}) if isinstance(cfg, Mapping) else {}
        animation = cfg.get("animation", {}) if isinstance(cfg, Mapping) else {}
        if not isinstance(features, Mapping):
            features = {}
        if not isinstance(animation, Mapping):
            animation = {}
        style = str(animation.get("style", "fixed")).strip().lower()
        if style not in {"fixed", "evolving"}:
            style = "fixed"

        def _float(key: str, fallback: float) -> float:
            try:
                return float(animation.get(key, fallback))
            except (TypeError, ValueError):
                return fallback

        return cls(
            parallax=bool(features.get("parallax", True)),
            tilt_3d=bool(features.get("tilt3d", True)),
            fold_4d=bool(features.get("fold4d", False)),
            lissajous=bool(features.get("lissajous", True)),
            show_signature=bool(features.get("signature", True)),
            show_intention=bool(features.get("intention", True)),
            style=style,
            fold_speed_cap=max(0.0, _float("foldSpeedCap", 0.003)),
            perspective_distance=max(1.05, _float("perspectiveDistance", 3.0)),
            fold_distance=max(1.05, _float("foldDistance", 2.0)),
        )


__all__ = [
    "AUDIO_OFFSETS",
    "EngineOptions",
    "LISSAJOUS_RATIOS",
    "PRIMARY_SYMMETRIES",
    "PROJECTION_CYLINDRICAL",
    "PROJECTION_ORTHOGRAPHIC",
    "PROJECTION_STEREOGRAPHIC",
    "ParameterBundle",
    "SECONDARY_SYMMETRIES",
    "VISUAL_OFFSETS",
    "extract_params",
]

"""Default settings and the user override file.

Settings are grouped in sections the same way the control window groups its
widgets. A JSON file in the user directory may override any key; unknown
keys are kept so newer files still load with an older build.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from .diagnostics import warn

DEFAULTS = dict(
    canvas=dict(
        size=600,
        frameIntervalMs=16,
        trailAlpha=0.95,
        dissolveTrailAlpha=0.35,
    ),
    animation=dict(
        style="fixed",
        dissolveMs=4000,
        dissolveSpin=0.35,
        perspectiveDistance=3.0,
        foldDistance=2.0,
        foldSpeedCap=0.003,
    ),
    features=dict(
        parallax=True,
        tilt3d=True,
        fold4d=False,
        lissajous=True,
        signature=True,
        intention=True,
    ),
    audio=dict(
        enabled=True,
        heartbeatHz=7.83,
        sampleRate=22050,
        masterGain=0.85,
        fadeMs=4000,
    ),
    session=dict(
        timerPresets=[5, 10, 15, 20, 30],
        wordLimit=50,
        historyLimit=100,
        gifFps=20,
        gifSeconds=5,
    ),
)

TOOLTIPS = {
    "canvas.size": "Side of the square drawing surface in pixels.",
    "canvas.frameIntervalMs": "Delay between two rendered frames.",
    "canvas.trailAlpha": "Opacity of the black wash painted before each frame. Lower values leave longer trails.",
    "canvas.dissolveTrailAlpha": "Opacity of the wash used while the pattern dissolves.",
    "animation.style": "fixed keeps the geometry chosen by the hash, evolving lets it drift slowly over time.",
    "animation.dissolveMs": "Duration of the closing spiral when a session ends.",
    "animation.dissolveSpin": "Extra rotation added at the last dissolve step, in radians per frame.",
    "animation.perspectiveDistance": "Camera distance used for the 3D tilt.",
    "animation.foldDistance": "Distance used when collapsing the fourth axis.",
    "animation.foldSpeedCap": "Upper bound for the 4D plane rotation speeds, in radians per frame.",
    "features.parallax": "Inner rings spin faster than outer rings.",
    "features.tilt3d": "Slow sine tilt around X and Y plus a steady spin around Z.",
    "features.fold4d": "Adds a fourth coordinate and rotates it through the XW, YW and ZW planes.",
    "features.lissajous": "Draws the Lissajous overlay.",
    "features.signature": "Shows the full digest in the top right corner.",
    "features.intention": "Shows the intention text in the bottom left corner.",
    "audio.enabled": "Plays the heartbeat pulse while a pattern breathes.",
    "audio.heartbeatHz": "Rate of the pulse. 7.83 Hz by default.",
    "audio.sampleRate": "Sample rate of the synthesised pulse.",
    "audio.masterGain": "Overall pulse volume.",
    "audio.fadeMs": "Fade length when the session ends.",
    "session.timerPresets": "Durations offered by the timer buttons, in minutes.",
    "session.wordLimit": "Largest intention accepted by the editor.",
    "session.historyLimit": "Number of intentions kept in the history.",
    "session.gifFps": "Frame rate of exported GIF files.",
    "session.gifSeconds": "Length of exported GIF files.",
}


def config_dir() -> Path:
    override = os.environ.get("KEEPER_HOME", "").strip()
    if override:
        return Path(override)
    return Path.home() / ".intention-keeper"


def default_config_path() -> Path:
    return config_dir() / "config.json"


def _merge(base: dict, override: Mapping[str, object]) -> dict:
    out = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key].update(copy.deepcopy(value))
        else:
            out[key] = copy.deepcopy(value)
    return out


def load_config(path: Optional[Path] = None) -> Dict[str, dict]:
    """Return the defaults merged with the user override file, if any."""

    target = Path(path) if path is not None else default_config_path()
    if not target.exists():
        return copy.deepcopy(DEFAULTS)
    try:
        payload = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        warn(f"Ignoring unreadable config {target}: {exc}")
        return copy.deepcopy(DEFAULTS)
    if not isinstance(payload, dict):
        warn(f"Ignoring config {target}: top level must be an object")
        return copy.deepcopy(DEFAULTS)
    return _merge(DEFAULTS, payload)


def section(cfg: Mapping[str, object], name: str) -> dict:
    value = cfg.get(name) if isinstance(cfg, Mapping) else None
    if isinstance(value, dict):
        return value
    return dict(DEFAULTS.get(name, {}))


__all__ = ["DEFAULTS", "TOOLTIPS", "config_dir", "default_config_path", "load_config", "section"]

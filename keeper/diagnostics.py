"""Console diagnostics tagged with the application name.

Debug lines are printed unconditionally by the engine and filtered at the
stream level by :class:`DebugSilencer` once :func:`install_debug_silencer`
has been called, unless ``KEEPER_DEBUG`` is set in the environment.
"""

from __future__ import annotations

import io
import os
import sys

TAG = "[Keeper]"
DEBUG_MARKER = f"{TAG}[DEBUG]"
WARN_MARKER = f"{TAG}[WARN]"


def debug(message: str) -> None:
    print(f"{DEBUG_MARKER} {message}", flush=True)


def warn(message: str) -> None:
    print(f"{WARN_MARKER} {message}", file=sys.stderr, flush=True)


def info(message: str) -> None:
    print(f"{TAG} {message}", flush=True)


class DebugSilencer(io.TextIOBase):
    """Stream wrapper dropping every line that carries ``marker``."""

    def __init__(self, stream: io.TextIOBase, marker: str) -> None:
        super().__init__()
        self._stream = stream
        self._marker = marker
        self._buffer: str = ""

    def write(self, text: str) -> int:  # type: ignore[override]
        self._buffer += text
        while "\n" in self._buffer:
            line, self._buffer = self._buffer.split("\n", 1)
            self._emit(line + "\n")
        return len(text)

    def flush(self) -> None:  # type: ignore[override]
        if self._buffer:
            self._emit(self._buffer)
            self._buffer = ""
        self._stream.flush()

    def _emit(self, chunk: str) -> None:
        if self._marker not in chunk:
            self._stream.write(chunk)

    def writelines(self, lines) -> None:  # type: ignore[override]
        for line in lines:
            self.write(line)

    def __getattr__(self, name):
        return getattr(self._stream, name)


def debug_enabled() -> bool:
    return os.environ.get("KEEPER_DEBUG", "").strip().lower() in {"1", "true", "yes"}


def install_debug_silencer(marker: str = DEBUG_MARKER) -> bool:
    """Wrap stdout/stderr so debug lines disappear. Returns True when installed."""

    if not marker or debug_enabled():
        return False
    if not isinstance(sys.stdout, DebugSilencer):
        sys.stdout = DebugSilencer(sys.stdout, marker)
    if not isinstance(sys.stderr, DebugSilencer):
        sys.stderr = DebugSilencer(sys.stderr, marker)
    return True


__all__ = [
    "DEBUG_MARKER",
    "DebugSilencer",
    "WARN_MARKER",
    "debug",
    "debug_enabled",
    "info",
    "install_debug_silencer",
    "warn",
]

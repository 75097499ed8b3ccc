"""Saved intentions, newest first, stored as a JSON list."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Dict, List, Optional

from .config import config_dir
from .diagnostics import warn
from .errors import PersistenceWriteError
from .hashing import hex_digest


def default_history_path() -> Path:
    return config_dir() / "history.json"


class IntentionHistory:
    """Ordered ``{text, digest, timestamp}`` records keyed by recency."""

    def __init__(self, path: Optional[Path] = None, limit: int = 100) -> None:
        self.path = Path(path) if path is not None else default_history_path()
        self.limit = max(1, int(limit))
        self._records: List[Dict[str, object]] = []
        self._load()

    # ------------------------------------------------------------------ utils
    def _load(self) -> None:
        self._records = []
        if not self.path.exists():
            return
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            warn(f"History file {self.path} unreadable, starting empty: {exc}")
            return
        if not isinstance(payload, list):
            return
        for entry in payload:
            if isinstance(entry, dict) and isinstance(entry.get("text"), str) and isinstance(entry.get("digest"), str):
                self._records.append(
                    {
                        "text": entry["text"],
                        "digest": entry["digest"],
                        "timestamp": float(entry.get("timestamp", 0.0) or 0.0),
                    }
                )
        del self._records[self.limit:]

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(self._records, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
        except OSError as exc:
            raise PersistenceWriteError(f"Could not write {self.path}: {exc}") from exc

    # ------------------------------------------------------------------ API
    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self.records())

    def records(self) -> List[Dict[str, object]]:
        return [dict(entry) for entry in self._records]

    def append(self, text: str, digest: bytes, timestamp: Optional[float] = None) -> bool:
        """Record ``text`` on top. Returns False when it repeats the newest entry."""

        value = hex_digest(digest)
        if self._records and self._records[0]["text"] == text and self._records[0]["digest"] == value:
            return False
        record = {"text": text, "digest": value, "timestamp": time.time() if timestamp is None else float(timestamp)}
        self._records.insert(0, record)
        del self._records[self.limit:]
        self._write()
        return True

    def delete(self, index: int) -> Dict[str, object]:
        if not 0 <= index < len(self._records):
            raise IndexError(f"No history entry at {index}")
        removed = self._records.pop(index)
        self._write()
        return dict(removed)

    def clear(self) -> None:
        self._records = []
        self._write()


__all__ = ["IntentionHistory", "default_history_path"]

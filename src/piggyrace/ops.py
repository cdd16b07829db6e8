"""Operational utilities for Piggy Race: structured logging and state stores."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Protocol

from .models import utc_now
from .state import STORAGE_KEY


class StateStore(Protocol):
    """Opaque load/save of the serialized game state."""

    def load(self) -> Optional[str]:
        ...

    def save(self, blob: str) -> None:
        ...


class MemoryStateStore:
    """Keep serialized states in memory along with a short rolling history."""

    def __init__(self, *, key: str = STORAGE_KEY, initial: Optional[str] = None, retain: int = 7) -> None:
        self.key = key
        self.retain = retain
        self.saves = 0
        self._values: Dict[str, str] = {}
        self._history: list[tuple[datetime, str]] = []
        if initial is not None:
            self._values[key] = initial

    def load(self) -> Optional[str]:
        return self._values.get(self.key)

    def save(self, blob: str) -> None:
        self._values[self.key] = blob
        self.saves += 1
        self._history.append((utc_now(), blob))
        if self.retain > 0:
            del self._history[:-self.retain]
        else:
            self._history.clear()

    def history(self) -> tuple[tuple[datetime, str], ...]:
        return tuple(self._history)


class StructuredLogger:
    """Write JSON lines log entries for later inspection."""

    def __init__(self, *, path: Path | None = None) -> None:
        self.path = path
        self._entries: list[dict] = []

    def log(self, event_type: str, **fields: object) -> dict:
        entry = {"timestamp": utc_now().isoformat(), "event": event_type, **fields}
        self._entries.append(entry)
        if self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, default=str) + "\n")
        return entry

    def tail(self, limit: int = 50) -> tuple[dict, ...]:
        return tuple(self._entries[-limit:])

    def events(self, event_type: str) -> tuple[dict, ...]:
        return tuple(entry for entry in self._entries if entry["event"] == event_type)


__all__ = ["MemoryStateStore", "StateStore", "StructuredLogger"]

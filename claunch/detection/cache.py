from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

DETECTION_TTL_SECONDS = 60.0


@dataclass(frozen=True)
class DetectionCacheEntry:
    installed: bool
    recorded_at: float


class DetectionCache:
    """Remembers detection results per application for a fixed time window."""

    def __init__(
        self,
        ttl: float = DETECTION_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, DetectionCacheEntry] = {}

    def get(self, key: str) -> Optional[bool]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() - entry.recorded_at >= self.ttl:
            return None
        return entry.installed

    def set(self, key: str, installed: bool) -> None:
        self._entries[key] = DetectionCacheEntry(bool(installed), self._clock())

    def entry(self, key: str) -> Optional[DetectionCacheEntry]:
        return self._entries.get(key)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

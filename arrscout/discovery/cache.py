"""In-memory cache for ranked discovery results."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from arrscout.discovery.types import CacheKey, NormalizedRelease

DEFAULT_FRESH_SECONDS = 10 * 60
DEFAULT_RETENTION_SECONDS = 30 * 60


@dataclass(frozen=True)
class CacheLookup:
    releases: list[NormalizedRelease]
    fresh: bool
    age_seconds: float


@dataclass
class _CacheEntry:
    releases: tuple[NormalizedRelease, ...]
    stored_at: float


@dataclass
class ReleaseCache:
    """Fresh entries are served as-is, stale ones only as a fallback, old ones are evicted."""

    fresh_seconds: float = DEFAULT_FRESH_SECONDS
    retention_seconds: float = DEFAULT_RETENTION_SECONDS
    clock: Callable[[], float] = time.monotonic
    entries: dict[CacheKey, _CacheEntry] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.retention_seconds < self.fresh_seconds:
            raise ValueError("retention_seconds must be at least fresh_seconds")

    def store(self, key: CacheKey, releases: list[NormalizedRelease]) -> None:
        self.entries[key] = _CacheEntry(releases=tuple(releases), stored_at=self.clock())

    def lookup(self, key: CacheKey) -> Optional[CacheLookup]:
        entry = self.entries.get(key)
        if entry is None:
            return None
        age = self.clock() - entry.stored_at
        if age > self.retention_seconds:
            self.entries.pop(key, None)
            return None
        return CacheLookup(releases=list(entry.releases), fresh=age <= self.fresh_seconds, age_seconds=age)

    def prune(self) -> int:
        now = self.clock()
        expired = [key for key, entry in self.entries.items() if now - entry.stored_at > self.retention_seconds]
        for key in expired:
            self.entries.pop(key, None)
        return len(expired)

    def invalidate(self, key: Optional[CacheKey] = None) -> None:
        if key is None:
            self.entries.clear()
        else:
            self.entries.pop(key, None)

    def is_empty(self) -> bool:
        return not self.entries

"""Single-slot TTL cache for the product feed.

The cache holds at most one ``FetchResult`` under ``CACHE_KEY``.  Entries
expire ``ttl_seconds`` after they were written and are replaced wholesale,
never patched.  There is no locking: two concurrent misses may both fetch,
and the last write wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import time

from .constants import CACHE_KEY, DEFAULT_CACHE_TTL_SECONDS
from .models import FetchResult
from .protocols import Clock, FeedSource

_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A stored result plus its write and expiry times (POSIX seconds)."""

    value: FetchResult
    stored_at: float
    expires_at: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Counters reported by ``/api/health``."""

    hits: int
    misses: int
    keys: int

    def to_dict(self) -> dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "keys": self.keys}


class ResponseCache:
    """Wrap a ``FeedSource`` with a time-to-live cache shared by all requests."""

    def __init__(
        self,
        source: FeedSource,
        *,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        key: str = CACHE_KEY,
        clock: Clock = time.time,
    ) -> None:
        self._source = source
        self._ttl = float(ttl_seconds)
        self._key = key
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def _live_entry(self) -> CacheEntry | None:
        entry = self._entries.get(self._key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            self._entries.pop(self._key, None)
            return None
        return entry

    def get_or_fetch(self) -> tuple[FetchResult, str]:
        """Return ``(result, "cache")`` on a hit, else fetch and return ``(result, "api")``."""
        entry = self._live_entry()
        if entry is not None:
            self._hits += 1
            _log.info("Cache hit for %s", self._key)
            return entry.value, "cache"
        self._misses += 1
        _log.info("Cache miss for %s; fetching from the marketplace", self._key)
        return self._store(self._source.fetch()), "api"

    def _store(self, result: FetchResult) -> FetchResult:
        now = self._clock()
        self._entries[self._key] = CacheEntry(value=result, stored_at=now, expires_at=now + self._ttl)
        return result

    def invalidate(self) -> None:
        """Drop the cached entry so the next read misses."""
        self._entries.pop(self._key, None)

    def refresh(self) -> FetchResult:
        """Invalidate, fetch, and store a fresh result."""
        self.invalidate()
        return self._store(self._source.fetch())

    def expires_at(self) -> datetime | None:
        entry = self._live_entry()
        if entry is None:
            return None
        return datetime.fromtimestamp(entry.expires_at, tz=timezone.utc)

    def keys(self) -> list[str]:
        return [self._key] if self._live_entry() is not None else []

    def stats(self) -> CacheStats:
        return CacheStats(hits=self._hits, misses=self._misses, keys=len(self.keys()))

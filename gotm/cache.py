"""In-memory caching of runoff results.

Tabulation itself is pure; this module memoises its output per
(election, category) and is the place that guarantees each key is computed by
at most one caller at a time.
"""

import logging
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from gotm import config

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    value: Any
    expiry: float


class TTLCache:
    """Simple in-memory cache with a per-entry time to live.

    Args:
        clock: Time source in seconds; monotonic by default
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry] = {}

    def get(self, key: Hashable) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expiry <= self._clock():
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        self._entries[key] = CacheEntry(value=value, expiry=self._clock() + ttl)

    def delete(self, key: Hashable) -> bool:
        """Remove a key; returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class ResultsCache:
    """Memoises runoff results per (election id, category).

    Example:
        >>> cache = ResultsCache()
        >>> result = cache.get_or_compute(12, "long", lambda: compute_results(12, "long"))
        >>> cache.invalidate(12, "long")  # after a ballot changes
    """

    def __init__(self, ttl: float | None = None, cache: TTLCache | None = None):
        self.ttl = config.CACHE_TTL_SECONDS if ttl is None else ttl
        self._cache = cache if cache is not None else TTLCache()
        self._locks: dict[tuple[Hashable, str], threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @staticmethod
    def key(election_id: Hashable, category: str) -> tuple[Hashable, str]:
        return (election_id, category)

    def _lock_for(self, key: tuple[Hashable, str]) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def get_or_compute(self, election_id: Hashable, category: str, compute: Callable[[], Any]) -> Any:
        """Return the cached result for the key, computing and storing it if needed.

        Concurrent callers for the same key wait for a single computation.
        Exceptions from compute propagate and nothing is cached.
        """
        key = self.key(election_id, category)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        with self._lock_for(key):
            cached = self._cache.get(key)
            if cached is not None:
                return cached
            logger.debug("Computing results for election %s (%s)", election_id, category)
            value = compute()
            self._cache.set(key, value, self.ttl)
            return value

    def clear(self) -> None:
        self._cache.clear()

    def invalidate(self, election_id: Hashable, category: str) -> bool:
        """Drop the cached result for the key, e.g. after a ballot changes."""
        removed = self._cache.delete(self.key(election_id, category))
        if removed:
            logger.info("Invalidated cached results for election %s (%s)", election_id, category)
        return removed

# src/cache/lru_store.py — v1
"""Bounded in-memory LRU cache with optional time-based expiry.

One threading.Lock guards every read-check-write sequence, so expiry checks
and eviction decisions are atomic for concurrent callers (asyncio tasks in one
loop or worker threads). No method awaits or blocks while holding the lock.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import TypeVar

from lansonesscan.cache.base_cache_store import BaseCacheStore
from lansonesscan.cache.models import CacheEntry, CacheStats

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TimedLruCache(BaseCacheStore[V]):
    """LRU cache of at most ``max_entries`` values.

    Args:
        max_entries: Capacity bound. Inserting a new key into a full cache
            evicts the least recently used entry first.
        ttl_seconds: Entry lifetime measured from insertion. ``None`` disables
            expiry (entries leave only through capacity eviction).
        name: Label used in log lines.
    """

    def __init__(
        self,
        max_entries: int,
        ttl_seconds: float | None = None,
        name: str = "cache",
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if ttl_seconds is not None and ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0 or None")
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()
        self._max_entries = max_entries
        self._ttl = ttl_seconds
        self._name = name
        self._lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def ttl_seconds(self) -> float | None:
        return self._ttl

    def get(self, key: str) -> V | None:
        """Return the live value for key, or None if absent or expired.

        Expired entries are removed here. A hit marks the entry most
        recently used.
        """
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry, now):
                del self._entries[key]
                logger.debug("%s: expired entry %s dropped", self._name, key[:16])
                return None
            self._entries.move_to_end(key)
            return entry.value

    def put(self, key: str, value: V) -> None:
        """Insert or overwrite key; overwriting refreshes age and recency."""
        now = time.monotonic()
        with self._lock:
            if key in self._entries:
                self._entries[key] = CacheEntry(value=value, created_at=now)
                self._entries.move_to_end(key)
                return
            while len(self._entries) >= self._max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                logger.debug("%s: evicted LRU entry %s", self._name, evicted_key[:16])
            self._entries[key] = CacheEntry(value=value, created_at=now)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("%s: cleared", self._name)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._entries), max_size=self._max_entries)

    def __contains__(self, key: object) -> bool:
        """Expiry-aware membership test that does not touch recency."""
        if not isinstance(key, str):
            return False
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._is_expired(entry, now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _is_expired(self, entry: CacheEntry[V], now: float) -> bool:
        """Called under lock."""
        return self._ttl is not None and now - entry.created_at > self._ttl

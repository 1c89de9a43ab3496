# src/cache/base_cache_store.py — v2
"""Abstract cache store interface keyed by image fingerprint."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from lansonesscan.cache.models import CacheStats

V = TypeVar("V")


class BaseCacheStore(ABC, Generic[V]):
    """Unified interface for the in-process caches."""

    @abstractmethod
    def get(self, key: str) -> V | None:
        """Retrieve a live value by fingerprint key."""

    @abstractmethod
    def put(self, key: str, value: V) -> None:
        """Insert or overwrite a value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a value if present."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all values."""

    @abstractmethod
    def stats(self) -> CacheStats:
        """Current size and capacity."""

# src/cache/models.py — v2
"""Cache domain models: CacheEntry, CacheStats."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """Cached value paired with its creation time (time.monotonic seconds)."""

    value: V
    created_at: float


class CacheStats(BaseModel):
    """Size snapshot of one cache instance."""

    size: int
    max_size: int

# src/cache/cache_factory.py — v3
"""Factories for the two analysis caches.

Both caches share the fingerprint key space but are independent instances:
the response cache holds resolved AnalysisOutcome records for a day, the
image cache holds normalized image artifacts for the current session only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lansonesscan.cache.lru_store import TimedLruCache
from lansonesscan.config.settings import Settings

if TYPE_CHECKING:
    from lansonesscan.core.models import AnalysisOutcome
    from lansonesscan.preprocessing.models import NormalizedImage

DEFAULT_RESPONSE_CACHE_ENTRIES = 50
DEFAULT_RESPONSE_CACHE_TTL_SECONDS = 24 * 60 * 60
DEFAULT_IMAGE_CACHE_ENTRIES = 10


def create_response_cache(
    settings: Settings | None = None,
) -> TimedLruCache[AnalysisOutcome]:
    """Instantiate the outcome cache (bounded LRU with expiry).

    Args:
        settings: Application settings. Defaults to 50 entries / 24 hours.
    """
    if settings is None:
        return TimedLruCache(
            max_entries=DEFAULT_RESPONSE_CACHE_ENTRIES,
            ttl_seconds=DEFAULT_RESPONSE_CACHE_TTL_SECONDS,
            name="response_cache",
        )
    return TimedLruCache(
        max_entries=settings.response_cache_max_entries,
        ttl_seconds=settings.response_cache_ttl_seconds,
        name="response_cache",
    )


def create_image_cache(
    settings: Settings | None = None,
) -> TimedLruCache[NormalizedImage]:
    """Instantiate the preprocessed-image cache (bounded LRU, no expiry).

    Args:
        settings: Application settings. Defaults to 10 entries.
    """
    max_entries = (
        DEFAULT_IMAGE_CACHE_ENTRIES if settings is None else settings.image_cache_max_entries
    )
    return TimedLruCache(max_entries=max_entries, ttl_seconds=None, name="image_cache")

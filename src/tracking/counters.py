# src/tracking/counters.py — v1
"""Process-scoped analysis counters, injected into the pipeline.

Increments are guarded by a lock so concurrent analyses never lose a count.
Counters reset when the process restarts (or when reset() is called).
"""

from __future__ import annotations

import threading

from lansonesscan.tracking.models import PerformanceStats


class AnalysisCounters:
    """Cache-hit-rate and gateway usage accounting."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total_analyses = 0
        self._cache_hits = 0
        self._gateway_calls = 0
        self._gateway_failures = 0

    def record_hit(self) -> None:
        with self._lock:
            self._total_analyses += 1
            self._cache_hits += 1

    def record_miss(self) -> None:
        with self._lock:
            self._total_analyses += 1

    def record_gateway_call(self, failed: bool = False) -> None:
        with self._lock:
            self._gateway_calls += 1
            if failed:
                self._gateway_failures += 1

    def snapshot(self) -> PerformanceStats:
        with self._lock:
            return PerformanceStats(
                total_analyses=self._total_analyses,
                cache_hits=self._cache_hits,
                gateway_calls=self._gateway_calls,
                gateway_failures=self._gateway_failures,
            )

    def reset(self) -> None:
        with self._lock:
            self._total_analyses = 0
            self._cache_hits = 0
            self._gateway_calls = 0
            self._gateway_failures = 0

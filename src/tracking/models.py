# src/tracking/models.py — v2
"""Tracking domain models: PerformanceStats, GatewayCallRecord."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class PerformanceStats(BaseModel):
    """Snapshot of the analysis counters."""

    total_analyses: int
    cache_hits: int
    gateway_calls: int
    gateway_failures: int

    @property
    def cache_misses(self) -> int:
        return self.total_analyses - self.cache_hits

    @property
    def hit_rate(self) -> float:
        """Cache hit rate in percent (0.0 when nothing was analyzed yet)."""
        if self.total_analyses == 0:
            return 0.0
        return self.cache_hits * 100.0 / self.total_analyses

    def summary(self) -> str:
        return (
            f"Analyses: {self.total_analyses}, Cache hits: {self.cache_hits} "
            f"({self.hit_rate:.1f}%)"
        )


class GatewayCallRecord(BaseModel):
    """One model gateway call made by the pipeline."""

    call_id: str
    timestamp: datetime
    step: Literal["detection", "analysis", "neutral", "variety"]
    provider: str
    latency_ms: int
    status: Literal["success", "failed"]
    error_category: str | None = None
    response_chars: int = 0

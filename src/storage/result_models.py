# src/storage/result_models.py — v1
"""Persisted analysis record handed off by the caller."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from lansonesscan.core.models import AnalysisOutcome


class StoredResult(BaseModel):
    """One saved analysis: outcome plus where it came from."""

    fingerprint: str = Field(min_length=1)
    saved_at: datetime
    source_name: str | None = None
    outcome: AnalysisOutcome

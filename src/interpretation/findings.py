# src/interpretation/findings.py — v1
"""Intermediate, not-yet-repaired result of interpreting model text.

Both the structured and the heuristic path produce a ParsedFindings; the
``source`` field tells them apart. Fields may be inconsistent with each other
(a detected disease without a name, a severity for a healthy sample); the
repair step is what turns them into a valid AnalysisOutcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

FindingsSource = Literal["structured", "heuristic"]


@dataclass(frozen=True)
class ParsedFindings:
    source: FindingsSource
    disease_detected: bool
    disease_name: str | None = None
    confidence: float | None = None
    symptoms: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    severity: str | None = None
    affected_part: str | None = None

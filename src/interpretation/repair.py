# src/interpretation/repair.py — v1
"""Invariant repair: turn ParsedFindings from either path into a valid outcome.

This is the single place where disease flag, name and severity are made
consistent. Whatever the model wrote, the returned AnalysisOutcome satisfies:

- a detected disease always has a non-blank name;
- no detected disease means no name and severity "none";
- confidence lies in [0, 1];
- unrelated images carry neutral findings only.
"""

from __future__ import annotations

import logging
import math

from lansonesscan.core.models import (
    UNIDENTIFIED_DISEASE,
    AnalysisOutcome,
    ItemCategory,
    Severity,
    VarietyResult,
)
from lansonesscan.interpretation.findings import ParsedFindings

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.6
NEUTRAL_CONFIDENCE = 1.0

# Names models use to mean "nothing found"; never valid for a detected disease.
_PLACEHOLDER_NAMES = frozenset({"none", "healthy", "null", "n/a", "na", "unknown", "no disease"})

_SEVERITY_SYNONYMS: dict[str, Severity] = {
    "none": "none",
    "healthy": "none",
    "low": "low",
    "mild": "low",
    "minor": "low",
    "slight": "low",
    "medium": "medium",
    "moderate": "medium",
    "high": "high",
    "severe": "high",
    "critical": "high",
    "extreme": "high",
}


def normalize_confidence(value: float | None) -> float:
    """Clamp to [0, 1]; values in (1, 100] are read as percentages."""
    if value is None or math.isnan(value):
        return DEFAULT_CONFIDENCE
    if 1.0 < value <= 100.0:
        value = value / 100.0
    return min(1.0, max(0.0, value))


def normalize_severity(value: str | None, disease_detected: bool) -> Severity:
    if not disease_detected:
        return "none"
    severity = _SEVERITY_SYNONYMS.get((value or "").strip().lower(), "medium")
    return "medium" if severity == "none" else severity


def usable_disease_name(value: str | None) -> str | None:
    if value is None:
        return None
    name = value.strip()
    if not name or name.lower() in _PLACEHOLDER_NAMES:
        return None
    return name


def _clean_lines(values: list[str]) -> list[str]:
    return [line.strip() for line in values if line and line.strip()]


def repair_findings(
    findings: ParsedFindings,
    category: ItemCategory,
    raw_text: str,
) -> AnalysisOutcome:
    """Build a valid AnalysisOutcome from possibly inconsistent findings."""
    if category == "unrelated":
        return AnalysisOutcome(
            item_category="unrelated",
            disease_detected=False,
            confidence=NEUTRAL_CONFIDENCE,
            symptoms=_clean_lines(findings.symptoms),
            affected_part="general",
            raw_model_text=raw_text,
            source="neutral",
        )

    disease_detected = findings.disease_detected
    disease_name: str | None = None
    if disease_detected:
        disease_name = usable_disease_name(findings.disease_name)
        if disease_name is None:
            logger.warning(
                "Disease detected but no usable name (%s path); using %r",
                findings.source, UNIDENTIFIED_DISEASE,
            )
            disease_name = UNIDENTIFIED_DISEASE

    affected_part = (findings.affected_part or "").strip().lower() or category

    return AnalysisOutcome(
        item_category=category,
        disease_detected=disease_detected,
        disease_name=disease_name,
        confidence=normalize_confidence(findings.confidence),
        symptoms=_clean_lines(findings.symptoms),
        recommendations=_clean_lines(findings.recommendations),
        severity=normalize_severity(findings.severity, disease_detected),
        affected_part=affected_part,
        raw_model_text=raw_text,
        source=findings.source,
    )


def attach_variety(outcome: AnalysisOutcome, variety: VarietyResult | None) -> AnalysisOutcome:
    """Return a copy of outcome carrying the variety result, re-validated.

    Raises:
        ValueError: If the outcome is not for fruit.
    """
    if variety is None:
        return outcome
    data = outcome.model_dump()
    data["variety_result"] = variety
    return AnalysisOutcome.model_validate(data)

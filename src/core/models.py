# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types; all imports come from core.models.
An AnalysisOutcome that breaks the disease/name/severity invariants cannot be
constructed: the validator below rejects it.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ItemCategory = Literal["fruit", "leaf", "unrelated"]
Severity = Literal["none", "low", "medium", "high"]
Variety = Literal["longkong", "duku", "paete", "jolo", "unknown"]
FindingSource = Literal["structured", "heuristic", "neutral"]

ITEM_CATEGORIES: tuple[ItemCategory, ...] = ("fruit", "leaf", "unrelated")
SEVERITIES: tuple[Severity, ...] = ("none", "low", "medium", "high")
VARIETIES: tuple[Variety, ...] = ("longkong", "duku", "paete", "jolo", "unknown")

UNIDENTIFIED_DISEASE = "Unidentified Disease"


# === DETECTION ===


class Detection(BaseModel):
    """First-stage decision: which specialized analysis applies."""

    model_config = ConfigDict(frozen=True)

    is_lansones: bool
    item_type: str
    category: ItemCategory
    confidence: float = Field(ge=0.0, le=1.0)
    description: str = ""


# === OUTCOME ===


class VarietyResult(BaseModel):
    """Best-effort variety identification for lansones fruit."""

    model_config = ConfigDict(frozen=True)

    variety: Variety = "unknown"
    confidence: float = Field(ge=0.0, le=1.0)
    characteristics: list[str] = Field(default_factory=list)
    description: str = ""


class AnalysisOutcome(BaseModel):
    """Resolved, invariant-satisfying result of analyzing one image."""

    model_config = ConfigDict(frozen=True)

    item_category: ItemCategory
    disease_detected: bool
    disease_name: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    symptoms: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    severity: Severity = "none"
    affected_part: str = "general"
    variety_result: VarietyResult | None = None
    raw_model_text: str = ""
    source: FindingSource = "structured"

    @model_validator(mode="after")
    def check_invariants(self) -> AnalysisOutcome:
        if self.disease_detected:
            if self.disease_name is None or not self.disease_name.strip():
                raise ValueError("disease_name must be non-empty when disease_detected")
            if self.severity == "none":
                raise ValueError("severity cannot be 'none' when disease_detected")
        else:
            if self.disease_name is not None:
                raise ValueError("disease_name must be None when no disease is detected")
            if self.severity != "none":
                raise ValueError("severity must be 'none' when no disease is detected")
        if self.variety_result is not None and self.item_category != "fruit":
            raise ValueError("variety_result is only allowed for fruit")
        return self

    @property
    def status_text(self) -> str:
        if self.disease_detected:
            return f"Disease Detected: {self.disease_name}"
        if self.item_category == "unrelated":
            return "Not lansones"
        return "Healthy"

    @property
    def confidence_percentage(self) -> int:
        return int(self.confidence * 100)

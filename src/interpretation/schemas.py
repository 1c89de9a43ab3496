# src/interpretation/schemas.py — v2
"""Expected JSON shapes of model replies, one per prompt.

Field names follow the camelCase keys the prompts request. Decoding is
lenient about list, number and string shapes but strict about the flags:
a reply without a usable ``diseaseDetected`` (or ``isLansones``) is not
structured data.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _as_str_list(value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return None


def _as_optional_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().rstrip("%"))
        except ValueError:
            return None
    return None


def _as_optional_str(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return None


_CONFIDENCE_ALIASES = AliasChoices("confidenceLevel", "confidence", "confidence_level")


class _ReplySchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DiseaseResponse(_ReplySchema):
    """Reply to the fruit or leaf analysis prompt.

    ``ripenessLevel`` and ``leafHealthStatus`` have no counterpart in
    AnalysisOutcome and are dropped with the other unknown keys.
    """

    disease_detected: bool = Field(alias="diseaseDetected")
    disease_name: str | None = Field(default=None, alias="diseaseName")
    confidence: float | None = Field(default=None, validation_alias=_CONFIDENCE_ALIASES)
    symptoms: list[str] | None = None
    recommendations: list[str] | None = None
    severity: str | None = None
    affected_part: str | None = Field(default=None, alias="affectedPart")

    @field_validator("symptoms", "recommendations", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> list[str] | None:
        return _as_str_list(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, v: Any) -> float | None:
        return _as_optional_float(v)

    @field_validator("disease_name", "severity", "affected_part", mode="before")
    @classmethod
    def coerce_strings(cls, v: Any) -> str | None:
        return _as_optional_str(v)


class NeutralResponse(_ReplySchema):
    """Reply to the observational prompt for non-lansones images."""

    observations: list[str] | None = None
    measurements: list[str] | None = None
    characteristics: list[str] | None = None

    @field_validator("observations", "measurements", "characteristics", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> list[str] | None:
        return _as_str_list(v)


class DetectionResponse(_ReplySchema):
    """Reply to the detection prompt."""

    is_lansones: bool = Field(alias="isLansones")
    item_type: str = Field(default="other", alias="itemType")
    confidence: float | None = None
    description: str = ""

    @field_validator("item_type", mode="before")
    @classmethod
    def coerce_item_type(cls, v: Any) -> str:
        return "other" if v is None else str(v)

    @field_validator("description", mode="before")
    @classmethod
    def coerce_description(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, v: Any) -> float | None:
        return _as_optional_float(v)


class VarietyResponse(_ReplySchema):
    """Reply to the variety identification prompt."""

    variety: str | None = None
    confidence: float | None = Field(default=None, validation_alias=_CONFIDENCE_ALIASES)
    characteristics: list[str] | None = None
    description: str | None = None

    @field_validator("characteristics", mode="before")
    @classmethod
    def coerce_lists(cls, v: Any) -> list[str] | None:
        return _as_str_list(v)

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, v: Any) -> float | None:
        return _as_optional_float(v)

    @field_validator("variety", "description", mode="before")
    @classmethod
    def coerce_strings(cls, v: Any) -> str | None:
        return _as_optional_str(v)

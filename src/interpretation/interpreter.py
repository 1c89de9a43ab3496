# src/interpretation/interpreter.py — v1
"""Response interpreter: model text in, validated domain records out.

interpret() tries the structured path first, falls back to prose heuristics
when no JSON object fits the reply schema, and always finishes with the
repair step. None of the functions here raise for any input string.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from lansonesscan.core.models import (
    VARIETIES,
    AnalysisOutcome,
    Detection,
    ItemCategory,
    Variety,
    VarietyResult,
)
from lansonesscan.interpretation.findings import ParsedFindings
from lansonesscan.interpretation.heuristics import interpret_prose, mentions_any
from lansonesscan.interpretation.json_extract import extract_json_object
from lansonesscan.interpretation.repair import (
    NEUTRAL_CONFIDENCE,
    normalize_confidence,
    repair_findings,
)
from lansonesscan.interpretation.schemas import DetectionResponse, VarietyResponse
from lansonesscan.interpretation.structured import decode_structured

logger = logging.getLogger(__name__)

_ITEM_TYPE_CATEGORIES: dict[str, ItemCategory] = {
    "lansones_fruit": "fruit",
    "lansones_fruits": "fruit",
    "fruit": "fruit",
    "lansones_leaves": "leaf",
    "lansones_leaf": "leaf",
    "leaves": "leaf",
    "leaf": "leaf",
}

_LANSONES_TERMS = ("lansones", "lansium")
_LEAF_TERMS = ("leaf", "leaves", "foliage", "leaflet", "compound", "pinnate")
_FRUIT_TERMS = ("fruit", "berry", "berries", "cluster")

FALLBACK_DETECTION_DESCRIPTION = "Fallback detection based on response content"


def interpret(text: str, category: ItemCategory) -> AnalysisOutcome:
    """Interpret an analysis reply for the given item category."""
    text = text or ""
    findings: ParsedFindings | None = None

    data = extract_json_object(text)
    if data is not None:
        findings = decode_structured(data, category)

    if findings is None:
        logger.debug("No structured reply found, using text heuristics (category=%s)", category)
        if category == "unrelated":
            findings = ParsedFindings(source="heuristic", disease_detected=False)
        else:
            findings = interpret_prose(text, category)

    return repair_findings(findings, category, text)


def neutral_outcome(description: str) -> AnalysisOutcome:
    """Non-judgmental outcome used when no category-specific analysis ran."""
    return AnalysisOutcome(
        item_category="unrelated",
        disease_detected=False,
        confidence=NEUTRAL_CONFIDENCE,
        affected_part="general",
        raw_model_text=f"Neutral analysis: {description}",
        source="neutral",
    )


def category_for_item_type(is_lansones: bool, item_type: str) -> ItemCategory:
    if not is_lansones:
        return "unrelated"
    return _ITEM_TYPE_CATEGORIES.get(item_type.strip().lower(), "unrelated")


def interpret_detection(text: str) -> Detection:
    """Interpret a detection reply, falling back to keyword rules."""
    text = text or ""
    data = extract_json_object(text)
    if data is not None:
        try:
            reply = DetectionResponse.model_validate(data)
        except ValidationError as e:
            logger.debug("Detection reply did not match schema: %d error(s)", e.error_count())
        else:
            category = category_for_item_type(reply.is_lansones, reply.item_type)
            return Detection(
                is_lansones=category != "unrelated",
                item_type=reply.item_type,
                category=category,
                confidence=normalize_confidence(reply.confidence),
                description=reply.description,
            )

    return _detect_from_text(text)


def _detect_from_text(text: str) -> Detection:
    category: ItemCategory = "unrelated"
    item_type = "other"
    if mentions_any(text, _LANSONES_TERMS):
        if mentions_any(text, _LEAF_TERMS):
            category, item_type = "leaf", "lansones_leaves"
        elif mentions_any(text, _FRUIT_TERMS):
            category, item_type = "fruit", "lansones_fruit"

    is_lansones = category != "unrelated"
    return Detection(
        is_lansones=is_lansones,
        item_type=item_type,
        category=category,
        confidence=0.7 if is_lansones else 0.3,
        description=FALLBACK_DETECTION_DESCRIPTION,
    )


def interpret_variety(text: str) -> VarietyResult | None:
    """Interpret a variety reply; None when it carries no usable JSON."""
    data = extract_json_object(text or "")
    if data is None:
        return None
    try:
        reply = VarietyResponse.model_validate(data)
    except ValidationError as e:
        logger.debug("Variety reply did not match schema: %d error(s)", e.error_count())
        return None

    return VarietyResult(
        variety=_variety_from_string(reply.variety),
        confidence=normalize_confidence(reply.confidence),
        characteristics=[c.strip() for c in reply.characteristics or [] if c.strip()],
        description=(reply.description or "").strip(),
    )


def _variety_from_string(value: str | None) -> Variety:
    name = (value or "").strip().lower()
    for variety in VARIETIES:
        if name == variety:
            return variety
    return "unknown"

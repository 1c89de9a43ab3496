# src/interpretation/structured.py — v1
"""Structured path: decode an extracted JSON object against a reply schema."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from lansonesscan.core.models import ItemCategory
from lansonesscan.interpretation.findings import ParsedFindings
from lansonesscan.interpretation.schemas import DiseaseResponse, NeutralResponse

logger = logging.getLogger(__name__)


def decode_structured(data: dict[str, Any], category: ItemCategory) -> ParsedFindings | None:
    """Decode a JSON object into findings, or None when it does not fit.

    For the unrelated category the neutral reply shape is used and the
    observations become the symptom list; disease fields are never read.
    """
    if category == "unrelated":
        try:
            neutral = NeutralResponse.model_validate(data)
        except ValidationError as e:
            logger.debug("Neutral reply did not match schema: %s", e.error_count())
            return None
        return ParsedFindings(
            source="structured",
            disease_detected=False,
            confidence=1.0,
            symptoms=list(neutral.observations or []),
        )

    try:
        reply = DiseaseResponse.model_validate(data)
    except ValidationError as e:
        logger.debug("Disease reply did not match schema: %d error(s)", e.error_count())
        return None

    return ParsedFindings(
        source="structured",
        disease_detected=reply.disease_detected,
        disease_name=reply.disease_name,
        confidence=reply.confidence,
        symptoms=list(reply.symptoms or []),
        recommendations=list(reply.recommendations or []),
        severity=reply.severity,
        affected_part=reply.affected_part,
    )

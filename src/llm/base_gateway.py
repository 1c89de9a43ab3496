# src/llm/base_gateway.py — v1
"""Abstract model gateway: one image plus one prompt in, raw text out.

Gateways are stateless. Every failure surfaces as GatewayError with a stable
category; provider exception text never leaks to callers.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod

from lansonesscan.core.errors import GatewayError
from lansonesscan.llm.models import ImageInput

logger = logging.getLogger(__name__)

# Keys the analysis prompts ask for; their presence marks a usable reply.
_EXPECTED_KEYS = ('"isLansones"', '"diseaseDetected"', '"observations"', '"variety"')
_MIN_TEXT_LENGTH = 10


class BaseVisionGateway(ABC):
    """Unified interface for multimodal model providers."""

    @abstractmethod
    async def submit(self, image: ImageInput, prompt: str) -> str:
        """Send one image with one prompt and return the model's text.

        Raises:
            GatewayError: On transport, provider or empty-response failure.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (google, anthropic, openai)."""


def is_meaningful_response(text: str | None) -> bool:
    """Whether a reply carries content worth interpreting.

    JSON objects must parse; fenced blocks and replies mentioning an expected
    key are accepted as is (the interpreter digs the JSON out later); plain
    prose must be longer than a few characters.
    """
    if text is None:
        return False
    trimmed = text.strip()
    if not trimmed:
        return False
    if trimmed.startswith("{") and trimmed.endswith("}"):
        try:
            json.loads(trimmed)
        except json.JSONDecodeError:
            return False
        return True
    if "```" in trimmed:
        return True
    if any(key in trimmed for key in _EXPECTED_KEYS):
        return True
    return len(trimmed) > _MIN_TEXT_LENGTH


def validate_response_text(text: str | None, provider: str) -> str:
    """Return the trimmed reply or raise GatewayError for empty/invalid replies."""
    if not is_meaningful_response(text):
        preview = (text or "")[:100]
        logger.error("Invalid or empty response from %s: %r", provider, preview)
        raise GatewayError(
            "unknown",
            detail=f"Invalid or empty response from {provider}: {preview!r}",
        )
    return (text or "").strip()

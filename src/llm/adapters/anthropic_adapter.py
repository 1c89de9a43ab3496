# src/llm/adapters/anthropic_adapter.py — v3
"""Anthropic Claude gateway implementing BaseVisionGateway.

Uses the official anthropic SDK with a base64 image block followed by the
prompt text in a single user turn.
"""

from __future__ import annotations

import base64
import logging
import time
from typing import Any

from lansonesscan.core.errors import GatewayError, to_gateway_error
from lansonesscan.llm.base_gateway import BaseVisionGateway, validate_response_text
from lansonesscan.llm.models import ImageInput

logger = logging.getLogger(__name__)


class AnthropicGateway(BaseVisionGateway):
    """Gateway for Anthropic Claude models."""

    def __init__(
        self,
        model: str = "claude-sonnet-4-20250514",
        api_key: str | None = None,
        temperature: float = 0.2,
        max_output_tokens: int = 1024,
        **kwargs: Any,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_output_tokens
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            if not self._api_key:
                raise GatewayError("auth", detail="ANTHROPIC_API_KEY is not configured")
            import anthropic

            self.__client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self.__client

    async def submit(self, image: ImageInput, prompt: str) -> str:
        content_blocks: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.media_type,
                    "data": base64.b64encode(image.data).decode("ascii"),
                },
            },
            {"type": "text", "text": prompt},
        ]
        params: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
            "messages": [{"role": "user", "content": content_blocks}],
        }

        client = self._client
        start = time.monotonic()
        try:
            response = await client.messages.create(**params)
        except Exception as e:
            error = to_gateway_error(e)
            logger.warning("Anthropic request failed (%s): %s", error.category, e)
            raise error from e
        latency_ms = int((time.monotonic() - start) * 1000)

        text = self._extract_text(response)
        logger.debug("Anthropic replied in %dms (%d chars)", latency_ms, len(text))
        return validate_response_text(text, self.provider_name)

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @staticmethod
    def _extract_text(response: Any) -> str:
        """Concatenate text blocks of an Anthropic response."""
        return "".join(
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        )

# src/llm/adapters/openai_adapter.py — v2
"""OpenAI GPT gateway implementing BaseVisionGateway.

Uses the official openai SDK; the image travels as a base64 data URL.
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


class OpenAIGateway(BaseVisionGateway):
    """OpenAI GPT gateway."""

    def __init__(
        self,
        model: str = "gpt-4o",
        api_key: str = "",
        temperature: float = 0.2,
        top_p: float = 0.85,
        max_output_tokens: int = 1024,
        **kwargs: Any,
    ):
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._top_p = top_p
        self._max_tokens = max_output_tokens

    async def submit(self, image: ImageInput, prompt: str) -> str:
        if not self._api_key:
            raise GatewayError("auth", detail="OPENAI_API_KEY is not configured")
        import openai

        client = openai.AsyncOpenAI(api_key=self._api_key)
        b64 = base64.b64encode(image.data).decode()
        content_parts: list[dict[str, Any]] = [
            {"type": "image_url", "image_url": {"url": f"data:{image.media_type};base64,{b64}"}},
            {"type": "text", "text": prompt},
        ]

        t0 = time.monotonic()
        try:
            resp = await client.chat.completions.create(
                model=self._model,
                messages=[{"role": "user", "content": content_parts}],
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                top_p=self._top_p,
            )
        except Exception as e:
            error = to_gateway_error(e)
            logger.warning("OpenAI request failed (%s): %s", error.category, e)
            raise error from e
        latency = int((time.monotonic() - t0) * 1000)

        text = resp.choices[0].message.content if resp.choices else None
        logger.debug("OpenAI replied in %dms (%d chars)", latency, len(text or ""))
        return validate_response_text(text, self.provider_name)

    @property
    def provider_name(self) -> str:
        return "openai"

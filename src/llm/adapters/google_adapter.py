# src/llm/adapters/google_adapter.py — v2
"""Google Gemini gateway implementing BaseVisionGateway.

Uses the google-generativeai SDK. Low temperature and a narrow top-k keep
replies for the same image as repeatable as the provider allows.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from lansonesscan.core.errors import GatewayError, to_gateway_error
from lansonesscan.llm.base_gateway import BaseVisionGateway, validate_response_text
from lansonesscan.llm.models import ImageInput

logger = logging.getLogger(__name__)


class GoogleGateway(BaseVisionGateway):
    """Google Gemini gateway."""

    def __init__(
        self,
        model: str = "gemini-2.0-flash",
        api_key: str = "",
        temperature: float = 0.2,
        top_k: int = 5,
        top_p: float = 0.85,
        max_output_tokens: int = 1024,
        **kwargs: Any,
    ):
        self._model_name = model
        self._api_key = api_key
        self._generation_config: dict[str, Any] = {
            "temperature": temperature,
            "top_k": top_k,
            "top_p": top_p,
            "max_output_tokens": max_output_tokens,
        }
        self.__model = None  # Lazy initialization

    @property
    def _model(self):
        """Lazy-init the GenerativeModel (only on first call)."""
        if self.__model is None:
            if not self._api_key:
                raise GatewayError("auth", detail="GOOGLE_API_KEY is not configured")
            import google.generativeai as genai

            genai.configure(api_key=self._api_key)
            self.__model = genai.GenerativeModel(
                self._model_name,
                generation_config=self._generation_config,
            )
            logger.debug("Gemini model initialized: %s", self._model_name)
        return self.__model

    async def submit(self, image: ImageInput, prompt: str) -> str:
        model = self._model
        parts: list[Any] = [
            {"inline_data": {"mime_type": image.media_type, "data": image.data}},
            {"text": prompt},
        ]

        t0 = time.monotonic()
        try:
            resp = await model.generate_content_async(parts)
            text = resp.text
        except Exception as e:
            error = to_gateway_error(e)
            logger.warning("Gemini request failed (%s): %s", error.category, e)
            raise error from e
        latency = int((time.monotonic() - t0) * 1000)

        logger.debug("Gemini replied in %dms (%d chars)", latency, len(text or ""))
        return validate_response_text(text, self.provider_name)

    @property
    def provider_name(self) -> str:
        return "google"

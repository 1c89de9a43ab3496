# src/pipeline/analysis_pipeline.py — v2
"""Classification pipeline: fingerprint, cache, detect, analyze, identify variety.

Flow for one image:
  1. reject empty input
  2. fingerprint the raw bytes
  3. outcome cache lookup (a hit returns without any gateway call)
  4. normalized image from the image cache, or preprocess and store it
  5. detection call (a gateway failure degrades to a neutral outcome)
  6. fruit/leaf analysis or neutral observation call
  7. variety call for fruit only (failures are logged and dropped)
  8. store the assembled outcome and return it

No cache lock is held while a gateway call is awaited, and the outcome cache
is written only once the full outcome is assembled. The cache stores and
hands out deep copies, so a caller editing a returned outcome never changes
what later cache hits return.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Union

from lansonesscan.cache.base_cache_store import BaseCacheStore
from lansonesscan.cache.cache_factory import create_image_cache, create_response_cache
from lansonesscan.cache.fingerprint import compute_fingerprint, short_fingerprint
from lansonesscan.cache.models import CacheStats
from lansonesscan.core.errors import EmptyInputError, GatewayError, PrimaryAnalysisError
from lansonesscan.core.models import AnalysisOutcome, ItemCategory, VarietyResult
from lansonesscan.interpretation.interpreter import (
    interpret,
    interpret_detection,
    interpret_variety,
    neutral_outcome,
)
from lansonesscan.interpretation.repair import attach_variety
from lansonesscan.llm.base_gateway import BaseVisionGateway
from lansonesscan.llm.models import ImageInput
from lansonesscan.llm.retry import RetryConfig, RetryExhausted, with_retry
from lansonesscan.logging.context import clear_context, set_analysis_context, set_step_context
from lansonesscan.pipeline.prompts import DETECTION_PROMPT, VARIETY_PROMPT, analysis_prompt
from lansonesscan.preprocessing.image_preprocessor import ImagePreprocessor
from lansonesscan.preprocessing.models import NormalizedImage
from lansonesscan.tracking.call_logger import CallLogger
from lansonesscan.tracking.counters import AnalysisCounters
from lansonesscan.tracking.models import PerformanceStats

logger = logging.getLogger(__name__)

MimeTypeResolver = Union[str, Callable[[], Union[str, None]], None]

DETECTION_FAILED_DESCRIPTION = "Detection failed, providing neutral analysis"


class AnalysisPipeline:
    """Analyze lansones images through a vision gateway, with memoization.

    Usage:
        pipeline = AnalysisPipeline(gateway)
        outcome = await pipeline.analyze(image_bytes, "image/jpeg")
    """

    def __init__(
        self,
        gateway: BaseVisionGateway,
        response_cache: BaseCacheStore[AnalysisOutcome] | None = None,
        image_cache: BaseCacheStore[NormalizedImage] | None = None,
        preprocessor: ImagePreprocessor | None = None,
        counters: AnalysisCounters | None = None,
        call_logger: CallLogger | None = None,
        retry_configs: dict[str, RetryConfig] | None = None,
    ) -> None:
        self._gateway = gateway
        self._response_cache = response_cache if response_cache is not None else create_response_cache()
        self._image_cache = image_cache if image_cache is not None else create_image_cache()
        self._preprocessor = preprocessor or ImagePreprocessor()
        self._counters = counters or AnalysisCounters()
        self._call_logger = call_logger
        self._retry_configs = retry_configs

    @property
    def counters(self) -> AnalysisCounters:
        return self._counters

    @property
    def call_logger(self) -> CallLogger | None:
        return self._call_logger

    async def analyze(
        self,
        raw_bytes: bytes,
        mime_type_resolver: MimeTypeResolver = None,
    ) -> AnalysisOutcome:
        """Analyze one image.

        Args:
            raw_bytes: Encoded image as received from the caller.
            mime_type_resolver: MIME type string, or a callable returning it.
                Only consulted on a cache miss.

        Returns:
            AnalysisOutcome satisfying all outcome invariants.

        Raises:
            EmptyInputError: raw_bytes is empty.
            ImageDecodeError: raw_bytes is not a decodable image.
            PrimaryAnalysisError: The gateway failed on the main analysis call.
        """
        if not raw_bytes:
            raise EmptyInputError()

        fingerprint = compute_fingerprint(raw_bytes)
        set_analysis_context(fingerprint)
        try:
            cached = self._response_cache.get(fingerprint)
            if cached is not None:
                self._counters.record_hit()
                logger.info(
                    "Cache HIT for %s (%s)",
                    short_fingerprint(fingerprint), self._counters.snapshot().summary(),
                )
                return cached.model_copy(deep=True)

            self._counters.record_miss()
            logger.info(
                "Cache MISS for %s (%s)",
                short_fingerprint(fingerprint), self._counters.snapshot().summary(),
            )

            image = self._normalized_image(fingerprint, raw_bytes, mime_type_resolver)
            outcome = await self._run_analysis(image)
            if outcome is None:
                return neutral_outcome(DETECTION_FAILED_DESCRIPTION)

            self._response_cache.put(fingerprint, outcome.model_copy(deep=True))
            return outcome
        finally:
            clear_context()

    def clear_cache(self) -> None:
        """Drop every cached outcome and normalized image."""
        self._response_cache.clear()
        self._image_cache.clear()

    def cache_stats(self) -> CacheStats:
        """Size and capacity of the outcome cache."""
        return self._response_cache.stats()

    def image_cache_stats(self) -> CacheStats:
        return self._image_cache.stats()

    def performance_stats(self) -> PerformanceStats:
        return self._counters.snapshot()

    # === STEPS ===

    def _normalized_image(
        self,
        fingerprint: str,
        raw_bytes: bytes,
        mime_type_resolver: MimeTypeResolver,
    ) -> ImageInput:
        set_step_context("preprocess")
        normalized = self._image_cache.get(fingerprint)
        if normalized is None:
            normalized = self._preprocessor.normalize(raw_bytes, _resolve_mime_type(mime_type_resolver))
            self._image_cache.put(fingerprint, normalized)
        else:
            logger.debug("Normalized image served from cache")
        return ImageInput(
            data=normalized.data,
            media_type=normalized.media_type,
            source_id=short_fingerprint(fingerprint),
        )

    async def _run_analysis(self, image: ImageInput) -> AnalysisOutcome | None:
        """Detection, routed analysis and variety. None when detection failed."""
        try:
            detection_text = await self._submit("detection", image, DETECTION_PROMPT)
        except GatewayError as e:
            logger.warning("Detection failed (%s), returning neutral outcome", e.category)
            return None

        detection = interpret_detection(detection_text)
        category: ItemCategory = detection.category
        logger.info(
            "Detected item_type=%s category=%s confidence=%.2f",
            detection.item_type, category, detection.confidence,
        )

        step = "neutral" if category == "unrelated" else "analysis"
        try:
            analysis_text = await self._submit(step, image, analysis_prompt(category))
        except GatewayError as e:
            logger.error("Primary analysis failed: %s", e.category)
            raise PrimaryAnalysisError(e, step=step) from e

        outcome = interpret(analysis_text, category)

        if category == "fruit":
            outcome = attach_variety(outcome, await self._identify_variety(image))

        logger.info(
            "Analysis complete: category=%s disease=%s source=%s",
            outcome.item_category, outcome.disease_name or "none", outcome.source,
        )
        return outcome

    async def _identify_variety(self, image: ImageInput) -> VarietyResult | None:
        try:
            text = await self._submit("variety", image, VARIETY_PROMPT)
        except GatewayError as e:
            logger.warning("Variety identification failed (%s), continuing without it", e.category)
            return None

        variety = interpret_variety(text)
        if variety is None:
            logger.warning("Variety reply could not be decoded, continuing without it")
        return variety

    async def _submit(self, step: str, image: ImageInput, prompt: str) -> str:
        """One gateway call with retry, accounting and call logging.

        Raises:
            GatewayError: The last error once retries are exhausted.
        """
        set_step_context(step)
        start = time.monotonic()
        try:
            text = await with_retry(
                self._gateway.submit, image, prompt,
                step=step, retry_configs=self._retry_configs,
            )
        except RetryExhausted as e:
            self._record_call(step, start, failed=True, error_category=e.last_error.category)
            raise e.last_error from e

        self._record_call(step, start, response_chars=len(text))
        return text

    def _record_call(
        self,
        step: str,
        start: float,
        failed: bool = False,
        error_category: str | None = None,
        response_chars: int = 0,
    ) -> None:
        self._counters.record_gateway_call(failed=failed)
        if self._call_logger is None:
            return
        self._call_logger.record(
            step=step,
            provider=self._gateway.provider_name,
            latency_ms=int((time.monotonic() - start) * 1000),
            status="failed" if failed else "success",
            error_category=error_category,
            response_chars=response_chars,
        )


def _resolve_mime_type(resolver: MimeTypeResolver) -> str | None:
    if resolver is None or isinstance(resolver, str):
        return resolver
    return resolver()

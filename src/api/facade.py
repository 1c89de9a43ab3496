# src/api/facade.py — v2
"""Public API facade: build a ready-to-use analysis pipeline from settings.

Usage:
    from lansonesscan.api.facade import create_pipeline
    pipeline = create_pipeline()
    outcome = await pipeline.analyze(image_bytes, "image/jpeg")
"""

from __future__ import annotations

import logging
from pathlib import Path

from lansonesscan.cache.cache_factory import create_image_cache, create_response_cache
from lansonesscan.config.settings import Settings
from lansonesscan.core.models import AnalysisOutcome
from lansonesscan.llm.base_gateway import BaseVisionGateway
from lansonesscan.llm.client_factory import create_gateway
from lansonesscan.llm.retry import build_retry_configs
from lansonesscan.pipeline.analysis_pipeline import AnalysisPipeline
from lansonesscan.preprocessing.image_preprocessor import ImagePreprocessor
from lansonesscan.preprocessing.image_validator import guess_media_type
from lansonesscan.tracking.call_logger import CallLogger
from lansonesscan.tracking.counters import AnalysisCounters

logger = logging.getLogger(__name__)


def create_pipeline(
    settings: Settings | None = None,
    gateway: BaseVisionGateway | None = None,
) -> AnalysisPipeline:
    """Wire caches, preprocessor, gateway and counters into one pipeline.

    Args:
        settings: Global settings. Loaded from .env if None.
        gateway: Gateway to use instead of the configured provider.

    Returns:
        AnalysisPipeline with its own caches and counters.

    Raises:
        UnsupportedProviderError: If settings.llm_provider is not registered.
    """
    settings = settings or Settings()
    gateway = gateway or create_gateway(settings)

    pipeline = AnalysisPipeline(
        gateway=gateway,
        response_cache=create_response_cache(settings),
        image_cache=create_image_cache(settings),
        preprocessor=ImagePreprocessor(
            min_dimension=settings.preprocess_min_dimension,
            max_dimension=settings.preprocess_max_dimension,
            jpeg_quality=settings.preprocess_jpeg_quality,
        ),
        counters=AnalysisCounters(),
        call_logger=CallLogger(),
        retry_configs=build_retry_configs(settings.llm_max_retries),
    )
    logger.info(
        "Pipeline ready: provider=%s, model=%s, cache=%d entries / %.0fh",
        gateway.provider_name, settings.llm_model,
        settings.response_cache_max_entries, settings.response_cache_ttl_hours,
    )
    return pipeline


async def analyze_file(pipeline: AnalysisPipeline, path: str | Path) -> AnalysisOutcome:
    """Read an image file and analyze it, resolving its MIME type lazily."""
    path = Path(path)
    raw_bytes = path.read_bytes()
    return await pipeline.analyze(raw_bytes, lambda: guess_media_type(path))

# tests/unit/pipeline/test_unit_analysis_pipeline.py — v1
"""Tests for pipeline/analysis_pipeline.py with a scripted gateway."""

from __future__ import annotations

import pytest

from helpers import NEUTRAL_REPLY, VARIETY_REPLY, ScriptedGateway, detection_reply, disease_reply, make_image_bytes
from lansonesscan.core.errors import EmptyInputError, GatewayError, ImageDecodeError, PrimaryAnalysisError
from lansonesscan.llm.retry import RetryConfig
from lansonesscan.logging.context import get_context
from lansonesscan.pipeline.analysis_pipeline import DETECTION_FAILED_DESCRIPTION, AnalysisPipeline
from lansonesscan.preprocessing.image_preprocessor import ImagePreprocessor
from lansonesscan.tracking.call_logger import CallLogger


class CountingPreprocessor(ImagePreprocessor):
    def __init__(self) -> None:
        super().__init__()
        self.calls: list[str | None] = []

    def normalize(self, raw_bytes, media_type=None):
        self.calls.append(media_type)
        return super().normalize(raw_bytes, media_type)


def _pipeline(gateway: ScriptedGateway, **kwargs) -> AnalysisPipeline:
    kwargs.setdefault("retry_configs", {})
    return AnalysisPipeline(gateway, **kwargs)


class TestFruitFlow:
    @pytest.mark.asyncio
    async def test_detection_analysis_variety(self, fruit_gateway, jpeg_bytes):
        call_logger = CallLogger()
        pipeline = _pipeline(fruit_gateway, call_logger=call_logger)

        outcome = await pipeline.analyze(jpeg_bytes, "image/jpeg")

        assert fruit_gateway.steps() == ["detection", "fruit", "variety"]
        assert outcome.item_category == "fruit"
        assert outcome.disease_name == "Anthracnose"
        assert outcome.variety_result.variety == "longkong"
        assert [r.step for r in call_logger.records] == ["detection", "analysis", "variety"]
        assert all(r.provider == "scripted" for r in call_logger.records)

        stats = pipeline.performance_stats()
        assert stats.total_analyses == 1
        assert stats.cache_hits == 0
        assert stats.gateway_calls == 3

    @pytest.mark.asyncio
    async def test_every_call_gets_same_image(self, fruit_gateway, jpeg_bytes):
        await _pipeline(fruit_gateway).analyze(jpeg_bytes, "image/jpeg")
        images = [image for _, image in fruit_gateway.calls]
        assert all(image == images[0] for image in images)
        assert images[0].media_type == "image/jpeg"

    @pytest.mark.asyncio
    async def test_context_cleared_afterwards(self, fruit_gateway, jpeg_bytes):
        await _pipeline(fruit_gateway).analyze(jpeg_bytes)
        assert get_context().fingerprint is None
        assert get_context().step is None


class TestCaching:
    @pytest.mark.asyncio
    async def test_second_call_is_a_hit(self, fruit_gateway, jpeg_bytes):
        pipeline = _pipeline(fruit_gateway)
        first = await pipeline.analyze(jpeg_bytes)
        second = await pipeline.analyze(jpeg_bytes)

        assert second == first
        assert len(fruit_gateway.calls) == 3
        stats = pipeline.performance_stats()
        assert stats.total_analyses == 2
        assert stats.cache_hits == 1
        assert pipeline.cache_stats().size == 1

    @pytest.mark.asyncio
    async def test_caller_edits_do_not_reach_cache(self, fruit_gateway, jpeg_bytes):
        pipeline = _pipeline(fruit_gateway)
        first = await pipeline.analyze(jpeg_bytes)
        first.symptoms.append("edited by caller")
        first.recommendations.clear()

        second = await pipeline.analyze(jpeg_bytes)
        second.variety_result.characteristics.append("edited again")
        third = await pipeline.analyze(jpeg_bytes)

        assert second is not first
        assert second.symptoms == ["dark sunken lesions"]
        assert second.recommendations == ["Apply copper-based fungicide"]
        assert third.variety_result.characteristics == ["thick skin", "few seeds"]
        assert len(fruit_gateway.calls) == 3

    @pytest.mark.asyncio
    async def test_resolver_only_called_on_miss(self, fruit_gateway, jpeg_bytes):
        pipeline = _pipeline(fruit_gateway)
        resolved: list[int] = []

        def resolver():
            resolved.append(1)
            return "image/jpeg"

        await pipeline.analyze(jpeg_bytes, resolver)
        await pipeline.analyze(jpeg_bytes, resolver)
        assert resolved == [1]

    @pytest.mark.asyncio
    async def test_clear_cache(self, fruit_gateway, jpeg_bytes):
        pipeline = _pipeline(fruit_gateway)
        await pipeline.analyze(jpeg_bytes)
        pipeline.clear_cache()
        assert pipeline.cache_stats().size == 0
        assert pipeline.image_cache_stats().size == 0

        await pipeline.analyze(jpeg_bytes)
        assert len(fruit_gateway.calls) == 6

    @pytest.mark.asyncio
    async def test_distinct_images_are_separate_entries(self, fruit_script):
        gateway = ScriptedGateway({k: [v, v] for k, v in fruit_script.items()})
        pipeline = _pipeline(gateway)
        await pipeline.analyze(make_image_bytes(color=(1, 2, 3)))
        await pipeline.analyze(make_image_bytes(color=(3, 2, 1)))
        assert pipeline.cache_stats().size == 2
        assert pipeline.performance_stats().cache_hits == 0


class TestInputErrors:
    @pytest.mark.asyncio
    async def test_empty_input(self, fruit_gateway):
        with pytest.raises(EmptyInputError):
            await _pipeline(fruit_gateway).analyze(b"")
        assert fruit_gateway.calls == []

    @pytest.mark.asyncio
    async def test_undecodable_input(self, fruit_gateway):
        pipeline = _pipeline(fruit_gateway)
        with pytest.raises(ImageDecodeError):
            await pipeline.analyze(b"definitely not an image")
        assert fruit_gateway.calls == []
        assert pipeline.cache_stats().size == 0


class TestRouting:
    @pytest.mark.asyncio
    async def test_leaf_has_no_variety_call(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": detection_reply("lansones_leaves"),
            "leaf": disease_reply(diseaseName="Leaf Spot", severity="low"),
        })
        outcome = await _pipeline(gateway).analyze(jpeg_bytes)
        assert gateway.steps() == ["detection", "leaf"]
        assert outcome.item_category == "leaf"
        assert outcome.disease_name == "Leaf Spot"
        assert outcome.variety_result is None

    @pytest.mark.asyncio
    async def test_unrelated_uses_neutral_prompt(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": detection_reply("other", is_lansones=False),
            "neutral": NEUTRAL_REPLY,
        })
        call_logger = CallLogger()
        pipeline = _pipeline(gateway, call_logger=call_logger)
        outcome = await pipeline.analyze(jpeg_bytes)

        assert gateway.steps() == ["detection", "neutral"]
        assert outcome.item_category == "unrelated"
        assert not outcome.disease_detected
        assert outcome.symptoms == ["A red ceramic mug on a wooden table"]
        assert call_logger.records[-1].step == "neutral"
        assert pipeline.cache_stats().size == 1

    @pytest.mark.asyncio
    async def test_prose_detection_falls_back_to_keywords(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": "These are lansones leaves, a compound pinnate arrangement.",
            "leaf": disease_reply(diseaseDetected=False, diseaseName=None),
        })
        outcome = await _pipeline(gateway).analyze(jpeg_bytes)
        assert outcome.item_category == "leaf"
        assert not outcome.disease_detected


class TestFailures:
    @pytest.mark.asyncio
    async def test_detection_failure_gives_neutral_outcome(self, jpeg_bytes):
        gateway = ScriptedGateway({"detection": [GatewayError("network"), detection_reply()]})
        pipeline = _pipeline(gateway)

        outcome = await pipeline.analyze(jpeg_bytes)
        assert outcome.item_category == "unrelated"
        assert outcome.source == "neutral"
        assert outcome.raw_model_text == f"Neutral analysis: {DETECTION_FAILED_DESCRIPTION}"
        assert gateway.steps() == ["detection"]
        assert pipeline.cache_stats().size == 0
        assert pipeline.performance_stats().gateway_failures == 1

    @pytest.mark.asyncio
    async def test_detection_failure_is_not_cached(self, fruit_script, jpeg_bytes):
        fruit_script["detection"] = [GatewayError("overloaded"), detection_reply()]
        gateway = ScriptedGateway(fruit_script)
        pipeline = _pipeline(gateway)

        await pipeline.analyze(jpeg_bytes)
        outcome = await pipeline.analyze(jpeg_bytes)
        assert outcome.item_category == "fruit"
        assert pipeline.performance_stats().cache_hits == 0

    @pytest.mark.asyncio
    async def test_primary_failure_raises(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": detection_reply(),
            "fruit": GatewayError("overloaded", detail="503"),
        })
        pipeline = _pipeline(gateway)

        with pytest.raises(PrimaryAnalysisError) as exc_info:
            await pipeline.analyze(jpeg_bytes)
        assert exc_info.value.category == "overloaded"
        assert exc_info.value.step == "analysis"
        assert "503" not in exc_info.value.message
        assert pipeline.cache_stats().size == 0

    @pytest.mark.asyncio
    async def test_neutral_failure_raises(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": detection_reply("other", is_lansones=False),
            "neutral": GatewayError("auth"),
        })
        with pytest.raises(PrimaryAnalysisError) as exc_info:
            await _pipeline(gateway).analyze(jpeg_bytes)
        assert exc_info.value.step == "neutral"

    @pytest.mark.asyncio
    async def test_normalized_image_reused_after_failure(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": [detection_reply(), detection_reply()],
            "fruit": [GatewayError("overloaded"), disease_reply()],
            "variety": VARIETY_REPLY,
        })
        preprocessor = CountingPreprocessor()
        pipeline = _pipeline(gateway, preprocessor=preprocessor)

        with pytest.raises(PrimaryAnalysisError):
            await pipeline.analyze(jpeg_bytes, "image/jpeg")
        outcome = await pipeline.analyze(jpeg_bytes, "image/jpeg")

        assert outcome.disease_name == "Anthracnose"
        assert preprocessor.calls == ["image/jpeg"]

    @pytest.mark.asyncio
    async def test_variety_failure_is_dropped(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": detection_reply(),
            "fruit": disease_reply(),
            "variety": GatewayError("rate_limited"),
        })
        outcome = await _pipeline(gateway).analyze(jpeg_bytes)
        assert outcome.disease_name == "Anthracnose"
        assert outcome.variety_result is None

    @pytest.mark.asyncio
    async def test_undecodable_variety_is_dropped(self, jpeg_bytes):
        gateway = ScriptedGateway({
            "detection": detection_reply(),
            "fruit": disease_reply(),
            "variety": "I think this could be longkong.",
        })
        outcome = await _pipeline(gateway).analyze(jpeg_bytes)
        assert outcome.variety_result is None


class TestRetry:
    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, fruit_script, jpeg_bytes):
        fruit_script["detection"] = [GatewayError("overloaded"), detection_reply()]
        gateway = ScriptedGateway(fruit_script)
        retry_configs = {"overloaded": RetryConfig(max_retries=1, base_delay_s=0.0, jitter=False)}
        pipeline = _pipeline(gateway, retry_configs=retry_configs)

        outcome = await pipeline.analyze(jpeg_bytes)

        assert outcome.item_category == "fruit"
        assert gateway.steps() == ["detection", "detection", "fruit", "variety"]
        stats = pipeline.performance_stats()
        assert stats.gateway_calls == 3
        assert stats.gateway_failures == 0

    @pytest.mark.asyncio
    async def test_auth_error_is_not_retried(self, jpeg_bytes):
        gateway = ScriptedGateway({"detection": [GatewayError("auth"), detection_reply()]})
        retry_configs = {"overloaded": RetryConfig(max_retries=3, base_delay_s=0.0)}
        outcome = await _pipeline(gateway, retry_configs=retry_configs).analyze(jpeg_bytes)
        assert outcome.source == "neutral"
        assert gateway.steps() == ["detection"]

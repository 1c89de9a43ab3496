# tests/unit/llm/test_unit_retry.py — v2
"""Tests for llm/retry.py."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from lansonesscan.core.errors import GatewayError
from lansonesscan.llm.retry import (
    DEFAULT_RETRY_CONFIGS,
    RetryConfig,
    RetryExhausted,
    _compute_delay,
    build_retry_configs,
    with_retry,
)

FAST = {
    "rate_limited": RetryConfig(max_retries=2, base_delay_s=0.0, jitter=False),
    "network": RetryConfig(max_retries=1, base_delay_s=0.0, jitter=False),
}


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_success_first_try(self):
        fn = AsyncMock(return_value="ok")
        assert await with_retry(fn, "a", step="detection", retry_configs=FAST) == "ok"
        fn.assert_awaited_once_with("a")

    @pytest.mark.asyncio
    async def test_retries_transient_then_succeeds(self):
        fn = AsyncMock(side_effect=[GatewayError("rate_limited"), "ok"])
        assert await with_retry(fn, step="analysis", retry_configs=FAST) == "ok"
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_exhaustion(self):
        fn = AsyncMock(side_effect=GatewayError("network"))
        with pytest.raises(RetryExhausted) as exc_info:
            await with_retry(fn, step="variety", retry_configs=FAST)
        assert fn.await_count == 2
        assert exc_info.value.attempts == 2
        assert exc_info.value.last_error.category == "network"
        assert exc_info.value.step == "variety"

    @pytest.mark.asyncio
    async def test_auth_fails_fast(self):
        fn = AsyncMock(side_effect=GatewayError("auth"))
        with pytest.raises(RetryExhausted):
            await with_retry(fn, step="detection", retry_configs=FAST)
        fn.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_config_disables_retry(self):
        fn = AsyncMock(side_effect=GatewayError("rate_limited"))
        with pytest.raises(RetryExhausted):
            await with_retry(fn, step="detection", retry_configs={})
        fn.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_foreign_exception_is_classified(self):
        fn = AsyncMock(side_effect=RuntimeError("429 quota exceeded"))
        with pytest.raises(RetryExhausted) as exc_info:
            await with_retry(fn, step="analysis", retry_configs={})
        assert exc_info.value.last_error.category == "rate_limited"
        assert isinstance(exc_info.value.__cause__, RuntimeError)


class TestConfigs:
    def test_compute_delay_without_jitter(self):
        config = RetryConfig(max_retries=3, base_delay_s=1.0, backoff_factor=2.0, jitter=False)
        assert [_compute_delay(config, n) for n in range(3)] == [1.0, 2.0, 4.0]

    def test_jitter_bounds(self):
        config = RetryConfig(max_retries=1, base_delay_s=2.0)
        for _ in range(50):
            assert 1.0 <= _compute_delay(config, 0) <= 3.0

    def test_build_retry_configs(self):
        configs = build_retry_configs(5)
        assert set(configs) == set(DEFAULT_RETRY_CONFIGS)
        assert all(c.max_retries == 5 for c in configs.values())
        assert configs["overloaded"].base_delay_s == DEFAULT_RETRY_CONFIGS["overloaded"].base_delay_s

    def test_auth_and_unknown_not_retried_by_default(self):
        assert "auth" not in DEFAULT_RETRY_CONFIGS
        assert "unknown" not in DEFAULT_RETRY_CONFIGS

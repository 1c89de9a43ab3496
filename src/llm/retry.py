# src/llm/retry.py — v2
"""Gateway retry policy with exponential backoff.

Only transient categories are retried; auth and unknown failures fail fast.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from lansonesscan.core.errors import GatewayError, to_gateway_error

logger = logging.getLogger(__name__)


class RetryExhausted(Exception):
    """All retries exhausted for a gateway call."""

    def __init__(self, step: str, attempts: int, last_error: GatewayError):
        self.step = step
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Step '{step}' failed after {attempts} attempts "
            f"({last_error.category}): {last_error.detail or last_error.message}"
        )


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration for a specific gateway error category."""

    max_retries: int
    base_delay_s: float
    backoff_factor: float = 2.0
    jitter: bool = True


DEFAULT_RETRY_CONFIGS: dict[str, RetryConfig] = {
    "rate_limited": RetryConfig(max_retries=2, base_delay_s=2.0),
    "overloaded": RetryConfig(max_retries=2, base_delay_s=3.0),
    "network": RetryConfig(max_retries=2, base_delay_s=1.0, backoff_factor=1.0),
}


def build_retry_configs(max_retries: int) -> dict[str, RetryConfig]:
    """Default policy with every transient category capped at max_retries."""
    return {
        category: RetryConfig(
            max_retries=max_retries,
            base_delay_s=config.base_delay_s,
            backoff_factor=config.backoff_factor,
            jitter=config.jitter,
        )
        for category, config in DEFAULT_RETRY_CONFIGS.items()
    }


def _compute_delay(config: RetryConfig, attempt: int) -> float:
    """Compute delay for a given attempt (0-based)."""
    delay = config.base_delay_s * (config.backoff_factor ** attempt)
    if config.jitter:
        delay *= 0.5 + random.random()  # noqa: S311
    return delay


async def with_retry(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    step: str = "unknown",
    retry_configs: dict[str, RetryConfig] | None = None,
    **kwargs: Any,
) -> Any:
    """Execute an async gateway call with retry logic.

    Args:
        fn: Coroutine function to call.
        step: Pipeline step name for log lines.
        retry_configs: Per-category policy. ``None`` means the defaults;
            an empty dict disables retries.

    Raises:
        RetryExhausted: Wrapping the last GatewayError once retries run out.
    """
    configs = DEFAULT_RETRY_CONFIGS if retry_configs is None else retry_configs
    attempts = 0

    while True:
        try:
            return await fn(*args, **kwargs)
        except Exception as e:
            gateway_error = to_gateway_error(e)
            attempts += 1
            config = configs.get(gateway_error.category)

            if config is None or attempts > config.max_retries:
                raise RetryExhausted(step, attempts, gateway_error) from e

            delay = _compute_delay(config, attempts - 1)
            logger.warning(
                "Step '%s': %s (attempt %d/%d), retrying in %.1fs",
                step, gateway_error.category, attempts, config.max_retries, delay,
            )
            await asyncio.sleep(delay)

# src/tracking/call_logger.py — v2
"""Gateway call logging: records every model call made by the pipeline.

Bounded to the most recent ``max_records`` calls so a long-running process
does not grow without limit.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections import deque
from datetime import datetime, timezone

from lansonesscan.tracking.models import GatewayCallRecord

logger = logging.getLogger(__name__)


class CallLogger:
    """Accumulates GatewayCallRecord entries."""

    def __init__(self, max_records: int = 500) -> None:
        self._records: deque[GatewayCallRecord] = deque(maxlen=max_records)
        self._lock = threading.Lock()

    def record(
        self,
        step: str,
        provider: str,
        latency_ms: int,
        status: str = "success",
        error_category: str | None = None,
        response_chars: int = 0,
    ) -> GatewayCallRecord:
        """Record a gateway call.

        Args:
            step: Pipeline step (detection, analysis, neutral, variety).
            provider: Gateway provider name.
            latency_ms: Wall time of the call including retries.
            status: "success" or "failed".
            error_category: Gateway error category for failed calls.
            response_chars: Length of the returned text.

        Returns:
            The recorded GatewayCallRecord.
        """
        record = GatewayCallRecord(
            call_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            step=step,  # type: ignore[arg-type]
            provider=provider,
            latency_ms=latency_ms,
            status=status,  # type: ignore[arg-type]
            error_category=error_category,
            response_chars=response_chars,
        )
        with self._lock:
            self._records.append(record)
        logger.debug(
            "Gateway call: step=%s provider=%s status=%s latency=%dms",
            step, provider, status, latency_ms,
        )
        return record

    @property
    def records(self) -> list[GatewayCallRecord]:
        """All retained calls, oldest first."""
        with self._lock:
            return list(self._records)

    @property
    def total_calls(self) -> int:
        with self._lock:
            return len(self._records)

    @property
    def failed_calls(self) -> list[GatewayCallRecord]:
        with self._lock:
            return [r for r in self._records if r.status == "failed"]

    def calls_for_step(self, step: str) -> list[GatewayCallRecord]:
        with self._lock:
            return [r for r in self._records if r.step == step]

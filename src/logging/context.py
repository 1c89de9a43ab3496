# src/logging/context.py — v2
"""Contextual logging support: attach image fingerprint and pipeline step to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging, set per analysis request.
_fingerprint: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "fingerprint", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    fingerprint: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        fingerprint=_fingerprint.get(),
        step=_step.get(),
    )


def set_analysis_context(fingerprint: str) -> None:
    """Set request-level context (called once per analysis).

    Only the first 16 hex characters are kept; that is enough to correlate
    log lines without flooding them.
    """
    _fingerprint.set(fingerprint[:16])
    _step.set(None)


def set_step_context(step: str | None) -> None:
    """Set the pipeline step currently executing (detection, analysis, variety)."""
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _fingerprint.set(None)
    _step.set(None)

# src/core/errors.py — v1
"""Error taxonomy for the analysis core.

Request-fatal failures are AnalysisError subclasses raised by the pipeline.
GatewayError is raised by model gateways and always carries a stable category
whose message is safe to show to a user (raw provider text is never surfaced).
"""

from __future__ import annotations

from typing import Any, Literal

GatewayErrorCategory = Literal["overloaded", "network", "auth", "rate_limited", "unknown"]

USER_MESSAGES: dict[str, str] = {
    "overloaded": "The AI model is currently overloaded. Please try again in a few moments.",
    "network": "Network connection error. Please check your internet connection and try again.",
    "auth": "API authentication failed. Please check your API key configuration.",
    "rate_limited": "API rate limit exceeded. Please wait a moment and try again.",
    "unknown": "Analysis failed: Please try again. If the problem persists, contact support.",
}


class LansonesScanError(Exception):
    """Base exception for all package errors.

    Attributes:
        code: Short error code for identification.
        message: Human-readable error message.
    """

    code: str = "GENERAL_ERROR"
    message: str = "An application error occurred"

    def __init__(self, message: str | None = None, *, code: str | None = None, **extra: Any):
        self.code = code or self.code
        self.message = message or self.message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for callers that report it."""
        return {"error": {"code": self.code, "message": self.message, **self.extra}}

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# === GATEWAY ===


class GatewayError(LansonesScanError):
    """A model gateway call failed."""

    code = "GATEWAY_ERROR"

    def __init__(
        self,
        category: GatewayErrorCategory = "unknown",
        detail: str = "",
        *,
        message: str | None = None,
    ):
        self.category: GatewayErrorCategory = category
        self.detail = detail
        super().__init__(message or USER_MESSAGES[category], category=category)


def classify_gateway_error(error: BaseException) -> GatewayErrorCategory:
    """Map a provider exception onto a stable gateway error category.

    Status codes are read from ``status_code``/``code`` attributes when the SDK
    exposes them, otherwise from the exception text.
    """
    if isinstance(error, GatewayError):
        return error.category

    status = getattr(error, "status_code", None) or getattr(error, "code", None)
    if isinstance(status, int):
        if status in (401, 403):
            return "auth"
        if status == 429:
            return "rate_limited"
        if status in (500, 502, 503, 504):
            return "overloaded"

    msg = str(error).lower()
    name = type(error).__name__.lower()

    if any(k in msg for k in ("503", "overload", "unavailable")):
        return "overloaded"
    if any(k in msg for k in ("429", "quota", "rate limit", "resource_exhausted")):
        return "rate_limited"
    if any(k in msg for k in ("401", "403", "unauthenticated", "permission denied")):
        return "auth"
    if "invalid" in msg and "key" in msg:
        return "auth"
    if "timeout" in name or "connection" in name or any(
        k in msg for k in ("network", "timeout", "timed out", "unreachable")
    ):
        return "network"
    return "unknown"


def to_gateway_error(error: BaseException) -> GatewayError:
    """Wrap any exception into a GatewayError, keeping the raw text as detail."""
    if isinstance(error, GatewayError):
        return error
    return GatewayError(classify_gateway_error(error), detail=str(error))


# === PIPELINE ===


class AnalysisError(LansonesScanError):
    """Request-fatal failure of a single analysis."""

    code = "ANALYSIS_ERROR"
    message = "The analysis could not be completed"


class EmptyInputError(AnalysisError):
    """The caller supplied no image bytes."""

    code = "EMPTY_INPUT"
    message = "Image data is empty"


class ImageDecodeError(AnalysisError):
    """The image bytes could not be decoded into an image."""

    code = "IMAGE_DECODE_FAILED"
    message = "Failed to decode image"


class PrimaryAnalysisError(AnalysisError):
    """The gateway failed on the main analysis call."""

    code = "ANALYSIS_FAILED"

    def __init__(self, gateway_error: GatewayError, step: str):
        self.category: GatewayErrorCategory = gateway_error.category
        self.step = step
        super().__init__(gateway_error.message, category=gateway_error.category, step=step)


# === PERSISTENCE ===


class PersistError(LansonesScanError):
    """A caller-side result store could not write or read a record."""

    code = "PERSIST_FAILED"
    message = "The analysis result could not be saved"

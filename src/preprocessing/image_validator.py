# src/preprocessing/image_validator.py — v1
"""Caller-side image validation before an analysis is requested.

Checks run cheapest first: size, declared format, decodability, resolution,
aspect ratio. Only the image header is decoded.
"""

from __future__ import annotations

import io
import logging
import mimetypes
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from lansonesscan.config.settings import Settings
from lansonesscan.preprocessing.models import (
    VALIDATION_MESSAGES,
    ImageInfo,
    ValidationErrorKind,
    ValidationResult,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = frozenset({"image/jpeg", "image/jpg", "image/png"})


class ImageValidator:
    """Validate image bytes against size, format and geometry limits."""

    def __init__(
        self,
        max_file_size_bytes: int = 10 * 1024 * 1024,
        min_dimension: int = 100,
        max_dimension: int = 4096,
        min_aspect_ratio: float = 0.25,
        max_aspect_ratio: float = 4.0,
    ) -> None:
        self._max_bytes = max_file_size_bytes
        self._min_dim = min_dimension
        self._max_dim = max_dimension
        self._min_ratio = min_aspect_ratio
        self._max_ratio = max_aspect_ratio

    @classmethod
    def from_settings(cls, settings: Settings) -> ImageValidator:
        return cls(
            max_file_size_bytes=settings.max_image_size_bytes,
            min_dimension=settings.min_image_dimension,
            max_dimension=settings.max_image_dimension,
            min_aspect_ratio=settings.min_aspect_ratio,
            max_aspect_ratio=settings.max_aspect_ratio,
        )

    def validate(self, raw_bytes: bytes, media_type: str | None) -> ValidationResult:
        """Full validation of in-memory image bytes."""
        if not raw_bytes:
            return self._failure("empty_file")
        if len(raw_bytes) > self._max_bytes:
            return self._failure("file_too_large")
        if media_type is None or media_type.lower() not in SUPPORTED_FORMATS:
            return self._failure("unsupported_format")

        try:
            with Image.open(io.BytesIO(raw_bytes)) as img:
                width, height = img.size
        except (UnidentifiedImageError, OSError) as e:
            logger.debug("Image header could not be decoded: %s", e)
            return self._failure("corrupted_file")

        info = ImageInfo(
            file_size=len(raw_bytes),
            media_type=media_type.lower(),
            width=width,
            height=height,
        )

        if width < self._min_dim or height < self._min_dim:
            return self._failure("image_too_small", info)
        if width > self._max_dim or height > self._max_dim:
            return self._failure("image_too_large", info)
        if not self._min_ratio <= info.aspect_ratio <= self._max_ratio:
            return self._failure("invalid_aspect_ratio", info)

        return ValidationResult(ok=True, image_info=info)

    def validate_file(self, path: Path) -> ValidationResult:
        """Validate an image file, guessing its MIME type from the extension."""
        media_type = guess_media_type(path)
        if path.stat().st_size > self._max_bytes:
            return self._failure("file_too_large")
        return self.validate(path.read_bytes(), media_type)

    def _failure(
        self, kind: ValidationErrorKind, info: ImageInfo | None = None
    ) -> ValidationResult:
        message = VALIDATION_MESSAGES[kind].format(
            max_mb=self._max_bytes // (1024 * 1024),
            min_dim=self._min_dim,
            max_dim=self._max_dim,
        )
        return ValidationResult(ok=False, error=kind, message=message, image_info=info)


def guess_media_type(path: Path) -> str | None:
    """MIME type from a file extension (None when unknown)."""
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type

# src/preprocessing/models.py — v1
"""Preprocessing domain models: NormalizedImage, ImageInfo, ValidationResult."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

ValidationErrorKind = Literal[
    "empty_file",
    "file_too_large",
    "unsupported_format",
    "corrupted_file",
    "image_too_small",
    "image_too_large",
    "invalid_aspect_ratio",
]

VALIDATION_MESSAGES: dict[str, str] = {
    "empty_file": "Image file is empty",
    "file_too_large": "Image file is too large. Maximum size is {max_mb}MB",
    "unsupported_format": "Image format not supported. Please use JPEG or PNG",
    "corrupted_file": "Image file appears to be corrupted",
    "image_too_small": "Image resolution is too small. Minimum size is {min_dim}x{min_dim}",
    "image_too_large": "Image resolution is too large. Maximum size is {max_dim}x{max_dim}",
    "invalid_aspect_ratio": "Image aspect ratio is not suitable for analysis",
}


class NormalizedImage(BaseModel):
    """Resized/re-encoded image artifact sent to the gateway."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    media_type: str
    width: int
    height: int
    resized: bool = False


class ImageInfo(BaseModel):
    """Basic facts about a candidate image."""

    file_size: int
    media_type: str
    width: int
    height: int

    @property
    def file_size_mb(self) -> float:
        return self.file_size / (1024 * 1024)

    @property
    def dimensions(self) -> str:
        return f"{self.width}x{self.height}"

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height if self.height else 0.0


class ValidationResult(BaseModel):
    """Outcome of validating an image before analysis."""

    ok: bool
    error: ValidationErrorKind | None = None
    message: str = ""
    image_info: ImageInfo | None = None

# src/preprocessing/image_preprocessor.py — v1
"""Image normalization before a gateway call.

Images whose sides already fall within [min_dimension, max_dimension] are
passed through byte for byte. Others are scaled (aspect ratio preserved) to the
nearest bound, EXIF-orientation corrected and re-encoded as JPEG.
"""

from __future__ import annotations

import io
import logging
import time

from PIL import Image, ImageOps, UnidentifiedImageError

from lansonesscan.core.errors import ImageDecodeError
from lansonesscan.preprocessing.models import NormalizedImage

logger = logging.getLogger(__name__)

DEFAULT_MIN_DIMENSION = 512
DEFAULT_MAX_DIMENSION = 1024
DEFAULT_JPEG_QUALITY = 90


def calculate_target_dimensions(
    width: int,
    height: int,
    min_dimension: int = DEFAULT_MIN_DIMENSION,
    max_dimension: int = DEFAULT_MAX_DIMENSION,
) -> tuple[int, int]:
    """Target size for an image, preserving aspect ratio.

    Landscape images pin the width, portrait and square images pin the height.
    Returns the input size unchanged when both sides are within bounds.
    """
    aspect_ratio = width / height

    if width > max_dimension or height > max_dimension:
        bound = max_dimension
    elif width < min_dimension or height < min_dimension:
        bound = min_dimension
    else:
        return width, height

    if aspect_ratio > 1:
        return bound, max(1, int(bound / aspect_ratio))
    return max(1, int(bound * aspect_ratio)), bound


class ImagePreprocessor:
    """Pure bytes-to-bytes transform; no network, no caching."""

    def __init__(
        self,
        min_dimension: int = DEFAULT_MIN_DIMENSION,
        max_dimension: int = DEFAULT_MAX_DIMENSION,
        jpeg_quality: int = DEFAULT_JPEG_QUALITY,
    ) -> None:
        if min_dimension > max_dimension:
            raise ValueError("min_dimension must be <= max_dimension")
        self._min = min_dimension
        self._max = max_dimension
        self._quality = jpeg_quality

    def normalize(self, raw_bytes: bytes, media_type: str | None = None) -> NormalizedImage:
        """Normalize image bytes for analysis.

        Args:
            raw_bytes: Encoded image (JPEG, PNG, ...).
            media_type: MIME type reported by the caller, kept on pass-through.

        Returns:
            NormalizedImage ready to be sent to a gateway.

        Raises:
            ImageDecodeError: If the bytes are not a decodable image.
        """
        start = time.monotonic()
        try:
            with Image.open(io.BytesIO(raw_bytes)) as img:
                img.load()
                source_format = img.format
                width, height = img.size
                target = calculate_target_dimensions(width, height, self._min, self._max)

                if target == (width, height):
                    logger.debug("Image already optimal size: %dx%d", width, height)
                    return NormalizedImage(
                        data=raw_bytes,
                        media_type=_resolve_media_type(media_type, source_format),
                        width=width,
                        height=height,
                    )

                oriented = ImageOps.exif_transpose(img) or img
                rgb = oriented.convert("RGB")
                # exif_transpose may swap sides; recompute on the oriented image
                target = calculate_target_dimensions(*rgb.size, self._min, self._max)
                resized = rgb.resize(target, Image.Resampling.LANCZOS)
                buffer = io.BytesIO()
                resized.save(buffer, format="JPEG", quality=self._quality)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageDecodeError(detail=str(e)) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug(
            "Image preprocessed: %dx%d -> %dx%d (%dms)",
            width, height, target[0], target[1], elapsed_ms,
        )
        return NormalizedImage(
            data=buffer.getvalue(),
            media_type="image/jpeg",
            width=target[0],
            height=target[1],
            resized=True,
        )


def _resolve_media_type(media_type: str | None, source_format: str | None) -> str:
    """Prefer the caller's image/* type, else derive it from the decoded format."""
    if media_type and media_type.startswith("image/"):
        return media_type
    if source_format:
        return Image.MIME.get(source_format.upper(), "image/jpeg")
    return "image/jpeg"

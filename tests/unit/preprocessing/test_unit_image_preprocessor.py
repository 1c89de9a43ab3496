# tests/unit/preprocessing/test_unit_image_preprocessor.py — v1
"""Tests for preprocessing/image_preprocessor.py."""

from __future__ import annotations

import io

import pytest
from PIL import Image

from helpers import make_image_bytes
from lansonesscan.core.errors import ImageDecodeError
from lansonesscan.preprocessing.image_preprocessor import (
    ImagePreprocessor,
    calculate_target_dimensions,
)


class TestCalculateTargetDimensions:
    @pytest.mark.parametrize(
        "size,expected",
        [
            ((600, 600), (600, 600)),
            ((512, 1024), (512, 1024)),
            ((2048, 1024), (1024, 512)),
            ((1000, 3000), (341, 1024)),
            ((300, 300), (512, 512)),
            ((200, 100), (512, 256)),
            ((2000, 100), (1024, 51)),
        ],
    )
    def test_targets(self, size, expected):
        assert calculate_target_dimensions(*size, 512, 1024) == expected

    def test_never_zero(self):
        assert calculate_target_dimensions(10000, 1, 512, 1024) == (1024, 1)


class TestNormalize:
    def test_pass_through_keeps_bytes(self):
        raw = make_image_bytes(600, 700)
        image = ImagePreprocessor().normalize(raw, "image/jpeg")
        assert image.data == raw
        assert (image.width, image.height) == (600, 700)
        assert image.media_type == "image/jpeg"
        assert not image.resized

    def test_pass_through_derives_media_type(self):
        raw = make_image_bytes(600, 600, fmt="PNG")
        assert ImagePreprocessor().normalize(raw).media_type == "image/png"

    def test_non_image_media_type_ignored(self):
        raw = make_image_bytes(600, 600, fmt="PNG")
        assert ImagePreprocessor().normalize(raw, "application/octet-stream").media_type == "image/png"

    def test_downscale_to_jpeg(self):
        raw = make_image_bytes(2000, 1000, fmt="PNG")
        image = ImagePreprocessor().normalize(raw, "image/png")
        assert image.resized
        assert image.media_type == "image/jpeg"
        assert (image.width, image.height) == (1024, 512)
        with Image.open(io.BytesIO(image.data)) as decoded:
            assert decoded.format == "JPEG"
            assert decoded.size == (1024, 512)

    def test_upscale_small(self):
        image = ImagePreprocessor().normalize(make_image_bytes(100, 100))
        assert (image.width, image.height) == (512, 512)

    def test_rgba_converted(self):
        buffer = io.BytesIO()
        Image.new("RGBA", (1500, 1500), (10, 200, 10, 128)).save(buffer, format="PNG")
        image = ImagePreprocessor().normalize(buffer.getvalue(), "image/png")
        with Image.open(io.BytesIO(image.data)) as decoded:
            assert decoded.mode == "RGB"

    def test_custom_bounds(self):
        pre = ImagePreprocessor(min_dimension=64, max_dimension=128, jpeg_quality=50)
        image = pre.normalize(make_image_bytes(256, 512))
        assert (image.width, image.height) == (64, 128)

    def test_deterministic(self):
        raw = make_image_bytes(1800, 1200)
        pre = ImagePreprocessor()
        assert pre.normalize(raw).data == pre.normalize(raw).data

    @pytest.mark.parametrize("raw", [b"not an image at all", b"\xff\xd8\xff\xe0truncated"])
    def test_undecodable(self, raw):
        with pytest.raises(ImageDecodeError):
            ImagePreprocessor().normalize(raw, "image/jpeg")

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            ImagePreprocessor(min_dimension=2048, max_dimension=1024)

# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides Pillow-generated image bytes, a scripted fake gateway and isolated
settings. No network access: every gateway call is served from a script.
"""

from __future__ import annotations

from typing import Any

import pytest

from helpers import VARIETY_REPLY, ScriptedGateway, detection_reply, disease_reply, make_image_bytes
from lansonesscan.config.settings import Settings
from lansonesscan.logging.context import clear_context


@pytest.fixture(autouse=True)
def _reset_log_context():
    yield
    clear_context()


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture
def fruit_script() -> dict[str, Any]:
    return {
        "detection": detection_reply("lansones_fruit"),
        "fruit": disease_reply(),
        "variety": VARIETY_REPLY,
    }


@pytest.fixture
def fruit_gateway(fruit_script: dict[str, Any]) -> ScriptedGateway:
    return ScriptedGateway(fruit_script)


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, results_dir=tmp_path / "results")

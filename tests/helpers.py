# tests/helpers.py — v1
"""Test doubles and reply builders shared by unit and integration tests."""

from __future__ import annotations

import io
import json
from typing import Any

from PIL import Image

from lansonesscan.core.errors import GatewayError
from lansonesscan.llm.base_gateway import BaseVisionGateway
from lansonesscan.llm.models import ImageInput
from lansonesscan.pipeline.prompts import (
    DETECTION_PROMPT,
    FRUIT_ANALYSIS_PROMPT,
    LEAF_ANALYSIS_PROMPT,
    NEUTRAL_PROMPT,
    VARIETY_PROMPT,
)

PROMPT_STEPS = {
    DETECTION_PROMPT: "detection",
    FRUIT_ANALYSIS_PROMPT: "fruit",
    LEAF_ANALYSIS_PROMPT: "leaf",
    NEUTRAL_PROMPT: "neutral",
    VARIETY_PROMPT: "variety",
}


def make_image_bytes(
    width: int = 600,
    height: int = 600,
    fmt: str = "JPEG",
    color: tuple[int, int, int] = (180, 150, 60),
) -> bytes:
    """Encode a solid-colour RGB image."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


class ScriptedGateway(BaseVisionGateway):
    """Fake gateway answering by prompt kind (detection, fruit, leaf, neutral, variety).

    A scripted value may be a string (returned), an exception (raised) or a
    list of those, consumed one per call.
    """

    def __init__(self, script: dict[str, Any] | None = None, **kwargs: Any) -> None:
        self.script: dict[str, Any] = dict(script or {})
        self.calls: list[tuple[str, ImageInput]] = []

    async def submit(self, image: ImageInput, prompt: str) -> str:
        step = PROMPT_STEPS.get(prompt, "unknown")
        self.calls.append((step, image))
        answer = self.script.get(step)
        if isinstance(answer, list):
            answer = answer.pop(0)
        if answer is None:
            raise GatewayError("unknown", detail=f"no scripted reply for {step}")
        if isinstance(answer, BaseException):
            raise answer
        return answer

    @property
    def provider_name(self) -> str:
        return "scripted"

    def steps(self) -> list[str]:
        return [step for step, _ in self.calls]


def detection_reply(item_type: str = "lansones_fruit", is_lansones: bool = True) -> str:
    return json.dumps({
        "isLansones": is_lansones,
        "itemType": item_type,
        "confidence": 0.92,
        "description": "Cluster of small round yellow-brown fruits",
    })


def disease_reply(**overrides: Any) -> str:
    data: dict[str, Any] = {
        "diseaseDetected": True,
        "diseaseName": "Anthracnose",
        "confidenceLevel": 0.85,
        "symptoms": ["dark sunken lesions"],
        "recommendations": ["Apply copper-based fungicide"],
        "severity": "medium",
    }
    data.update(overrides)
    return "```json\n" + json.dumps(data) + "\n```"


VARIETY_REPLY = json.dumps({
    "variety": "longkong",
    "confidenceLevel": 0.8,
    "characteristics": ["thick skin", "few seeds"],
    "description": "Typical longkong cluster",
})

NEUTRAL_REPLY = json.dumps({
    "observations": ["A red ceramic mug on a wooden table"],
    "measurements": ["approximately 10 cm tall"],
    "characteristics": ["glossy glaze"],
})

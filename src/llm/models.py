# src/llm/models.py — v2
"""Gateway payload types: ImageInput."""

from __future__ import annotations

from pydantic import BaseModel


class ImageInput(BaseModel):
    """Image payload for a vision gateway call."""

    data: bytes
    media_type: str
    source_id: str | None = None

# src/interpretation/json_extract.py — v3
"""Locate a JSON object inside free-form model text.

Fenced code blocks are tried first, then a brace scan over the raw text. The
scan is a single left-to-right pass that records every balanced ``{...}``
span with a stack, tracking string literals and escapes inside objects, so
braces inside values do not confuse it. Candidate spans are then decoded in
order of their opening brace, each on its own slice. A span whose first
token cannot open an object (``{x}``, ``{{``) is skipped without decoding.
"""

from __future__ import annotations

import json
import re
from typing import Any

_FENCED_BLOCK_RE = re.compile(r"```(?:json|JSON)?\s*\n?([\s\S]*?)```")

# A JSON object starts with a key or closes immediately.
_OBJECT_START_RE = re.compile(r'\{\s*["}]')


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first decodable JSON object found in text, or None."""
    if not text:
        return None

    for match in _FENCED_BLOCK_RE.finditer(text):
        block = match.group(1).strip()
        found = _loads_object(block)
        if found is None:
            found = _scan_for_object(block)
        if found is not None:
            return found

    return _scan_for_object(text)


def _loads_object(candidate: str) -> dict[str, Any] | None:
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def _scan_for_object(text: str) -> dict[str, Any] | None:
    """First balanced span, by opening position, that decodes to an object."""
    for start, end in _balanced_spans(text):
        if _OBJECT_START_RE.match(text, start) is None:
            continue
        found = _loads_object(text[start : end + 1])
        if found is not None:
            return found
    return None


def _balanced_spans(text: str) -> list[tuple[int, int]]:
    """``(open, close)`` indexes of every balanced ``{...}`` span, by opening index.

    Quotes only open strings inside an object; quotes in surrounding prose
    are ordinary characters. A ``}`` with no open brace is ignored, and
    braces left open at the end of the text produce no span.
    """
    spans: list[tuple[int, int]] = []
    stack: list[int] = []
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == "{":
            stack.append(i)
        elif ch == "}":
            if stack:
                spans.append((stack.pop(), i))
        elif ch == '"' and stack:
            in_string = True
    spans.sort()
    return spans

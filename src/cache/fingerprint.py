# src/cache/fingerprint.py — v4
"""Content fingerprinting of raw image bytes.

The fingerprint is the SHA-256 hex digest of the bytes exactly as received,
so it is bit-stable across platforms and Python versions. It is only ever used
as a cache key.
"""

from __future__ import annotations

import hashlib
import re

FINGERPRINT_LENGTH = 64

_FINGERPRINT_RE = re.compile(rf"[0-9a-f]{{{FINGERPRINT_LENGTH}}}")


def compute_fingerprint(raw_bytes: bytes) -> str:
    """Compute the content fingerprint of an image.

    Args:
        raw_bytes: Original image bytes. Empty input still hashes; callers
            reject empty images before reaching this point.

    Returns:
        64-character lowercase hexadecimal SHA-256 digest.
    """
    return hashlib.sha256(raw_bytes).hexdigest()


def short_fingerprint(fingerprint: str, length: int = 16) -> str:
    """Truncated fingerprint for log lines and file names."""
    return fingerprint[:length]


def is_fingerprint(value: str) -> bool:
    """Whether value looks like a fingerprint produced by compute_fingerprint."""
    return _FINGERPRINT_RE.fullmatch(value) is not None

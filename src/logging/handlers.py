# src/logging/handlers.py — v2
"""Rotating file handlers for log files.

Rotation is either size based ("10MB") or time based ("midnight", "12h", "1d").
"""

from __future__ import annotations

import logging
import re
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from pathlib import Path

_SIZE_RE = re.compile(r"^(\d+)\s*(B|KB|MB|GB)$", re.IGNORECASE)
_INTERVAL_RE = re.compile(r"^(\d+)\s*(h|d)$", re.IGNORECASE)
_SIZE_MULTIPLIERS = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}


def _parse_size(size_str: str) -> int | None:
    """Parse '10MB' style sizes into bytes. Returns None if not a size."""
    match = _SIZE_RE.match(size_str.strip())
    if not match:
        return None
    return int(match.group(1)) * _SIZE_MULTIPLIERS[match.group(2).upper()]


def _parse_interval(interval_str: str) -> tuple[str, int] | None:
    """Parse 'midnight', '12h' or '1d' into TimedRotatingFileHandler args."""
    value = interval_str.strip().lower()
    if value == "midnight":
        return ("midnight", 1)
    match = _INTERVAL_RE.match(value)
    if not match:
        return None
    return (match.group(2).upper(), int(match.group(1)))


def create_rotating_handler(
    log_file: str,
    rotation: str = "10MB",
    retention: int = 30,
) -> logging.Handler:
    """Create a rotating file handler.

    Args:
        log_file: Path to log file (``~`` is expanded, parents are created).
        rotation: Max size before rotation ("10MB") or interval ("midnight", "1d").
        retention: Number of rotated files to keep.

    Returns:
        Configured file handler.

    Raises:
        ValueError: If rotation is neither a size nor an interval.
    """
    path = Path(log_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    max_bytes = _parse_size(rotation)
    if max_bytes is not None:
        return RotatingFileHandler(
            filename=str(path),
            maxBytes=max_bytes,
            backupCount=retention,
            encoding="utf-8",
        )

    interval = _parse_interval(rotation)
    if interval is not None:
        when, every = interval
        return TimedRotatingFileHandler(
            filename=str(path),
            when=when,
            interval=every,
            backupCount=retention,
            encoding="utf-8",
        )

    raise ValueError(
        f"Invalid rotation: {rotation!r}. Use a size like '10MB' or 'midnight'/'1d'."
    )

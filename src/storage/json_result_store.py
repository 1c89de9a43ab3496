# src/storage/json_result_store.py — v1
"""Local JSON result store: one document per saved analysis.

Files are named ``<UTC timestamp>_<fingerprint[:16]>.json`` so a directory
listing sorts chronologically.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from lansonesscan.cache.fingerprint import short_fingerprint
from lansonesscan.core.errors import PersistError
from lansonesscan.core.models import AnalysisOutcome
from lansonesscan.storage.base_result_store import BaseResultStore
from lansonesscan.storage.result_models import StoredResult

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"


class JsonResultStore(BaseResultStore):
    """Write outcomes as pretty-printed JSON files under a root directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def save(
        self,
        outcome: AnalysisOutcome,
        fingerprint: str,
        source_name: str | None = None,
    ) -> str:
        saved_at = datetime.now(timezone.utc)
        record = StoredResult(
            fingerprint=fingerprint,
            saved_at=saved_at,
            source_name=source_name,
            outcome=outcome,
        )
        record_id = f"{saved_at.strftime(_TIMESTAMP_FORMAT)}_{short_fingerprint(fingerprint)}"
        path = self._root / f"{record_id}.json"
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            path.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise PersistError(f"Could not write {path}", path=str(path), detail=str(e)) from e

        logger.info("Saved analysis result: %s", path.name)
        return record_id

    def load(self, record_id: str) -> StoredResult:
        path = self._root / f"{record_id}.json"
        try:
            return StoredResult.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            raise PersistError(f"Could not read {path}", path=str(path), detail=str(e)) from e

    def list_results(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(p.stem for p in self._root.glob("*.json"))

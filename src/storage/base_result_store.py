# src/storage/base_result_store.py — v1
"""Abstract result store: caller-side persistence of analysis outcomes.

The analysis pipeline never writes here; callers decide what to keep.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from lansonesscan.core.models import AnalysisOutcome
from lansonesscan.storage.result_models import StoredResult


class BaseResultStore(ABC):
    """Unified interface for result persistence backends."""

    @abstractmethod
    def save(
        self,
        outcome: AnalysisOutcome,
        fingerprint: str,
        source_name: str | None = None,
    ) -> str:
        """Persist one outcome and return its record identifier.

        Raises:
            PersistError: If the record cannot be written.
        """

    @abstractmethod
    def load(self, record_id: str) -> StoredResult:
        """Load a previously saved record."""

    @abstractmethod
    def list_results(self) -> list[str]:
        """Record identifiers, oldest first."""

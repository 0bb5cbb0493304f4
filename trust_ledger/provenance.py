# =============================================================================
# Provenance Ledger
# =============================================================================
# Append-only, hash-addressed record of AI-derived insights per dataset and
# version. Entries are never updated or deduplicated.
# =============================================================================

"""Insight ledger."""

import logging
from typing import Optional

from pydantic import ValidationError

from trust_ledger.errors import InvalidInputError
from trust_ledger.hashing import content_hash
from trust_ledger.locks import DatasetLocks
from trust_ledger.models import InsightInput, LedgerEntry
from trust_ledger.store import LedgerStore

__all__ = ["ProvenanceLedger"]

logger = logging.getLogger(__name__)


class ProvenanceLedger:
    """Appends and lists ledger entries."""

    def __init__(self, store: LedgerStore, locks: DatasetLocks) -> None:
        self.store = store
        self.locks = locks

    def append(
        self,
        dataset_id: int,
        insight_text: str,
        at_version: int,
        confidence: Optional[float] = None,
    ) -> LedgerEntry:
        """
        Append one insight computed against ``at_version`` of a dataset.

        The entry is content-addressed by the SHA-256 of its text and marked
        verified. Appending identical text twice yields two entries with the
        same hash.

        Raises:
            InvalidInputError: If the text is empty or confidence is out of range
        """
        try:
            insight = InsightInput(insight_text=insight_text, confidence=confidence)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid insight: {e}") from e

        with self.locks.hold(dataset_id):
            entry = LedgerEntry(
                id=self.store.next_id(LedgerStore.LEDGER),
                dataset_id=dataset_id,
                insight_text=insight.insight_text,
                insight_hash=content_hash(insight.insight_text),
                dataset_version=at_version,
                verified=True,
                confidence=insight.confidence,
            )
            self.store.insert(LedgerStore.LEDGER, entry)

        logger.debug("Ledger entry %s appended for dataset %s", entry.id, dataset_id)
        return entry

    def list_by_dataset(self, dataset_id: int) -> list[LedgerEntry]:
        """Entries of a dataset in insertion order."""
        return self.store.list_for_dataset(LedgerStore.LEDGER, dataset_id, LedgerEntry)

    @staticmethod
    def verify_entry(entry: LedgerEntry) -> bool:
        """Check that the stored hash still matches the stored text."""
        return content_hash(entry.insight_text) == entry.insight_hash

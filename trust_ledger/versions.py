# =============================================================================
# Version Chain
# =============================================================================
# Per-dataset, strictly increasing version sequence with parent linkage.
# History is linear: a new version must extend the current head.
# =============================================================================

"""Dataset version lineage."""

import logging

from trust_ledger.errors import ConflictError, NotFoundError
from trust_ledger.locks import DatasetLocks
from trust_ledger.models import DatasetVersion
from trust_ledger.store import LedgerStore

__all__ = ["VersionChain"]

logger = logging.getLogger(__name__)


class VersionChain:
    """Creates and lists immutable dataset versions."""

    def __init__(self, store: LedgerStore, locks: DatasetLocks) -> None:
        self.store = store
        self.locks = locks

    def create_initial(self, dataset_id: int, content_hash: str) -> DatasetVersion:
        """
        Seed version 1 of a dataset.

        Raises:
            ConflictError: If the dataset already has versions
        """
        with self.locks.hold(dataset_id):
            if self.store.latest_version(dataset_id) is not None:
                raise ConflictError(f"Dataset {dataset_id} already has an initial version")
            version = DatasetVersion(
                id=self.store.next_id(LedgerStore.VERSIONS),
                dataset_id=dataset_id,
                version_number=1,
                parent_version=None,
                file_hash=content_hash,
            )
            return self.store.insert(LedgerStore.VERSIONS, version)

    def create_next(
        self, dataset_id: int, content_hash: str, parent_version: int
    ) -> DatasetVersion:
        """
        Append version N+1, where N is the dataset's current head.

        The check of ``parent_version`` against the head and the insert run
        under the dataset lock, and a unique index on
        (dataset_id, version_number) backs it up across processes.

        Raises:
            NotFoundError: If the dataset has no versions
            ConflictError: If ``parent_version`` is not the current head
        """
        with self.locks.hold(dataset_id):
            head = self.store.latest_version(dataset_id)
            if head is None:
                raise NotFoundError(f"Dataset {dataset_id} has no versions")
            if parent_version != head.version_number:
                logger.warning(
                    "Rejected version for dataset %s: parent %s is not head %s",
                    dataset_id,
                    parent_version,
                    head.version_number,
                )
                raise ConflictError(
                    f"Parent version {parent_version} is not the current version "
                    f"{head.version_number} of dataset {dataset_id}"
                )
            version = DatasetVersion(
                id=self.store.next_id(LedgerStore.VERSIONS),
                dataset_id=dataset_id,
                version_number=head.version_number + 1,
                parent_version=head.version_number,
                file_hash=content_hash,
            )
            return self.store.insert(LedgerStore.VERSIONS, version)

    def list_versions(self, dataset_id: int) -> list[DatasetVersion]:
        """All versions of a dataset, ascending by version number."""
        return self.store.list_versions(dataset_id)

    def latest(self, dataset_id: int) -> DatasetVersion | None:
        return self.store.latest_version(dataset_id)

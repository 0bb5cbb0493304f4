"""Ledger Store - MongoDB persistence for the trust ledger."""

from __future__ import annotations

import functools
import logging
import threading
from contextlib import contextmanager
from functools import cached_property
from typing import Any, ClassVar, Iterator, Optional, TypeVar

from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from trust_ledger.errors import ConflictError, InternalError, LedgerError, NotFoundError
from trust_ledger.models import (
    DatasetRecord,
    DatasetVersion,
    DocumentModel,
    MongoSettings,
)
from trust_ledger.models.base import utcnow

__all__ = ["LedgerStore", "UnitOfWork"]

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=DocumentModel)


def _store_operation(func):
    """Translate pymongo failures into ledger error kinds."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LedgerError:
            raise
        except DuplicateKeyError as e:
            raise ConflictError(f"Duplicate key in {func.__name__}: {e}") from e
        except PyMongoError as e:
            logger.exception("Ledger store failure in %s", func.__name__)
            raise InternalError(f"Ledger store failure in {func.__name__}: {e}") from e

    return wrapper


class UnitOfWork:
    """
    Compensation log for one logical mutation.

    Records every document inserted and every dataset snapshot taken before an
    update, so that a failure part-way through can be undone in reverse order.
    """

    def __init__(self) -> None:
        self._actions: list[tuple[str, str, Any]] = []

    def record_insert(self, collection: str, document_id: Any) -> None:
        self._actions.append(("insert", collection, document_id))

    def record_update(self, collection: str, before: dict[str, Any]) -> None:
        self._actions.append(("update", collection, before))

    def rollback(self, db: Database) -> None:
        for kind, collection, payload in reversed(self._actions):
            try:
                if kind == "insert":
                    db[collection].delete_one({"_id": payload})
                else:
                    db[collection].replace_one({"_id": payload["_id"]}, payload)
            except PyMongoError:
                logger.exception(
                    "Rollback step failed: %s on %s", kind, collection
                )
        self._actions.clear()


class LedgerStore:
    """
    MongoDB-backed store for the trust ledger.

    The store is the source of truth for datasets and every record owned by
    them. Documents use integer ``_id`` values allocated from the ``counters``
    collection. Child collections reference their dataset by ``dataset_id``.
    """

    DATASETS: ClassVar[str] = "datasets"
    VERSIONS: ClassVar[str] = "dataset_versions"
    LEDGER: ClassVar[str] = "ledger_entries"
    LIFECYCLE: ClassVar[str] = "lifecycle_events"
    AUDIT: ClassVar[str] = "audit_events"
    VERIFICATION_LOGS: ClassVar[str] = "verification_logs"
    COUNTERS: ClassVar[str] = "counters"

    CHILD_COLLECTIONS: ClassVar[tuple[str, ...]] = (
        VERSIONS,
        LEDGER,
        LIFECYCLE,
        AUDIT,
        VERIFICATION_LOGS,
    )

    def __init__(self, connection_string: str, database: str = "trust_ledger") -> None:
        self.connection_string = connection_string
        self.database = database
        self._local = threading.local()

    @classmethod
    def from_settings(cls, settings: MongoSettings) -> "LedgerStore":
        return cls(settings.connection_string, database=settings.database)

    @cached_property
    def _client(self) -> MongoClient:
        return MongoClient(self.connection_string, tz_aware=True)

    def _get_db(self) -> Database:
        return self._client[self.database]

    def _get_collection(self, name: str) -> Collection:
        return self._get_db()[name]

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """
        Group writes so they commit together or not at all.

        Nested calls join the outermost unit of work. On any exception the
        recorded writes are compensated and the exception propagates.
        """
        current: Optional[UnitOfWork] = getattr(self._local, "uow", None)
        if current is not None:
            yield current
            return

        uow = UnitOfWork()
        self._local.uow = uow
        try:
            yield uow
        except BaseException:
            logger.warning("Rolling back partial ledger writes")
            uow.rollback(self._get_db())
            raise
        finally:
            self._local.uow = None

    def _track_insert(self, collection: str, document_id: Any) -> None:
        uow: Optional[UnitOfWork] = getattr(self._local, "uow", None)
        if uow is not None:
            uow.record_insert(collection, document_id)

    def _track_update(self, collection: str, before: dict[str, Any]) -> None:
        uow: Optional[UnitOfWork] = getattr(self._local, "uow", None)
        if uow is not None:
            uow.record_update(collection, before)

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    @_store_operation
    def next_id(self, sequence: str) -> int:
        """
        Allocate the next integer id for a collection.

        Ids are strictly increasing per sequence. Ids consumed by a rolled
        back write are not reused.
        """
        document = self._get_collection(self.COUNTERS).find_one_and_update(
            {"_id": sequence},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(document["seq"])

    # ------------------------------------------------------------------
    # Generic child-record operations
    # ------------------------------------------------------------------

    @_store_operation
    def insert(self, collection: str, model: ModelT) -> ModelT:
        """Insert a document model and register it with the active unit of work."""
        self._get_collection(collection).insert_one(model.to_document())
        self._track_insert(collection, model.id)
        return model

    @_store_operation
    def list_for_dataset(
        self,
        collection: str,
        dataset_id: int,
        model_cls: type[ModelT],
        *,
        newest_first: bool = False,
    ) -> list[ModelT]:
        """
        Return every document of a dataset ordered by (created_at, _id).

        ``_id`` is monotonic, so ties on the timestamp fall back to insertion
        order and the ordering is total and stable.
        """
        direction = DESCENDING if newest_first else ASCENDING
        cursor = self._get_collection(collection).find({"dataset_id": dataset_id}).sort(
            [("created_at", direction), ("_id", direction)]
        )
        return [model_cls.from_document(doc) for doc in cursor]

    # ------------------------------------------------------------------
    # Dataset operations
    # ------------------------------------------------------------------

    @_store_operation
    def find_dataset(self, dataset_id: int) -> DatasetRecord | None:
        document = self._get_collection(self.DATASETS).find_one({"_id": dataset_id})
        if not document:
            return None
        return DatasetRecord.from_document(document)

    def get_dataset(self, dataset_id: int) -> DatasetRecord:
        """Load a dataset or raise NotFoundError."""
        record = self.find_dataset(dataset_id)
        if record is None:
            raise NotFoundError(f"Dataset not found: {dataset_id}")
        return record

    @_store_operation
    def find_datasets_by_hash(self, file_hash: str) -> list[DatasetRecord]:
        """Datasets whose current file hash matches."""
        cursor = self._get_collection(self.DATASETS).find({"file_hash": file_hash}).sort(
            "_id", ASCENDING
        )
        return [DatasetRecord.from_document(doc) for doc in cursor]

    @_store_operation
    def list_datasets(self, limit: int = 50, offset: int = 0) -> list[DatasetRecord]:
        """Most recently created datasets first."""
        cursor = (
            self._get_collection(self.DATASETS)
            .find({})
            .sort("_id", DESCENDING)
            .skip(offset)
            .limit(limit)
        )
        return [DatasetRecord.from_document(doc) for doc in cursor]

    @_store_operation
    def update_dataset(self, record: DatasetRecord, changes: dict[str, Any]) -> DatasetRecord:
        """
        Apply ``changes`` to a dataset if it is still at ``record.revision``.

        Raises:
            ConflictError: If the dataset was modified since ``record`` was read
            NotFoundError: If the dataset no longer exists
        """
        changes = {k: v for k, v in changes.items() if k not in ("_id", "id", "revision")}
        changes["updated_at"] = utcnow()

        collection = self._get_collection(self.DATASETS)
        document = collection.find_one_and_update(
            {"_id": record.id, "revision": record.revision},
            {"$set": changes, "$inc": {"revision": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if document is None:
            if collection.count_documents({"_id": record.id}) == 0:
                raise NotFoundError(f"Dataset not found: {record.id}")
            raise ConflictError(
                f"Dataset {record.id} was modified concurrently "
                f"(expected revision {record.revision})"
            )

        self._track_update(self.DATASETS, record.to_document())
        return DatasetRecord.from_document(document)

    @_store_operation
    def delete_dataset(self, dataset_id: int) -> dict[str, int]:
        """
        Delete a dataset and every document it owns.

        Returns:
            Deleted document count per collection
        """
        deleted: dict[str, int] = {}
        db = self._get_db()
        for name in self.CHILD_COLLECTIONS:
            deleted[name] = db[name].delete_many({"dataset_id": dataset_id}).deleted_count
        deleted[self.DATASETS] = db[self.DATASETS].delete_one({"_id": dataset_id}).deleted_count
        return deleted

    # ------------------------------------------------------------------
    # Version operations
    # ------------------------------------------------------------------

    @_store_operation
    def latest_version(self, dataset_id: int) -> DatasetVersion | None:
        """Return the highest version of a dataset."""
        document = self._get_collection(self.VERSIONS).find_one(
            {"dataset_id": dataset_id},
            sort=[("version_number", DESCENDING)],
        )
        if not document:
            return None
        return DatasetVersion.from_document(document)

    @_store_operation
    def list_versions(self, dataset_id: int) -> list[DatasetVersion]:
        cursor = self._get_collection(self.VERSIONS).find({"dataset_id": dataset_id}).sort(
            "version_number", ASCENDING
        )
        return [DatasetVersion.from_document(doc) for doc in cursor]

    @_store_operation
    def find_versions_by_hash(self, file_hash: str) -> list[DatasetVersion]:
        cursor = self._get_collection(self.VERSIONS).find({"file_hash": file_hash}).sort(
            "_id", ASCENDING
        )
        return [DatasetVersion.from_document(doc) for doc in cursor]

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    @_store_operation
    def ping(self) -> bool:
        """Round-trip to the server. Raises InternalError when unreachable."""
        self._client.admin.command("ping")
        return True

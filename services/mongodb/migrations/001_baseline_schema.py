"""
Migration 001: Baseline Trust Ledger Schema

Creates the ledger collections and the indexes the store relies on.

Indexes:
- datasets: file_hash (content lookups)
- dataset_versions: unique (dataset_id, version_number), file_hash
- ledger_entries, lifecycle_events, audit_events, verification_logs:
  (dataset_id, created_at) for ordered per-dataset reads
- verification_logs: content_hash
"""

from pymongo import ASCENDING
from pymongo.database import Database

VERSION = "001"

COLLECTIONS = (
    "datasets",
    "dataset_versions",
    "ledger_entries",
    "lifecycle_events",
    "audit_events",
    "verification_logs",
    "counters",
)

TIMELINE_COLLECTIONS = (
    "ledger_entries",
    "lifecycle_events",
    "audit_events",
    "verification_logs",
)


def _ensure_index(db: Database, collection: str, keys: list, name: str, **kwargs) -> None:
    existing = {idx["name"] for idx in db[collection].list_indexes()}
    if name not in existing:
        db[collection].create_index(keys, name=name, **kwargs)


def up(db: Database) -> None:
    """Create ledger collections and indexes."""
    existing = set(db.list_collection_names())
    for name in COLLECTIONS:
        if name not in existing:
            db.create_collection(name)

    _ensure_index(db, "datasets", [("file_hash", ASCENDING)], "file_hash")

    _ensure_index(
        db,
        "dataset_versions",
        [("dataset_id", ASCENDING), ("version_number", ASCENDING)],
        "dataset_version_unique",
        unique=True,
    )
    _ensure_index(db, "dataset_versions", [("file_hash", ASCENDING)], "file_hash")

    for name in TIMELINE_COLLECTIONS:
        _ensure_index(
            db,
            name,
            [("dataset_id", ASCENDING), ("created_at", ASCENDING), ("_id", ASCENDING)],
            "dataset_created_at",
        )

    _ensure_index(db, "verification_logs", [("content_hash", ASCENDING)], "content_hash")


def down(db: Database) -> None:
    """Drop ledger collections."""
    existing = set(db.list_collection_names())
    for name in COLLECTIONS:
        if name in existing:
            db.drop_collection(name)

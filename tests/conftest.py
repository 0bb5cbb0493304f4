"""
Shared pytest fixtures for trust ledger tests.

Provides an in-memory MongoDB (mongomock) with the baseline schema applied,
and ledger components wired to it.
"""

import mongomock
import pytest

from scripts.migrate_db import run_migrations
from trust_ledger import LedgerStore, TrustLedgerService
from trust_ledger.hashing import content_hash
from trust_ledger.locks import DatasetLocks
from trust_ledger.models import LedgerSettings

TEST_DATABASE = "trust_ledger_test"


# =============================================================================
# MongoDB Fixtures
# =============================================================================

@pytest.fixture
def mongomock_client():
    """In-memory MongoDB client for tests."""
    return mongomock.MongoClient(tz_aware=True)


@pytest.fixture
def mongo_db(mongomock_client):
    """Test database with the baseline migrations applied."""
    db = mongomock_client[TEST_DATABASE]
    run_migrations(db)
    return db


@pytest.fixture
def ledger_store(monkeypatch, mongomock_client, mongo_db):
    """LedgerStore configured to use the mongomock client."""
    monkeypatch.setattr(
        "trust_ledger.store.MongoClient",
        lambda *args, **kwargs: mongomock_client,
    )
    return LedgerStore("mongodb://localhost:27017", database=TEST_DATABASE)


@pytest.fixture
def dataset_locks():
    return DatasetLocks()


# =============================================================================
# Service Fixtures
# =============================================================================

@pytest.fixture
def ledger_settings():
    """Ledger settings with production defaults, independent of the environment."""
    return LedgerSettings(
        default_completeness=80,
        default_freshness=70,
        default_consistency=75,
        default_schema=85,
        default_verification=0,
        verification_bump=50,
        attestation_timeout_seconds=2,
        enforce_lifecycle_order=False,
    )


@pytest.fixture
def ledger_service(ledger_store, ledger_settings):
    """TrustLedgerService over the mongomock store and simulated authority."""
    service = TrustLedgerService(ledger_store, settings=ledger_settings)
    yield service
    service.close()


# =============================================================================
# Data Fixtures
# =============================================================================

@pytest.fixture
def file_hash():
    """Content hash of a small CSV upload."""
    return content_hash(b"id,value\n1,42\n2,17\n")


@pytest.fixture
def other_file_hash():
    return content_hash(b"id,value\n1,42\n2,17\n3,99\n")


@pytest.fixture
def dataset(ledger_service, file_hash):
    """A freshly created dataset with default sub-scores."""
    return ledger_service.create_dataset(
        name="Quarterly sales",
        owner_wallet="0xabc123",
        description="Sales by region",
        content_hash=file_hash,
        filename="sales.csv",
    )

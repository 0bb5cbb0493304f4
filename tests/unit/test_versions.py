"""Unit tests for the dataset version chain."""

import pytest

from trust_ledger.errors import ConflictError, NotFoundError
from trust_ledger.hashing import content_hash
from trust_ledger.versions import VersionChain


@pytest.fixture
def chain(ledger_store, dataset_locks):
    return VersionChain(ledger_store, dataset_locks)


def test_initial_version(chain, file_hash):
    version = chain.create_initial(1, file_hash)

    assert version.version_number == 1
    assert version.parent_version is None
    assert chain.latest(1) == version


def test_initial_version_only_once(chain, file_hash):
    chain.create_initial(1, file_hash)
    with pytest.raises(ConflictError):
        chain.create_initial(1, file_hash)


def test_versions_increase_without_gaps(chain, file_hash):
    chain.create_initial(1, file_hash)
    for n in range(1, 5):
        chain.create_next(1, content_hash(f"revision {n}"), parent_version=n)

    versions = chain.list_versions(1)
    assert [v.version_number for v in versions] == [1, 2, 3, 4, 5]
    assert [v.parent_version for v in versions] == [None, 1, 2, 3, 4]


def test_stale_parent_is_conflict(chain, file_hash, other_file_hash):
    chain.create_initial(1, file_hash)
    chain.create_next(1, other_file_hash, parent_version=1)

    with pytest.raises(ConflictError, match="not the current version"):
        chain.create_next(1, other_file_hash, parent_version=1)
    assert len(chain.list_versions(1)) == 2


def test_next_without_initial_is_not_found(chain, file_hash):
    with pytest.raises(NotFoundError):
        chain.create_next(1, file_hash, parent_version=1)


def test_chains_are_per_dataset(chain, file_hash):
    chain.create_initial(1, file_hash)
    chain.create_initial(2, file_hash)
    chain.create_next(2, file_hash, parent_version=1)

    assert chain.latest(1).version_number == 1
    assert chain.latest(2).version_number == 2

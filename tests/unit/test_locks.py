"""Unit tests for the per-dataset lock registry."""

import threading

import pytest

from trust_ledger.errors import ConflictError
from trust_ledger.locks import DatasetLocks


def test_entry_exists_only_while_held():
    locks = DatasetLocks()
    with locks.hold(1):
        with locks.hold(2):
            assert len(locks) == 2
        assert len(locks) == 1
    assert len(locks) == 0


def test_entry_released_when_block_raises():
    locks = DatasetLocks()
    with pytest.raises(ValueError):
        with locks.hold(7):
            raise ValueError("boom")
    assert len(locks) == 0


def test_hold_is_reentrant():
    locks = DatasetLocks()
    with locks.hold(1):
        with locks.hold(1):
            pass


def test_timeout_raises_conflict():
    locks = DatasetLocks(timeout=0.05)
    acquired = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold(1):
            acquired.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    try:
        assert acquired.wait(5)
        with pytest.raises(ConflictError, match="busy"):
            with locks.hold(1):
                pass
        # A different dataset is not blocked
        with locks.hold(2):
            pass
    finally:
        release.set()
        thread.join()


def test_hold_serializes_writers():
    locks = DatasetLocks()
    counter = {"value": 0}

    def bump():
        for _ in range(200):
            with locks.hold(1):
                current = counter["value"]
                counter["value"] = current + 1

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert counter["value"] == 800


def test_waiter_keeps_entry_alive():
    locks = DatasetLocks()
    acquired = threading.Event()
    release = threading.Event()
    seen = []

    def holder():
        with locks.hold(1):
            acquired.set()
            release.wait(5)

    def waiter():
        with locks.hold(1):
            seen.append("waiter")

    first = threading.Thread(target=holder)
    first.start()
    assert acquired.wait(5)
    second = threading.Thread(target=waiter)
    second.start()
    release.set()
    first.join()
    second.join()

    assert seen == ["waiter"]
    assert len(locks) == 0

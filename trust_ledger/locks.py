# =============================================================================
# Per-dataset Locks
# =============================================================================
# Serializes mutating operations on one dataset while leaving different
# datasets fully independent.
# =============================================================================

"""Keyed lock registry for dataset-scoped mutations."""

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from trust_ledger.errors import ConflictError

__all__ = ["DatasetLocks"]


class DatasetLocks:
    """
    Registry of one re-entrant lock per dataset id.

    Locks are re-entrant so a facade operation holding a dataset's lock can
    call components that take the same lock. Reads never go through here.

    An entry lives only while some thread holds or waits on it, so ids that
    turn out unknown and datasets that get deleted leave nothing behind.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.RLock] = {}
        self._users: dict[int, int] = {}
        self._timeout = timeout

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def _checkout(self, dataset_id: int) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(dataset_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[dataset_id] = lock
            self._users[dataset_id] = self._users.get(dataset_id, 0) + 1
            return lock

    def _checkin(self, dataset_id: int) -> None:
        with self._guard:
            remaining = self._users[dataset_id] - 1
            if remaining:
                self._users[dataset_id] = remaining
            else:
                del self._users[dataset_id]
                del self._locks[dataset_id]

    @contextmanager
    def hold(self, dataset_id: int) -> Iterator[None]:
        """
        Hold the lock of ``dataset_id`` for the duration of the block.

        Raises:
            ConflictError: If a timeout is configured and the lock is not
                acquired in time
        """
        lock = self._checkout(dataset_id)
        try:
            timeout = -1 if self._timeout is None else self._timeout
            if not lock.acquire(timeout=timeout):
                raise ConflictError(f"Dataset {dataset_id} is busy, lock wait timed out")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(dataset_id)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

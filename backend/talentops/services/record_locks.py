"""Per-candidate mutation locks.

Every mutation of a candidate record (stage transition, interview steps,
activation) runs inside the lock for that candidate's id, so two requests
for the same candidate never interleave their read-validate-write cycles.
Requests for different candidates proceed independently.

The locks are process-local. Writers in other processes are caught by the
version check in the candidate source (StaleRecordError).
"""

import asyncio
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class RecordLocks:
    """Registry of asyncio locks keyed by candidate id.

    Locks are created on first use and dropped again once nobody holds or
    waits on them, so the registry does not grow with the candidate table.
    """

    def __init__(self) -> None:
        self._locks: dict[uuid.UUID, asyncio.Lock] = {}
        self._waiters: dict[uuid.UUID, int] = {}

    @asynccontextmanager
    async def hold(self, candidate_id: uuid.UUID) -> AsyncIterator[None]:
        """Hold the lock for one candidate for the duration of the block.

        Args:
            candidate_id: Candidate whose record is about to be mutated.
        """
        lock = self._locks.setdefault(candidate_id, asyncio.Lock())
        self._waiters[candidate_id] = self._waiters.get(candidate_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._waiters[candidate_id] - 1
            if remaining:
                self._waiters[candidate_id] = remaining
            else:
                del self._waiters[candidate_id]
                del self._locks[candidate_id]

    def __len__(self) -> int:
        """Number of candidates with a live lock."""
        return len(self._locks)


_record_locks: RecordLocks | None = None


def get_record_locks() -> RecordLocks:
    """Get or create the process-wide lock registry."""
    global _record_locks

    if _record_locks is None:
        _record_locks = RecordLocks()
    return _record_locks


def reset_record_locks() -> None:
    """Reset the lock registry.

    Used in tests to ensure isolation between test cases.
    """
    global _record_locks
    _record_locks = None

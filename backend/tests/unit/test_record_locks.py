"""Tests for per-candidate record locks."""

import asyncio
import uuid

import pytest

from talentops.services.record_locks import (
    RecordLocks,
    get_record_locks,
    reset_record_locks,
)


class TestRecordLocks:
    """Serialization per candidate id."""

    @pytest.mark.asyncio
    async def test_same_candidate_blocks_are_serialized(self) -> None:
        locks = RecordLocks()
        candidate_id = uuid.uuid4()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold(candidate_id):
                events.append(f"{name}-start")
                await asyncio.sleep(0)
                events.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a-start", "a-end", "b-start", "b-end"]

    @pytest.mark.asyncio
    async def test_different_candidates_do_not_block_each_other(self) -> None:
        locks = RecordLocks()
        first, second = uuid.uuid4(), uuid.uuid4()
        entered = asyncio.Event()

        async def hold_first() -> None:
            async with locks.hold(first):
                await asyncio.wait_for(entered.wait(), timeout=1)

        async def hold_second() -> None:
            async with locks.hold(second):
                entered.set()

        await asyncio.gather(hold_first(), hold_second())

        assert entered.is_set()

    @pytest.mark.asyncio
    async def test_lock_is_dropped_when_released(self) -> None:
        locks = RecordLocks()

        async with locks.hold(uuid.uuid4()):
            assert len(locks) == 1

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_lock_is_dropped_when_block_raises(self) -> None:
        locks = RecordLocks()

        with pytest.raises(RuntimeError):
            async with locks.hold(uuid.uuid4()):
                raise RuntimeError("boom")

        assert len(locks) == 0


class TestRecordLocksSingleton:
    def test_reset_creates_new_registry(self) -> None:
        first = get_record_locks()
        reset_record_locks()

        assert get_record_locks() is not first

"""Tests for the PostgreSQL candidate repository.

Round-trip tests need a running PostgreSQL and are skipped otherwise (see
conftest.db_engine). Commit handling is also checked against a mocked
session, which needs no database.
"""

import asyncio
from datetime import UTC, date, datetime, time
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from talentops.core.errors import (
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    PersistError,
    StaleRecordError,
)
from talentops.repositories.candidate_repository import CandidateRepository
from talentops.services.candidate_stage import CandidateStage
from talentops.services.candidate_types import (
    AuditEntry,
    AuditKind,
    InterviewPlatform,
    InterviewSchedule,
)
from talentops.services.record_locks import RecordLocks
from talentops.services.transition_engine import TransitionEngine
from tests.conftest import CANDIDATE_ID, SECOND_CANDIDATE_ID, make_candidate


def _entry(stage: CandidateStage, note: str) -> AuditEntry:
    return AuditEntry(
        kind=AuditKind.STAGE_CHANGE,
        note=note,
        stage=stage,
        recorded_at=datetime(2026, 1, 6, tzinfo=UTC),
    )


@pytest.fixture
def repo(db_session) -> CandidateRepository:
    return CandidateRepository(db_session)


class TestAddAndRead:
    """Round trip through the candidates tables."""

    @pytest.mark.asyncio
    async def test_add_then_get(self, repo) -> None:
        record = make_candidate(
            candidate_id=CANDIDATE_ID,
            email="ada@example.com",
            skills=("Python", "SQL"),
            title="Analyst",
        )

        await repo.add_candidate(record)
        loaded = await repo.get_candidate(CANDIDATE_ID)

        assert loaded == record

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self, repo) -> None:
        assert await repo.get_candidate(CANDIDATE_ID) is None

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, repo) -> None:
        await repo.add_candidate(
            make_candidate(candidate_id=CANDIDATE_ID, email="ada@example.com")
        )

        with pytest.raises(ConflictError) as exc_info:
            await repo.add_candidate(
                make_candidate(candidate_id=SECOND_CANDIDATE_ID, email="ada@example.com")
            )

        assert exc_info.value.code == "DUPLICATE_EMAIL"

    @pytest.mark.asyncio
    async def test_fetch_orders_by_creation(self, repo) -> None:
        later = make_candidate(
            candidate_id=SECOND_CANDIDATE_ID,
            created_at=datetime(2026, 2, 1, tzinfo=UTC),
        )
        earlier = make_candidate(candidate_id=CANDIDATE_ID)
        await repo.add_candidate(later)
        await repo.add_candidate(earlier)

        records = await repo.fetch_candidates()

        assert [r.id for r in records] == [CANDIDATE_ID, SECOND_CANDIDATE_ID]


class TestPersist:
    """Versioned updates."""

    @pytest.mark.asyncio
    async def test_persists_stage_side_data_and_audit_trail(self, repo) -> None:
        record = make_candidate(candidate_id=CANDIDATE_ID)
        await repo.add_candidate(record)
        schedule = InterviewSchedule(
            interview_date=date(2026, 2, 3),
            interview_time=time(14, 30),
            meeting_link="https://zoom.us/j/123",
            platform=InterviewPlatform.ZOOM,
            interviewer_name="Grace Hopper",
        )
        updated = record.with_audit_entry(
            _entry(CandidateStage.REVIEW, "Interview Scheduled"),
            stage=CandidateStage.REVIEW,
            interview_schedule=schedule,
        )

        await repo.persist(updated)
        loaded = await repo.get_candidate(CANDIDATE_ID)

        assert loaded.stage == CandidateStage.REVIEW
        assert loaded.version == 2
        assert loaded.interview_schedule == schedule
        assert [e.note for e in loaded.audit_trail] == ["Interview Scheduled"]

    @pytest.mark.asyncio
    async def test_stale_version_is_rejected(self, repo) -> None:
        record = make_candidate(candidate_id=CANDIDATE_ID)
        await repo.add_candidate(record)
        first = record.with_audit_entry(
            _entry(CandidateStage.REVIEW, "First"), stage=CandidateStage.REVIEW
        )
        second = record.with_audit_entry(
            _entry(CandidateStage.REJECTED, "Second"), stage=CandidateStage.REJECTED
        )
        await repo.persist(first)

        with pytest.raises(StaleRecordError):
            await repo.persist(second)

    @pytest.mark.asyncio
    async def test_unknown_candidate_is_not_found(self, repo) -> None:
        record = make_candidate(candidate_id=CANDIDATE_ID, version=2)

        with pytest.raises(NotFoundError):
            await repo.persist(record)


# =============================================================================
# Commit handling (mocked session)
# =============================================================================


@pytest.fixture
def session() -> AsyncMock:
    """Session whose UPDATE matches one row and whose lookups find nothing."""
    db = AsyncMock(spec=AsyncSession)
    db.execute.return_value = MagicMock(rowcount=1)
    db.scalar.return_value = None
    return db


def _advanced(record):
    return record.with_audit_entry(
        _entry(CandidateStage.REVIEW, "Moved to review"), stage=CandidateStage.REVIEW
    )


class TestCommitsEachWrite:
    """Writes commit before returning instead of waiting for the request."""

    @pytest.mark.asyncio
    async def test_add_candidate_commits(self, session) -> None:
        await CandidateRepository(session).add_candidate(
            make_candidate(candidate_id=CANDIDATE_ID)
        )

        session.commit.assert_awaited_once()
        session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_persist_commits(self, session) -> None:
        record = make_candidate(candidate_id=CANDIDATE_ID)

        await CandidateRepository(session).persist(_advanced(record))

        session.commit.assert_awaited_once()
        session.add_all.assert_called_once()

    @pytest.mark.asyncio
    async def test_failed_commit_rolls_back_and_raises_persist_error(
        self, session
    ) -> None:
        session.commit.side_effect = OperationalError(
            "COMMIT", {}, Exception("connection reset")
        )
        record = make_candidate(candidate_id=CANDIDATE_ID)

        with pytest.raises(PersistError):
            await CandidateRepository(session).persist(_advanced(record))

        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_stale_version_does_not_commit(self, session) -> None:
        session.execute.return_value = MagicMock(rowcount=0)
        session.scalar.return_value = CANDIDATE_ID
        record = make_candidate(candidate_id=CANDIDATE_ID)

        with pytest.raises(StaleRecordError):
            await CandidateRepository(session).persist(_advanced(record))

        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_transition_commits_while_record_lock_is_held(
        self, session
    ) -> None:
        locks = RecordLocks()
        repo = CandidateRepository(session)
        live_locks_at_commit: list[int] = []
        session.commit.side_effect = lambda: live_locks_at_commit.append(len(locks))
        record = make_candidate(candidate_id=CANDIDATE_ID)

        with patch.object(repo, "get_candidate", AsyncMock(return_value=record)):
            await TransitionEngine(repo, locks).request_transition(
                CANDIDATE_ID, CandidateStage.REVIEW, "Moved to review"
            )

        assert live_locks_at_commit == [1]
        assert len(locks) == 0


# =============================================================================
# Concurrent writers (live database)
# =============================================================================


class TestConcurrentWriters:
    """Two requests, each with its own session, racing on one candidate."""

    @pytest.mark.asyncio
    async def test_queued_writer_sees_committed_stage(self, db_engine) -> None:
        factory = async_sessionmaker(
            db_engine, class_=AsyncSession, expire_on_commit=False
        )
        locks = RecordLocks()
        async with factory() as setup:
            await CandidateRepository(setup).add_candidate(
                make_candidate(candidate_id=CANDIDATE_ID)
            )

        async def move_to_review():
            async with factory() as db:
                engine = TransitionEngine(CandidateRepository(db), locks)
                return await engine.request_transition(
                    CANDIDATE_ID, CandidateStage.REVIEW, "Moved to review"
                )

        outcomes = await asyncio.gather(
            move_to_review(), move_to_review(), return_exceptions=True
        )

        errors = [o for o in outcomes if isinstance(o, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], IllegalTransitionError)
        async with factory() as check:
            stored = await CandidateRepository(check).get_candidate(CANDIDATE_ID)
        assert stored.stage == CandidateStage.REVIEW
        assert stored.version == 2

"""Tests for the Stage Transition Engine.

Tests verify:
1. Legal transitions commit stage, audit entry and version together
2. Illegal transitions leave the record untouched
3. Replays are rejected or ignored without duplicating audit entries
4. Concurrent requests for one candidate are serialized
5. Persist failures leave no visible mutation
"""

import asyncio
from datetime import date, time
from unittest.mock import AsyncMock

import pytest

from talentops.core.errors import (
    IllegalTransitionError,
    InvalidStateError,
    NotFoundError,
    PersistError,
    StaleRecordError,
    ValidationError,
)
from talentops.services.candidate_stage import CandidateStage
from talentops.services.candidate_types import (
    AuditKind,
    InterviewPlatform,
    InterviewSchedule,
)
from talentops.services.transition_engine import TransitionEngine
from tests.conftest import CANDIDATE_ID, make_candidate


@pytest.fixture
async def pending(memory_source):
    record = make_candidate(CandidateStage.PENDING, candidate_id=CANDIDATE_ID)
    await memory_source.add_candidate(record)
    return record


@pytest.fixture
async def in_review(memory_source):
    record = make_candidate(CandidateStage.REVIEW, candidate_id=CANDIDATE_ID)
    await memory_source.add_candidate(record)
    return record


class TestLegalTransitions:
    """Successful commits."""

    @pytest.mark.asyncio
    async def test_moves_stage_and_appends_one_entry(
        self, engine, memory_source, pending
    ) -> None:
        result = await engine.request_transition(
            CANDIDATE_ID, CandidateStage.REVIEW, "Screened OK"
        )

        stored = await memory_source.get_candidate(CANDIDATE_ID)
        assert result.stage_changed is True
        assert result.recorded is True
        assert result.previous_stage == CandidateStage.PENDING
        assert stored.stage == CandidateStage.REVIEW
        assert stored.version == pending.version + 1
        assert len(stored.audit_trail) == 1
        entry = stored.audit_trail[0]
        assert entry.kind == AuditKind.STAGE_CHANGE
        assert entry.note == "Screened OK"
        assert entry.stage == CandidateStage.REVIEW

    @pytest.mark.asyncio
    async def test_strips_note_whitespace(self, engine, pending) -> None:
        result = await engine.request_transition(
            CANDIDATE_ID, CandidateStage.REVIEW, "  Screened OK \n"
        )

        assert result.candidate.audit_trail[-1].note == "Screened OK"

    @pytest.mark.asyncio
    async def test_applies_side_data_in_same_version(
        self, engine, memory_source, pending
    ) -> None:
        schedule = InterviewSchedule(
            interview_date=date(2026, 3, 2),
            interview_time=time(10, 0),
            meeting_link="https://zoom.example.com/j/1",
            platform=InterviewPlatform.ZOOM,
            interviewer_name="Grace Hopper",
        )

        await engine.request_transition(
            CANDIDATE_ID,
            CandidateStage.REVIEW,
            "Interview booked",
            kind=AuditKind.INTERVIEW_SCHEDULED,
            changes={"interview_schedule": schedule},
        )

        stored = await memory_source.get_candidate(CANDIDATE_ID)
        assert stored.interview_schedule == schedule
        assert stored.version == 2
        assert memory_source.persist_calls == 1


class TestRejectedTransitions:
    """Requests that must not change anything."""

    @pytest.mark.asyncio
    async def test_pending_to_accepted_is_illegal(
        self, engine, memory_source, pending
    ) -> None:
        with pytest.raises(IllegalTransitionError):
            await engine.request_transition(
                CANDIDATE_ID, CandidateStage.ACCEPTED, "Skip the interview"
            )

        stored = await memory_source.get_candidate(CANDIDATE_ID)
        assert stored == pending
        assert stored.audit_trail == ()

    @pytest.mark.asyncio
    async def test_same_stage_is_illegal_without_allow_stay(
        self, engine, in_review
    ) -> None:
        with pytest.raises(IllegalTransitionError):
            await engine.request_transition(
                CANDIDATE_ID, CandidateStage.REVIEW, "Still reviewing"
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("note", ["", "   ", "\n\t"])
    async def test_empty_note_is_rejected(
        self, engine, memory_source, pending, note
    ) -> None:
        with pytest.raises(ValidationError):
            await engine.request_transition(CANDIDATE_ID, CandidateStage.REVIEW, note)

        assert memory_source.persist_calls == 0

    @pytest.mark.asyncio
    async def test_unknown_candidate_raises_not_found(self, engine) -> None:
        with pytest.raises(NotFoundError):
            await engine.request_transition(
                CANDIDATE_ID, CandidateStage.REVIEW, "note"
            )

    @pytest.mark.asyncio
    async def test_required_stage_mismatch_raises_invalid_state(
        self, engine, in_review
    ) -> None:
        with pytest.raises(InvalidStateError):
            await engine.request_transition(
                CANDIDATE_ID,
                CandidateStage.ACCEPTED,
                "note",
                require_stage=CandidateStage.PENDING,
            )

    @pytest.mark.asyncio
    async def test_unexpected_side_data_is_refused(self, engine, pending) -> None:
        with pytest.raises(ValueError, match="account_link"):
            await engine.request_transition(
                CANDIDATE_ID,
                CandidateStage.REVIEW,
                "note",
                changes={"account_link": "emp-1"},
            )


class TestReplays:
    """Retry idempotence."""

    @pytest.mark.asyncio
    async def test_replayed_transition_is_illegal_and_not_duplicated(
        self, engine, memory_source, pending
    ) -> None:
        await engine.request_transition(CANDIDATE_ID, CandidateStage.REVIEW, "go")

        with pytest.raises(IllegalTransitionError):
            await engine.request_transition(CANDIDATE_ID, CandidateStage.REVIEW, "go")

        stored = await memory_source.get_candidate(CANDIDATE_ID)
        assert len(stored.audit_trail) == 1

    @pytest.mark.asyncio
    async def test_replayed_stay_update_is_a_noop(
        self, engine, memory_source, in_review
    ) -> None:
        kwargs = {"kind": AuditKind.INTERVIEW_FEEDBACK, "allow_stay": True}
        first = await engine.request_transition(
            CANDIDATE_ID, CandidateStage.REVIEW, "needs another round", **kwargs
        )
        second = await engine.request_transition(
            CANDIDATE_ID, CandidateStage.REVIEW, "needs another round", **kwargs
        )

        assert first.recorded is True
        assert first.stage_changed is False
        assert second.recorded is False
        assert second.candidate == first.candidate
        stored = await memory_source.get_candidate(CANDIDATE_ID)
        assert len(stored.audit_trail) == 1

    @pytest.mark.asyncio
    async def test_different_stay_note_is_recorded(
        self, engine, memory_source, in_review
    ) -> None:
        kwargs = {"kind": AuditKind.INTERVIEW_FEEDBACK, "allow_stay": True}
        await engine.request_transition(
            CANDIDATE_ID, CandidateStage.REVIEW, "round one", **kwargs
        )
        await engine.request_transition(
            CANDIDATE_ID, CandidateStage.REVIEW, "round two", **kwargs
        )

        stored = await memory_source.get_candidate(CANDIDATE_ID)
        assert [e.note for e in stored.audit_trail] == ["round one", "round two"]


class TestConcurrency:
    """Concurrent requests for the same candidate."""

    @pytest.mark.asyncio
    async def test_stale_request_fails_after_competing_commit(
        self, engine, memory_source, in_review
    ) -> None:
        accept = engine.request_transition(
            CANDIDATE_ID, CandidateStage.ACCEPTED, "hire"
        )
        reject = engine.request_transition(
            CANDIDATE_ID, CandidateStage.REJECTED, "pass"
        )

        results = await asyncio.gather(accept, reject, return_exceptions=True)

        assert results[0].candidate.stage == CandidateStage.ACCEPTED
        assert isinstance(results[1], IllegalTransitionError)
        stored = await memory_source.get_candidate(CANDIDATE_ID)
        assert stored.stage == CandidateStage.ACCEPTED
        assert len(stored.audit_trail) == 1
        assert stored.version == 2

    @pytest.mark.asyncio
    async def test_stale_record_error_propagates(self, locks, in_review) -> None:
        source = AsyncMock()
        source.get_candidate.return_value = in_review
        source.persist.side_effect = StaleRecordError(str(CANDIDATE_ID))
        engine = TransitionEngine(source, locks)

        with pytest.raises(StaleRecordError):
            await engine.request_transition(
                CANDIDATE_ID, CandidateStage.ACCEPTED, "hire"
            )


class TestPersistFailure:
    @pytest.mark.asyncio
    async def test_failed_persist_leaves_stored_record_unchanged(
        self, locks, memory_source, in_review
    ) -> None:
        memory_source.persist = AsyncMock(side_effect=PersistError())
        engine = TransitionEngine(memory_source, locks)

        with pytest.raises(PersistError):
            await engine.request_transition(
                CANDIDATE_ID, CandidateStage.ACCEPTED, "hire"
            )

        assert await memory_source.get_candidate(CANDIDATE_ID) == in_review
        assert len(locks) == 0

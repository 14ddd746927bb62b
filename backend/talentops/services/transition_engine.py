"""Stage Transition Engine.

Validates and commits moves between pipeline stages. This is the only code
path that changes CandidateRecord.stage.

Each request runs inside the candidate's record lock and re-reads the record
there, so validation always sees the latest committed stage. The audit entry,
the stage change and any side data (interview schedule or feedback) are
written as one new record version: either everything is persisted or
nothing is.

The engine deliberately does not check whether an interview was scheduled or
feedback captured; interview_workflow.py owns that policy.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from talentops.core.errors import InvalidStateError, NotFoundError, ValidationError
from talentops.repositories.candidate_source import CandidateSource
from talentops.services.candidate_stage import CandidateStage, ensure_transition
from talentops.services.candidate_types import AuditEntry, AuditKind, CandidateRecord
from talentops.services.record_locks import RecordLocks, get_record_locks

logger = logging.getLogger(__name__)

# Fields a caller may commit together with a transition
_SIDE_DATA_FIELDS = frozenset({"interview_schedule", "interview_feedback"})


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a transition request.

    Attributes:
        candidate: The record after the request (unchanged on a no-op).
        previous_stage: Stage before the request.
        stage_changed: Whether the stage moved.
        recorded: Whether a new audit entry was committed. False only when an
            identical same-stage request had already been applied.
    """

    candidate: CandidateRecord
    previous_stage: CandidateStage
    stage_changed: bool
    recorded: bool


class TransitionEngine:
    """Commits stage transitions against a candidate source.

    Args:
        source: Candidate store to read and persist records.
        locks: Per-candidate lock registry. Defaults to the process-wide one.
    """

    def __init__(
        self,
        source: CandidateSource,
        locks: RecordLocks | None = None,
    ) -> None:
        self.source = source
        self.locks = locks if locks is not None else get_record_locks()

    async def request_transition(
        self,
        candidate_id: uuid.UUID,
        target_stage: CandidateStage,
        audit_note: str,
        *,
        kind: AuditKind = AuditKind.STAGE_CHANGE,
        require_stage: CandidateStage | None = None,
        allow_stay: bool = False,
        changes: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Validate and commit a stage transition.

        Args:
            candidate_id: Candidate to move.
            target_stage: Desired stage.
            audit_note: Rationale recorded in the audit trail (required).
            kind: Audit entry kind.
            require_stage: If set, the candidate must currently be in this stage.
            allow_stay: Accept target_stage == current stage as an update that
                records the note without moving the candidate.
            changes: Side data committed with the transition. Only
                interview_schedule and interview_feedback may be set.

        Returns:
            TransitionResult describing the committed record.

        Raises:
            ValidationError: If audit_note is empty.
            NotFoundError: If the candidate does not exist.
            InvalidStateError: If require_stage does not match.
            IllegalTransitionError: If target_stage is not reachable.
            StaleRecordError: If another writer committed first.
            PersistError: If the record could not be saved.
        """
        note = audit_note.strip() if audit_note else ""
        if not note:
            raise ValidationError(
                "An audit note is required for every stage change",
                details=[{"field": "audit_note", "msg": "must not be empty"}],
            )
        side_data = dict(changes or {})
        unexpected = set(side_data) - _SIDE_DATA_FIELDS
        if unexpected:
            raise ValueError(
                f"Cannot commit fields {sorted(unexpected)} with a transition"
            )

        async with self.locks.hold(candidate_id):
            record = await self.source.get_candidate(candidate_id)
            if record is None:
                raise NotFoundError("Candidate", str(candidate_id))

            if require_stage is not None and record.stage != require_stage:
                raise InvalidStateError(
                    f"Candidate must be in {require_stage.value} stage, "
                    f"currently {record.stage.value}"
                )

            previous = record.stage
            if target_stage == previous and allow_stay:
                latest = record.latest_audit_entry
                if (
                    latest is not None
                    and latest.kind == kind
                    and latest.stage == target_stage
                    and latest.note == note
                ):
                    logger.info(
                        "Ignoring replayed %s update for candidate %s",
                        kind.value,
                        candidate_id,
                    )
                    return TransitionResult(
                        candidate=record,
                        previous_stage=previous,
                        stage_changed=False,
                        recorded=False,
                    )
            else:
                ensure_transition(previous, target_stage)

            entry = AuditEntry(
                kind=kind,
                note=note,
                stage=target_stage,
                recorded_at=datetime.now(UTC),
            )
            updated = record.with_audit_entry(entry, stage=target_stage, **side_data)
            await self.source.persist(updated)

        logger.info(
            "Candidate %s: %s -> %s (%s, version %d)",
            candidate_id,
            previous.value,
            target_stage.value,
            kind.value,
            updated.version,
        )
        return TransitionResult(
            candidate=updated,
            previous_stage=previous,
            stage_changed=previous != target_stage,
            recorded=True,
        )

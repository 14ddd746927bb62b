"""SQLAlchemy candidate source.

Maps Candidate / CandidateAuditEntry rows to immutable CandidateRecord
snapshots and back. persist() is a conditional UPDATE on the version column,
so a writer in another process that committed first makes it fail with
StaleRecordError instead of silently overwriting.

Each write commits before returning. Callers hold the candidate's record
lock around read-modify-persist, so the next writer for that candidate
reads the committed row and sees the new stage.
"""

import uuid

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from talentops.core.errors import (
    ConflictError,
    NotFoundError,
    PersistError,
    StaleRecordError,
)
from talentops.models.candidate import Candidate, CandidateAuditEntry
from talentops.repositories.candidate_source import CandidateSource
from talentops.services.candidate_stage import CandidateStage
from talentops.services.candidate_types import (
    AuditEntry,
    AuditKind,
    CandidateRecord,
    ContactInfo,
    InterviewFeedback,
    InterviewSchedule,
)


def _to_record(row: Candidate) -> CandidateRecord:
    """Convert an ORM row (with audit entries loaded) to a record."""
    return CandidateRecord(
        id=row.id,
        stage=CandidateStage.from_string(row.stage),
        contact=ContactInfo(name=row.name, email=row.email, phone=row.phone),
        title=row.title,
        department=row.department,
        location=row.location,
        experience=row.experience,
        skills=tuple(row.skills or ()),
        audit_trail=tuple(
            AuditEntry(
                kind=AuditKind(entry.kind),
                note=entry.note,
                stage=CandidateStage.from_string(entry.stage),
                recorded_at=entry.recorded_at,
            )
            for entry in row.audit_entries
        ),
        interview_schedule=(
            InterviewSchedule.from_dict(row.interview_schedule)
            if row.interview_schedule
            else None
        ),
        interview_feedback=(
            InterviewFeedback.from_dict(row.interview_feedback)
            if row.interview_feedback
            else None
        ),
        account_link=row.account_link,
        version=row.version,
        created_at=row.created_at,
    )


def _snapshot_values(record: CandidateRecord) -> dict:
    """Column values for a record's mutable snapshot."""
    return {
        "stage": record.stage.value,
        "name": record.contact.name,
        "email": record.contact.email,
        "phone": record.contact.phone,
        "title": record.title,
        "department": record.department,
        "location": record.location,
        "experience": record.experience,
        "skills": list(record.skills),
        "interview_schedule": (
            record.interview_schedule.to_dict() if record.interview_schedule else None
        ),
        "interview_feedback": (
            record.interview_feedback.to_dict() if record.interview_feedback else None
        ),
        "account_link": record.account_link,
        "version": record.version,
    }


def _audit_rows(
    record: CandidateRecord, start: int
) -> list[CandidateAuditEntry]:
    return [
        CandidateAuditEntry(
            candidate_id=record.id,
            position=position,
            kind=entry.kind.value,
            note=entry.note,
            stage=entry.stage.value,
            recorded_at=entry.recorded_at,
        )
        for position, entry in enumerate(record.audit_trail[start:], start=start)
    ]


class CandidateRepository(CandidateSource):
    """Candidate source backed by PostgreSQL.

    Args:
        db: Async database session. Writes commit on success and roll back
            on failure.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def fetch_candidates(self) -> list[CandidateRecord]:
        stmt = (
            select(Candidate)
            .order_by(Candidate.created_at, Candidate.id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistError("Failed to load candidates") from e
        return [_to_record(row) for row in result.scalars().all()]

    async def get_candidate(self, candidate_id: uuid.UUID) -> CandidateRecord | None:
        stmt = (
            select(Candidate)
            .where(Candidate.id == candidate_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            raise PersistError(f"Failed to load candidate '{candidate_id}'") from e
        row = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def add_candidate(self, record: CandidateRecord) -> None:
        try:
            duplicate = await self.db.scalar(
                select(Candidate.id).where(Candidate.email == record.contact.email)
            )
            if duplicate is not None:
                raise ConflictError(
                    "DUPLICATE_EMAIL",
                    f"A candidate with email '{record.contact.email}' already exists.",
                )
            row = Candidate(
                id=record.id, created_at=record.created_at, **_snapshot_values(record)
            )
            self.db.add(row)
            self.db.add_all(_audit_rows(record, 0))
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(
                "DUPLICATE_CANDIDATE",
                f"Candidate '{record.id}' conflicts with an existing record.",
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistError(f"Failed to create candidate '{record.id}'") from e

    async def persist(self, record: CandidateRecord) -> None:
        stmt = (
            update(Candidate)
            .where(
                Candidate.id == record.id,
                Candidate.version == record.version - 1,
            )
            .values(**_snapshot_values(record))
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                exists = await self.db.scalar(
                    select(Candidate.id).where(Candidate.id == record.id)
                )
                if exists is None:
                    raise NotFoundError("Candidate", str(record.id))
                raise StaleRecordError(str(record.id))

            stored = await self.db.scalar(
                select(func.count())
                .select_from(CandidateAuditEntry)
                .where(CandidateAuditEntry.candidate_id == record.id)
            )
            self.db.add_all(_audit_rows(record, stored or 0))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistError(f"Failed to save candidate '{record.id}'") from e

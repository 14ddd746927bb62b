"""Candidate models - onboarding pipeline records and their audit trail.

Candidate rows hold the current snapshot; audit entries are append-only
child rows ordered by position.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from talentops.models.base import Base, TimestampMixin

_DEFAULT_UUID = text("gen_random_uuid()")


class Candidate(Base, TimestampMixin):
    """Applicant or employee in the onboarding pipeline."""

    __tablename__ = "candidates"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    stage: Mapped[str] = mapped_column(
        String(20),
        server_default="pending",
        nullable=False,
    )

    # Contact
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    phone: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    # Profile
    title: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    department: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    location: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    experience: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    skills: Mapped[list] = mapped_column(
        JSONB,
        server_default=text("'[]'::jsonb"),
        nullable=False,
    )

    # Interview workflow
    interview_schedule: Mapped[dict | None] = mapped_column(
        JSONB,
        nullable=True,
    )
    interview_feedback: Mapped[dict | None] = mapped_column(
        JSONB,
        nullable=True,
    )

    # Activation
    account_link: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # Optimistic concurrency token
    version: Mapped[int] = mapped_column(
        Integer,
        server_default=text("1"),
        nullable=False,
    )

    audit_entries: Mapped[list["CandidateAuditEntry"]] = relationship(
        back_populates="candidate",
        cascade="all, delete-orphan",
        order_by="CandidateAuditEntry.position",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "stage IN ('pending', 'review', 'accepted', 'rejected')",
            name="ck_candidate_stage",
        ),
        CheckConstraint(
            "account_link IS NULL OR stage = 'accepted'",
            name="ck_candidate_account_link_accepted",
        ),
        CheckConstraint("version >= 1", name="ck_candidate_version_positive"),
    )


class CandidateAuditEntry(Base):
    """One append-only audit trail note for a candidate."""

    __tablename__ = "candidate_audit_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    candidate_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
    )
    note: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    stage: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    candidate: Mapped["Candidate"] = relationship(back_populates="audit_entries")

    __table_args__ = (
        UniqueConstraint(
            "candidate_id", "position", name="uq_candidate_audit_position"
        ),
        CheckConstraint(
            "kind IN ('stage_change', 'interview_scheduled', "
            "'interview_feedback', 'account_activated')",
            name="ck_candidate_audit_kind",
        ),
    )

"""Candidate record types for the onboarding pipeline.

A CandidateRecord is an immutable snapshot. Every committed mutation
produces a new record with an incremented version, so a failed operation
can never leave a half-updated record behind and concurrent writers can be
detected by comparing versions.

Defaulting of optional profile fields happens once, in candidate_intake.py;
code reading a record never needs fallbacks.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time
from enum import Enum
from typing import Any

from talentops.services.candidate_stage import CandidateStage

# =============================================================================
# Enums
# =============================================================================


class AuditKind(Enum):
    """Kinds of audit trail entries."""

    STAGE_CHANGE = "stage_change"
    INTERVIEW_SCHEDULED = "interview_scheduled"
    INTERVIEW_FEEDBACK = "interview_feedback"
    ACCOUNT_ACTIVATED = "account_activated"


class InterviewPlatform(Enum):
    """Meeting platforms offered by the schedule dialog."""

    ZOOM = "zoom"
    GOOGLE_MEET = "google-meet"
    TEAMS = "teams"
    OTHER = "other"

    @property
    def label(self) -> str:
        """Human-readable platform name for audit notes."""
        return _PLATFORM_LABELS[self]


_PLATFORM_LABELS: dict[InterviewPlatform, str] = {
    InterviewPlatform.ZOOM: "Zoom",
    InterviewPlatform.GOOGLE_MEET: "Google Meet",
    InterviewPlatform.TEAMS: "MS Teams",
    InterviewPlatform.OTHER: "Other",
}


class Recommendation(Enum):
    """Interviewer recommendation captured with feedback."""

    ACCEPT = "accept"
    REJECT = "reject"
    REVIEW = "review"


# =============================================================================
# Value Objects
# =============================================================================


@dataclass(frozen=True)
class ContactInfo:
    """Candidate contact details.

    Attributes:
        name: Display name.
        email: Email address (required, lowercase).
        phone: Normalized phone number, e.g. "(555) 123-4567", or None.
    """

    name: str
    email: str
    phone: str | None = None


@dataclass(frozen=True)
class AuditEntry:
    """One append-only audit trail note.

    Attributes:
        kind: What produced the entry.
        note: Free-text or formatted note.
        stage: Candidate stage in effect after the entry was recorded.
        recorded_at: When the entry was committed (UTC).
    """

    kind: AuditKind
    note: str
    stage: CandidateStage
    recorded_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "kind": self.kind.value,
            "note": self.note,
            "stage": self.stage.value,
            "recorded_at": self.recorded_at.isoformat(),
        }


@dataclass(frozen=True)
class InterviewSchedule:
    """Interview booking captured by the schedule step.

    Attributes:
        interview_date: Calendar date of the interview.
        interview_time: Local start time.
        meeting_link: Non-empty meeting URL.
        platform: Meeting platform.
        interviewer_name: Interviewer display name (required).
        interviewer_email: Interviewer email, if provided.
        preparation_notes: Optional notes for the interviewer.
    """

    interview_date: date
    interview_time: time
    meeting_link: str
    platform: InterviewPlatform
    interviewer_name: str
    interviewer_email: str | None = None
    preparation_notes: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSONB storage and responses."""
        return {
            "interview_date": self.interview_date.isoformat(),
            "interview_time": self.interview_time.strftime("%H:%M"),
            "meeting_link": self.meeting_link,
            "platform": self.platform.value,
            "interviewer_name": self.interviewer_name,
            "interviewer_email": self.interviewer_email,
            "preparation_notes": self.preparation_notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InterviewSchedule":
        """Rebuild from a to_dict() payload."""
        return cls(
            interview_date=date.fromisoformat(data["interview_date"]),
            interview_time=time.fromisoformat(data["interview_time"]),
            meeting_link=data["meeting_link"],
            platform=InterviewPlatform(data["platform"]),
            interviewer_name=data["interviewer_name"],
            interviewer_email=data.get("interviewer_email"),
            preparation_notes=data.get("preparation_notes") or "",
        )


@dataclass(frozen=True)
class InterviewFeedback:
    """Structured interview feedback.

    Ratings are 1-5; the optional dimensions use 0 for "not rated".

    Attributes:
        overall_rating: Overall rating (1-5, required).
        recommendation: Interviewer recommendation.
        technical_rating: Technical skills rating (0-5).
        communication_rating: Communication rating (0-5).
        cultural_fit_rating: Cultural fit rating (0-5).
        strengths: Free-text strengths.
        weaknesses: Free-text areas for improvement.
        additional_notes: Free-text notes.
        interviewer_name: Who conducted the interview, if recorded.
        interview_date: When the interview took place, if recorded.
    """

    overall_rating: int
    recommendation: Recommendation
    technical_rating: int = 0
    communication_rating: int = 0
    cultural_fit_rating: int = 0
    strengths: str = ""
    weaknesses: str = ""
    additional_notes: str = ""
    interviewer_name: str | None = None
    interview_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSONB storage and responses."""
        return {
            "overall_rating": self.overall_rating,
            "recommendation": self.recommendation.value,
            "technical_rating": self.technical_rating,
            "communication_rating": self.communication_rating,
            "cultural_fit_rating": self.cultural_fit_rating,
            "strengths": self.strengths,
            "weaknesses": self.weaknesses,
            "additional_notes": self.additional_notes,
            "interviewer_name": self.interviewer_name,
            "interview_date": (
                self.interview_date.isoformat() if self.interview_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InterviewFeedback":
        """Rebuild from a to_dict() payload."""
        raw_date = data.get("interview_date")
        return cls(
            overall_rating=int(data["overall_rating"]),
            recommendation=Recommendation(data["recommendation"]),
            technical_rating=int(data.get("technical_rating") or 0),
            communication_rating=int(data.get("communication_rating") or 0),
            cultural_fit_rating=int(data.get("cultural_fit_rating") or 0),
            strengths=data.get("strengths") or "",
            weaknesses=data.get("weaknesses") or "",
            additional_notes=data.get("additional_notes") or "",
            interviewer_name=data.get("interviewer_name"),
            interview_date=date.fromisoformat(raw_date) if raw_date else None,
        )


# =============================================================================
# Candidate Record
# =============================================================================


@dataclass(frozen=True)
class CandidateRecord:
    """One applicant/employee in the onboarding pipeline.

    Attributes:
        id: Candidate identifier.
        stage: Current pipeline stage.
        contact: Contact details.
        title: Job title / role, if known.
        department: Department, if known.
        location: Work location, if known.
        experience: Experience summary, if known.
        skills: Distinct skill tags in first-seen order.
        audit_trail: Append-only audit entries, oldest first.
        interview_schedule: Set once the interview has been scheduled.
        interview_feedback: Set once feedback has been captured.
        account_link: Provisioned login identity; set only by activation.
        version: Optimistic concurrency token, starts at 1.
        created_at: When the record was created.
    """

    id: uuid.UUID
    stage: CandidateStage
    contact: ContactInfo
    title: str | None = None
    department: str | None = None
    location: str | None = None
    experience: str | None = None
    skills: tuple[str, ...] = ()
    audit_trail: tuple[AuditEntry, ...] = ()
    interview_schedule: InterviewSchedule | None = None
    interview_feedback: InterviewFeedback | None = None
    account_link: str | None = None
    version: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not isinstance(self.stage, CandidateStage):
            raise TypeError(
                f"stage must be a CandidateStage, got {type(self.stage).__name__}"
            )
        if self.version < 1:
            raise ValueError(f"version must be >= 1, got {self.version}")
        if self.account_link is not None and self.stage != CandidateStage.ACCEPTED:
            raise ValueError("account_link can only be set on accepted candidates")

    @property
    def is_activated(self) -> bool:
        """Whether a login identity has been provisioned."""
        return self.account_link is not None

    @property
    def latest_audit_entry(self) -> AuditEntry | None:
        """Most recent audit entry, or None for a fresh record."""
        return self.audit_trail[-1] if self.audit_trail else None

    def with_audit_entry(
        self,
        entry: AuditEntry,
        **changes: Any,
    ) -> "CandidateRecord":
        """Return the next version of this record with one more audit entry.

        Args:
            entry: Audit entry to append.
            **changes: Other fields to replace (stage, interview_schedule, ...).

        Returns:
            New CandidateRecord with version incremented.
        """
        return replace(
            self,
            audit_trail=(*self.audit_trail, entry),
            version=self.version + 1,
            **changes,
        )

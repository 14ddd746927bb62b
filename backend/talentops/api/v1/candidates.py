"""Candidates API router.

Onboarding console endpoints: pipeline board, candidate intake, stage
transitions, interview schedule/feedback, activation and skills-gap report.

Request schemas only bound sizes and types; business validation lives in the
services so the same rules apply to every caller.
"""

import uuid
from datetime import date, time

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, ConfigDict, Field

from talentops.api.deps import (
    Engine,
    Extractor,
    Identity,
    Locks,
    Notifier,
    Providers,
    Source,
)
from talentops.core.errors import NotFoundError, ValidationError
from talentops.core.responses import DataResponse, ListMeta, ListResponse
from talentops.services.activation_workflow import (
    ActivationCommand,
    ActivationResult,
    activate_candidate,
    generate_temporary_secret,
)
from talentops.services.candidate_intake import (
    IntakeForm,
    build_intake,
    create_candidate,
    intake_from_source,
)
from talentops.services.candidate_stage import (
    CandidateStage,
    get_valid_transitions,
    suggest_stage_note,
)
from talentops.services.candidate_types import CandidateRecord
from talentops.services.interview_workflow import (
    ScheduleInterviewCommand,
    SubmitFeedbackCommand,
    schedule_interview,
    submit_feedback,
)
from talentops.services.pipeline_summary import group_by_stage, summarize_pipeline
from talentops.services.skills_gap import analyze_skill_gaps, summarize_skill_gaps
from talentops.services.transition_engine import TransitionResult

_MAX_TEXT_LENGTH = 10000
_MAX_FIELD_LENGTH = 255
_MAX_SKILLS = 100

router = APIRouter()


# =============================================================================
# Request Schemas
# =============================================================================


class CandidateFormRequest(BaseModel):
    """Operator-entered candidate fields (all optional, email required after merge)."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    email: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    phone: str | None = Field(default=None, max_length=30)
    title: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    department: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    location: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    experience: str | None = Field(default=None, max_length=_MAX_TEXT_LENGTH)
    skills: list[str] = Field(default_factory=list, max_length=_MAX_SKILLS)

    def to_form(self) -> IntakeForm:
        return IntakeForm(
            name=self.name,
            email=self.email,
            phone=self.phone,
            title=self.title,
            department=self.department,
            location=self.location,
            experience=self.experience,
            skills=tuple(self.skills),
        )


class ExtractCandidateRequest(CandidateFormRequest):
    """Intake through the extraction oracle; form fields override it."""

    source_ref: str = Field(..., min_length=1, max_length=1000)


class TransitionRequest(BaseModel):
    """Manual stage change with its rationale."""

    model_config = ConfigDict(extra="forbid")

    target_stage: str = Field(..., max_length=20)
    audit_note: str = Field(..., max_length=_MAX_TEXT_LENGTH)


class ScheduleInterviewRequest(BaseModel):
    """Schedule dialog fields."""

    model_config = ConfigDict(extra="forbid")

    interview_date: date | None = None
    interview_time: time | None = None
    meeting_link: str = Field(default="", max_length=1000)
    platform: str = Field(default="zoom", max_length=20)
    interviewer_name: str = Field(default="", max_length=_MAX_FIELD_LENGTH)
    interviewer_email: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    preparation_notes: str = Field(default="", max_length=_MAX_TEXT_LENGTH)


class FeedbackRequest(BaseModel):
    """Feedback dialog fields."""

    model_config = ConfigDict(extra="forbid")

    overall_rating: int
    recommendation: str = Field(..., max_length=20)
    technical_rating: int = 0
    communication_rating: int = 0
    cultural_fit_rating: int = 0
    strengths: str = Field(default="", max_length=_MAX_TEXT_LENGTH)
    weaknesses: str = Field(default="", max_length=_MAX_TEXT_LENGTH)
    additional_notes: str = Field(default="", max_length=_MAX_TEXT_LENGTH)
    interviewer_name: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    interview_date: date | None = None


class ActivationRequest(BaseModel):
    """Activation dialog fields."""

    model_config = ConfigDict(extra="forbid")

    temporary_secret: str = Field(default="", max_length=128)
    role: str = Field(default="Employee", max_length=50)
    department: str | None = Field(default=None, max_length=_MAX_FIELD_LENGTH)
    send_welcome: bool = True


# =============================================================================
# Helper Functions
# =============================================================================


def candidate_to_dict(record: CandidateRecord) -> dict:
    """Convert a CandidateRecord to an API response dict."""
    return {
        "id": str(record.id),
        "stage": record.stage.value,
        "name": record.contact.name,
        "email": record.contact.email,
        "phone": record.contact.phone,
        "title": record.title,
        "department": record.department,
        "location": record.location,
        "experience": record.experience,
        "skills": list(record.skills),
        "audit_trail": [entry.to_dict() for entry in record.audit_trail],
        "interview_schedule": (
            record.interview_schedule.to_dict() if record.interview_schedule else None
        ),
        "interview_feedback": (
            record.interview_feedback.to_dict() if record.interview_feedback else None
        ),
        "account_link": record.account_link,
        "is_activated": record.is_activated,
        "valid_transitions": [s.value for s in get_valid_transitions(record.stage)],
        "version": record.version,
        "created_at": record.created_at.isoformat(),
    }


def _transition_to_dict(result: TransitionResult) -> dict:
    return {
        "candidate": candidate_to_dict(result.candidate),
        "previous_stage": result.previous_stage.value,
        "stage_changed": result.stage_changed,
        "recorded": result.recorded,
    }


def _activation_to_dict(result: ActivationResult) -> dict:
    return {
        "candidate": candidate_to_dict(result.candidate),
        "account_id": result.account_id,
        "email": result.email,
        "role": result.role,
        "department": result.department,
        "welcome_sent": result.welcome_sent,
        "notification_error": result.notification_error,
        "warnings": result.warnings,
        "message": result.message,
    }


def _parse_stage(value: str, field_name: str) -> CandidateStage:
    try:
        return CandidateStage.from_string(value)
    except ValueError as e:
        raise ValidationError(
            "Unknown candidate stage",
            details=[{"field": field_name, "msg": str(e)}],
        ) from e


async def _get_or_404(source: Source, candidate_id: uuid.UUID) -> CandidateRecord:
    record = await source.get_candidate(candidate_id)
    if record is None:
        raise NotFoundError("Candidate", str(candidate_id))
    return record


# =============================================================================
# Collection Endpoints
# =============================================================================


@router.get("")
async def list_candidates(
    source: Source,
    stage: str | None = Query(default=None, max_length=20),
) -> ListResponse[dict]:
    """List candidates, optionally filtered by stage."""
    candidates = await source.fetch_candidates()
    if stage is not None:
        wanted = _parse_stage(stage, "stage")
        candidates = [c for c in candidates if c.stage == wanted]
    return ListResponse(
        data=[candidate_to_dict(c) for c in candidates],
        meta=ListMeta(total=len(candidates)),
    )


@router.get("/board")
async def get_board(source: Source) -> DataResponse[dict]:
    """Candidates grouped into one column per stage."""
    columns = group_by_stage(await source.fetch_candidates())
    return DataResponse(
        data={
            stage.value: [candidate_to_dict(c) for c in members]
            for stage, members in columns.items()
        }
    )


@router.get("/summary")
async def get_summary(source: Source) -> DataResponse[dict]:
    """Dashboard counts."""
    summary = summarize_pipeline(await source.fetch_candidates())
    return DataResponse(data=summary.to_dict())


@router.get("/skills-gap")
async def get_skills_gap(source: Source) -> DataResponse[dict]:
    """Skills-gap report over accepted employees."""
    candidates = await source.fetch_candidates()
    accepted = [c for c in candidates if c.stage == CandidateStage.ACCEPTED]
    summary = summarize_skill_gaps(
        analyze_skill_gaps(accepted),
        total_employees=len(candidates),
        accepted_employees=len(accepted),
    )
    return DataResponse(
        data={
            "total_employees": summary.total_employees,
            "accepted_employees": summary.accepted_employees,
            "has_data": summary.has_data,
            "no_data_reason": summary.no_data_reason,
            "total_gap": summary.total_gap,
            "critical_gaps": summary.critical_gaps,
            "fulfilled": summary.fulfilled,
            "skill_gaps": [entry.to_dict() for entry in summary.entries],
        }
    )


@router.get("/temporary-secret")
async def get_temporary_secret() -> DataResponse[dict]:
    """Generate a temporary secret for the activation dialog."""
    return DataResponse(data={"temporary_secret": generate_temporary_secret()})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_candidate_manually(
    request: CandidateFormRequest,
    source: Source,
) -> DataResponse[dict]:
    """Add a candidate from operator-entered fields."""
    record = await create_candidate(source, build_intake(request.to_form()))
    return DataResponse(data=candidate_to_dict(record))


@router.post("/extract", status_code=status.HTTP_201_CREATED)
async def create_candidate_from_document(
    request: ExtractCandidateRequest,
    source: Source,
    extractor: Extractor,
    providers: Providers,
) -> DataResponse[dict]:
    """Add a candidate from an uploaded profile document."""
    intake = await intake_from_source(
        extractor, request.source_ref, request.to_form(), providers
    )
    record = await create_candidate(source, intake)
    return DataResponse(data=candidate_to_dict(record))


# =============================================================================
# Single Candidate Endpoints
# =============================================================================


@router.get("/{candidate_id}")
async def get_candidate(candidate_id: uuid.UUID, source: Source) -> DataResponse[dict]:
    """Get one candidate."""
    return DataResponse(data=candidate_to_dict(await _get_or_404(source, candidate_id)))


@router.get("/{candidate_id}/suggested-note")
async def get_suggested_note(
    candidate_id: uuid.UUID,
    source: Source,
    target_stage: str = Query(..., max_length=20),
) -> DataResponse[dict]:
    """Default rationale text for the stage-change dialog."""
    target = _parse_stage(target_stage, "target_stage")
    record = await _get_or_404(source, candidate_id)
    return DataResponse(
        data={
            "target_stage": target.value,
            "note": suggest_stage_note(target, record.contact.name),
        }
    )


@router.post("/{candidate_id}/transitions")
async def transition_candidate(
    candidate_id: uuid.UUID,
    request: TransitionRequest,
    engine: Engine,
) -> DataResponse[dict]:
    """Move a candidate along a legal stage edge."""
    result = await engine.request_transition(
        candidate_id,
        _parse_stage(request.target_stage, "target_stage"),
        request.audit_note,
    )
    return DataResponse(data=_transition_to_dict(result))


@router.post("/{candidate_id}/interview-schedule")
async def schedule_candidate_interview(
    candidate_id: uuid.UUID,
    request: ScheduleInterviewRequest,
    engine: Engine,
) -> DataResponse[dict]:
    """Confirm an interview and move the candidate to review."""
    result = await schedule_interview(
        engine,
        candidate_id,
        ScheduleInterviewCommand(**request.model_dump()),
    )
    return DataResponse(data=_transition_to_dict(result))


@router.post("/{candidate_id}/interview-feedback")
async def submit_candidate_feedback(
    candidate_id: uuid.UUID,
    request: FeedbackRequest,
    engine: Engine,
) -> DataResponse[dict]:
    """Record interview feedback and apply the recommendation."""
    result = await submit_feedback(
        engine,
        candidate_id,
        SubmitFeedbackCommand(**request.model_dump()),
    )
    return DataResponse(data=_transition_to_dict(result))


@router.post("/{candidate_id}/activation")
async def activate(
    candidate_id: uuid.UUID,
    request: ActivationRequest,
    source: Source,
    identity: Identity,
    notifier: Notifier,
    locks: Locks,
    providers: Providers,
) -> DataResponse[dict]:
    """Provision a login identity for an accepted candidate."""
    result = await activate_candidate(
        candidate_id,
        ActivationCommand(**request.model_dump()),
        source=source,
        identity=identity,
        notifier=notifier,
        locks=locks,
        config=providers,
    )
    return DataResponse(data=_activation_to_dict(result))

"""Interview workflow: schedule step and feedback step.

Two confirm actions gate the review stage:

1. schedule_interview: only while pending. Records the interview booking
   and moves the candidate pending → review.
2. submit_feedback: only while in review. Records feedback and moves the
   candidate according to the recommendation:
       accept → accepted, reject → rejected, review → stays in review

Nothing is written until a command is confirmed; an abandoned dialog simply
never calls these functions. Each confirm commits the structured record,
the formatted audit note and the stage change as one record version through
the Stage Transition Engine.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, time

from talentops.core.errors import ValidationError
from talentops.services.candidate_stage import CandidateStage
from talentops.services.candidate_types import (
    AuditKind,
    InterviewFeedback,
    InterviewPlatform,
    InterviewSchedule,
    Recommendation,
)
from talentops.services.contact_validation import normalize_email
from talentops.services.transition_engine import TransitionEngine, TransitionResult

logger = logging.getLogger(__name__)

_MIN_RATING = 1
_MAX_RATING = 5
_UNSET_RATING = 0

_RECOMMENDATION_STAGES: dict[Recommendation, CandidateStage] = {
    Recommendation.ACCEPT: CandidateStage.ACCEPTED,
    Recommendation.REJECT: CandidateStage.REJECTED,
    Recommendation.REVIEW: CandidateStage.REVIEW,
}


# =============================================================================
# Commands
# =============================================================================


@dataclass(frozen=True)
class ScheduleInterviewCommand:
    """Fields collected by the schedule dialog."""

    interview_date: date | None
    interview_time: time | None
    meeting_link: str
    platform: InterviewPlatform | str
    interviewer_name: str
    interviewer_email: str | None = None
    preparation_notes: str = ""


@dataclass(frozen=True)
class SubmitFeedbackCommand:
    """Fields collected by the feedback dialog.

    Optional ratings default to 0 (not rated).
    """

    overall_rating: int
    recommendation: Recommendation | str
    technical_rating: int = _UNSET_RATING
    communication_rating: int = _UNSET_RATING
    cultural_fit_rating: int = _UNSET_RATING
    strengths: str = ""
    weaknesses: str = ""
    additional_notes: str = ""
    interviewer_name: str | None = None
    interview_date: date | None = None


# =============================================================================
# Mapping & Formatting
# =============================================================================


def map_recommendation_to_stage(recommendation: Recommendation) -> CandidateStage:
    """Stage a feedback recommendation moves the candidate to."""
    return _RECOMMENDATION_STAGES[recommendation]


def format_schedule_note(schedule: InterviewSchedule) -> str:
    """Render the audit note recorded when an interview is scheduled."""
    lines = [
        "Interview Scheduled",
        f"Date: {schedule.interview_date.isoformat()}",
        f"Time: {schedule.interview_time.strftime('%H:%M')}",
        f"Platform: {schedule.platform.label}",
        f"Meeting Link: {schedule.meeting_link}",
        f"Interviewer: {schedule.interviewer_name}",
    ]
    if schedule.interviewer_email:
        lines.append(f"Interviewer Email: {schedule.interviewer_email}")
    if schedule.preparation_notes:
        lines.append("Preparation Notes:")
        lines.append(schedule.preparation_notes)
    return "\n".join(lines)


def _format_rating(value: int) -> str:
    return f"{value}/5" if value else "not rated"


def format_feedback_note(feedback: InterviewFeedback) -> str:
    """Render the audit note recorded when feedback is submitted."""
    header = "Interview Feedback"
    if feedback.interview_date is not None:
        header = f"{header} ({feedback.interview_date.isoformat()})"
    lines = [header]
    if feedback.interviewer_name:
        lines.append(f"Interviewer: {feedback.interviewer_name}")
    lines.extend(
        [
            "Ratings:",
            f"- Technical Skills: {_format_rating(feedback.technical_rating)}",
            f"- Communication: {_format_rating(feedback.communication_rating)}",
            f"- Cultural Fit: {_format_rating(feedback.cultural_fit_rating)}",
            f"- Overall: {_format_rating(feedback.overall_rating)}",
            f"Strengths: {feedback.strengths or 'N/A'}",
            f"Areas for Improvement: {feedback.weaknesses or 'N/A'}",
            f"Recommendation: {feedback.recommendation.value.upper()}",
        ]
    )
    if feedback.additional_notes:
        lines.append("Additional Notes:")
        lines.append(feedback.additional_notes)
    return "\n".join(lines)


# =============================================================================
# Validation
# =============================================================================


def _missing(field_name: str) -> dict:
    return {"field": field_name, "msg": "is required"}


def build_schedule(command: ScheduleInterviewCommand) -> InterviewSchedule:
    """Validate a schedule command and build the InterviewSchedule.

    Raises:
        ValidationError: Listing every missing or malformed field.
    """
    errors: list[dict] = []
    if command.interview_date is None:
        errors.append(_missing("interview_date"))
    if command.interview_time is None:
        errors.append(_missing("interview_time"))
    meeting_link = (command.meeting_link or "").strip()
    if not meeting_link:
        errors.append(_missing("meeting_link"))
    interviewer_name = (command.interviewer_name or "").strip()
    if not interviewer_name:
        errors.append(_missing("interviewer_name"))

    platform: InterviewPlatform | None = None
    try:
        platform = InterviewPlatform(command.platform)
    except ValueError:
        errors.append(
            {
                "field": "platform",
                "msg": f"must be one of {[p.value for p in InterviewPlatform]}",
            }
        )

    interviewer_email: str | None = None
    if command.interviewer_email and command.interviewer_email.strip():
        interviewer_email = normalize_email(command.interviewer_email)
        if interviewer_email is None:
            errors.append({"field": "interviewer_email", "msg": "invalid email"})

    if errors:
        raise ValidationError("Interview schedule is incomplete", details=errors)

    # Narrowed by the checks above
    assert command.interview_date is not None  # nosec B101
    assert command.interview_time is not None  # nosec B101
    assert platform is not None  # nosec B101
    return InterviewSchedule(
        interview_date=command.interview_date,
        interview_time=command.interview_time,
        meeting_link=meeting_link,
        platform=platform,
        interviewer_name=interviewer_name,
        interviewer_email=interviewer_email,
        preparation_notes=(command.preparation_notes or "").strip(),
    )


def _check_rating(
    errors: list[dict], field_name: str, value: int, *, required: bool
) -> None:
    low = _MIN_RATING if required else _UNSET_RATING
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append({"field": field_name, "msg": "must be an integer"})
    elif not low <= value <= _MAX_RATING:
        errors.append(
            {"field": field_name, "msg": f"must be between {low} and {_MAX_RATING}"}
        )


def build_feedback(command: SubmitFeedbackCommand) -> InterviewFeedback:
    """Validate a feedback command and build the InterviewFeedback.

    Raises:
        ValidationError: Listing every missing or malformed field.
    """
    errors: list[dict] = []
    _check_rating(errors, "overall_rating", command.overall_rating, required=True)
    _check_rating(
        errors, "technical_rating", command.technical_rating, required=False
    )
    _check_rating(
        errors, "communication_rating", command.communication_rating, required=False
    )
    _check_rating(
        errors, "cultural_fit_rating", command.cultural_fit_rating, required=False
    )

    recommendation: Recommendation | None = None
    try:
        recommendation = Recommendation(command.recommendation)
    except ValueError:
        errors.append(
            {
                "field": "recommendation",
                "msg": f"must be one of {[r.value for r in Recommendation]}",
            }
        )

    if errors:
        raise ValidationError("Interview feedback is incomplete", details=errors)

    assert recommendation is not None  # nosec B101
    interviewer = (command.interviewer_name or "").strip() or None
    return InterviewFeedback(
        overall_rating=command.overall_rating,
        recommendation=recommendation,
        technical_rating=command.technical_rating,
        communication_rating=command.communication_rating,
        cultural_fit_rating=command.cultural_fit_rating,
        strengths=(command.strengths or "").strip(),
        weaknesses=(command.weaknesses or "").strip(),
        additional_notes=(command.additional_notes or "").strip(),
        interviewer_name=interviewer,
        interview_date=command.interview_date,
    )


# =============================================================================
# Public API
# =============================================================================


async def schedule_interview(
    engine: TransitionEngine,
    candidate_id: uuid.UUID,
    command: ScheduleInterviewCommand,
) -> TransitionResult:
    """Confirm an interview schedule and move the candidate to review.

    Args:
        engine: Transition engine bound to the candidate source.
        candidate_id: Candidate being interviewed.
        command: Confirmed schedule dialog fields.

    Returns:
        TransitionResult with interview_schedule populated.

    Raises:
        ValidationError: Missing or malformed schedule fields.
        NotFoundError: Unknown candidate.
        InvalidStateError: Candidate is not pending.
    """
    schedule = build_schedule(command)
    result = await engine.request_transition(
        candidate_id,
        CandidateStage.REVIEW,
        format_schedule_note(schedule),
        kind=AuditKind.INTERVIEW_SCHEDULED,
        require_stage=CandidateStage.PENDING,
        changes={"interview_schedule": schedule},
    )
    logger.info(
        "Interview scheduled for candidate %s on %s via %s",
        candidate_id,
        schedule.interview_date.isoformat(),
        schedule.platform.value,
    )
    return result


async def submit_feedback(
    engine: TransitionEngine,
    candidate_id: uuid.UUID,
    command: SubmitFeedbackCommand,
) -> TransitionResult:
    """Confirm interview feedback and apply the recommendation.

    A "review" recommendation keeps the candidate in review; the feedback
    and its audit entry are still recorded, and a later submission may
    replace the feedback while the candidate remains in review.

    Args:
        engine: Transition engine bound to the candidate source.
        candidate_id: Candidate that was interviewed.
        command: Confirmed feedback dialog fields.

    Returns:
        TransitionResult with interview_feedback populated.

    Raises:
        ValidationError: Missing or malformed feedback fields.
        NotFoundError: Unknown candidate.
        InvalidStateError: Candidate is not in review.
    """
    feedback = build_feedback(command)
    target = map_recommendation_to_stage(feedback.recommendation)
    result = await engine.request_transition(
        candidate_id,
        target,
        format_feedback_note(feedback),
        kind=AuditKind.INTERVIEW_FEEDBACK,
        require_stage=CandidateStage.REVIEW,
        allow_stay=True,
        changes={"interview_feedback": feedback},
    )
    logger.info(
        "Feedback recorded for candidate %s: recommendation=%s overall=%d",
        candidate_id,
        feedback.recommendation.value,
        feedback.overall_rating,
    )
    return result

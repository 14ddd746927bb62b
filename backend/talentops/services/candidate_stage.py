"""Candidate pipeline stage machine.

Implements the onboarding stage machine:
- Pending → Review
- Review → Accepted, Rejected
- Accepted, Rejected → (terminal, no transitions)

One-way transitions only. There is no direct Pending → Accepted or
Pending → Rejected edge: a candidate has to be interviewed first.
"""

from enum import Enum

from talentops.core.errors import IllegalTransitionError

# =============================================================================
# Enums
# =============================================================================


class CandidateStage(Enum):
    """Candidate pipeline stage values.

    Values match the database check constraint in the candidates table.
    """

    PENDING = "pending"
    REVIEW = "review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    @classmethod
    def from_string(cls, value: str) -> "CandidateStage":
        """Convert a stored or submitted string to enum.

        Args:
            value: Stage string (case-insensitive, surrounding whitespace ignored).

        Returns:
            The corresponding CandidateStage enum value.

        Raises:
            ValueError: If the string doesn't match any stage.
        """
        normalized = value.strip().lower() if isinstance(value, str) else value
        for stage in cls:
            if stage.value == normalized:
                return stage
        valid = [s.value for s in cls]
        raise ValueError(f"Invalid candidate stage: '{value}'. Valid: {valid}")


# =============================================================================
# State Machine Definition
# =============================================================================


_VALID_TRANSITIONS: dict[CandidateStage, list[CandidateStage]] = {
    CandidateStage.PENDING: [
        CandidateStage.REVIEW,
    ],
    CandidateStage.REVIEW: [
        CandidateStage.ACCEPTED,
        CandidateStage.REJECTED,
    ],
    CandidateStage.ACCEPTED: [],  # Terminal stage
    CandidateStage.REJECTED: [],  # Terminal stage
}

# Board column order used by the console
STAGE_ORDER: tuple[CandidateStage, ...] = (
    CandidateStage.PENDING,
    CandidateStage.REVIEW,
    CandidateStage.ACCEPTED,
    CandidateStage.REJECTED,
)


# =============================================================================
# Public Functions
# =============================================================================


def is_valid_transition(
    current: CandidateStage,
    target: CandidateStage,
) -> bool:
    """Check if a stage transition is valid.

    Args:
        current: The candidate's current stage.
        target: The desired target stage.

    Returns:
        True if the transition is a legal edge, False otherwise. Staying in
        the same stage is never a legal edge.
    """
    return target in _VALID_TRANSITIONS.get(current, [])


def get_valid_transitions(stage: CandidateStage) -> list[CandidateStage]:
    """Get valid target stages from the given stage.

    Args:
        stage: The current stage.

    Returns:
        List of stages that can be transitioned to (copy).
    """
    return list(_VALID_TRANSITIONS.get(stage, []))


def is_terminal(stage: CandidateStage) -> bool:
    """Check whether a stage has no outgoing edges."""
    return not _VALID_TRANSITIONS.get(stage)


def ensure_transition(current: CandidateStage, target: CandidateStage) -> None:
    """Raise if target is not reachable from current by a legal edge.

    Args:
        current: The candidate's current stage.
        target: The desired target stage.

    Raises:
        IllegalTransitionError: If the transition is not allowed.
    """
    if not is_valid_transition(current, target):
        raise IllegalTransitionError(
            current_stage=current.value,
            target_stage=target.value,
            valid_targets=[s.value for s in get_valid_transitions(current)],
        )


# =============================================================================
# Suggested Notes
# =============================================================================


def suggest_stage_note(target: CandidateStage, candidate_name: str) -> str:
    """Build a default rationale for a manual stage change.

    The console pre-fills the stage-change dialog with this text; operators
    edit it before confirming.

    Args:
        target: Stage the candidate is being moved to.
        candidate_name: Display name of the candidate.

    Returns:
        Suggested audit note text.
    """
    name = candidate_name.strip() or "The candidate"
    if target == CandidateStage.REVIEW:
        return (
            f"{name} has passed initial screening. Resume shows relevant "
            "experience and skills. Recommended for technical interview to "
            "assess practical knowledge and cultural fit."
        )
    if target == CandidateStage.ACCEPTED:
        return (
            f"{name} successfully completed all interview rounds. Strong "
            "technical skills, good communication, and aligns well with "
            "company culture. Recommended for onboarding."
        )
    if target == CandidateStage.REJECTED:
        return (
            f"{name} does not meet the current requirements for this role. "
            "Profile kept on file for future openings."
        )
    return f"Stage changed to {target.value} for {name}."

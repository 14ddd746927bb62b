"""Pipeline board grouping and headline counts."""

from collections.abc import Iterable
from dataclasses import dataclass

from talentops.services.candidate_stage import STAGE_ORDER, CandidateStage
from talentops.services.candidate_types import CandidateRecord


@dataclass(frozen=True)
class PipelineSummary:
    """Counts shown on the onboarding dashboard.

    Attributes:
        total: Number of candidates.
        by_stage: Count per stage; every stage is present.
        activated: Accepted candidates with an account.
        awaiting_activation: Accepted candidates without an account.
    """

    total: int
    by_stage: dict[CandidateStage, int]
    activated: int
    awaiting_activation: int

    def to_dict(self) -> dict:
        """Serialize for JSON responses."""
        return {
            "total": self.total,
            "by_stage": {stage.value: n for stage, n in self.by_stage.items()},
            "activated": self.activated,
            "awaiting_activation": self.awaiting_activation,
        }


def group_by_stage(
    candidates: Iterable[CandidateRecord],
) -> dict[CandidateStage, list[CandidateRecord]]:
    """Group candidates into board columns, keeping input order.

    Every stage key is present, possibly with an empty list.
    """
    columns: dict[CandidateStage, list[CandidateRecord]] = {
        stage: [] for stage in STAGE_ORDER
    }
    for candidate in candidates:
        columns[candidate.stage].append(candidate)
    return columns


def summarize_pipeline(candidates: Iterable[CandidateRecord]) -> PipelineSummary:
    """Compute dashboard counts for a candidate snapshot."""
    columns = group_by_stage(candidates)
    accepted = columns[CandidateStage.ACCEPTED]
    activated = sum(1 for c in accepted if c.is_activated)
    return PipelineSummary(
        total=sum(len(members) for members in columns.values()),
        by_stage={stage: len(members) for stage, members in columns.items()},
        activated=activated,
        awaiting_activation=len(accepted) - activated,
    )

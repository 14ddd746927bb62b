"""Skills-gap analysis over the employee population.

Pure and deterministic: counts how many employees hold each skill tag,
keeps the most common tags and compares availability with a target that
carries a fixed 30% buffer.

Algorithm:
1. Count each tag once per employee.
2. Rank by count descending; ties keep first-encounter order.
3. Keep the top MAX_SKILLS tags.
4. required = ceil(available * 1.3), computed in exact decimal arithmetic.
5. gap = max(0, required - available).
6. priority: high if gap >= 2, medium if gap == 1, else low.

No employees, or employees without any tags, yield NoSkillData instead of
an empty list so callers can tell "no data" apart from "no gaps".
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Protocol

# =============================================================================
# Policy Constants
# =============================================================================

REQUIRED_BUFFER = Decimal("1.3")
MAX_SKILLS = 10
HIGH_PRIORITY_GAP = 2
MEDIUM_PRIORITY_GAP = 1


class GapPriority(Enum):
    """How urgently a skill gap should be addressed."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class HasSkills(Protocol):
    """Anything exposing a skill tag collection (e.g. CandidateRecord)."""

    @property
    def skills(self) -> Iterable[str]: ...


@dataclass(frozen=True)
class SkillGapEntry:
    """Availability versus target for one skill.

    Attributes:
        skill: Skill tag.
        available: Number of employees holding the skill.
        required: Target headcount including the buffer.
        gap: Shortfall, never negative.
        priority: Derived from gap.
    """

    skill: str
    available: int
    required: int
    gap: int
    priority: GapPriority

    def to_dict(self) -> dict[str, int | str]:
        """Serialize for JSON responses."""
        return {
            "skill": self.skill,
            "available": self.available,
            "required": self.required,
            "gap": self.gap,
            "priority": self.priority.value,
        }


@dataclass(frozen=True)
class NoSkillData:
    """Sentinel returned when there is nothing to analyze.

    Attributes:
        reason: "no_employees" or "no_skills".
    """

    reason: str


NO_EMPLOYEES = "no_employees"
NO_SKILLS = "no_skills"


def required_headcount(available: int) -> int:
    """Target headcount for a skill: ceil(available * 1.3)."""
    return math.ceil(available * REQUIRED_BUFFER)


def classify_gap(gap: int) -> GapPriority:
    """Priority for a gap size."""
    if gap >= HIGH_PRIORITY_GAP:
        return GapPriority.HIGH
    if gap == MEDIUM_PRIORITY_GAP:
        return GapPriority.MEDIUM
    return GapPriority.LOW


def analyze_skill_gaps(
    employees: Iterable[HasSkills],
) -> tuple[SkillGapEntry, ...] | NoSkillData:
    """Rank the most common skills and compute their gaps.

    Args:
        employees: Employee records exposing ``skills``.

    Returns:
        Up to MAX_SKILLS entries ordered by availability, or NoSkillData.
    """
    # dict preserves first-encounter order for the stable tie-break
    counts: dict[str, int] = {}
    employee_count = 0
    for employee in employees:
        employee_count += 1
        for tag in dict.fromkeys(employee.skills):
            counts[tag] = counts.get(tag, 0) + 1

    if employee_count == 0:
        return NoSkillData(reason=NO_EMPLOYEES)
    if not counts:
        return NoSkillData(reason=NO_SKILLS)

    ranked = sorted(counts.items(), key=lambda item: -item[1])[:MAX_SKILLS]
    entries = []
    for skill, available in ranked:
        required = required_headcount(available)
        gap = max(0, required - available)
        entries.append(
            SkillGapEntry(
                skill=skill,
                available=available,
                required=required,
                gap=gap,
                priority=classify_gap(gap),
            )
        )
    return tuple(entries)


@dataclass(frozen=True)
class SkillsGapSummary:
    """Headline numbers for the skills-gap view.

    Attributes:
        total_employees: Size of the whole candidate population.
        accepted_employees: Number of employees that were analyzed.
        entries: Ranked gap entries (empty when there was no data).
        no_data_reason: Set when analysis returned NoSkillData.
        total_gap: Sum of gaps across entries.
        critical_gaps: Entries with high priority.
        fulfilled: Entries with no gap.
    """

    total_employees: int
    accepted_employees: int
    entries: tuple[SkillGapEntry, ...]
    no_data_reason: str | None
    total_gap: int
    critical_gaps: int
    fulfilled: int

    @property
    def has_data(self) -> bool:
        return self.no_data_reason is None


def summarize_skill_gaps(
    result: tuple[SkillGapEntry, ...] | NoSkillData,
    total_employees: int,
    accepted_employees: int,
) -> SkillsGapSummary:
    """Aggregate an analysis result for reporting."""
    if isinstance(result, NoSkillData):
        return SkillsGapSummary(
            total_employees=total_employees,
            accepted_employees=accepted_employees,
            entries=(),
            no_data_reason=result.reason,
            total_gap=0,
            critical_gaps=0,
            fulfilled=0,
        )
    return SkillsGapSummary(
        total_employees=total_employees,
        accepted_employees=accepted_employees,
        entries=result,
        no_data_reason=None,
        total_gap=sum(entry.gap for entry in result),
        critical_gaps=sum(1 for e in result if e.priority == GapPriority.HIGH),
        fulfilled=sum(1 for e in result if e.gap == 0),
    )

"""Candidate intake: merge operator input with extracted profile data.

This is the only place profile defaults are applied. Rules:
- Operator-supplied form fields win over extracted fields.
- Name falls back to the local part of the email.
- Department falls back to the first extracted sector.
- Skills are trimmed, empties dropped, duplicates removed in first-seen
  order. Form skills come first, then extracted ones.
- Email is required after merging and must be valid.
- Phone is optional; when present it must be a valid NANP number and is
  normalized to "(NNN) NNN-NNNN".

New candidates always start in pending with version 1 and an empty audit
trail.
"""

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from talentops.core.errors import UpstreamError, ValidationError
from talentops.providers.config import ProviderConfig
from talentops.providers.errors import ProviderError
from talentops.providers.extraction.base import ExtractionProvider, ProfileExtraction
from talentops.providers.retry import with_retries
from talentops.repositories.candidate_source import CandidateSource
from talentops.services.candidate_stage import CandidateStage
from talentops.services.candidate_types import CandidateRecord, ContactInfo
from talentops.services.contact_validation import normalize_email, normalize_phone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntakeForm:
    """Fields typed by the operator in the add-candidate dialog."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    department: str | None = None
    location: str | None = None
    experience: str | None = None
    skills: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CandidateIntake:
    """Validated, defaulted profile ready to become a CandidateRecord."""

    name: str
    email: str
    phone: str | None
    title: str | None
    department: str | None
    location: str | None
    experience: str | None
    skills: tuple[str, ...]


def normalize_skills(*groups: Iterable[str] | str | None) -> tuple[str, ...]:
    """Merge skill tag groups into one ordered, de-duplicated tuple.

    Args:
        *groups: Iterables of tags, or comma-separated strings.

    Returns:
        Trimmed, non-empty, distinct tags in first-seen order.
    """
    tags: dict[str, None] = {}
    for group in groups:
        if not group:
            continue
        items = group.split(",") if isinstance(group, str) else group
        for item in items:
            if isinstance(item, str) and item.strip():
                tags.setdefault(item.strip(), None)
    return tuple(tags)


def _pick(*values: str | None) -> str | None:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def build_intake(
    form: IntakeForm | None = None,
    extraction: ProfileExtraction | None = None,
) -> CandidateIntake:
    """Merge form fields with an extraction and apply defaults.

    Form values win over extracted ones. Experience text falls back to
    "<N> years" when only a numeric years value was extracted.

    Args:
        form: Operator-supplied fields.
        extraction: Oracle output, possibly empty.

    Returns:
        CandidateIntake with every default applied.

    Raises:
        ValidationError: Missing or invalid email, or invalid phone.
    """
    form = form or IntakeForm()
    extraction = extraction or ProfileExtraction()
    errors: list[dict] = []

    raw_email = _pick(form.email, extraction.email)
    email = normalize_email(raw_email) if raw_email else None
    if raw_email is None:
        errors.append({"field": "email", "msg": "is required"})
    elif email is None:
        errors.append({"field": "email", "msg": "invalid email"})

    raw_phone = _pick(form.phone, extraction.phone)
    phone = normalize_phone(raw_phone) if raw_phone else None
    if raw_phone is not None and phone is None:
        errors.append(
            {"field": "phone", "msg": "must be a 10-digit number like (555) 234-5678"}
        )

    if errors:
        raise ValidationError("Candidate details are invalid", details=errors)

    assert email is not None  # nosec B101
    first_sector = extraction.sectors[0] if extraction.sectors else None
    years_text = (
        f"{extraction.experience_years} years"
        if extraction.experience_years is not None
        else None
    )
    return CandidateIntake(
        name=_pick(form.name, extraction.name) or email.split("@", 1)[0],
        email=email,
        phone=phone,
        title=_pick(form.title, extraction.title),
        department=_pick(form.department, first_sector),
        location=_pick(form.location, extraction.location),
        experience=_pick(form.experience, extraction.experience, years_text),
        skills=normalize_skills(form.skills, extraction.skills),
    )


async def create_candidate(
    source: CandidateSource,
    intake: CandidateIntake,
) -> CandidateRecord:
    """Store a new pending candidate.

    Raises:
        ConflictError: Duplicate email.
        PersistError: The store could not be written.
    """
    record = CandidateRecord(
        id=uuid.uuid4(),
        stage=CandidateStage.PENDING,
        contact=ContactInfo(name=intake.name, email=intake.email, phone=intake.phone),
        title=intake.title,
        department=intake.department,
        location=intake.location,
        experience=intake.experience,
        skills=intake.skills,
        created_at=datetime.now(UTC),
    )
    await source.add_candidate(record)
    logger.info("Candidate %s created (%d skills)", record.id, len(record.skills))
    return record


async def intake_from_source(
    extractor: ExtractionProvider,
    source_ref: str,
    form: IntakeForm | None = None,
    config: ProviderConfig | None = None,
) -> CandidateIntake:
    """Run the extraction oracle and merge its output with form fields.

    An empty extraction is not an error; the form must then supply the email.

    Args:
        extractor: Extraction collaborator.
        source_ref: Opaque reference to the uploaded document.
        form: Operator-supplied fields.
        config: Retry policy. Defaults to ProviderConfig().

    Returns:
        CandidateIntake.

    Raises:
        UpstreamError: The oracle failed (EXTRACTION_FAILED).
        ValidationError: Email missing after merging, or invalid contact data.
    """
    try:
        extraction = await with_retries(
            lambda: extractor.extract(source_ref),
            config if config is not None else ProviderConfig(),
        )
    except ProviderError as e:
        logger.error("Extraction failed for %s: %s", source_ref, e)
        raise UpstreamError(
            "EXTRACTION_FAILED",
            "Could not read the profile document. Enter the details manually.",
        ) from e

    if extraction.is_empty:
        logger.info("Extraction returned no fields for %s", source_ref)
    return build_intake(form, extraction)

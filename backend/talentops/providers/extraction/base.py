"""Abstract base class and types for profile extraction providers.

The extraction oracle turns a CV or profile document into structured
fields. Its internals are a black box; every field may be missing, and raw
payloads are coerced leniently by coerce_extraction().
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from talentops.providers.config import ProviderConfig

_TEXT_FIELDS = ("name", "email", "phone", "title", "location", "experience")
_LIST_FIELDS = ("skills", "sectors")
# Oracles disagree on the key for years of experience
_YEARS_KEYS = ("experience_years", "experienceYears", "total_experience_years")


@dataclass(frozen=True)
class ProfileExtraction:
    """Structured fields read from a profile document. All optional."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    location: str | None = None
    experience: str | None = None
    experience_years: int | None = None
    skills: tuple[str, ...] = ()
    sectors: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        """Whether the oracle returned nothing usable."""
        if self.experience_years is not None:
            return False
        return not any(getattr(self, name) for name in _TEXT_FIELDS + _LIST_FIELDS)


def _coerce_years(raw: dict[str, Any]) -> int | None:
    """First non-negative whole number of years under any known key.

    Floats are truncated; numeric strings such as "7" are accepted. Booleans
    are not numbers here.
    """
    for key in _YEARS_KEYS:
        value = raw.get(key)
        if isinstance(value, bool) or value is None:
            continue
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                continue
        if isinstance(value, int | float) and math.isfinite(value) and value >= 0:
            return int(value)
    return None


def coerce_extraction(raw: Any) -> ProfileExtraction:
    """Build a ProfileExtraction from an untrusted payload.

    Non-dict payloads yield an empty extraction. Text fields that are not
    non-blank strings are dropped; list fields keep only string items.
    Oracles that return "skills" as one comma-separated string are accepted.
    Years of experience may arrive as experienceYears or
    total_experience_years; negative or non-numeric values are dropped.

    Args:
        raw: Decoded JSON from the oracle.

    Returns:
        ProfileExtraction with only well-typed fields set.
    """
    if not isinstance(raw, dict):
        return ProfileExtraction()

    values: dict[str, Any] = {}
    for name in _TEXT_FIELDS:
        value = raw.get(name)
        if isinstance(value, str) and value.strip():
            values[name] = value.strip()

    for name in _LIST_FIELDS:
        value = raw.get(name)
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list | tuple):
            items = tuple(
                item.strip() for item in value if isinstance(item, str) and item.strip()
            )
            if items:
                values[name] = items

    years = _coerce_years(raw)
    if years is not None:
        values["experience_years"] = years

    return ProfileExtraction(**values)


class ExtractionProvider(ABC):
    """Reads structured profile fields from a document reference."""

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration including endpoint and API key.
        """
        self.config = config

    @abstractmethod
    async def extract(self, source_ref: str) -> ProfileExtraction:
        """Extract profile fields.

        Args:
            source_ref: Opaque reference to the uploaded document.

        Returns:
            ProfileExtraction, possibly empty.

        Raises:
            ProviderError: If the oracle fails.
        """
        ...

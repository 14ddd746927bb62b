"""Candidate data source interface.

The onboarding core reads and writes candidate records only through this
interface. Adapters:
- InMemoryCandidateSource: dict-backed, for tests and local demos
- CandidateRepository: SQLAlchemy/PostgreSQL
"""

import uuid
from abc import ABC, abstractmethod

from talentops.services.candidate_types import CandidateRecord


class CandidateSource(ABC):
    """Abstract store of candidate records.

    persist() implements optimistic concurrency: a record with version N is
    only accepted when the stored record is at version N - 1.
    """

    @abstractmethod
    async def fetch_candidates(self) -> list[CandidateRecord]:
        """Return a consistent snapshot of all candidates, oldest first.

        Raises:
            PersistError: If the store cannot be read.
        """
        ...

    @abstractmethod
    async def get_candidate(self, candidate_id: uuid.UUID) -> CandidateRecord | None:
        """Fetch one candidate.

        Args:
            candidate_id: Candidate identifier.

        Returns:
            The record, or None if it does not exist.

        Raises:
            PersistError: If the store cannot be read.
        """
        ...

    @abstractmethod
    async def add_candidate(self, record: CandidateRecord) -> None:
        """Store a newly created candidate (version 1).

        Args:
            record: Record to insert.

        Raises:
            ConflictError: If a candidate with the same id or email exists.
            PersistError: If the store cannot be written.
        """
        ...

    @abstractmethod
    async def persist(self, record: CandidateRecord) -> None:
        """Replace the stored record with its next version.

        Args:
            record: New version of an existing record.

        Raises:
            NotFoundError: If the candidate does not exist.
            StaleRecordError: If the stored version is not record.version - 1.
            PersistError: If the store cannot be written.
        """
        ...

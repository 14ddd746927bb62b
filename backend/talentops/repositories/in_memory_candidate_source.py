"""Dict-backed candidate source.

Used by unit tests and by the API when CANDIDATE_STORE=memory. Records are
immutable, so storing and returning the same objects is safe.
"""

import uuid

from talentops.core.errors import ConflictError, NotFoundError, StaleRecordError
from talentops.repositories.candidate_source import CandidateSource
from talentops.services.candidate_types import CandidateRecord


class InMemoryCandidateSource(CandidateSource):
    """Candidate source holding records in insertion order.

    Attributes:
        persist_calls: Number of successful persist() calls, for assertions.
    """

    def __init__(self, records: list[CandidateRecord] | None = None) -> None:
        self._records: dict[uuid.UUID, CandidateRecord] = {}
        self.persist_calls = 0
        for record in records or []:
            self._records[record.id] = record

    async def fetch_candidates(self) -> list[CandidateRecord]:
        return list(self._records.values())

    async def get_candidate(self, candidate_id: uuid.UUID) -> CandidateRecord | None:
        return self._records.get(candidate_id)

    async def add_candidate(self, record: CandidateRecord) -> None:
        if record.id in self._records:
            raise ConflictError(
                "DUPLICATE_CANDIDATE",
                f"Candidate with id '{record.id}' already exists.",
            )
        email = record.contact.email
        if any(r.contact.email == email for r in self._records.values()):
            raise ConflictError(
                "DUPLICATE_EMAIL",
                f"Candidate with email '{email}' already exists.",
            )
        self._records[record.id] = record

    async def persist(self, record: CandidateRecord) -> None:
        stored = self._records.get(record.id)
        if stored is None:
            raise NotFoundError("Candidate", str(record.id))
        if stored.version != record.version - 1:
            raise StaleRecordError(str(record.id))
        self._records[record.id] = record
        self.persist_calls += 1

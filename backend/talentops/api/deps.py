"""Shared dependencies for API endpoints.

Routers depend on these aliases rather than on concrete classes, so tests
swap the candidate store and collaborators through app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from talentops.core.config import settings
from talentops.core.database import get_db
from talentops.providers.config import ProviderConfig
from talentops.providers.extraction.base import ExtractionProvider
from talentops.providers.factory import (
    get_extraction_provider,
    get_identity_provider,
    get_notification_provider,
    get_provider_config,
)
from talentops.providers.identity.base import IdentityProvider
from talentops.providers.notification.base import NotificationProvider
from talentops.repositories.candidate_repository import CandidateRepository
from talentops.repositories.candidate_source import CandidateSource
from talentops.repositories.in_memory_candidate_source import InMemoryCandidateSource
from talentops.services.record_locks import RecordLocks, get_record_locks
from talentops.services.transition_engine import TransitionEngine

DbSession = Annotated[AsyncSession, Depends(get_db)]

_memory_source: InMemoryCandidateSource | None = None


def get_memory_candidate_source() -> InMemoryCandidateSource:
    """Get or create the process-wide in-memory store (CANDIDATE_STORE=memory)."""
    global _memory_source

    if _memory_source is None:
        _memory_source = InMemoryCandidateSource()
    return _memory_source


def reset_memory_candidate_source() -> None:
    """Drop the in-memory store. Used in tests."""
    global _memory_source
    _memory_source = None


def get_candidate_source(db: DbSession) -> CandidateSource:
    """Candidate store selected by settings.candidate_store.

    The session is only used by the postgres store; an unused session never
    opens a connection.
    """
    if settings.candidate_store == "memory":
        return get_memory_candidate_source()
    return CandidateRepository(db)


Source = Annotated[CandidateSource, Depends(get_candidate_source)]
Locks = Annotated[RecordLocks, Depends(get_record_locks)]


def get_transition_engine(source: Source, locks: Locks) -> TransitionEngine:
    """Transition engine bound to the request's candidate store."""
    return TransitionEngine(source, locks)


Engine = Annotated[TransitionEngine, Depends(get_transition_engine)]
Providers = Annotated[ProviderConfig, Depends(get_provider_config)]


def get_identity(config: Providers) -> IdentityProvider:
    return get_identity_provider(config)


def get_notifier(config: Providers) -> NotificationProvider:
    return get_notification_provider(config)


def get_extractor(config: Providers) -> ExtractionProvider:
    return get_extraction_provider(config)


Identity = Annotated[IdentityProvider, Depends(get_identity)]
Notifier = Annotated[NotificationProvider, Depends(get_notifier)]
Extractor = Annotated[ExtractionProvider, Depends(get_extractor)]

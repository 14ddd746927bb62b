import socket
import uuid
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from talentops.core.config import settings
from talentops.models.base import Base
from talentops.providers import factory
from talentops.providers.config import ProviderConfig
from talentops.providers.extraction.mock_adapter import MockExtractionProvider
from talentops.providers.identity.mock_adapter import MockIdentityProvider
from talentops.providers.notification.mock_adapter import MockNotificationProvider
from talentops.repositories.in_memory_candidate_source import InMemoryCandidateSource
from talentops.services.candidate_stage import CandidateStage
from talentops.services.candidate_types import CandidateRecord, ContactInfo
from talentops.services.record_locks import RecordLocks
from talentops.services.transition_engine import TransitionEngine

# Same server, separate database
TEST_DATABASE_URL = (
    f"{settings.database_url.rsplit('/', 1)[0]}/{settings.database_name}_test"
)

# Consistent ids for predictable assertions
CANDIDATE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
SECOND_CANDIDATE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c2")

TEST_SECRET = "Xk7#mPq9$Lw2"  # nosec B105  # gitleaks:allow


def make_candidate(
    stage: CandidateStage = CandidateStage.PENDING,
    *,
    candidate_id: uuid.UUID | None = None,
    name: str = "Ada Lovelace",
    email: str | None = None,
    skills: tuple[str, ...] = (),
    account_link: str | None = None,
    **overrides,
) -> CandidateRecord:
    """Build a CandidateRecord with sensible defaults.

    Args:
        stage: Pipeline stage.
        candidate_id: Fixed id; random when omitted.
        name: Contact name.
        email: Contact email; derived from the id when omitted.
        skills: Skill tags.
        account_link: Provisioned login id (accepted candidates only).
        **overrides: Any other CandidateRecord field.

    Returns:
        CandidateRecord at version 1 unless overridden.
    """
    candidate_id = candidate_id or uuid.uuid4()
    return CandidateRecord(
        id=candidate_id,
        stage=stage,
        contact=ContactInfo(
            name=name,
            email=email or f"{candidate_id.hex[:8]}@example.com",
        ),
        skills=skills,
        account_link=account_link,
        created_at=overrides.pop("created_at", datetime(2026, 1, 5, tzinfo=UTC)),
        **overrides,
    )


def _postgres_reachable() -> bool:
    """Check the configured database host and port with a plain TCP connect."""
    try:
        with socket.create_connection(
            (settings.database_host, settings.database_port), timeout=1
        ):
            return True
    except OSError:
        return False


_POSTGRES_AVAILABLE = _postgres_reachable()


def skip_if_no_postgres() -> None:
    """Skip the calling test when the database is down."""
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            f"PostgreSQL not reachable at {settings.database_host}:"
            f"{settings.database_port}; repository tests need a live database"
        )


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Engine on the _test database with the candidate tables created."""
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Session on the _test database. Repository writes commit; db_engine
    drops the tables after each test."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def locks() -> RecordLocks:
    """Fresh lock registry, isolated from the process-wide one."""
    return RecordLocks()


@pytest.fixture
def memory_source() -> InMemoryCandidateSource:
    """Empty in-memory candidate store."""
    return InMemoryCandidateSource()


@pytest.fixture
def engine(memory_source, locks) -> TransitionEngine:
    """Transition engine over the in-memory store."""
    return TransitionEngine(memory_source, locks)


@pytest.fixture
def fast_retry_config() -> ProviderConfig:
    """Provider config with millisecond backoff."""
    return ProviderConfig(
        max_retries=2,
        retry_base_delay_ms=1,
        retry_max_delay_ms=5,
    )


# =============================================================================
# Provider Fixtures
# =============================================================================


@pytest.fixture
def mock_identity() -> Iterator[MockIdentityProvider]:
    """Mock identity provider injected into the factory singleton."""
    mock = MockIdentityProvider()
    factory._identity_provider = mock
    yield mock
    factory.reset_providers()


@pytest.fixture
def mock_notifier() -> Iterator[MockNotificationProvider]:
    """Mock notification provider injected into the factory singleton."""
    mock = MockNotificationProvider()
    factory._notification_provider = mock
    yield mock
    factory.reset_providers()


@pytest.fixture
def mock_extractor() -> Iterator[MockExtractionProvider]:
    """Mock extraction provider injected into the factory singleton."""
    mock = MockExtractionProvider(
        {
            "cv-ada.pdf": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "phone": "555-234-5678",
                "title": "Analyst",
                "skills": ["Python", "SQL", "Python"],
                "sectors": ["Engineering"],
            }
        }
    )
    factory._extraction_provider = mock
    yield mock
    factory.reset_providers()


# =============================================================================
# API Test Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def api_client(
    memory_source,
    locks,
    fast_retry_config,
    mock_identity,  # noqa: ARG001 - injected into factory
    mock_notifier,  # noqa: ARG001 - injected into factory
    mock_extractor,  # noqa: ARG001 - injected into factory
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the in-memory store and mock providers."""
    from talentops.api.deps import get_candidate_source
    from talentops.main import create_app
    from talentops.providers.factory import get_provider_config
    from talentops.services.record_locks import get_record_locks

    app = create_app()
    app.dependency_overrides[get_candidate_source] = lambda: memory_source
    app.dependency_overrides[get_record_locks] = lambda: locks
    app.dependency_overrides[get_provider_config] = lambda: fast_retry_config

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

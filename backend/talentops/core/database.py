"""Candidate store connection handling (CANDIDATE_STORE=postgres).

The engine is built on first use, so the in-memory store never touches
asyncpg. Sessions handed out by get_db do not commit: CandidateRepository
commits each write itself while the caller still holds the record lock,
which keeps a queued writer from reading the pre-commit snapshot.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from talentops.core.config import settings

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the process-wide engine for settings.database_url."""
    global _engine

    if _engine is None:
        _engine = create_async_engine(
            settings.database_url,
            echo=settings.environment == "development",
            pool_pre_ping=True,
        )
        logger.info(
            "Candidate store engine created for %s:%s/%s",
            settings.database_host,
            settings.database_port,
            settings.database_name,
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to get_engine().

    expire_on_commit is off because records are rebuilt from rows after a
    per-write commit.
    """
    global _session_factory

    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine. Called on shutdown."""
    global _engine, _session_factory

    if _engine is not None:
        await _engine.dispose()
        logger.info("Candidate store engine disposed")
    _engine = None
    _session_factory = None


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a session for one request.

    Anything left uncommitted when the request fails is rolled back.
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

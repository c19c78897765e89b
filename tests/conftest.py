"""Pytest configuration and fixtures for subcompliance.

Unit tests run against in-memory repositories (fakes.py). Repository and
HTTP tests use an in-memory SQLite database (aiosqlite) created from the
ORM metadata; the API's session dependencies and the session factory used
by the reminder tick are overridden to use it.
"""

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fakes import FIXED_NOW, FakeComplianceCache, InMemoryEngine, MutableClock
from subcompliance.application.context import ComplianceContext
from subcompliance.application.services.document_catalog import default_catalog
from subcompliance.application.services.reminder_policy import FixedIntervalPolicy
from subcompliance.infrastructure.persistence import models  # noqa: F401
from subcompliance.infrastructure.persistence.database import (
    Base,
    get_db,
    get_db_transactional,
    get_session_factory,
)
from subcompliance.main import app


@pytest.fixture
def clock() -> MutableClock:
    """Clock fixed at FIXED_NOW; tests may advance it."""
    return MutableClock(FIXED_NOW)


@pytest.fixture
def context(clock: MutableClock) -> ComplianceContext:
    """Engine context with the default catalog, 72h reminders and 3 attempts."""
    return ComplianceContext(
        catalog=default_catalog(),
        reminder_policy=FixedIntervalPolicy(timedelta(hours=72)),
        expiring_window_days=30,
        default_due_days=14,
        max_attempts=3,
        batch_size=50,
        clock=clock,
    )


@pytest.fixture
def engine(context: ComplianceContext) -> InMemoryEngine:
    """Use cases over in-memory repositories (no read cache)."""
    return InMemoryEngine(context)


@pytest.fixture
def cached_engine(context: ComplianceContext) -> InMemoryEngine:
    """Use cases over in-memory repositories with a fake read cache."""
    return InMemoryEngine(context, cache=FakeComplianceCache())


@pytest.fixture
async def session_factory():
    """Session factory over a fresh in-memory SQLite schema."""
    sql_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with sql_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(
        bind=sql_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    await sql_engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncSession:
    """Database session for repository tests. Rolls back after test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(session_factory, context: ComplianceContext) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) backed by SQLite.

    ASGITransport does not run the lifespan, so the compliance context is
    set on app.state here.
    """

    async def _get_db():
        async with session_factory() as session:
            yield session

    async def _get_db_transactional():
        async with session_factory() as session:
            async with session.begin():
                yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_db_transactional] = _get_db_transactional
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.state.compliance_context = context
    app.state.cache = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    del app.state.compliance_context

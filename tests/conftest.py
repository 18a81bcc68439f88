"""Shared pytest fixtures for the review engine test suite.

Provides:
- anyio_backend: run async tests on asyncio
- make_podcast: factory for CandidatePodcast with sensible defaults
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- client: AsyncClient with dependency overrides for DB-backed testing
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import src.db.tables  # noqa: F401 - register ORM models on Base.metadata
from src.db.session import Base, get_async_session
from src.models.catalog import CandidatePodcast, PodcastCategory


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_podcast():
    """Build CandidatePodcast objects; ``categories`` takes category ids."""

    def _make(podcast_id: str, name: str | None = None, *,
              categories: tuple[str, ...] = (), **fields) -> CandidatePodcast:
        return CandidatePodcast(
            podcast_id=podcast_id,
            podcast_name=name or f"Podcast {podcast_id}",
            podcast_categories=tuple(
                PodcastCategory(category_id=c, category_name=c.title()) for c in categories
            ),
            **fields,
        )

    return _make


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed and rolls back at teardown.
    A commit from application code releases the SAVEPOINT, which is then
    restarted so later operations stay inside the outer transaction.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


@pytest.fixture
async def client(db_session):
    """AsyncClient with get_async_session overridden to use the test session."""
    from src.api.main import app

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_async_session] = _override_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()

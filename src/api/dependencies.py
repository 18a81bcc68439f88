"""FastAPI dependency injection factories for repositories.

Each factory takes AsyncSession via Depends(get_async_session) and returns
a repository instance. API endpoints use these via Depends().
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.session import get_async_session
from src.repositories.prospects import (
    DashboardRepository,
    FeedbackRepository,
    ProspectPodcastRepository,
)

# ---------------------------------------------------------------------------
# Dashboards / catalog
# ---------------------------------------------------------------------------


async def get_dashboard_repo(
    session: AsyncSession = Depends(get_async_session),
) -> DashboardRepository:
    return DashboardRepository(session)


async def get_podcast_repo(
    session: AsyncSession = Depends(get_async_session),
) -> ProspectPodcastRepository:
    return ProspectPodcastRepository(session)


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------


async def get_feedback_repo(
    session: AsyncSession = Depends(get_async_session),
) -> FeedbackRepository:
    return FeedbackRepository(session)

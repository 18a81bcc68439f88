"""Prospect dashboard, curated catalog and feedback repositories."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.tables import PodcastFeedbackRow, ProspectDashboardRow, ProspectPodcastRow
from src.models.catalog import CandidatePodcast, Demographics, FitAnalysis
from src.models.common import FeedbackStatus, new_uuid7, utc_now


class DashboardRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, slug: str, prospect_name: str,
                     prospect_bio: str | None = None, tagline: str | None = None,
                     is_active: bool = True) -> ProspectDashboardRow:
        now = utc_now()
        row = ProspectDashboardRow(
            dashboard_id=new_uuid7(), slug=slug, prospect_name=prospect_name,
            prospect_bio=prospect_bio, tagline=tagline, is_active=is_active,
            view_count=0, last_viewed_at=None, created_at=now, updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, dashboard_id: UUID) -> ProspectDashboardRow | None:
        return await self._session.get(ProspectDashboardRow, dashboard_id)

    async def get_by_slug(self, slug: str) -> ProspectDashboardRow | None:
        result = await self._session.execute(
            select(ProspectDashboardRow).where(ProspectDashboardRow.slug == slug)
        )
        return result.scalar_one_or_none()

    async def record_view(self, row: ProspectDashboardRow) -> ProspectDashboardRow:
        now = utc_now()
        row.view_count = (row.view_count or 0) + 1
        row.last_viewed_at = now
        row.updated_at = now
        await self._session.flush()
        return row


class ProspectPodcastRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, *, dashboard_id: UUID, podcast: CandidatePodcast,
                  position: int) -> ProspectPodcastRow:
        analysis = podcast.analysis
        row = ProspectPodcastRow(
            dashboard_id=dashboard_id,
            podcast_id=podcast.podcast_id,
            position=position,
            podcast_name=podcast.podcast_name,
            podcast_description=podcast.podcast_description,
            podcast_image_url=podcast.podcast_image_url,
            podcast_url=podcast.podcast_url,
            publisher_name=podcast.publisher_name,
            itunes_rating=podcast.itunes_rating,
            episode_count=podcast.episode_count,
            audience_size=podcast.audience_size,
            last_posted_at=podcast.last_posted_at,
            podcast_categories=[c.model_dump() for c in podcast.podcast_categories],
            ai_clean_description=analysis.clean_description if analysis else None,
            ai_fit_reasons=list(analysis.fit_reasons) if analysis else None,
            ai_pitch_angles=(
                [a.model_dump() for a in analysis.pitch_angles] if analysis else None
            ),
            ai_analyzed_at=utc_now() if analysis else None,
            demographics=(
                podcast.demographics.model_dump() if podcast.demographics else None
            ),
            demographics_fetched_at=utc_now() if podcast.demographics else None,
            created_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def list_for_dashboard(self, dashboard_id: UUID) -> list[ProspectPodcastRow]:
        result = await self._session.execute(
            select(ProspectPodcastRow)
            .where(ProspectPodcastRow.dashboard_id == dashboard_id)
            .order_by(ProspectPodcastRow.position)
        )
        return list(result.scalars().all())

    async def get(self, dashboard_id: UUID, podcast_id: str) -> ProspectPodcastRow | None:
        return await self._session.get(ProspectPodcastRow, (dashboard_id, podcast_id))

    async def save_analysis(self, dashboard_id: UUID, podcast_id: str,
                            analysis: FitAnalysis) -> ProspectPodcastRow | None:
        row = await self.get(dashboard_id, podcast_id)
        if row is not None:
            row.ai_clean_description = analysis.clean_description
            row.ai_fit_reasons = list(analysis.fit_reasons)
            row.ai_pitch_angles = [a.model_dump() for a in analysis.pitch_angles]
            row.ai_analyzed_at = utc_now()
            await self._session.flush()
        return row

    async def save_demographics(self, podcast_id: str,
                                demographics: Demographics) -> int:
        """Attach demographics to every curated row for the podcast."""
        result = await self._session.execute(
            select(ProspectPodcastRow).where(ProspectPodcastRow.podcast_id == podcast_id)
        )
        rows = list(result.scalars().all())
        payload = demographics.model_dump()
        now = utc_now()
        for row in rows:
            row.demographics = payload
            row.demographics_fetched_at = now
        await self._session.flush()
        return len(rows)

    async def find_demographics(self, podcast_id: str) -> dict | None:
        result = await self._session.execute(
            select(ProspectPodcastRow).where(ProspectPodcastRow.podcast_id == podcast_id)
        )
        for row in result.scalars().all():
            if row.demographics:
                return row.demographics
        return None


class FeedbackRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, *, dashboard_id: UUID, podcast_id: str,
                     podcast_name: str | None, status: FeedbackStatus,
                     notes: str) -> PodcastFeedbackRow:
        """Insert or replace the verdict for (dashboard, podcast)."""
        now = utc_now()
        row = await self.get(dashboard_id, podcast_id)
        if row is None:
            row = PodcastFeedbackRow(
                feedback_id=new_uuid7(), dashboard_id=dashboard_id,
                podcast_id=podcast_id, podcast_name=podcast_name,
                status=status.value, notes=notes, created_at=now, updated_at=now,
            )
            try:
                async with self._session.begin_nested():
                    self._session.add(row)
                return row
            except IntegrityError:
                # A concurrent first write won the insert; update its row.
                row = await self.get(dashboard_id, podcast_id)
                if row is None:
                    raise
        row.podcast_name = podcast_name or row.podcast_name
        row.status = status.value
        row.notes = notes
        row.updated_at = now
        await self._session.flush()
        return row

    async def get(self, dashboard_id: UUID, podcast_id: str) -> PodcastFeedbackRow | None:
        result = await self._session.execute(
            select(PodcastFeedbackRow).where(
                PodcastFeedbackRow.dashboard_id == dashboard_id,
                PodcastFeedbackRow.podcast_id == podcast_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_dashboard(self, dashboard_id: UUID) -> list[PodcastFeedbackRow]:
        result = await self._session.execute(
            select(PodcastFeedbackRow)
            .where(PodcastFeedbackRow.dashboard_id == dashboard_id)
            .order_by(PodcastFeedbackRow.created_at)
        )
        return list(result.scalars().all())

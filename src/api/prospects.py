"""FastAPI prospect dashboard endpoints.

POST /v1/prospects                                          - create dashboard + catalog
GET  /v1/prospects/{slug}                                   - dashboard (counts a view)
GET  /v1/prospects/{slug}/podcasts                          - curated catalog
GET  /v1/prospects/{slug}/podcasts/{podcast_id}/analysis    - stored fit analysis
PUT  /v1/prospects/{slug}/podcasts/{podcast_id}/analysis    - store fit analysis
GET  /v1/prospects/{slug}/feedback                          - reviewer feedback
PUT  /v1/prospects/{slug}/feedback/{podcast_id}             - upsert feedback
GET  /v1/podcasts/{podcast_id}/demographics                 - stored demographics
PUT  /v1/podcasts/{podcast_id}/demographics                 - store demographics

Unknown slugs are 404; inactive dashboards are 403.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from src.api.dependencies import get_dashboard_repo, get_feedback_repo, get_podcast_repo
from src.db.tables import PodcastFeedbackRow, ProspectDashboardRow, ProspectPodcastRow
from src.engine.catalog import dedupe_podcasts
from src.models.catalog import (
    CandidatePodcast,
    Demographics,
    FitAnalysis,
    PitchAngle,
    PodcastCategory,
    ProspectDashboard,
)
from src.models.common import FeedbackStatus
from src.models.feedback import FeedbackRecord
from src.repositories.prospects import (
    DashboardRepository,
    FeedbackRepository,
    ProspectPodcastRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/prospects", tags=["prospects"])
podcasts_router = APIRouter(prefix="/v1/podcasts", tags=["podcasts"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------


class CreateDashboardRequest(BaseModel):
    slug: str = Field(..., min_length=1, max_length=255)
    prospect_name: str = Field(..., min_length=1)
    prospect_bio: str | None = None
    tagline: str | None = None
    podcasts: list[CandidatePodcast] = Field(default_factory=list)


class UpsertFeedbackRequest(BaseModel):
    podcast_name: str | None = None
    status: FeedbackStatus = FeedbackStatus.NONE
    notes: str = ""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _dashboard_row_to_model(row: ProspectDashboardRow) -> ProspectDashboard:
    return ProspectDashboard(
        dashboard_id=row.dashboard_id,
        slug=row.slug,
        prospect_name=row.prospect_name,
        prospect_bio=row.prospect_bio,
        tagline=row.tagline,
        is_active=row.is_active,
        view_count=row.view_count,
        last_viewed_at=row.last_viewed_at,
    )


def _analysis_from_row(row: ProspectPodcastRow) -> FitAnalysis | None:
    """Stored analysis, or None unless it carries at least one fit reason."""
    if not row.ai_fit_reasons:
        return None
    return FitAnalysis(
        clean_description=row.ai_clean_description or row.podcast_description or "",
        fit_reasons=tuple(row.ai_fit_reasons),
        pitch_angles=tuple(PitchAngle(**a) for a in row.ai_pitch_angles or []),
    )


def _podcast_row_to_model(row: ProspectPodcastRow) -> CandidatePodcast:
    return CandidatePodcast(
        podcast_id=row.podcast_id,
        podcast_name=row.podcast_name,
        podcast_description=row.podcast_description,
        podcast_image_url=row.podcast_image_url,
        podcast_url=row.podcast_url,
        publisher_name=row.publisher_name,
        itunes_rating=row.itunes_rating,
        episode_count=row.episode_count,
        audience_size=row.audience_size,
        last_posted_at=row.last_posted_at,
        podcast_categories=tuple(PodcastCategory(**c) for c in row.podcast_categories or []),
        analysis=_analysis_from_row(row),
        demographics=Demographics(**row.demographics) if row.demographics else None,
    )


def _feedback_row_to_model(row: PodcastFeedbackRow) -> FeedbackRecord:
    return FeedbackRecord(
        podcast_id=row.podcast_id,
        podcast_name=row.podcast_name,
        status=FeedbackStatus(row.status),
        notes=row.notes or "",
        updated_at=row.updated_at,
    )


async def _require_active(slug: str, repo: DashboardRepository) -> ProspectDashboardRow:
    row = await repo.get_by_slug(slug)
    if row is None:
        raise HTTPException(status_code=404, detail=f"Dashboard '{slug}' not found.")
    if not row.is_active:
        raise HTTPException(status_code=403, detail="This dashboard link is no longer active.")
    return row


async def _require_podcast(
    slug: str,
    podcast_id: str,
    dashboards: DashboardRepository,
    podcasts: ProspectPodcastRepository,
) -> ProspectPodcastRow:
    dashboard = await _require_active(slug, dashboards)
    row = await podcasts.get(dashboard.dashboard_id, podcast_id)
    if row is None:
        raise HTTPException(
            status_code=404, detail=f"Podcast {podcast_id} is not curated for '{slug}'.",
        )
    return row


# ---------------------------------------------------------------------------
# Dashboards / catalog
# ---------------------------------------------------------------------------


@router.post("", status_code=201, response_model=ProspectDashboard)
async def create_dashboard(
    body: CreateDashboardRequest,
    dashboards: DashboardRepository = Depends(get_dashboard_repo),
    podcasts: ProspectPodcastRepository = Depends(get_podcast_repo),
) -> ProspectDashboard:
    """Create a dashboard with its curated catalog (duplicates dropped)."""
    if await dashboards.get_by_slug(body.slug) is not None:
        raise HTTPException(status_code=409, detail=f"Slug '{body.slug}' is already in use.")

    row = await dashboards.create(
        slug=body.slug,
        prospect_name=body.prospect_name,
        prospect_bio=body.prospect_bio,
        tagline=body.tagline,
    )
    curated = dedupe_podcasts(body.podcasts)
    for position, podcast in enumerate(curated):
        await podcasts.add(dashboard_id=row.dashboard_id, podcast=podcast, position=position)

    logger.info("Dashboard %s created with %d podcasts", body.slug, len(curated))
    return _dashboard_row_to_model(row)


@router.get("/{slug}", response_model=ProspectDashboard)
async def get_dashboard(
    slug: str,
    dashboards: DashboardRepository = Depends(get_dashboard_repo),
) -> ProspectDashboard:
    """Fetch an active dashboard and count the view."""
    row = await _require_active(slug, dashboards)
    await dashboards.record_view(row)
    return _dashboard_row_to_model(row)


@router.get("/{slug}/podcasts", response_model=list[CandidatePodcast])
async def list_podcasts(
    slug: str,
    dashboards: DashboardRepository = Depends(get_dashboard_repo),
    podcasts: ProspectPodcastRepository = Depends(get_podcast_repo),
) -> list[CandidatePodcast]:
    """Curated catalog in display order, with stored derived data embedded."""
    dashboard = await _require_active(slug, dashboards)
    rows = await podcasts.list_for_dashboard(dashboard.dashboard_id)
    return [_podcast_row_to_model(r) for r in rows]


# ---------------------------------------------------------------------------
# Fit analysis
# ---------------------------------------------------------------------------


@router.get("/{slug}/podcasts/{podcast_id}/analysis", response_model=FitAnalysis | None)
async def get_analysis(
    slug: str,
    podcast_id: str,
    dashboards: DashboardRepository = Depends(get_dashboard_repo),
    podcasts: ProspectPodcastRepository = Depends(get_podcast_repo),
) -> FitAnalysis | None:
    row = await _require_podcast(slug, podcast_id, dashboards, podcasts)
    return _analysis_from_row(row)


@router.put("/{slug}/podcasts/{podcast_id}/analysis", response_model=FitAnalysis)
async def put_analysis(
    slug: str,
    podcast_id: str,
    body: FitAnalysis,
    dashboards: DashboardRepository = Depends(get_dashboard_repo),
    podcasts: ProspectPodcastRepository = Depends(get_podcast_repo),
) -> FitAnalysis:
    row = await _require_podcast(slug, podcast_id, dashboards, podcasts)
    await podcasts.save_analysis(row.dashboard_id, podcast_id, body)
    return body


# ---------------------------------------------------------------------------
# Feedback
# ---------------------------------------------------------------------------


@router.get("/{slug}/feedback", response_model=list[FeedbackRecord])
async def list_feedback(
    slug: str,
    dashboards: DashboardRepository = Depends(get_dashboard_repo),
    feedback: FeedbackRepository = Depends(get_feedback_repo),
) -> list[FeedbackRecord]:
    dashboard = await _require_active(slug, dashboards)
    rows = await feedback.list_for_dashboard(dashboard.dashboard_id)
    return [_feedback_row_to_model(r) for r in rows]


@router.put("/{slug}/feedback/{podcast_id}", response_model=FeedbackRecord)
async def upsert_feedback(
    slug: str,
    podcast_id: str,
    body: UpsertFeedbackRequest,
    dashboards: DashboardRepository = Depends(get_dashboard_repo),
    feedback: FeedbackRepository = Depends(get_feedback_repo),
) -> FeedbackRecord:
    """Insert or replace the verdict; repeating a request is harmless."""
    dashboard = await _require_active(slug, dashboards)
    row = await feedback.upsert(
        dashboard_id=dashboard.dashboard_id,
        podcast_id=podcast_id,
        podcast_name=body.podcast_name,
        status=body.status,
        notes=body.notes,
    )
    return _feedback_row_to_model(row)


# ---------------------------------------------------------------------------
# Demographics (keyed by podcast, shared across dashboards)
# ---------------------------------------------------------------------------


@podcasts_router.get("/{podcast_id}/demographics", response_model=Demographics | None)
async def get_demographics(
    podcast_id: str,
    podcasts: ProspectPodcastRepository = Depends(get_podcast_repo),
) -> Demographics | None:
    payload = await podcasts.find_demographics(podcast_id)
    return Demographics(**payload) if payload else None


@podcasts_router.put("/{podcast_id}/demographics", response_model=Demographics)
async def put_demographics(
    podcast_id: str,
    body: Demographics,
    podcasts: ProspectPodcastRepository = Depends(get_podcast_repo),
) -> Demographics:
    updated = await podcasts.save_demographics(podcast_id, body)
    if updated == 0:
        raise HTTPException(status_code=404, detail=f"Podcast {podcast_id} is not curated anywhere.")
    return body

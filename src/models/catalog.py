"""Catalog models: prospect dashboards, candidate podcasts, derived data.

A CandidatePodcast is immutable once loaded. It may arrive with its fit
analysis and/or demographics already attached (stored by the backend), in
which case the derived-data caches are pre-warmed from it.
"""

from datetime import datetime
from uuid import UUID

from pydantic import ConfigDict, Field

from src.models.common import ProspectBase


class PodcastCategory(ProspectBase, frozen=True):
    """A category tag attached to a podcast."""

    category_id: str = Field(..., min_length=1)
    category_name: str


class PitchAngle(ProspectBase, frozen=True):
    """A suggested angle for pitching the prospect to a show."""

    title: str
    description: str


class FitAnalysis(ProspectBase, frozen=True):
    """Why a podcast fits the prospect. Produced externally, never mutated."""

    clean_description: str = ""
    fit_reasons: tuple[str, ...] = ()
    pitch_angles: tuple[PitchAngle, ...] = ()


class Demographics(ProspectBase):
    """Audience attributes for a podcast.

    Providers return varying shapes; unknown keys are retained.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    age: str | None = None
    gender_skew: str | None = None
    purchasing_power: str | None = None
    education_level: str | None = None
    engagement_level: str | None = None
    episodes_analyzed: int | None = None
    age_distribution: list[dict] = Field(default_factory=list)
    professional_industry: list[dict] = Field(default_factory=list)


class CandidatePodcast(ProspectBase, frozen=True):
    """A podcast curated for one prospect."""

    podcast_id: str = Field(..., min_length=1)
    podcast_name: str
    podcast_description: str | None = None
    podcast_image_url: str | None = None
    podcast_url: str | None = None
    publisher_name: str | None = None
    itunes_rating: float | None = None
    episode_count: int | None = None
    audience_size: int | None = None
    last_posted_at: datetime | None = None
    podcast_categories: tuple[PodcastCategory, ...] = ()

    # Pre-warmed derived data
    analysis: FitAnalysis | None = None
    demographics: Demographics | None = None

    @property
    def category_ids(self) -> frozenset[str]:
        return frozenset(c.category_id for c in self.podcast_categories)


class ProspectDashboard(ProspectBase, frozen=True):
    """The prospect a catalog was curated for."""

    dashboard_id: UUID
    slug: str
    prospect_name: str
    prospect_bio: str | None = None
    tagline: str | None = None
    is_active: bool = True
    view_count: int = 0
    last_viewed_at: datetime | None = None


class AnalysisContext(ProspectBase, frozen=True):
    """Prospect context a fit analysis is computed against."""

    dashboard_id: UUID
    session_key: str
    prospect_name: str
    prospect_bio: str

    @classmethod
    def for_dashboard(cls, dashboard: ProspectDashboard) -> "AnalysisContext | None":
        """Build the context, or None when the prospect has no bio to analyse against."""
        if not dashboard.prospect_bio or not dashboard.prospect_bio.strip():
            return None
        return cls(
            dashboard_id=dashboard.dashboard_id,
            session_key=dashboard.slug,
            prospect_name=dashboard.prospect_name,
            prospect_bio=dashboard.prospect_bio,
        )

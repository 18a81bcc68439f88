"""SQLAlchemy ORM table models for the prospect backend.

Uses FlexJSON (JSONB on Postgres, JSON on SQLite) for nested values.

- prospect_dashboards: one row per shareable prospect link
- prospect_podcasts: the curated catalog, in display order, with any stored
  fit analysis and demographics
- podcast_feedback: reviewer verdicts, one row per (dashboard, podcast)
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from src.db.session import Base

# JSONB on PostgreSQL, plain JSON on SQLite (for tests)
FlexJSON = JSONB().with_variant(JSON(), "sqlite")


# ---------------------------------------------------------------------------
# Dashboards
# ---------------------------------------------------------------------------


class ProspectDashboardRow(Base):
    __tablename__ = "prospect_dashboards"

    dashboard_id: Mapped[UUID] = mapped_column(primary_key=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    prospect_name: Mapped[str] = mapped_column(String(255), nullable=False)
    prospect_bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    tagline: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_viewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProspectPodcastRow(Base):
    """A podcast curated for a dashboard.

    Analysis columns are null until a fit analysis is stored. Demographics
    are keyed by podcast, so the same payload may appear on several rows.
    """

    __tablename__ = "prospect_podcasts"

    dashboard_id: Mapped[UUID] = mapped_column(
        ForeignKey("prospect_dashboards.dashboard_id"), primary_key=True,
    )
    podcast_id: Mapped[str] = mapped_column(String(100), primary_key=True, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    podcast_name: Mapped[str] = mapped_column(String(500), nullable=False)
    podcast_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    podcast_image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    podcast_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    publisher_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    itunes_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    episode_count: Mapped[int | None] = mapped_column(Integer, nullable=True)
    audience_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_posted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    podcast_categories = mapped_column(FlexJSON, nullable=False)

    # Stored fit analysis
    ai_clean_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_fit_reasons = mapped_column(FlexJSON, nullable=True)
    ai_pitch_angles = mapped_column(FlexJSON, nullable=True)
    ai_analyzed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Stored demographics
    demographics = mapped_column(FlexJSON, nullable=True)
    demographics_fetched_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Feedback - OPERATIONAL (upserted in place)
# ---------------------------------------------------------------------------


class PodcastFeedbackRow(Base):
    __tablename__ = "podcast_feedback"
    __table_args__ = (
        UniqueConstraint("dashboard_id", "podcast_id", name="uq_podcast_feedback"),
    )

    feedback_id: Mapped[UUID] = mapped_column(primary_key=True)
    dashboard_id: Mapped[UUID] = mapped_column(
        ForeignKey("prospect_dashboards.dashboard_id"), nullable=False, index=True,
    )
    podcast_id: Mapped[str] = mapped_column(String(100), nullable=False)
    podcast_name: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="none")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

"""Prospect dashboards, curated podcasts and reviewer feedback.

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "prospect_dashboards",
        sa.Column("dashboard_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("prospect_name", sa.String(255), nullable=False),
        sa.Column("prospect_bio", sa.Text, nullable=True),
        sa.Column("tagline", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("view_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("last_viewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_prospect_dashboards_slug", "prospect_dashboards", ["slug"], unique=True,
    )

    op.create_table(
        "prospect_podcasts",
        sa.Column("dashboard_id", UUID(as_uuid=True),
                  sa.ForeignKey("prospect_dashboards.dashboard_id"), primary_key=True),
        sa.Column("podcast_id", sa.String(100), primary_key=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("podcast_name", sa.String(500), nullable=False),
        sa.Column("podcast_description", sa.Text, nullable=True),
        sa.Column("podcast_image_url", sa.String(1000), nullable=True),
        sa.Column("podcast_url", sa.String(1000), nullable=True),
        sa.Column("publisher_name", sa.String(500), nullable=True),
        sa.Column("itunes_rating", sa.Float, nullable=True),
        sa.Column("episode_count", sa.Integer, nullable=True),
        sa.Column("audience_size", sa.Integer, nullable=True),
        sa.Column("last_posted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("podcast_categories", JSONB, nullable=False),
        sa.Column("ai_clean_description", sa.Text, nullable=True),
        sa.Column("ai_fit_reasons", JSONB, nullable=True),
        sa.Column("ai_pitch_angles", JSONB, nullable=True),
        sa.Column("ai_analyzed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("demographics", JSONB, nullable=True),
        sa.Column("demographics_fetched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_prospect_podcasts_podcast_id", "prospect_podcasts", ["podcast_id"])

    op.create_table(
        "podcast_feedback",
        sa.Column("feedback_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("dashboard_id", UUID(as_uuid=True),
                  sa.ForeignKey("prospect_dashboards.dashboard_id"), nullable=False),
        sa.Column("podcast_id", sa.String(100), nullable=False),
        sa.Column("podcast_name", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="none"),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("dashboard_id", "podcast_id", name="uq_podcast_feedback"),
    )
    op.create_index("ix_podcast_feedback_dashboard_id", "podcast_feedback", ["dashboard_id"])


def downgrade() -> None:
    op.drop_index("ix_podcast_feedback_dashboard_id", table_name="podcast_feedback")
    op.drop_table("podcast_feedback")
    op.drop_index("ix_prospect_podcasts_podcast_id", table_name="prospect_podcasts")
    op.drop_table("prospect_podcasts")
    op.drop_index("ix_prospect_dashboards_slug", table_name="prospect_dashboards")
    op.drop_table("prospect_dashboards")

"""Seed script: load a demo prospect dashboard into the database.

Creates:
1. An active dashboard for a sample prospect (slug ``demo-prospect``)
2. A curated catalog of podcasts across several categories
3. Stored fit analyses for some podcasts and demographics for others

Idempotent: safe to run multiple times - skips if the demo slug already exists.

Usage:
    python -m scripts.seed          # against DATABASE_URL from .env
"""

import asyncio
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.catalog import (
    CandidatePodcast,
    Demographics,
    FitAnalysis,
    PitchAngle,
    PodcastCategory,
)
from src.repositories.prospects import DashboardRepository, ProspectPodcastRepository

DEMO_SLUG = "demo-prospect"
DEMO_PROSPECT_NAME = "Dana Reyes"
DEMO_PROSPECT_BIO = (
    "Founder of a B2B payments startup; speaks on fintech regulation, "
    "early-stage fundraising and building remote engineering teams."
)

_BUSINESS = PodcastCategory(category_id="cat-business", category_name="Business")
_TECH = PodcastCategory(category_id="cat-tech", category_name="Technology")
_FINANCE = PodcastCategory(category_id="cat-finance", category_name="Investing")
_CAREERS = PodcastCategory(category_id="cat-careers", category_name="Careers")

DEMO_PODCASTS: list[CandidatePodcast] = [
    CandidatePodcast(
        podcast_id="pod-001",
        podcast_name="Founders Unfiltered",
        podcast_description="Candid conversations with startup founders.",
        publisher_name="Northwind Media",
        itunes_rating=4.8,
        episode_count=312,
        audience_size=120_000,
        last_posted_at=datetime(2026, 9, 30, tzinfo=timezone.utc),
        podcast_categories=(_BUSINESS, _TECH),
        analysis=FitAnalysis(
            clean_description="Long-form founder interviews.",
            fit_reasons=(
                "Audience of early-stage founders",
                "Recent episodes on fundraising",
            ),
            pitch_angles=(
                PitchAngle(
                    title="Raising in a down market",
                    description="What changed in seed rounds since 2024.",
                ),
            ),
        ),
    ),
    CandidatePodcast(
        podcast_id="pod-002",
        podcast_name="The Ledger",
        podcast_description="Weekly fintech news and analysis.",
        publisher_name="Ledger Labs",
        itunes_rating=4.5,
        episode_count=148,
        audience_size=54_000,
        podcast_categories=(_FINANCE, _TECH),
        demographics=Demographics(
            age="25-44",
            gender_skew="slightly male",
            purchasing_power="high",
            education_level="graduate",
            engagement_level="high",
            episodes_analyzed=20,
        ),
    ),
    CandidatePodcast(
        podcast_id="pod-003",
        podcast_name="Remote Ready",
        podcast_description="Running distributed teams well.",
        itunes_rating=4.2,
        episode_count=64,
        audience_size=8_500,
        podcast_categories=(_CAREERS, _TECH),
    ),
    CandidatePodcast(
        podcast_id="pod-004",
        podcast_name="Compliance Hour",
        podcast_description="Regulation explained for operators.",
        itunes_rating=4.0,
        episode_count=92,
        audience_size=3_200,
        podcast_categories=(_FINANCE,),
    ),
    CandidatePodcast(
        podcast_id="pod-005",
        podcast_name="Seed Stage",
        podcast_description="Angels and early VCs on what they fund.",
        itunes_rating=4.6,
        episode_count=205,
        audience_size=31_000,
        podcast_categories=(_BUSINESS, _FINANCE),
    ),
    CandidatePodcast(
        podcast_id="pod-006",
        podcast_name="Build in Public",
        podcast_description="Makers sharing revenue, mistakes and lessons.",
        itunes_rating=4.4,
        episode_count=41,
        audience_size=900,
        podcast_categories=(_BUSINESS,),
    ),
]


async def seed_dashboard(session: AsyncSession) -> dict:
    """Create the demo dashboard and catalog unless the slug exists."""
    dashboards = DashboardRepository(session)
    existing = await dashboards.get_by_slug(DEMO_SLUG)
    if existing is not None:
        return {"created": False, "dashboard_id": existing.dashboard_id, "podcast_count": 0}

    row = await dashboards.create(
        slug=DEMO_SLUG,
        prospect_name=DEMO_PROSPECT_NAME,
        prospect_bio=DEMO_PROSPECT_BIO,
        tagline="Curated podcast opportunities",
    )
    podcasts = ProspectPodcastRepository(session)
    for position, podcast in enumerate(DEMO_PODCASTS):
        await podcasts.add(dashboard_id=row.dashboard_id, podcast=podcast, position=position)

    return {
        "created": True,
        "dashboard_id": row.dashboard_id,
        "podcast_count": len(DEMO_PODCASTS),
    }


async def _run_seed() -> None:
    """Run the seed against the real database (idempotent)."""
    from src.db.session import async_session_factory

    async with async_session_factory() as session:
        result = await seed_dashboard(session)

        if not result["created"]:
            print(f"Demo dashboard already seeded ({DEMO_SLUG} exists). Skipping.")
            print(f"  Dashboard: {result['dashboard_id']}")
            return

        await session.commit()

        print("Seed complete.")
        print(f"  Dashboard: {result['dashboard_id']} ({DEMO_SLUG})")
        print(f"  Podcasts:  {result['podcast_count']}")


if __name__ == "__main__":
    asyncio.run(_run_seed())

"""Summary statistics for a prospect's catalog and review progress.

Deterministic aggregates over the loaded catalog. Missing numbers count
as 0 for sums and are excluded from averages where noted.
"""

from collections.abc import Mapping, Sequence

from src.models.catalog import CandidatePodcast, PodcastCategory
from src.models.common import FeedbackStatus
from src.models.feedback import FeedbackRecord
from src.models.view import CatalogSummary, FeedbackStats, ReviewProgress

PREMIUM_MIN_AUDIENCE = 50_000
PREMIUM_MIN_EPISODES = 100


def _max_by(podcasts: Sequence[CandidatePodcast], key) -> CandidatePodcast | None:
    # max() returns the first maximal element, so ties go to catalog order
    if not podcasts:
        return None
    return max(podcasts, key=key)


def summarize_catalog(podcasts: Sequence[CandidatePodcast]) -> CatalogSummary:
    """Headline reach / rating / episode numbers and standout podcasts."""
    total_reach = sum(p.audience_size or 0 for p in podcasts)
    with_audience = [p for p in podcasts if (p.audience_size or 0) > 0]
    ratings = [p.itunes_rating for p in podcasts if p.itunes_rating]
    total_episodes = sum(p.episode_count or 0 for p in podcasts)

    return CatalogSummary(
        podcast_count=len(podcasts),
        total_reach=total_reach,
        avg_listeners_per_podcast=(
            round(total_reach / len(with_audience)) if with_audience else 0
        ),
        avg_rating=round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
        total_episodes=total_episodes,
        avg_episodes_per_podcast=(
            round(total_episodes / len(podcasts)) if podcasts else 0
        ),
        top_rated=_max_by(podcasts, lambda p: p.itunes_rating or 0),
        highest_reach=_max_by(podcasts, lambda p: p.audience_size or 0),
        most_episodes=_max_by(podcasts, lambda p: p.episode_count or 0),
    )


def category_index(podcasts: Sequence[CandidatePodcast]) -> list[PodcastCategory]:
    """Unique categories across the catalog, sorted by name."""
    seen: dict[str, PodcastCategory] = {}
    for podcast in podcasts:
        for category in podcast.podcast_categories:
            if category.category_name and category.category_id not in seen:
                seen[category.category_id] = category
    return sorted(seen.values(), key=lambda c: c.category_name.casefold())


def feedback_stats(
    podcasts: Sequence[CandidatePodcast],
    feedback: Mapping[str, FeedbackRecord],
) -> FeedbackStats:
    """Approved / rejected / not-reviewed tallies over ``podcasts``."""
    counts = {status: 0 for status in FeedbackStatus}
    for podcast in podcasts:
        record = feedback.get(podcast.podcast_id)
        counts[record.status if record else FeedbackStatus.NONE] += 1
    return FeedbackStats(
        approved=counts[FeedbackStatus.APPROVED],
        rejected=counts[FeedbackStatus.REJECTED],
        not_reviewed=counts[FeedbackStatus.NONE],
    )


def review_progress(
    podcasts: Sequence[CandidatePodcast],
    feedback: Mapping[str, FeedbackRecord],
) -> ReviewProgress:
    """Reviewed and approved counts among ``podcasts``."""
    stats = feedback_stats(podcasts, feedback)
    return ReviewProgress(
        reviewed=stats.approved + stats.rejected,
        approved=stats.approved,
        total=len(podcasts),
    )


def is_premium(podcast: CandidatePodcast) -> bool:
    """Established show: large audience and a deep back catalog."""
    return (
        (podcast.audience_size or 0) >= PREMIUM_MIN_AUDIENCE
        and (podcast.episode_count or 0) >= PREMIUM_MIN_EPISODES
    )

"""Tests for catalog summary statistics and review progress."""

from src.engine.stats import (
    category_index,
    feedback_stats,
    is_premium,
    review_progress,
    summarize_catalog,
)
from src.models.common import FeedbackStatus
from src.models.feedback import FeedbackRecord
from src.models.catalog import PodcastCategory


class TestSummarizeCatalog:

    def test_headline_numbers(self, make_podcast) -> None:
        podcasts = [
            make_podcast("p1", audience_size=10_000, episode_count=100, itunes_rating=4.0),
            make_podcast("p2", audience_size=30_000, episode_count=50, itunes_rating=5.0),
            make_podcast("p3", audience_size=None, episode_count=None, itunes_rating=None),
        ]
        summary = summarize_catalog(podcasts)

        assert summary.podcast_count == 3
        assert summary.total_reach == 40_000
        assert summary.avg_listeners_per_podcast == 20_000
        assert summary.avg_rating == 4.5
        assert summary.total_episodes == 150
        assert summary.avg_episodes_per_podcast == 50
        assert summary.top_rated.podcast_id == "p2"
        assert summary.highest_reach.podcast_id == "p2"
        assert summary.most_episodes.podcast_id == "p1"

    def test_ties_go_to_catalog_order(self, make_podcast) -> None:
        podcasts = [make_podcast("a", audience_size=5), make_podcast("b", audience_size=5)]
        assert summarize_catalog(podcasts).highest_reach.podcast_id == "a"

    def test_empty_catalog(self) -> None:
        summary = summarize_catalog([])
        assert summary.podcast_count == 0
        assert summary.avg_listeners_per_podcast == 0
        assert summary.avg_rating == 0.0
        assert summary.top_rated is None


class TestCategoryIndex:

    def test_unique_and_sorted_by_name(self, make_podcast) -> None:
        podcasts = [
            make_podcast("p1", categories=("tech", "business")),
            make_podcast("p2", categories=("arts", "tech")),
        ]
        names = [c.category_name for c in category_index(podcasts)]
        assert names == ["Arts", "Business", "Tech"]

    def test_unnamed_categories_skipped(self, make_podcast) -> None:
        podcast = make_podcast("p1").model_copy(update={
            "podcast_categories": (PodcastCategory(category_id="x", category_name=""),),
        })
        assert category_index([podcast]) == []


class TestFeedbackStats:

    def test_counts_only_catalog_podcasts(self, make_podcast) -> None:
        podcasts = [make_podcast(f"p{i}") for i in range(4)]
        feedback = {
            "p0": FeedbackRecord(podcast_id="p0", status=FeedbackStatus.APPROVED),
            "p1": FeedbackRecord(podcast_id="p1", status=FeedbackStatus.REJECTED),
            "p2": FeedbackRecord(podcast_id="p2", notes="thinking"),
            "gone": FeedbackRecord(podcast_id="gone", status=FeedbackStatus.APPROVED),
        }
        stats = feedback_stats(podcasts, feedback)
        assert (stats.approved, stats.rejected, stats.not_reviewed) == (1, 1, 2)

        progress = review_progress(podcasts, feedback)
        assert progress.reviewed == 2
        assert progress.approved == 1
        assert progress.total == 4
        assert progress.percent_reviewed == 50.0

    def test_empty_progress(self) -> None:
        assert review_progress([], {}).percent_reviewed == 0.0


class TestPremium:

    def test_requires_both_thresholds(self, make_podcast) -> None:
        assert is_premium(make_podcast("a", audience_size=50_000, episode_count=100))
        assert not is_premium(make_podcast("b", audience_size=49_999, episode_count=500))
        assert not is_premium(make_podcast("c", audience_size=90_000, episode_count=99))
        assert not is_premium(make_podcast("d"))

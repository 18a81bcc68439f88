"""Tests for engine Pydantic models: validation and derived properties."""

import pytest
from pydantic import ValidationError
from uuid_extensions import uuid7

from src.models.catalog import (
    AnalysisContext,
    CandidatePodcast,
    Demographics,
    ProspectDashboard,
)
from src.models.common import FeedbackFilter, FeedbackStatus, SortMode
from src.models.feedback import FeedbackRecord
from src.models.view import FilterCriteria, InsightProgress, ResultView


class TestCandidatePodcast:

    def test_requires_id(self) -> None:
        with pytest.raises(ValidationError):
            CandidatePodcast(podcast_id="", podcast_name="x")

    def test_is_immutable(self, make_podcast) -> None:
        podcast = make_podcast("p1")
        with pytest.raises(ValidationError):
            podcast.podcast_name = "changed"

    def test_category_ids(self, make_podcast) -> None:
        podcast = make_podcast("p1", categories=("tech", "arts"))
        assert podcast.category_ids == frozenset({"tech", "arts"})

    def test_parses_backend_json(self) -> None:
        podcast = CandidatePodcast.model_validate({
            "podcast_id": "p1",
            "podcast_name": "Pod",
            "audience_size": 1200,
            "podcast_categories": [{"category_id": "c1", "category_name": "News"}],
            "analysis": {"clean_description": "d", "fit_reasons": ["r1"], "pitch_angles": []},
            "demographics": None,
        })
        assert podcast.podcast_categories[0].category_name == "News"
        assert podcast.analysis.fit_reasons == ("r1",)


class TestDemographics:

    def test_unknown_provider_keys_are_kept(self) -> None:
        demo = Demographics.model_validate({"age": "18-24", "family_status": "single"})
        assert demo.model_dump()["family_status"] == "single"


class TestAnalysisContext:

    def _dashboard(self, bio: str | None) -> ProspectDashboard:
        return ProspectDashboard(
            dashboard_id=uuid7(), slug="acme", prospect_name="Jordan", prospect_bio=bio,
        )

    def test_built_from_dashboard(self) -> None:
        context = AnalysisContext.for_dashboard(self._dashboard("Climate investor"))
        assert context.session_key == "acme"
        assert context.prospect_bio == "Climate investor"

    @pytest.mark.parametrize("bio", [None, "", "   "])
    def test_no_context_without_bio(self, bio) -> None:
        assert AnalysisContext.for_dashboard(self._dashboard(bio)) is None


class TestFilterCriteria:

    def test_defaults_do_not_filter(self) -> None:
        criteria = FilterCriteria()
        assert not criteria.is_filtering
        assert criteria.with_changes(sort=SortMode.NAME).is_filtering is False

    def test_with_changes_validates(self) -> None:
        criteria = FilterCriteria().with_changes(feedback="approved", categories={"c1"})
        assert criteria.feedback == FeedbackFilter.APPROVED
        assert criteria.categories == frozenset({"c1"})
        assert criteria.is_filtering

        with pytest.raises(ValidationError):
            FilterCriteria().with_changes(feedback="maybe")

    def test_with_changes_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValueError, match="Unknown filter criteria"):
            FilterCriteria().with_changes(page=2)

    def test_whitespace_query_is_not_filtering(self) -> None:
        assert not FilterCriteria(query="   ").is_filtering


class TestViewModels:

    def test_result_view_navigation(self) -> None:
        view = ResultView(total=40, page=2, total_pages=3)
        assert view.has_previous
        assert view.has_next

    def test_result_view_rejects_page_zero(self) -> None:
        with pytest.raises(ValidationError):
            ResultView(page=0)

    def test_insight_progress(self) -> None:
        assert InsightProgress(ready=3, total=3).is_complete
        assert not InsightProgress(ready=1, total=3).is_complete


class TestFeedbackRecord:

    def test_defaults(self) -> None:
        record = FeedbackRecord(podcast_id="p1")
        assert record.status == FeedbackStatus.NONE
        assert record.notes == ""
        assert not record.is_reviewed
        assert record.updated_at.tzinfo is not None

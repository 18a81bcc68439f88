"""View models: filter criteria, paginated result view, progress counters."""

from pydantic import Field

from src.models.catalog import CandidatePodcast
from src.models.common import (
    AudienceBucket,
    EpisodeBucket,
    FeedbackFilter,
    ProspectBase,
    SortMode,
)


class FilterCriteria(ProspectBase, frozen=True):
    """Reviewer-selected criteria. Replaced wholesale on every change."""

    query: str = ""
    categories: frozenset[str] = frozenset()
    feedback: FeedbackFilter = FeedbackFilter.ALL
    episodes: EpisodeBucket = EpisodeBucket.ANY
    audience: AudienceBucket = AudienceBucket.ANY
    sort: SortMode = SortMode.DEFAULT

    def with_changes(self, **changes) -> "FilterCriteria":
        """Return a validated copy with the given fields replaced."""
        unknown = set(changes) - set(FilterCriteria.model_fields)
        if unknown:
            msg = f"Unknown filter criteria: {sorted(unknown)}."
            raise ValueError(msg)
        data = self.model_dump()
        data.update(changes)
        return FilterCriteria.model_validate(data)

    @property
    def is_filtering(self) -> bool:
        """True when any criterion narrows the catalog (sort does not)."""
        return bool(
            self.query.strip()
            or self.categories
            or self.feedback != FeedbackFilter.ALL
            or self.episodes != EpisodeBucket.ANY
            or self.audience != AudienceBucket.ANY
        )


class ResultView(ProspectBase, frozen=True):
    """Ordered, filtered, paginated projection of the catalog."""

    items: tuple[CandidatePodcast, ...] = ()
    total: int = Field(default=0, ge=0)
    catalog_size: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=18, ge=1)
    total_pages: int = Field(default=1, ge=1)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def item_ids(self) -> list[str]:
        return [p.podcast_id for p in self.items]


class InsightProgress(ProspectBase, frozen=True):
    """Settled fit analyses over catalog size ("insights ready: X/Y")."""

    ready: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)

    @property
    def is_complete(self) -> bool:
        return self.ready >= self.total


class FeedbackStats(ProspectBase, frozen=True):
    """Verdict tallies over a set of podcasts."""

    approved: int = 0
    rejected: int = 0
    not_reviewed: int = 0


class ReviewProgress(ProspectBase, frozen=True):
    """Reviewed/approved counts over the podcasts currently displayed."""

    reviewed: int = 0
    approved: int = 0
    total: int = 0

    @property
    def percent_reviewed(self) -> float:
        if self.total == 0:
            return 0.0
        return round(100.0 * self.reviewed / self.total, 1)


class CatalogSummary(ProspectBase, frozen=True):
    """Headline numbers for a prospect's catalog."""

    podcast_count: int = 0
    total_reach: int = 0
    avg_listeners_per_podcast: int = 0
    avg_rating: float = 0.0
    total_episodes: int = 0
    avg_episodes_per_podcast: int = 0
    top_rated: CandidatePodcast | None = None
    highest_reach: CandidatePodcast | None = None
    most_episodes: CandidatePodcast | None = None

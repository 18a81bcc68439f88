"""FilterPipeline: pure (catalog, feedback, criteria) -> ResultView.

Stages run in a fixed order, each narrowing or reordering the output of the
previous one:

    1. text search        (name, description, publisher; case-insensitive)
    2. category filter    (intersection with the selection)
    3. feedback filter    (all / approved / rejected / not reviewed)
    4. episode bucket, then audience bucket (half-open ranges)
    5. stable sort
    6. paginate           (out-of-range pages clamp)

No I/O, no module state: identical inputs always produce identical views.
Missing numeric attributes count as 0.
"""

import math
from collections.abc import Mapping, Sequence

from src.models.catalog import CandidatePodcast
from src.models.common import (
    AudienceBucket,
    EpisodeBucket,
    FeedbackFilter,
    FeedbackStatus,
    SortMode,
)
from src.models.feedback import FeedbackRecord
from src.models.view import FilterCriteria, ResultView

DEFAULT_PAGE_SIZE = 18

# [low, high); None = unbounded above
EPISODE_RANGES: dict[EpisodeBucket, tuple[int, int | None]] = {
    EpisodeBucket.UNDER_50: (0, 50),
    EpisodeBucket.FROM_50_TO_100: (50, 100),
    EpisodeBucket.FROM_100_TO_200: (100, 200),
    EpisodeBucket.OVER_200: (200, None),
}

AUDIENCE_RANGES: dict[AudienceBucket, tuple[int, int | None]] = {
    AudienceBucket.UNDER_1K: (0, 1_000),
    AudienceBucket.FROM_1K_TO_5K: (1_000, 5_000),
    AudienceBucket.FROM_5K_TO_10K: (5_000, 10_000),
    AudienceBucket.FROM_10K_TO_25K: (10_000, 25_000),
    AudienceBucket.FROM_25K_TO_50K: (25_000, 50_000),
    AudienceBucket.FROM_50K_TO_100K: (50_000, 100_000),
    AudienceBucket.OVER_50K: (50_000, None),
    AudienceBucket.OVER_100K: (100_000, None),
}

FeedbackMap = Mapping[str, FeedbackRecord]


def _in_range(value: int | None, bounds: tuple[int, int | None]) -> bool:
    low, high = bounds
    v = value or 0
    if v < low:
        return False
    return high is None or v < high


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def search_stage(podcasts: Sequence[CandidatePodcast], query: str) -> list[CandidatePodcast]:
    """Keep podcasts whose name, description or publisher contains ``query``."""
    if not query.strip():
        return list(podcasts)
    needle = query.lower()
    return [
        p for p in podcasts
        if needle in p.podcast_name.lower()
        or needle in (p.podcast_description or "").lower()
        or needle in (p.publisher_name or "").lower()
    ]


def category_stage(
    podcasts: Sequence[CandidatePodcast],
    categories: frozenset[str],
) -> list[CandidatePodcast]:
    """Keep podcasts tagged with at least one selected category."""
    if not categories:
        return list(podcasts)
    return [p for p in podcasts if p.category_ids & categories]


def feedback_stage(
    podcasts: Sequence[CandidatePodcast],
    feedback: FeedbackMap,
    wanted: FeedbackFilter,
) -> list[CandidatePodcast]:
    """Keep podcasts whose verdict matches ``wanted``."""
    if wanted == FeedbackFilter.ALL:
        return list(podcasts)

    def status_of(podcast: CandidatePodcast) -> FeedbackStatus:
        record = feedback.get(podcast.podcast_id)
        return record.status if record is not None else FeedbackStatus.NONE

    if wanted == FeedbackFilter.NOT_REVIEWED:
        return [p for p in podcasts if status_of(p) == FeedbackStatus.NONE]
    target = FeedbackStatus(wanted.value)
    return [p for p in podcasts if status_of(p) == target]


def episode_stage(
    podcasts: Sequence[CandidatePodcast],
    bucket: EpisodeBucket,
) -> list[CandidatePodcast]:
    if bucket == EpisodeBucket.ANY:
        return list(podcasts)
    bounds = EPISODE_RANGES[bucket]
    return [p for p in podcasts if _in_range(p.episode_count, bounds)]


def audience_stage(
    podcasts: Sequence[CandidatePodcast],
    bucket: AudienceBucket,
) -> list[CandidatePodcast]:
    if bucket == AudienceBucket.ANY:
        return list(podcasts)
    bounds = AUDIENCE_RANGES[bucket]
    return [p for p in podcasts if _in_range(p.audience_size, bounds)]


def sort_stage(podcasts: Sequence[CandidatePodcast], mode: SortMode) -> list[CandidatePodcast]:
    """Stable sort; ties keep their prior relative order."""
    if mode == SortMode.AUDIENCE_DESC:
        # sorted() stays stable with reverse=True
        return sorted(podcasts, key=lambda p: p.audience_size or 0, reverse=True)
    if mode == SortMode.AUDIENCE_ASC:
        return sorted(podcasts, key=lambda p: p.audience_size or 0)
    if mode == SortMode.NAME:
        return sorted(podcasts, key=lambda p: p.podcast_name.casefold())
    return list(podcasts)


def clamp_page(page: int, total_items: int, page_size: int) -> tuple[int, int]:
    """Return ``(page, total_pages)`` with ``page`` clamped into range.

    An empty result still has one (empty) page.
    """
    total_pages = max(1, math.ceil(total_items / page_size))
    return min(max(page, 1), total_pages), total_pages


def paginate(
    podcasts: Sequence[CandidatePodcast],
    page: int,
    page_size: int,
) -> tuple[list[CandidatePodcast], int, int]:
    """Slice ``[(page-1)*size, page*size)`` after clamping the page."""
    if page_size < 1:
        msg = f"page_size must be >= 1, got {page_size}."
        raise ValueError(msg)
    page, total_pages = clamp_page(page, len(podcasts), page_size)
    start = (page - 1) * page_size
    return list(podcasts[start:start + page_size]), page, total_pages


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def filter_and_sort(
    catalog: Sequence[CandidatePodcast],
    feedback: FeedbackMap,
    criteria: FilterCriteria,
) -> list[CandidatePodcast]:
    """Stages 1-5: the full ordered match list, before pagination."""
    matched = search_stage(catalog, criteria.query)
    matched = category_stage(matched, criteria.categories)
    matched = feedback_stage(matched, feedback, criteria.feedback)
    matched = episode_stage(matched, criteria.episodes)
    matched = audience_stage(matched, criteria.audience)
    return sort_stage(matched, criteria.sort)


def apply_filters(
    catalog: Sequence[CandidatePodcast],
    feedback: FeedbackMap,
    criteria: FilterCriteria,
    *,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ResultView:
    """Run every stage and return the requested page."""
    ordered = filter_and_sort(catalog, feedback, criteria)
    items, page, total_pages = paginate(ordered, page, page_size)
    return ResultView(
        items=tuple(items),
        total=len(ordered),
        catalog_size=len(catalog),
        page=page,
        page_size=page_size,
        total_pages=total_pages,
    )


def page_window(current: int, total_pages: int) -> list[int | None]:
    """Page numbers for a pager: first, last, and current +/- 1.

    ``None`` marks a gap to render as an ellipsis.

    >>> page_window(5, 9)
    [1, None, 4, 5, 6, None, 9]
    """
    shown = [
        n for n in range(1, total_pages + 1)
        if n in (1, total_pages) or abs(n - current) <= 1
    ]
    window: list[int | None] = []
    for idx, n in enumerate(shown):
        if idx > 0 and n - shown[idx - 1] > 1:
            window.append(None)
        window.append(n)
    return window

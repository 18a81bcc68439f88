"""SessionOrchestrator: one reviewer's view of one prospect dashboard.

Owns every piece of mutable state for the lifetime of the view (catalog,
both derived-data caches, feedback map, criteria, current page) and
discards it on close(). Nothing is shared across sessions.

Event handlers:
- open(session_key)       load catalog -> hydrate feedback -> pre-warm caches
- select(podcast_id)      ensure() fit analysis and demographics for it
- set_criteria(...)       replace criteria, reset to page 1, recompute
- on_search_input(text)   debounced into set_criteria(query=text)
- set_status / set_note   mutate feedback, then recompute (the feedback
                          filter depends on it)
"""

import asyncio
import logging
from dataclasses import dataclass

from src.config.settings import Settings, get_settings
from src.engine.catalog import CatalogStore
from src.engine.collaborators import (
    AnalysisSource,
    CatalogSource,
    DemographicsSource,
    FeedbackSink,
)
from src.engine.debounce import DEFAULT_QUIET_SECONDS, SearchDebouncer
from src.engine.derived_cache import CacheEntry, DerivedDataCache
from src.engine.errors import FetchError, LoadError
from src.engine.feedback import ApprovalCallback, FeedbackStore
from src.engine.pipeline import DEFAULT_PAGE_SIZE, apply_filters, filter_and_sort
from src.engine.stats import (
    category_index,
    feedback_stats,
    is_premium,
    review_progress,
    summarize_catalog,
)
from src.models.catalog import (
    AnalysisContext,
    CandidatePodcast,
    Demographics,
    FitAnalysis,
    PodcastCategory,
    ProspectDashboard,
)
from src.models.common import FeedbackStatus
from src.models.feedback import FeedbackRecord
from src.models.view import (
    CatalogSummary,
    FeedbackStats,
    FilterCriteria,
    InsightProgress,
    ResultView,
    ReviewProgress,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PodcastDetail:
    """Everything the side panel shows for one podcast."""

    podcast: CandidatePodcast
    analysis: CacheEntry[FitAnalysis]
    demographics: CacheEntry[Demographics]
    feedback: FeedbackRecord | None
    premium: bool


class SessionOrchestrator:
    """Wires CatalogStore, both caches, FeedbackStore, pipeline and debouncer."""

    def __init__(
        self,
        *,
        catalog_source: CatalogSource,
        analysis_source: AnalysisSource,
        demographics_source: DemographicsSource,
        feedback_sink: FeedbackSink,
        page_size: int = DEFAULT_PAGE_SIZE,
        debounce_seconds: float = DEFAULT_QUIET_SECONDS,
        rollback_on_failure: bool = False,
        on_approved: ApprovalCallback | None = None,
    ) -> None:
        self._catalog_store = CatalogStore(catalog_source)
        self._analysis_source = analysis_source
        self._demographics_source = demographics_source
        self._feedback_sink = feedback_sink
        self._page_size = page_size
        self._rollback_on_failure = rollback_on_failure
        self._on_approved = on_approved

        self._analyses: DerivedDataCache[FitAnalysis] = DerivedDataCache("analysis")
        self._demographics: DerivedDataCache[Demographics] = DerivedDataCache("demographics")
        self._debouncer = SearchDebouncer(self._on_search_settled, delay=debounce_seconds)
        self._feedback: FeedbackStore | None = None

        self._session_key: str | None = None
        self._dashboard: ProspectDashboard | None = None
        self._analysis_context: AnalysisContext | None = None
        self._catalog: tuple[CandidatePodcast, ...] = ()
        self._by_id: dict[str, CandidatePodcast] = {}
        self._criteria = FilterCriteria()
        self._page = 1
        self._view = ResultView(page_size=page_size)
        self._selected: str | None = None
        self._error: LoadError | None = None

    @classmethod
    def from_settings(
        cls,
        backend,
        *,
        settings: Settings | None = None,
        on_approved: ApprovalCallback | None = None,
    ) -> "SessionOrchestrator":
        """Build a session whose collaborators are all served by ``backend``."""
        settings = settings or get_settings()
        return cls(
            catalog_source=backend,
            analysis_source=backend,
            demographics_source=backend,
            feedback_sink=backend,
            page_size=settings.PAGE_SIZE,
            debounce_seconds=settings.SEARCH_DEBOUNCE_SECONDS,
            rollback_on_failure=settings.FEEDBACK_ROLLBACK_ON_FAILURE,
            on_approved=on_approved,
        )

    async def __aenter__(self) -> "SessionOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, session_key: str) -> ResultView:
        """Load the dashboard and compute the first view.

        Raises:
            LoadError: The catalog is unavailable; the session is unusable.
        """
        if self._session_key is not None:
            msg = f"Session already open for '{self._session_key}'."
            raise RuntimeError(msg)

        try:
            podcasts = await self._catalog_store.load(session_key)
        except LoadError as exc:
            self._error = exc
            logger.error("Session %s failed to open: %s", session_key, exc.reason)
            raise

        self._session_key = session_key
        self._error = None
        self._dashboard = self._catalog_store.dashboard(session_key)
        self._analysis_context = AnalysisContext.for_dashboard(self._dashboard)
        self._catalog = tuple(podcasts)
        self._by_id = {p.podcast_id: p for p in podcasts}

        self._feedback = FeedbackStore(
            session_key=session_key,
            sink=self._feedback_sink,
            on_approved=self._on_approved,
            rollback_on_failure=self._rollback_on_failure,
        )
        try:
            self._feedback.hydrate(await self._feedback_sink.list_feedback(session_key))
        except Exception:
            logger.exception(
                "Existing feedback for %s could not be loaded; starting empty", session_key,
            )

        self._prewarm()
        return self._recompute()

    def _prewarm(self) -> None:
        analyses = demographics = 0
        for podcast in self._catalog:
            if podcast.analysis is not None:
                analyses += self._analyses.seed(podcast.podcast_id, podcast.analysis)
            if podcast.demographics is not None:
                demographics += self._demographics.seed(podcast.podcast_id, podcast.demographics)
        logger.info(
            "Session %s pre-warmed %d analyses and %d demographics from the catalog",
            self._session_key, analyses, demographics,
        )

    async def close(self) -> None:
        """Tear down: drop pending search input, caches, catalog and criteria."""
        self._debouncer.cancel()
        self._analyses.clear()
        self._demographics.clear()
        self._feedback = None
        self._catalog = ()
        self._by_id = {}
        self._selected = None
        self._dashboard = None
        self._analysis_context = None
        self._criteria = FilterCriteria()
        self._page = 1
        self._view = ResultView(page_size=self._page_size)
        if self._session_key is not None:
            logger.info("Session %s closed", self._session_key)
        self._session_key = None

    # ------------------------------------------------------------------
    # Selection / derived data
    # ------------------------------------------------------------------

    async def select(self, podcast_id: str) -> PodcastDetail:
        """Open the detail panel and fetch any missing derived data.

        Fetch failures are logged and leave the entry UNSET (shown as
        loading); they never fail the selection. Selecting another podcast
        while fetches are in flight does not cancel them.
        """
        podcast = self._require(podcast_id)
        self._selected = podcast_id

        jobs = [self._ensure_demographics(podcast)]
        if self._analysis_context is not None:
            jobs.append(self._ensure_analysis(podcast, self._analysis_context))
        await asyncio.gather(*jobs)
        return self.detail(podcast_id)

    def deselect(self) -> None:
        self._selected = None

    async def _ensure_analysis(
        self,
        podcast: CandidatePodcast,
        context: AnalysisContext,
    ) -> None:
        async def fetch(_key: str) -> FitAnalysis | None:
            return await self._analysis_source.fetch_analysis(podcast, context)

        try:
            await self._analyses.ensure(podcast.podcast_id, fetch)
        except FetchError as exc:
            logger.info("Analysis for %s left unset: %s", podcast.podcast_id, exc.reason)

    async def _ensure_demographics(self, podcast: CandidatePodcast) -> None:
        async def fetch(key: str) -> Demographics | None:
            return await self._demographics_source.fetch_demographics(key)

        try:
            await self._demographics.ensure(podcast.podcast_id, fetch)
        except FetchError as exc:
            logger.info("Demographics for %s left unset: %s", podcast.podcast_id, exc.reason)

    def detail(self, podcast_id: str) -> PodcastDetail:
        podcast = self._require(podcast_id)
        return PodcastDetail(
            podcast=podcast,
            analysis=self._analyses.get(podcast_id),
            demographics=self._demographics.get(podcast_id),
            feedback=self._feedback.get(podcast_id) if self._feedback else None,
            premium=is_premium(podcast),
        )

    def analysis_entry(self, podcast_id: str) -> CacheEntry[FitAnalysis]:
        return self._analyses.get(podcast_id)

    def demographics_entry(self, podcast_id: str) -> CacheEntry[Demographics]:
        return self._demographics.get(podcast_id)

    def is_loading(self, podcast_id: str) -> bool:
        """Loading indicator for one podcast's panel, never a global flag."""
        return self._analyses.is_pending(podcast_id) or self._demographics.is_pending(podcast_id)

    # ------------------------------------------------------------------
    # Criteria / pagination
    # ------------------------------------------------------------------

    def set_criteria(self, **changes) -> ResultView:
        """Replace criteria fields and go back to page 1."""
        self._criteria = self._criteria.with_changes(**changes)
        self._page = 1
        return self._recompute()

    def toggle_category(self, category_id: str) -> ResultView:
        selected = set(self._criteria.categories)
        selected.symmetric_difference_update({category_id})
        return self.set_criteria(categories=frozenset(selected))

    def clear_filters(self) -> ResultView:
        self._debouncer.cancel()
        self._criteria = FilterCriteria()
        self._page = 1
        return self._recompute()

    def on_search_input(self, text: str) -> None:
        """Feed a keystroke; the query is applied once typing pauses."""
        self._debouncer.on_input(text)

    def _on_search_settled(self, text: str) -> None:
        if text != self._criteria.query:
            self.set_criteria(query=text)

    def set_page(self, page: int) -> ResultView:
        self._page = page
        return self._recompute()

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    async def set_status(self, podcast_id: str, status: FeedbackStatus) -> FeedbackRecord:
        """Record a verdict, then recompute the view.

        Raises:
            PersistError: The durable write failed. The view already reflects
                the local (optimistic) state.
        """
        podcast = self._require(podcast_id)
        store = self._require_feedback()
        try:
            return await store.set_status(
                podcast_id, status, podcast_name=podcast.podcast_name,
            )
        finally:
            self._recompute()

    async def set_note(self, podcast_id: str, text: str) -> FeedbackRecord:
        self._require(podcast_id)
        store = self._require_feedback()
        try:
            return await store.set_note(podcast_id, text)
        finally:
            self._recompute()

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def session_key(self) -> str | None:
        return self._session_key

    @property
    def error(self) -> LoadError | None:
        return self._error

    @property
    def dashboard(self) -> ProspectDashboard | None:
        return self._dashboard

    @property
    def catalog(self) -> tuple[CandidatePodcast, ...]:
        return self._catalog

    @property
    def view(self) -> ResultView:
        return self._view

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def selected(self) -> str | None:
        return self._selected

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    @property
    def unsynced_feedback(self) -> frozenset[str]:
        return self._feedback.unsynced_ids if self._feedback else frozenset()

    @property
    def progress(self) -> InsightProgress:
        """Settled fit analyses over catalog size."""
        return InsightProgress(
            ready=self._analyses.settled_count(self._by_id),
            total=len(self._catalog),
        )

    @property
    def feedback_stats(self) -> FeedbackStats:
        return feedback_stats(self._catalog, self._feedback_records())

    @property
    def review_progress(self) -> ReviewProgress:
        """Progress over the filtered set while filtering, else the catalog."""
        records = self._feedback_records()
        if self._criteria.is_filtering:
            shown = filter_and_sort(self._catalog, records, self._criteria)
        else:
            shown = list(self._catalog)
        return review_progress(shown, records)

    @property
    def summary(self) -> CatalogSummary:
        return summarize_catalog(self._catalog)

    @property
    def categories(self) -> list[PodcastCategory]:
        return category_index(self._catalog)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _feedback_records(self) -> dict[str, FeedbackRecord]:
        return self._feedback.records() if self._feedback else {}

    def _recompute(self) -> ResultView:
        self._view = apply_filters(
            self._catalog,
            self._feedback_records(),
            self._criteria,
            page=self._page,
            page_size=self._page_size,
        )
        self._page = self._view.page
        return self._view

    def _require(self, podcast_id: str) -> CandidatePodcast:
        podcast = self._by_id.get(podcast_id)
        if podcast is None:
            msg = f"Podcast {podcast_id} is not in this catalog."
            raise KeyError(msg)
        return podcast

    def _require_feedback(self) -> FeedbackStore:
        if self._feedback is None:
            msg = "Session is not open."
            raise RuntimeError(msg)
        return self._feedback

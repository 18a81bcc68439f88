"""In-memory collaborators for engine tests.

Each fake counts calls and can be gated with an ``asyncio.Event`` so tests
can hold a fetch in flight and observe the PENDING state.
"""

import asyncio
from collections import Counter

import pytest
from uuid_extensions import uuid7

from src.engine.collaborators import (
    AnalysisSource,
    CatalogSource,
    DemographicsSource,
    FeedbackSink,
)
from src.engine.session import SessionOrchestrator
from src.models.catalog import (
    AnalysisContext,
    CandidatePodcast,
    Demographics,
    FitAnalysis,
    ProspectDashboard,
)
from src.models.feedback import FeedbackRecord


class FakeCatalogSource(CatalogSource):
    def __init__(self, dashboard: ProspectDashboard, podcasts: list[CandidatePodcast]) -> None:
        self.dashboard = dashboard
        self.podcasts = podcasts
        self.dashboard_calls = 0
        self.catalog_calls = 0
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def fetch_dashboard(self, session_key: str) -> ProspectDashboard:
        self.dashboard_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.dashboard

    async def fetch_catalog(self, session_key: str) -> list[CandidatePodcast]:
        self.catalog_calls += 1
        return list(self.podcasts)


class FakeDerivedSource(AnalysisSource, DemographicsSource):
    """Serves both fit analyses and demographics from ``results``."""

    def __init__(self) -> None:
        self.results: dict[str, FitAnalysis | Demographics | None] = {}
        self.calls: Counter[str] = Counter()
        self.failures_left: Counter[str] = Counter()
        self.contexts: list[AnalysisContext] = []
        self.gate: asyncio.Event | None = None

    async def _lookup(self, podcast_id: str):
        self.calls[podcast_id] += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.failures_left[podcast_id] > 0:
            self.failures_left[podcast_id] -= 1
            raise RuntimeError("provider down")
        return self.results.get(podcast_id)

    async def fetch_analysis(
        self,
        podcast: CandidatePodcast,
        context: AnalysisContext,
    ) -> FitAnalysis | None:
        self.contexts.append(context)
        return await self._lookup(podcast.podcast_id)

    async def fetch_demographics(self, podcast_id: str) -> Demographics | None:
        return await self._lookup(podcast_id)


class FakeFeedbackSink(FeedbackSink):
    def __init__(self) -> None:
        self.existing: list[FeedbackRecord] = []
        self.saved: dict[str, FeedbackRecord] = {}
        self.writes: list[FeedbackRecord] = []
        self.fail = False
        self.list_error: Exception | None = None

    async def list_feedback(self, session_key: str) -> list[FeedbackRecord]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.existing)

    async def upsert_feedback(self, session_key: str, record: FeedbackRecord) -> None:
        self.writes.append(record)
        if self.fail:
            raise ConnectionError("store unreachable")
        self.saved[record.podcast_id] = record


@pytest.fixture
def dashboard() -> ProspectDashboard:
    return ProspectDashboard(
        dashboard_id=uuid7(),
        slug="acme",
        prospect_name="Jordan Lee",
        prospect_bio="Operator and angel investor focused on climate tech.",
    )


@pytest.fixture
def analysis_source() -> FakeDerivedSource:
    return FakeDerivedSource()


@pytest.fixture
def demographics_source() -> FakeDerivedSource:
    return FakeDerivedSource()


@pytest.fixture
def feedback_sink() -> FakeFeedbackSink:
    return FakeFeedbackSink()


@pytest.fixture
def catalog_source_for(dashboard):
    def _build(podcasts: list[CandidatePodcast], *, board: ProspectDashboard | None = None):
        return FakeCatalogSource(board or dashboard, podcasts)

    return _build


@pytest.fixture
def session_for(catalog_source_for, analysis_source, demographics_source, feedback_sink):
    """Build a SessionOrchestrator over the fakes for a given catalog."""

    def _build(podcasts: list[CandidatePodcast], **kwargs) -> SessionOrchestrator:
        board = kwargs.pop("board", None)
        return SessionOrchestrator(
            catalog_source=catalog_source_for(podcasts, board=board),
            analysis_source=analysis_source,
            demographics_source=demographics_source,
            feedback_sink=feedback_sink,
            **kwargs,
        )

    return _build

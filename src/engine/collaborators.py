"""Collaborator interfaces the review engine depends on.

The engine never talks to a transport directly. Implementations may raise
any exception; the engine wraps failures into LoadError / FetchError /
PersistError at its own boundary.
"""

from abc import ABC, abstractmethod

from src.models.catalog import (
    AnalysisContext,
    CandidatePodcast,
    Demographics,
    FitAnalysis,
    ProspectDashboard,
)
from src.models.feedback import FeedbackRecord


class CatalogSource(ABC):
    """Loads a prospect dashboard and its curated podcasts."""

    @abstractmethod
    async def fetch_dashboard(self, session_key: str) -> ProspectDashboard:
        """Return the dashboard identified by ``session_key``."""
        ...

    @abstractmethod
    async def fetch_catalog(self, session_key: str) -> list[CandidatePodcast]:
        """Return the curated podcasts in display order."""
        ...


class AnalysisSource(ABC):
    """Computes (or looks up) a fit analysis for one podcast."""

    @abstractmethod
    async def fetch_analysis(
        self,
        podcast: CandidatePodcast,
        context: AnalysisContext,
    ) -> FitAnalysis | None:
        """Return the analysis, or None when none is available."""
        ...


class DemographicsSource(ABC):
    """Looks up audience demographics for one podcast."""

    @abstractmethod
    async def fetch_demographics(self, podcast_id: str) -> Demographics | None:
        """Return demographics, or None when the provider has no data."""
        ...


class FeedbackSink(ABC):
    """Durable store for reviewer feedback."""

    @abstractmethod
    async def list_feedback(self, session_key: str) -> list[FeedbackRecord]:
        """Return all feedback previously saved for the dashboard."""
        ...

    @abstractmethod
    async def upsert_feedback(self, session_key: str, record: FeedbackRecord) -> None:
        """Insert or replace the record for ``record.podcast_id``."""
        ...

"""BackendClient: the engine's collaborators, served by the prospect API.

Implements CatalogSource, AnalysisSource, DemographicsSource and
FeedbackSink over HTTP. Non-2xx responses raise ``httpx.HTTPStatusError``;
the engine wraps them into LoadError / FetchError / PersistError.
"""

import logging
from urllib.parse import quote

import httpx

from src.config.settings import Settings, get_settings
from src.engine.collaborators import (
    AnalysisSource,
    CatalogSource,
    DemographicsSource,
    FeedbackSink,
)
from src.models.catalog import (
    AnalysisContext,
    CandidatePodcast,
    Demographics,
    FitAnalysis,
    ProspectDashboard,
)
from src.models.feedback import FeedbackRecord

logger = logging.getLogger(__name__)


def _seg(value: str) -> str:
    return quote(value, safe="")


class BackendClient(CatalogSource, AnalysisSource, DemographicsSource, FeedbackSink):
    """Thin async client; owns no state beyond the httpx connection pool."""

    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "BackendClient":
        settings = settings or get_settings()
        headers = {"apikey": settings.BACKEND_API_KEY} if settings.BACKEND_API_KEY else {}
        http = httpx.AsyncClient(
            base_url=settings.BACKEND_BASE_URL,
            headers=headers,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )
        return cls(http)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # CatalogSource
    # ------------------------------------------------------------------

    async def fetch_dashboard(self, session_key: str) -> ProspectDashboard:
        resp = await self._http.get(f"/v1/prospects/{_seg(session_key)}")
        resp.raise_for_status()
        return ProspectDashboard.model_validate(resp.json())

    async def fetch_catalog(self, session_key: str) -> list[CandidatePodcast]:
        resp = await self._http.get(f"/v1/prospects/{_seg(session_key)}/podcasts")
        resp.raise_for_status()
        return [CandidatePodcast.model_validate(item) for item in resp.json()]

    # ------------------------------------------------------------------
    # AnalysisSource / DemographicsSource
    # ------------------------------------------------------------------

    async def fetch_analysis(
        self,
        podcast: CandidatePodcast,
        context: AnalysisContext,
    ) -> FitAnalysis | None:
        resp = await self._http.get(
            f"/v1/prospects/{_seg(context.session_key)}"
            f"/podcasts/{_seg(podcast.podcast_id)}/analysis"
        )
        resp.raise_for_status()
        data = resp.json()
        return FitAnalysis.model_validate(data) if data else None

    async def fetch_demographics(self, podcast_id: str) -> Demographics | None:
        resp = await self._http.get(f"/v1/podcasts/{_seg(podcast_id)}/demographics")
        resp.raise_for_status()
        data = resp.json()
        return Demographics.model_validate(data) if data else None

    # ------------------------------------------------------------------
    # FeedbackSink
    # ------------------------------------------------------------------

    async def list_feedback(self, session_key: str) -> list[FeedbackRecord]:
        resp = await self._http.get(f"/v1/prospects/{_seg(session_key)}/feedback")
        resp.raise_for_status()
        return [FeedbackRecord.model_validate(item) for item in resp.json()]

    async def upsert_feedback(self, session_key: str, record: FeedbackRecord) -> None:
        resp = await self._http.put(
            f"/v1/prospects/{_seg(session_key)}/feedback/{_seg(record.podcast_id)}",
            json={
                "podcast_name": record.podcast_name,
                "status": record.status.value,
                "notes": record.notes,
            },
        )
        resp.raise_for_status()
        logger.debug("Feedback for %s saved (%s)", record.podcast_id, record.status)

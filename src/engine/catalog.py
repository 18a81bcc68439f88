"""CatalogStore: session-scoped, load-once catalog of candidate podcasts."""

import asyncio
import logging

from src.engine.collaborators import CatalogSource
from src.engine.errors import LoadError
from src.models.catalog import CandidatePodcast, ProspectDashboard

logger = logging.getLogger(__name__)


def dedupe_podcasts(podcasts: list[CandidatePodcast]) -> list[CandidatePodcast]:
    """Drop repeated podcast ids, keeping the first occurrence."""
    seen: set[str] = set()
    unique: list[CandidatePodcast] = []
    for podcast in podcasts:
        if podcast.podcast_id in seen:
            continue
        seen.add(podcast.podcast_id)
        unique.append(podcast)
    return unique


class CatalogStore:
    """Loads each dashboard's catalog at most once.

    Content is immutable for the session: nothing is added or removed
    client-side after load.
    """

    def __init__(self, source: CatalogSource) -> None:
        self._source = source
        self._catalogs: dict[str, tuple[CandidatePodcast, ...]] = {}
        self._dashboards: dict[str, ProspectDashboard] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def is_loaded(self, session_key: str) -> bool:
        return session_key in self._catalogs

    async def load(self, session_key: str) -> list[CandidatePodcast]:
        """Return the catalog for ``session_key``, fetching it on first use.

        Raises:
            LoadError: On transport failure, unknown or inactive dashboard.
        """
        if session_key in self._catalogs:
            return list(self._catalogs[session_key])

        lock = self._locks.setdefault(session_key, asyncio.Lock())
        async with lock:
            # A concurrent first load may have finished while we waited
            if session_key in self._catalogs:
                return list(self._catalogs[session_key])

            try:
                dashboard = await self._source.fetch_dashboard(session_key)
            except LoadError:
                raise
            except Exception as exc:
                logger.exception("Dashboard %s could not be fetched", session_key)
                raise LoadError(session_key, str(exc) or "dashboard not found") from exc

            if not dashboard.is_active:
                raise LoadError(session_key, "this dashboard link is no longer active")

            try:
                raw = await self._source.fetch_catalog(session_key)
            except LoadError:
                raise
            except Exception as exc:
                logger.exception("Catalog for %s could not be fetched", session_key)
                raise LoadError(session_key, str(exc) or "catalog unavailable") from exc

            podcasts = dedupe_podcasts(raw)
            dropped = len(raw) - len(podcasts)
            if dropped:
                logger.warning(
                    "Catalog %s: dropped %d duplicate podcast(s)", session_key, dropped,
                )

            self._dashboards[session_key] = dashboard
            self._catalogs[session_key] = tuple(podcasts)
            logger.info("Catalog %s loaded: %d podcasts", session_key, len(podcasts))
            return list(podcasts)

    def dashboard(self, session_key: str) -> ProspectDashboard:
        """Return the dashboard loaded alongside the catalog.

        Raises:
            KeyError: If ``load`` has not completed for this key.
        """
        if session_key not in self._dashboards:
            msg = f"Catalog '{session_key}' has not been loaded."
            raise KeyError(msg)
        return self._dashboards[session_key]

"""FeedbackStore: optimistic reviewer verdicts reconciled with a durable sink.

Per podcast the status moves freely between NONE, APPROVED and REJECTED.
Every change follows the same protocol:

1. apply the new record to the local map immediately (optimistic);
2. upsert the full record through the FeedbackSink;
3. on success, nothing more to do;
4. on failure, mark the podcast unsynced, log, and raise PersistError.
   The local record is kept unless ``rollback_on_failure`` is set.

Re-applying an identical status or note leaves the local record untouched
and re-sends it, so a failed write can be retried. A genuine transition
into APPROVED triggers the ``on_approved`` callback exactly once.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable

from src.engine.collaborators import FeedbackSink
from src.engine.errors import PersistError
from src.models.common import FeedbackStatus, utc_now
from src.models.feedback import FeedbackRecord

logger = logging.getLogger(__name__)

ApprovalCallback = Callable[[str], None]


class FeedbackStore:
    """Local verdict map for one dashboard session."""

    def __init__(
        self,
        *,
        session_key: str,
        sink: FeedbackSink,
        on_approved: ApprovalCallback | None = None,
        rollback_on_failure: bool = False,
    ) -> None:
        self._session_key = session_key
        self._sink = sink
        self._on_approved = on_approved
        self._rollback_on_failure = rollback_on_failure
        self._records: dict[str, FeedbackRecord] = {}
        self._unsynced: set[str] = set()
        self._write_locks: dict[str, asyncio.Lock] = {}

    # ----- Reads -----

    def get(self, podcast_id: str) -> FeedbackRecord | None:
        return self._records.get(podcast_id)

    def status_of(self, podcast_id: str) -> FeedbackStatus:
        record = self._records.get(podcast_id)
        return record.status if record is not None else FeedbackStatus.NONE

    def records(self) -> dict[str, FeedbackRecord]:
        """Snapshot of the local map, safe to hand to the pipeline."""
        return dict(self._records)

    @property
    def unsynced_ids(self) -> frozenset[str]:
        """Podcasts whose latest durable write failed."""
        return frozenset(self._unsynced)

    # ----- Writes -----

    def hydrate(self, records: Iterable[FeedbackRecord]) -> None:
        """Seed local state from previously persisted feedback."""
        for record in records:
            self._records[record.podcast_id] = record
        logger.info(
            "Feedback for %s hydrated: %d records", self._session_key, len(self._records),
        )

    async def set_status(
        self,
        podcast_id: str,
        status: FeedbackStatus,
        *,
        podcast_name: str | None = None,
    ) -> FeedbackRecord:
        """Set the verdict for a podcast (idempotent upsert).

        Raises:
            PersistError: If the durable write failed.
        """
        status = FeedbackStatus(status)
        previous = self._records.get(podcast_id)
        if previous is not None and previous.status == status:
            record = previous
        else:
            record = FeedbackRecord(
                podcast_id=podcast_id,
                podcast_name=podcast_name or (previous.podcast_name if previous else None),
                status=status,
                notes=previous.notes if previous else "",
                updated_at=utc_now(),
            )
            self._records[podcast_id] = record
            old = previous.status if previous else FeedbackStatus.NONE
            logger.info("Podcast %s: %s -> %s", podcast_id, old, status)
            if status == FeedbackStatus.APPROVED:
                self._celebrate(podcast_id)

        await self._persist(podcast_id, previous)
        return self._records.get(podcast_id, record)

    async def set_note(self, podcast_id: str, text: str) -> FeedbackRecord:
        """Set the reviewer note for a podcast (idempotent upsert).

        Raises:
            PersistError: If the durable write failed.
        """
        previous = self._records.get(podcast_id)
        if previous is not None and previous.notes == text:
            record = previous
        else:
            record = FeedbackRecord(
                podcast_id=podcast_id,
                podcast_name=previous.podcast_name if previous else None,
                status=previous.status if previous else FeedbackStatus.NONE,
                notes=text,
                updated_at=utc_now(),
            )
            self._records[podcast_id] = record

        await self._persist(podcast_id, previous)
        return self._records.get(podcast_id, record)

    def _celebrate(self, podcast_id: str) -> None:
        if self._on_approved is None:
            return
        try:
            self._on_approved(podcast_id)
        except Exception:
            logger.exception("Approval callback failed for %s", podcast_id)

    async def _persist(self, podcast_id: str, previous: FeedbackRecord | None) -> None:
        lock = self._write_locks.setdefault(podcast_id, asyncio.Lock())
        async with lock:
            # Always send the latest local record so the store converges on it
            record = self._records.get(podcast_id)
            if record is None:
                return
            try:
                await self._sink.upsert_feedback(self._session_key, record)
            except Exception as exc:
                self._unsynced.add(podcast_id)
                logger.warning(
                    "Feedback write for %s failed; local state %s: %s",
                    podcast_id,
                    "rolled back" if self._rollback_on_failure else "retained",
                    exc,
                )
                if self._rollback_on_failure and self._records.get(podcast_id) is record:
                    if previous is None:
                        del self._records[podcast_id]
                    else:
                        self._records[podcast_id] = previous
                raise PersistError(podcast_id, str(exc)) from exc
            self._unsynced.discard(podcast_id)

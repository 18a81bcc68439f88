"""Reviewer feedback record (one per podcast per dashboard)."""

from pydantic import Field

from src.models.common import FeedbackStatus, ProspectBase, UTCTimestamp, utc_now


class FeedbackRecord(ProspectBase, frozen=True):
    """Verdict and note for a single podcast."""

    podcast_id: str = Field(..., min_length=1)
    podcast_name: str | None = None
    status: FeedbackStatus = FeedbackStatus.NONE
    notes: str = ""
    updated_at: UTCTimestamp = Field(default_factory=utc_now)

    @property
    def is_reviewed(self) -> bool:
        return self.status != FeedbackStatus.NONE

"""Shared types, enums, and base models used across the review engine."""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]


# --- Shared enums ---


class FeedbackStatus(StrEnum):
    """Reviewer verdict for a single podcast."""

    APPROVED = "approved"
    REJECTED = "rejected"
    NONE = "none"


class FeedbackFilter(StrEnum):
    """Feedback-status filter offered to the reviewer."""

    ALL = "all"
    APPROVED = "approved"
    REJECTED = "rejected"
    NOT_REVIEWED = "not_reviewed"


class EpisodeBucket(StrEnum):
    """Episode-count ranges (half-open)."""

    ANY = "any"
    UNDER_50 = "under50"
    FROM_50_TO_100 = "50to100"
    FROM_100_TO_200 = "100to200"
    OVER_200 = "200plus"


class AudienceBucket(StrEnum):
    """Audience-size ranges (half-open)."""

    ANY = "any"
    UNDER_1K = "under1k"
    FROM_1K_TO_5K = "1kto5k"
    FROM_5K_TO_10K = "5kto10k"
    FROM_10K_TO_25K = "10kto25k"
    FROM_25K_TO_50K = "25kto50k"
    FROM_50K_TO_100K = "50kto100k"
    OVER_50K = "50kplus"
    OVER_100K = "100kplus"


class SortMode(StrEnum):
    """Result ordering."""

    DEFAULT = "default"
    AUDIENCE_DESC = "audience_desc"
    AUDIENCE_ASC = "audience_asc"
    NAME = "name"


# --- Base model ---


class ProspectBase(BaseModel):
    """Base model with common configuration for all engine Pydantic models."""

    model_config = {
        "populate_by_name": True,
        "protected_namespaces": (),
    }

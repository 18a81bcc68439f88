"""Review engine error taxonomy.

- LoadError: catalog unavailable. Fatal for the session.
- FetchError: derived data unavailable for one podcast. The cache key stays
  retryable.
- PersistError: durable feedback write failed. Local state is retained
  unless rollback is configured.
"""


class ReviewEngineError(Exception):
    """Base class for all review engine errors."""


class LoadError(ReviewEngineError):
    """The catalog (or its dashboard) could not be loaded."""

    def __init__(self, session_key: str, reason: str) -> None:
        self.session_key = session_key
        self.reason = reason
        super().__init__(f"Could not load dashboard '{session_key}': {reason}")


class FetchError(ReviewEngineError):
    """Derived data (analysis / demographics) could not be fetched."""

    def __init__(self, podcast_id: str, kind: str, reason: str) -> None:
        self.podcast_id = podcast_id
        self.kind = kind
        self.reason = reason
        super().__init__(f"{kind} fetch failed for podcast {podcast_id}: {reason}")


class PersistError(ReviewEngineError):
    """A feedback upsert was rejected or never reached the store."""

    def __init__(self, podcast_id: str, reason: str) -> None:
        self.podcast_id = podcast_id
        self.reason = reason
        super().__init__(f"Feedback for podcast {podcast_id} was not saved: {reason}")

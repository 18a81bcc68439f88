"""SearchDebouncer: coalesce keystrokes into one settled query."""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_QUIET_SECONDS = 0.3


class SearchDebouncer:
    """Emit ``on_settled(text)`` once input has been quiet for ``delay`` seconds.

    Each ``on_input`` call re-arms the timer, so a burst produces a single
    emission carrying the last value. Must be driven from a running loop.
    """

    def __init__(
        self,
        on_settled: Callable[[str], None],
        *,
        delay: float = DEFAULT_QUIET_SECONDS,
    ) -> None:
        if delay < 0:
            msg = f"delay must be >= 0, got {delay}."
            raise ValueError(msg)
        self._on_settled = on_settled
        self._delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._latest: str | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def on_input(self, text: str) -> None:
        self._cancel_timer()
        self._latest = text
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay, self._fire)

    def flush(self) -> None:
        """Emit the pending value immediately, if any."""
        if self._handle is not None:
            self._cancel_timer()
            self._fire()

    def cancel(self) -> None:
        """Drop the pending value without emitting."""
        self._cancel_timer()
        self._latest = None

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        text, self._latest = self._latest, None
        if text is None:
            return
        try:
            self._on_settled(text)
        except Exception:
            logger.exception("Search settle handler failed for %r", text)

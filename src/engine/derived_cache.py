"""DerivedDataCache: memoizing, single-flight, fetch-on-miss cache.

Used once for fit analyses and once for demographics. Every key moves
through three states:

    UNSET --ensure()--> PENDING --fetch ok--> SETTLED (terminal)
                           |
                           +--fetch failed--> UNSET (retryable)

A SETTLED entry whose value is None is the explicit-absent sentinel:
"checked, nothing available", as opposed to UNSET, "never checked".
Settled entries are never invalidated, overwritten or re-fetched.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from src.engine.errors import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[str], Awaitable[T | None]]


class CacheState(StrEnum):
    """Lifecycle of a single cache key."""

    UNSET = "UNSET"
    PENDING = "PENDING"
    SETTLED = "SETTLED"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """Snapshot of one cache key."""

    state: CacheState
    value: T | None = None

    @property
    def is_unset(self) -> bool:
        return self.state == CacheState.UNSET

    @property
    def is_pending(self) -> bool:
        return self.state == CacheState.PENDING

    @property
    def is_settled(self) -> bool:
        return self.state == CacheState.SETTLED

    @property
    def is_absent(self) -> bool:
        """Settled with no data."""
        return self.state == CacheState.SETTLED and self.value is None


def _consume_exception(task: asyncio.Task) -> None:
    # Mark the failure retrieved; waiters still receive it through shield()
    if not task.cancelled():
        task.exception()


class DerivedDataCache(Generic[T]):
    """Per-session cache keyed by podcast id.

    Owned by a SessionOrchestrator and discarded with it.
    """

    def __init__(self, kind: str) -> None:
        self._kind = kind
        self._settled: dict[str, T | None] = {}
        self._pending: dict[str, asyncio.Task] = {}
        self._failures: dict[str, int] = {}

    @property
    def kind(self) -> str:
        return self._kind

    def __len__(self) -> int:
        return len(self._settled)

    # ----- Peeking -----

    def get(self, key: str) -> CacheEntry[T]:
        """Synchronous peek. Never triggers a fetch."""
        if key in self._settled:
            return CacheEntry(CacheState.SETTLED, self._settled[key])
        if key in self._pending:
            return CacheEntry(CacheState.PENDING)
        return CacheEntry(CacheState.UNSET)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def failures(self, key: str) -> int:
        """Consecutive failed fetches for ``key`` since it was last settled."""
        return self._failures.get(key, 0)

    def settled_count(self, keys: Iterable[str] | None = None) -> int:
        """Number of settled entries, optionally restricted to ``keys``."""
        if keys is None:
            return len(self._settled)
        return sum(1 for k in set(keys) if k in self._settled)

    # ----- Filling -----

    def seed(self, key: str, value: T | None) -> bool:
        """Pre-warm ``key`` with a value known at load time.

        Returns False (and changes nothing) if the key is already settled.
        """
        if key in self._settled:
            return False
        self._settled[key] = value
        return True

    async def ensure(self, key: str, fetcher: Fetcher) -> T | None:
        """Return the cached value, fetching it at most once.

        Concurrent callers for the same key share one in-flight fetch.
        A None result settles the key as explicit-absent.

        Raises:
            FetchError: If the fetch failed. The key is UNSET again and a
                later call will retry.
        """
        if key in self._settled:
            return self._settled[key]

        task = self._pending.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._fetch(key, fetcher))
            task.add_done_callback(_consume_exception)
            self._pending[key] = task
        # One waiter being cancelled must not abort the shared fetch
        return await asyncio.shield(task)

    async def _fetch(self, key: str, fetcher: Fetcher) -> T | None:
        try:
            value = await fetcher(key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._failures[key] = self._failures.get(key, 0) + 1
            logger.warning(
                "%s fetch for %s failed (attempt %d): %s",
                self._kind, key, self._failures[key], exc,
            )
            raise FetchError(key, self._kind, str(exc)) from exc
        finally:
            if self._pending.get(key) is asyncio.current_task():
                del self._pending[key]

        self._failures.pop(key, None)
        if key not in self._settled:
            self._settled[key] = value
        else:
            logger.debug("%s for %s was seeded while in flight; keeping seed", self._kind, key)
        return self._settled[key]

    # ----- Teardown -----

    def clear(self) -> None:
        """Cancel in-flight fetches and drop every entry."""
        for task in list(self._pending.values()):
            task.cancel()
        self._pending.clear()
        self._settled.clear()
        self._failures.clear()

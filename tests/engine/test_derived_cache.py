"""Tests for DerivedDataCache: state machine, single-flight, retry."""

import asyncio

import pytest

from src.engine.derived_cache import CacheState, DerivedDataCache
from src.engine.errors import FetchError


class CountingFetcher:
    def __init__(self, value="value", *, fail_times: int = 0) -> None:
        self.value = value
        self.fail_times = fail_times
        self.calls = 0
        self.gate = asyncio.Event()
        self.gate.set()

    async def __call__(self, key: str):
        self.calls += 1
        await self.gate.wait()
        if self.fail_times > 0:
            self.fail_times -= 1
            raise RuntimeError("boom")
        return self.value


class TestPeek:

    def test_unknown_key_is_unset(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        entry = cache.get("p1")
        assert entry.state == CacheState.UNSET
        assert entry.is_unset
        assert entry.value is None

    @pytest.mark.anyio
    async def test_settled_entry_exposes_value(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        await cache.ensure("p1", CountingFetcher("fit"))
        entry = cache.get("p1")
        assert entry.is_settled
        assert entry.value == "fit"
        assert not entry.is_absent


class TestSingleFlight:

    @pytest.mark.anyio
    async def test_concurrent_ensures_share_one_fetch(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fit")
        fetcher.gate.clear()

        first = asyncio.create_task(cache.ensure("p1", fetcher))
        second = asyncio.create_task(cache.ensure("p1", fetcher))
        await asyncio.sleep(0)
        assert cache.get("p1").is_pending
        assert cache.is_pending("p1")

        fetcher.gate.set()
        results = await asyncio.gather(first, second)

        assert results == ["fit", "fit"]
        assert fetcher.calls == 1
        assert cache.get("p1").is_settled

    @pytest.mark.anyio
    async def test_settled_key_is_never_refetched(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("demographics")
        fetcher = CountingFetcher("data")
        await cache.ensure("p1", fetcher)
        await cache.ensure("p1", fetcher)
        await cache.ensure("p1", fetcher)
        assert fetcher.calls == 1

    @pytest.mark.anyio
    async def test_distinct_keys_fetch_independently(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fit")
        await asyncio.gather(cache.ensure("p1", fetcher), cache.ensure("p2", fetcher))
        assert fetcher.calls == 2
        assert cache.settled_count() == 2


class TestExplicitAbsent:

    @pytest.mark.anyio
    async def test_none_result_settles_as_absent(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("demographics")
        fetcher = CountingFetcher(None)
        assert await cache.ensure("p1", fetcher) is None
        entry = cache.get("p1")
        assert entry.is_settled
        assert entry.is_absent

    @pytest.mark.anyio
    async def test_absent_is_not_refetched(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("demographics")
        fetcher = CountingFetcher(None)
        await cache.ensure("p1", fetcher)
        await cache.ensure("p1", fetcher)
        assert fetcher.calls == 1


class TestFailure:

    @pytest.mark.anyio
    async def test_failure_raises_fetch_error_and_resets_to_unset(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fit", fail_times=1)

        with pytest.raises(FetchError) as exc_info:
            await cache.ensure("p1", fetcher)

        assert exc_info.value.podcast_id == "p1"
        assert exc_info.value.kind == "analysis"
        assert cache.get("p1").is_unset
        assert cache.failures("p1") == 1

    @pytest.mark.anyio
    async def test_failed_key_is_retryable(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fit", fail_times=1)

        with pytest.raises(FetchError):
            await cache.ensure("p1", fetcher)
        assert await cache.ensure("p1", fetcher) == "fit"

        assert fetcher.calls == 2
        assert cache.get("p1").is_settled
        assert cache.failures("p1") == 0

    @pytest.mark.anyio
    async def test_all_waiters_see_the_shared_failure(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fit", fail_times=1)
        fetcher.gate.clear()

        first = asyncio.create_task(cache.ensure("p1", fetcher))
        second = asyncio.create_task(cache.ensure("p1", fetcher))
        await asyncio.sleep(0)
        fetcher.gate.set()
        results = await asyncio.gather(first, second, return_exceptions=True)

        assert all(isinstance(r, FetchError) for r in results)
        assert fetcher.calls == 1


class TestSeed:

    @pytest.mark.anyio
    async def test_seeded_key_short_circuits_fetch(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fresh")
        assert cache.seed("p1", "embedded") is True

        assert await cache.ensure("p1", fetcher) == "embedded"
        assert fetcher.calls == 0

    def test_seed_does_not_overwrite_settled(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        cache.seed("p1", "first")
        assert cache.seed("p1", "second") is False
        assert cache.get("p1").value == "first"

    @pytest.mark.anyio
    async def test_seed_during_flight_wins(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fetched")
        fetcher.gate.clear()

        task = asyncio.create_task(cache.ensure("p1", fetcher))
        await asyncio.sleep(0)
        cache.seed("p1", "seeded")
        fetcher.gate.set()

        assert await task == "seeded"
        assert cache.get("p1").value == "seeded"


class TestCountsAndClear:

    def test_settled_count_restricted_to_keys(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        cache.seed("p1", "a")
        cache.seed("p2", None)
        cache.seed("other", "x")
        assert cache.settled_count(["p1", "p2", "p3"]) == 2
        assert len(cache) == 3

    @pytest.mark.anyio
    async def test_clear_cancels_pending_and_drops_entries(self) -> None:
        cache: DerivedDataCache[str] = DerivedDataCache("analysis")
        fetcher = CountingFetcher("fit")
        fetcher.gate.clear()
        cache.seed("p1", "a")

        task = asyncio.create_task(cache.ensure("p2", fetcher))
        await asyncio.sleep(0)
        cache.clear()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(cache) == 0
        assert cache.get("p2").is_unset

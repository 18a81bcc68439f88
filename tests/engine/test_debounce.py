"""Tests for SearchDebouncer: keystroke coalescing on the event loop."""

import asyncio

import pytest

from src.engine.debounce import SearchDebouncer


class TestCoalescing:

    @pytest.mark.anyio
    async def test_burst_emits_once_with_last_value(self) -> None:
        settled: list[str] = []
        debouncer = SearchDebouncer(settled.append, delay=0.3)

        for text in ("c", "cl", "cli"):
            debouncer.on_input(text)
            await asyncio.sleep(0.05)
        assert settled == []

        await asyncio.sleep(0.4)
        assert settled == ["cli"]
        assert not debouncer.pending

    @pytest.mark.anyio
    async def test_separate_bursts_emit_separately(self) -> None:
        settled: list[str] = []
        debouncer = SearchDebouncer(settled.append, delay=0.05)

        debouncer.on_input("a")
        await asyncio.sleep(0.1)
        debouncer.on_input("ab")
        await asyncio.sleep(0.1)

        assert settled == ["a", "ab"]

    @pytest.mark.anyio
    async def test_empty_string_is_emitted(self) -> None:
        settled: list[str] = []
        debouncer = SearchDebouncer(settled.append, delay=0.01)
        debouncer.on_input("")
        await asyncio.sleep(0.05)
        assert settled == [""]


class TestFlushAndCancel:

    @pytest.mark.anyio
    async def test_flush_emits_immediately(self) -> None:
        settled: list[str] = []
        debouncer = SearchDebouncer(settled.append, delay=10)
        debouncer.on_input("now")
        debouncer.flush()
        assert settled == ["now"]
        assert not debouncer.pending

    @pytest.mark.anyio
    async def test_cancel_drops_pending_value(self) -> None:
        settled: list[str] = []
        debouncer = SearchDebouncer(settled.append, delay=0.02)
        debouncer.on_input("never")
        assert debouncer.pending
        debouncer.cancel()
        await asyncio.sleep(0.05)
        assert settled == []

    def test_flush_without_input_is_noop(self) -> None:
        settled: list[str] = []
        SearchDebouncer(settled.append).flush()
        assert settled == []


class TestValidation:

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError, match="delay"):
            SearchDebouncer(print, delay=-1)

    @pytest.mark.anyio
    async def test_handler_error_is_contained(self) -> None:
        def explode(text: str) -> None:
            raise RuntimeError("bad handler")

        debouncer = SearchDebouncer(explode, delay=0.01)
        debouncer.on_input("x")
        await asyncio.sleep(0.05)
        assert not debouncer.pending

"""Tests for request sequencing, debouncing and the event hub."""

import asyncio
import logging

import pytest

from booking_client.sync.debounce import Debouncer
from booking_client.sync.events import EventHub
from booking_client.sync.sequencing import RequestSequencer


class TestRequestSequencer:
    def test_only_newest_is_latest(self) -> None:
        seq = RequestSequencer()
        first = seq.next("search")
        second = seq.next("search")
        assert not seq.is_latest("search", first)
        assert seq.is_latest("search", second)

    def test_slots_are_independent(self) -> None:
        seq = RequestSequencer()
        a = seq.next("popular")
        seq.next("nearby")
        assert seq.is_latest("popular", a)

    def test_unknown_slot(self) -> None:
        assert not RequestSequencer().is_latest("bookings", 1)


class TestDebouncer:
    async def test_only_last_call_runs(self) -> None:
        calls: list[str] = []

        def make(value: str):
            async def fn() -> str:
                calls.append(value)
                return value
            return fn

        debouncer = Debouncer(0.01)
        first = debouncer.schedule(make("a"))
        second = debouncer.schedule(make("b"))

        assert await second == "b"
        assert first.cancelled()
        assert calls == ["b"]
        assert not debouncer.pending

    async def test_cancel(self) -> None:
        ran = False

        async def fn() -> None:
            nonlocal ran
            ran = True

        debouncer = Debouncer(0.01)
        task = debouncer.schedule(fn)
        assert debouncer.pending
        debouncer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert ran is False


class TestEventHub:
    def test_delivers_to_all_handlers(self) -> None:
        hub = EventHub()
        seen: list[tuple[str, str]] = []
        hub.subscribe(lambda e: seen.append(("a", e)))
        hub.subscribe(lambda e: seen.append(("b", e)))
        hub.publish("SIGNED_IN")
        assert seen == [("a", "SIGNED_IN"), ("b", "SIGNED_IN")]

    def test_unsubscribe(self) -> None:
        hub = EventHub()
        seen: list[str] = []
        unsubscribe = hub.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        hub.publish("SIGNED_OUT")
        assert seen == []

    def test_failing_handler_does_not_stop_others(self, caplog: pytest.LogCaptureFixture) -> None:
        hub = EventHub()
        seen: list[str] = []

        def broken(event: str) -> None:
            raise RuntimeError("boom")

        hub.subscribe(broken)
        hub.subscribe(seen.append)
        with caplog.at_level(logging.ERROR, logger="booking_client.sync.events"):
            hub.publish("SESSION_EXPIRED")

        assert seen == ["SESSION_EXPIRED"]
        assert "Error in event handler broken" in caplog.text

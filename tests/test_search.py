"""Tests for SearchController: minimum length, paging, debounce and stale discard."""

import asyncio

import httpx
import pytest

from booking_client.clients.api import ApiClient
from booking_client.controllers.search import SearchController

from conftest import FakeBookingApi, accommodation_payload, page_payload


@pytest.fixture
def search(api: ApiClient) -> SearchController:
    return SearchController(api, debounce_s=0.01, min_query_length=3, page_size=10)


def _paged(request: httpx.Request) -> httpx.Response:
    page = int(request.url.params.get("page", "1"))
    query = request.url.params["query"]
    return httpx.Response(
        200, json=page_payload([accommodation_payload(f"{query}-{page}")], page=page, total_pages=2)
    )


class TestSearch:
    async def test_short_query_sends_nothing(self, search: SearchController, fake_api: FakeBookingApi) -> None:
        assert await search.search(" pa ") == []
        assert fake_api.requests == []
        assert search.has_more is False

    async def test_first_page(self, search: SearchController, fake_api: FakeBookingApi) -> None:
        fake_api.on("GET", "/api/accommodations/search", handler=_paged)
        results = await search.search("paris")
        assert [a.id for a in results] == ["paris-1"]
        assert search.page == 1
        assert search.has_more
        params = fake_api.requests[-1].url.params
        assert (params["query"], params["page"], params["limit"]) == ("paris", "1", "10")

    async def test_load_more_appends(self, search: SearchController, fake_api: FakeBookingApi) -> None:
        fake_api.on("GET", "/api/accommodations/search", handler=_paged)
        await search.search("paris")
        results = await search.load_more()
        assert [a.id for a in results] == ["paris-1", "paris-2"]
        assert not search.has_more

        await search.load_more()
        assert len(fake_api.requests) == 2

    async def test_refresh_restarts_at_first_page(
        self, search: SearchController, fake_api: FakeBookingApi
    ) -> None:
        fake_api.on("GET", "/api/accommodations/search", handler=_paged)
        await search.search("paris")
        await search.load_more()
        results = await search.refresh()
        assert [a.id for a in results] == ["paris-1"]

    async def test_shortening_query_clears_results(
        self, search: SearchController, fake_api: FakeBookingApi
    ) -> None:
        fake_api.on("GET", "/api/accommodations/search", handler=_paged)
        await search.search("paris")
        await search.search("pa")
        assert search.results == []
        assert search.page == 0

    async def test_superseded_response_is_discarded(
        self, search: SearchController, fake_api: FakeBookingApi
    ) -> None:
        slow_gate = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["query"] == "paris":
                await slow_gate.wait()
            return _paged(request)

        fake_api.on("GET", "/api/accommodations/search", handler=handler)

        slow = asyncio.create_task(search.search("paris"))
        await asyncio.sleep(0)
        await search.search("rome")
        slow_gate.set()
        await slow

        assert [a.id for a in search.results] == ["rome-1"]
        assert search.query == "rome"

    async def test_short_query_discards_in_flight_search(
        self, search: SearchController, fake_api: FakeBookingApi
    ) -> None:
        gate = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await gate.wait()
            return _paged(request)

        fake_api.on("GET", "/api/accommodations/search", handler=handler)
        slow = asyncio.create_task(search.search("paris"))
        await asyncio.sleep(0)
        await search.search("")
        gate.set()
        await slow
        assert search.results == []


class TestSearchAsYouType:
    async def test_only_last_keystroke_is_sent(
        self, search: SearchController, fake_api: FakeBookingApi
    ) -> None:
        fake_api.on("GET", "/api/accommodations/search", handler=_paged)
        first = search.search_as_you_type("par")
        search.search_as_you_type("pari")
        last = search.search_as_you_type("paris")

        results = await last

        assert first.cancelled()
        assert [a.id for a in results] == ["paris-1"]
        assert [r.url.params["query"] for r in fake_api.requests] == ["paris"]

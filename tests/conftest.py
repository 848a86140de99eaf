"""Shared fixtures for booking-client tests."""

import asyncio
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable

import httpx
import pytest

from booking_client.clients.api import ApiClient
from booking_client.clients.token_store import TokenStore
from booking_client.controllers.session import SessionController
from booking_client.sync.cache import ClientCache
from booking_client.sync.events import EventHub

Handler = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


class FakeClock:
    def __init__(self, start_ms: int = 1_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class FakeBookingApi:
    """Routes requests by (method, path) and records every request it sees."""

    def __init__(self) -> None:
        self._routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        json: Any = None,
        status: int = 200,
        handler: Handler | None = None,
    ) -> None:
        if handler is None:
            def handler(request: httpx.Request) -> httpx.Response:
                return httpx.Response(status, json=json)
        self._routes[(method, path)] = handler

    def gated(self, method: str, path: str, json: Any = None, status: int = 200) -> asyncio.Event:
        """Register a route whose response is held back until the returned event is set."""
        gate = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            await gate.wait()
            return httpx.Response(status, json=json)

        self.on(method, path, handler=handler)
        return gate

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    async def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        response = handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)


def user_payload(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "_id": "user-1",
        "email": "user@example.com",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone_number": "+44 20 7946 0000",
        "location": {"type": "Point", "coordinates": [-0.1276, 51.5072], "address": "London"},
        "is_admin": False,
        "is_active": True,
        "profile_image_url": None,
        "created_at": "2025-01-01T00:00:00",
    }
    data.update(overrides)
    return data


def room_payload(room_id: str = "room1", **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "_id": room_id,
        "name": f"Room {room_id}",
        "description": None,
        "price_per_night": 120.0,
        "capacity": 2,
        "amenities": ["wifi"],
        "images": [],
        "is_available": True,
    }
    data.update(overrides)
    return data


def accommodation_payload(accommodation_id: str = "acc-1", **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "_id": accommodation_id,
        "name": f"Hotel {accommodation_id}",
        "description": "Close to everything",
        "accommodation_type": "hotel",
        "location": {"type": "Point", "coordinates": [2.3522, 48.8566], "address": "Paris"},
        "address": "1 Rue de Rivoli",
        "city": "Paris",
        "state": "",
        "country": "France",
        "amenities": ["wifi", "pool"],
        "rooms": [room_payload("room1"), room_payload("room2", price_per_night=90.0)],
        "images": [],
        "rating": 4.2,
        "contact_email": "desk@example.com",
        "contact_phone": "",
    }
    data.update(overrides)
    return data


def booking_payload(booking_id: str = "bk-1", **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "_id": booking_id,
        "accommodation_id": "acc-1",
        "room_id": "room1",
        "check_in_date": "2025-06-01",
        "check_out_date": "2025-06-05",
        "guests": 2,
        "special_requests": "",
        "user_id": "user-1",
        "total_price": 480.0,
        "booking_status": "pending",
        "payment_status": "pending",
        "created_at": "2025-05-01T10:00:00",
    }
    data.update(overrides)
    return data


def page_payload(results: list[dict[str, Any]], page: int = 1, total_pages: int = 1) -> dict[str, Any]:
    return {
        "results": results,
        "page": page,
        "limit": 10,
        "total_count": len(results) * total_pages,
        "total_pages": total_pages,
    }


@pytest.fixture
def fake_api() -> FakeBookingApi:
    return FakeBookingApi()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ClientCache:
    return ClientCache(clock)


@pytest.fixture
def token_store(tmp_path: Path) -> TokenStore:
    return TokenStore(tmp_path / "token")


@pytest.fixture
async def api(token_store: TokenStore, fake_api: FakeBookingApi) -> AsyncIterator[ApiClient]:
    client = ApiClient(token_store, base_url="https://api.test", timeout=5.0, transport=fake_api.transport)
    yield client
    await client.aclose()


@pytest.fixture
def events() -> EventHub:
    return EventHub()


@pytest.fixture
def session(api: ApiClient, token_store: TokenStore, events: EventHub) -> SessionController:
    return SessionController(api, token_store, events, location_debounce_s=0.01)


@pytest.fixture
async def signed_in_session(
    session: SessionController, token_store: TokenStore, fake_api: FakeBookingApi
) -> SessionController:
    token_store.set("valid-token")
    fake_api.on("GET", "/api/auth/me", json=user_payload())
    await session.start()
    return session

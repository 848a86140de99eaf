"""Tests for BookingsController and tab partitioning."""

from datetime import date

import httpx
import pytest

from booking_client.clients.api import ApiClient
from booking_client.controllers.bookings import BookingsController, partition_bookings
from booking_client.errors import HttpError
from booking_client.models.booking import Booking, BookingStatus, BookingTab

from conftest import FakeBookingApi, booking_payload

TODAY = date(2025, 6, 1)


def _bookings() -> list[dict]:
    return [
        booking_payload("future", check_in_date="2025-07-01", check_out_date="2025-07-03"),
        booking_payload("today", check_in_date="2025-06-01", check_out_date="2025-06-02"),
        booking_payload("past", check_in_date="2025-01-10", check_out_date="2025-01-12", booking_status="completed"),
        booking_payload("cancelled", check_in_date="2025-08-01", booking_status="cancelled"),
    ]


@pytest.fixture
def bookings(api: ApiClient) -> BookingsController:
    return BookingsController(api)


class TestPartition:
    def test_partition(self) -> None:
        tabs = partition_bookings([Booking.model_validate(b) for b in _bookings()], TODAY)
        assert [b.id for b in tabs[BookingTab.upcoming]] == ["future", "today"]
        assert [b.id for b in tabs[BookingTab.past]] == ["past"]
        assert [b.id for b in tabs[BookingTab.cancelled]] == ["cancelled"]

    def test_unparseable_date_is_past(self) -> None:
        tabs = partition_bookings([Booking.model_validate(booking_payload(check_in_date="soon"))], TODAY)
        assert len(tabs[BookingTab.past]) == 1

    def test_datetime_strings_are_accepted(self) -> None:
        tabs = partition_bookings(
            [Booking.model_validate(booking_payload(check_in_date="2025-06-02T14:00:00"))], TODAY
        )
        assert len(tabs[BookingTab.upcoming]) == 1


class TestLoad:
    async def test_load_tab(self, bookings: BookingsController, fake_api: FakeBookingApi) -> None:
        fake_api.on("GET", "/api/users/bookings", json=_bookings())
        result = await bookings.load(BookingTab.past, today=TODAY)
        assert [b.id for b in result] == ["past"]
        assert bookings.tab == BookingTab.past

    async def test_reload_keeps_identity(self, bookings: BookingsController, fake_api: FakeBookingApi) -> None:
        fake_api.on("GET", "/api/users/bookings", json=_bookings())
        first = await bookings.load(BookingTab.upcoming, today=TODAY)
        assert await bookings.load(BookingTab.upcoming, today=TODAY) is first

    async def test_get(self, bookings: BookingsController, fake_api: FakeBookingApi) -> None:
        fake_api.on("GET", "/api/users/bookings/bk-1", json=booking_payload())
        assert (await bookings.get("bk-1")).id == "bk-1"


class TestCancel:
    async def test_cancel_marks_booking_and_keeps_it(
        self, bookings: BookingsController, fake_api: FakeBookingApi
    ) -> None:
        fake_api.on("GET", "/api/users/bookings", json=_bookings())
        fake_api.on("DELETE", "/api/bookings/future", handler=lambda r: httpx.Response(204))
        await bookings.load(BookingTab.upcoming, today=TODAY)

        cancelled = await bookings.cancel("future")

        assert cancelled is not None
        assert cancelled.booking_status == BookingStatus.cancelled
        assert [b.id for b in bookings.bookings] == ["future", "today"]
        assert bookings.bookings[0].booking_status == BookingStatus.cancelled

    async def test_failed_cancel_changes_nothing(
        self, bookings: BookingsController, fake_api: FakeBookingApi
    ) -> None:
        fake_api.on("GET", "/api/users/bookings", json=_bookings())
        fake_api.on("DELETE", "/api/bookings/future", json={"detail": "Too late to cancel"}, status=400)
        await bookings.load(BookingTab.upcoming, today=TODAY)

        with pytest.raises(HttpError):
            await bookings.cancel("future")
        assert bookings.bookings[0].booking_status == BookingStatus.pending

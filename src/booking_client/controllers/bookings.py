"""The user's bookings: tabbed listing, detail, and cancellation."""

import logging
from datetime import date

from booking_client.clients.api import ApiClient
from booking_client.errors import BookingClientError
from booking_client.models.booking import Booking, BookingStatus, BookingTab
from booking_client.sync.cache import replace_if_changed
from booking_client.sync.sequencing import RequestSequencer

logger = logging.getLogger(__name__)

_SLOT = "bookings"


class BookingsController:
    def __init__(self, api: ApiClient, sequencer: RequestSequencer | None = None) -> None:
        self._api = api
        self._sequencer = sequencer or RequestSequencer()
        self.tab = BookingTab.upcoming
        self.bookings: list[Booking] = []

    async def load(self, tab: BookingTab = BookingTab.upcoming, today: date | None = None) -> list[Booking]:
        self.tab = tab
        seq = self._sequencer.next(_SLOT)
        try:
            fetched = await self._api.get_user_bookings()
        except BookingClientError as e:
            logger.error("Error fetching bookings: %s", e)
            raise
        if not self._sequencer.is_latest(_SLOT, seq):
            logger.debug("Discarding superseded bookings response for tab %s", tab.value)
            return self.bookings

        filtered = partition_bookings(fetched, today or date.today())[tab]
        self.bookings = replace_if_changed(self.bookings, filtered)
        return self.bookings

    async def get(self, booking_id: str) -> Booking:
        return await self._api.get_user_booking(booking_id)

    async def cancel(self, booking_id: str) -> Booking | None:
        """Cancel server-side, then mark the held booking cancelled. Bookings are never dropped."""
        try:
            await self._api.cancel_booking(booking_id)
        except BookingClientError as e:
            logger.error("Error cancelling booking %s: %s", booking_id, e)
            raise
        logger.info("Cancelled booking %s", booking_id)

        cancelled: Booking | None = None
        updated: list[Booking] = []
        for b in self.bookings:
            if b.id == booking_id:
                b = b.model_copy(update={"booking_status": BookingStatus.cancelled})
                cancelled = b
            updated.append(b)
        self.bookings = updated
        return cancelled


def partition_bookings(bookings: list[Booking], today: date) -> dict[BookingTab, list[Booking]]:
    tabs: dict[BookingTab, list[Booking]] = {tab: [] for tab in BookingTab}
    for b in bookings:
        if b.booking_status == BookingStatus.cancelled:
            tabs[BookingTab.cancelled].append(b)
        elif _parse_date(b.check_in_date) >= today:
            tabs[BookingTab.upcoming].append(b)
        else:
            tabs[BookingTab.past].append(b)
    return tabs


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return date.min

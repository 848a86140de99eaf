"""Paginated accommodation search with debounce and stale-response discard."""

import asyncio
import logging

from booking_client.clients.api import ApiClient
from booking_client.config import settings
from booking_client.errors import BookingClientError
from booking_client.models.accommodation import AccommodationSummary
from booking_client.sync.debounce import Debouncer
from booking_client.sync.sequencing import RequestSequencer

logger = logging.getLogger(__name__)

_SLOT = "search"


class SearchController:
    def __init__(
        self,
        api: ApiClient,
        sequencer: RequestSequencer | None = None,
        debounce_s: float | None = None,
        min_query_length: int | None = None,
        page_size: int | None = None,
    ) -> None:
        self._api = api
        self._sequencer = sequencer or RequestSequencer()
        self._debouncer = Debouncer(
            debounce_s if debounce_s is not None else settings.search_debounce_seconds
        )
        self._min_length = min_query_length if min_query_length is not None else settings.search_min_query_length
        self._page_size = page_size or settings.listing_limit
        self.query = ""
        self.page = 0
        self.total_pages = 0
        self.results: list[AccommodationSummary] = []

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages

    async def search(self, query: str) -> list[AccommodationSummary]:
        query = query.strip()
        self.query = query
        if len(query) < self._min_length:
            # Invalidate anything still in flight for the previous query
            self._sequencer.next(_SLOT)
            self.results = []
            self.page = 0
            self.total_pages = 0
            return self.results
        return await self._fetch(query, page=1)

    def search_as_you_type(self, query: str) -> "asyncio.Task[list[AccommodationSummary]]":
        return self._debouncer.schedule(lambda: self.search(query))

    async def load_more(self) -> list[AccommodationSummary]:
        if not self.query or not self.has_more:
            return self.results
        return await self._fetch(self.query, page=self.page + 1)

    async def refresh(self) -> list[AccommodationSummary]:
        return await self.search(self.query)

    async def _fetch(self, query: str, page: int) -> list[AccommodationSummary]:
        seq = self._sequencer.next(_SLOT)
        try:
            result = await self._api.search_accommodations(query, page=page, limit=self._page_size)
        except BookingClientError as e:
            logger.error("Search for %r failed: %s", query, e)
            raise
        if not self._sequencer.is_latest(_SLOT, seq):
            logger.debug("Discarding superseded search response for %r", query)
            return self.results

        self.results = result.results if page == 1 else self.results + result.results
        self.page = result.page
        self.total_pages = result.total_pages
        return self.results

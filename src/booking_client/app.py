"""Application container: builds each service once and hands out references."""

import logging
from typing import Any

import httpx

from booking_client.clients.api import ApiClient
from booking_client.clients.token_store import TokenStore
from booking_client.config import Settings, settings as default_settings
from booking_client.controllers.bookings import BookingsController
from booking_client.controllers.favorites import FavoritesController
from booking_client.controllers.listings import ListingsController
from booking_client.controllers.search import SearchController
from booking_client.controllers.session import SessionController
from booking_client.controllers.wizard import BookingWizard
from booking_client.errors import BookingClientError
from booking_client.models.accommodation import AccommodationSummary
from booking_client.models.session import SessionState
from booking_client.sync.cache import ClientCache, Clock
from booking_client.sync.events import EventHub
from booking_client.sync.sequencing import RequestSequencer

logger = logging.getLogger(__name__)


class BookingApp:
    def __init__(
        self,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or default_settings
        self.events = EventHub()
        self.tokens = TokenStore(self.config.token_path)
        self.api = ApiClient(
            self.tokens,
            base_url=self.config.api_base_url,
            timeout=self.config.http_timeout_seconds,
            transport=transport,
        )
        self.cache = ClientCache(clock)
        self.sequencer = RequestSequencer()

        self.session = SessionController(
            self.api, self.tokens, self.events, location_debounce_s=self.config.location_debounce_seconds
        )
        self.favorites = FavoritesController(self.api, self.cache, self.session, ttl_ms=self.config.cache_ttl_ms)
        self.listings = ListingsController(
            self.api,
            self.cache,
            ttl_ms=self.config.cache_ttl_ms,
            limit=self.config.listing_limit,
            nearby_distance_m=self.config.nearby_distance_m,
            sequencer=self.sequencer,
        )
        self.search = SearchController(
            self.api,
            sequencer=self.sequencer,
            debounce_s=self.config.search_debounce_seconds,
            min_query_length=self.config.search_min_query_length,
            page_size=self.config.listing_limit,
        )
        self.bookings = BookingsController(self.api, sequencer=self.sequencer)

    async def start(self) -> SessionState:
        state = await self.session.start()
        if self.session.is_authenticated:
            user = self.session.user
            if user is not None and user.location is not None and user.location.coordinates != (0.0, 0.0):
                self.listings.set_origin(user.location.latitude, user.location.longitude)
            try:
                await self.favorites.fetch_favorites()
            except BookingClientError as e:
                # Favorites are refetched on the next focus; startup proceeds without them
                logger.warning("Could not prefetch favorites: %s", e)
        return state

    def new_booking_wizard(self, accommodation: AccommodationSummary) -> BookingWizard:
        return BookingWizard(self.api, accommodation, callback_url=self.config.payment_callback_url)

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "BookingApp":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

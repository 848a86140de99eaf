"""Listing buckets (popular, recommended, nearby, by type) and accommodation detail."""

import asyncio
import logging
from typing import Awaitable, Callable

from booking_client.clients.api import ApiClient
from booking_client.config import settings
from booking_client.errors import BookingClientError, ValidationError
from booking_client.models.accommodation import (
    AccommodationCategory,
    AccommodationDetail,
    AccommodationSummary,
    Review,
)
from booking_client.sync.cache import Bucket, ClientCache, replace_if_changed
from booking_client.sync.sequencing import RequestSequencer

logger = logging.getLogger(__name__)

_Fetcher = Callable[[], Awaitable[list[AccommodationSummary]]]

LISTING_BUCKETS = (
    Bucket.popular,
    Bucket.recommended,
    Bucket.trending,
    Bucket.nearby,
    Bucket.hotels,
    Bucket.apartments,
    Bucket.hostels,
    Bucket.lodges,
)


class ListingsController:
    def __init__(
        self,
        api: ApiClient,
        cache: ClientCache,
        ttl_ms: int | None = None,
        limit: int | None = None,
        nearby_distance_m: int | None = None,
        sequencer: RequestSequencer | None = None,
    ) -> None:
        self._api = api
        self._cache = cache
        self._ttl_ms = ttl_ms if ttl_ms is not None else settings.cache_ttl_ms
        self._limit = limit or settings.listing_limit
        self._distance_m = nearby_distance_m or settings.nearby_distance_m
        self._sequencer = sequencer or RequestSequencer()
        self._origin: tuple[float, float] | None = None
        self._views: dict[Bucket, list[AccommodationSummary]] = {}
        self._fetchers: dict[Bucket, _Fetcher] = {
            Bucket.popular: lambda: self._api.get_popular_accommodations(limit=self._limit),
            Bucket.recommended: lambda: self._api.get_recommended_accommodations(limit=self._limit),
            Bucket.trending: lambda: self._api.get_trending_accommodations(limit=self._limit),
            Bucket.nearby: self._fetch_nearby,
        }
        for category in AccommodationCategory:
            self._fetchers[Bucket(category.value)] = self._by_type_fetcher(category)

    def view(self, bucket: Bucket) -> list[AccommodationSummary]:
        return self._views.get(bucket, [])

    def set_origin(self, latitude: float, longitude: float) -> None:
        """Set the point nearby listings are searched around.

        Marks the nearby bucket stale and supersedes any nearby fetch still in
        flight for the previous origin.
        """
        if self._origin != (latitude, longitude):
            self._origin = (latitude, longitude)
            self._sequencer.next(Bucket.nearby.value)
            self._cache.invalidate(Bucket.nearby)

    async def on_focus(self, bucket: Bucket) -> list[AccommodationSummary]:
        """Screen focus: refetch only if the bucket has gone stale."""
        return await self.load(bucket, force=False)

    async def refresh(self, bucket: Bucket) -> list[AccommodationSummary]:
        """Pull-to-refresh: always refetch and rewrite the cache."""
        return await self.load(bucket, force=True)

    async def load(self, bucket: Bucket, force: bool = False) -> list[AccommodationSummary]:
        if bucket not in self._fetchers:
            raise ValueError(f"{bucket!r} is not a listing bucket")

        entry = self._cache.get(bucket)
        if not force and entry is not None and self._cache.is_fresh(bucket, self._ttl_ms):
            payload = entry.payload
        else:
            seq = self._sequencer.next(bucket.value)
            try:
                payload = await self._fetchers[bucket]()
            except BookingClientError as e:
                logger.error("Error fetching %s listings: %s", bucket.value, e)
                raise
            if not self._sequencer.is_latest(bucket.value, seq):
                logger.debug("Discarding superseded %s response", bucket.value)
                return self.view(bucket)
            self._cache.put(bucket, payload)

        self._views[bucket] = replace_if_changed(self._views.get(bucket), payload)
        return self._views[bucket]

    async def load_detail(self, accommodation_id: str, review_limit: int = 10) -> AccommodationDetail:
        accommodation, reviews = await asyncio.gather(
            self._api.get_accommodation(accommodation_id),
            self._api.get_accommodation_reviews(accommodation_id, limit=review_limit),
        )
        return AccommodationDetail(accommodation=accommodation, reviews=reviews)

    async def submit_review(self, accommodation_id: str, rating: int, comment: str) -> Review:
        if not 1 <= rating <= 5:
            raise ValidationError("rating", "Rating must be between 1 and 5")
        if not comment.strip():
            raise ValidationError("comment", "Please write a few words about your stay")
        review = await self._api.create_review(accommodation_id, rating, comment.strip())
        logger.info("Posted review for %s", accommodation_id)
        return review

    async def cities(self) -> list[str]:
        return await self._api.get_cities()

    async def countries(self) -> list[str]:
        return await self._api.get_countries()

    async def _fetch_nearby(self) -> list[AccommodationSummary]:
        if self._origin is None:
            raise ValidationError("location", "Set your location to see places nearby")
        latitude, longitude = self._origin
        page = await self._api.get_nearby_accommodations(
            latitude=latitude, longitude=longitude, distance=self._distance_m, limit=self._limit
        )
        return page.results

    def _by_type_fetcher(self, category: AccommodationCategory) -> _Fetcher:
        async def fetch() -> list[AccommodationSummary]:
            page = await self._api.get_accommodations_by_type(category, limit=self._limit)
            return page.results

        return fetch

"""Favorites controller: optimistic add/remove with rollback, backed by the client cache."""

import asyncio
import logging
from collections import Counter
from contextlib import asynccontextmanager
from typing import AsyncIterator

from booking_client.clients.api import ApiClient
from booking_client.config import settings
from booking_client.controllers.session import SessionController
from booking_client.errors import BookingClientError
from booking_client.models.accommodation import AccommodationSummary
from booking_client.models.session import SessionEvent
from booking_client.sync.cache import Bucket, ClientCache, replace_if_changed

logger = logging.getLogger(__name__)


class FavoritesController:
    def __init__(
        self,
        api: ApiClient,
        cache: ClientCache,
        session: SessionController,
        ttl_ms: int | None = None,
    ) -> None:
        self._api = api
        self._cache = cache
        self._session = session
        self._ttl_ms = ttl_ms if ttl_ms is not None else settings.cache_ttl_ms
        self._favorites: frozenset[str] = frozenset()
        self._accommodations: list[AccommodationSummary] = []
        # One lock per accommodation id with a pending toggle; dropped when nobody holds or awaits it
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()
        session.events.subscribe(self._on_session_event)

    @property
    def favorites(self) -> frozenset[str]:
        return self._favorites

    def is_favorited(self, accommodation_id: str) -> bool:
        return accommodation_id in self._favorites

    def favorite_accommodations(self, accommodation_type: str | None = None) -> list[AccommodationSummary]:
        """Accommodations from the last fetch that are still favorited."""
        return [
            a for a in self._accommodations
            if a.id in self._favorites
            and (accommodation_type is None or a.accommodation_type == accommodation_type)
        ]

    async def fetch_favorites(self, force: bool = False) -> frozenset[str]:
        if not self._session.is_authenticated:
            return self._favorites

        entry = self._cache.get(Bucket.favorites)
        if not force and entry is not None and self._cache.is_fresh(Bucket.favorites, self._ttl_ms):
            self._favorites = replace_if_changed(self._favorites, entry.payload)
            return self._favorites

        try:
            accommodations = await self._api.get_favorites()
        except BookingClientError as e:
            logger.error("Error fetching favorites: %s", e)
            raise

        ids = frozenset(a.id for a in accommodations)
        self._accommodations = replace_if_changed(self._accommodations, accommodations)
        self._favorites = replace_if_changed(self._favorites, ids)
        self._cache.put(Bucket.favorites, ids)
        return self._favorites

    async def add_favorite(self, accommodation_id: str) -> None:
        async with self._serialized(accommodation_id):
            was_favorited = accommodation_id in self._favorites
            self._favorites = self._favorites | {accommodation_id}
            try:
                await self._api.add_favorite(accommodation_id)
            except BookingClientError as e:
                if not was_favorited:
                    self._favorites = self._favorites - {accommodation_id}
                logger.error("Error adding favorite %s: %s", accommodation_id, e)
                raise
            self._cache.reconcile(
                Bucket.favorites, lambda ids: ids | {accommodation_id}, default=frozenset()
            )
            logger.info("Added favorite %s", accommodation_id)

    async def remove_favorite(self, accommodation_id: str) -> None:
        async with self._serialized(accommodation_id):
            was_favorited = accommodation_id in self._favorites
            self._favorites = self._favorites - {accommodation_id}
            try:
                await self._api.remove_favorite(accommodation_id)
            except BookingClientError as e:
                if was_favorited:
                    self._favorites = self._favorites | {accommodation_id}
                logger.error("Error removing favorite %s: %s", accommodation_id, e)
                raise
            self._cache.reconcile(
                Bucket.favorites, lambda ids: ids - {accommodation_id}, default=frozenset()
            )
            logger.info("Removed favorite %s", accommodation_id)

    async def toggle_favorite(self, accommodation_id: str) -> bool:
        """Flip membership. Returns the resulting favorited state."""
        if self.is_favorited(accommodation_id):
            await self.remove_favorite(accommodation_id)
            return False
        await self.add_favorite(accommodation_id)
        return True

    def reset(self) -> None:
        self._favorites = frozenset()
        self._accommodations = []
        self._cache.invalidate(Bucket.favorites)

    @asynccontextmanager
    async def _serialized(self, accommodation_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(accommodation_id, asyncio.Lock())
        self._lock_users[accommodation_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[accommodation_id] -= 1
            if not self._lock_users[accommodation_id]:
                del self._lock_users[accommodation_id]
                del self._locks[accommodation_id]

    def _on_session_event(self, event: SessionEvent) -> None:
        # A sign-in may be a different user
        if event in (SessionEvent.SIGNED_IN, SessionEvent.SIGNED_OUT, SessionEvent.SESSION_EXPIRED):
            self.reset()

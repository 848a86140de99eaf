"""In-memory TTL cache for read-mostly collections, keyed by bucket name."""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")

Clock = Callable[[], int]


class Bucket(str, Enum):
    popular = "popular"
    recommended = "recommended"
    trending = "trending"
    nearby = "nearby"
    hotels = "hotels"
    apartments = "apartments"
    hostels = "hostels"
    lodges = "lodges"
    favorites = "favorites"


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    bucket_key: str
    payload: T
    fetched_at_ms: int | None  # None: reconciled locally, never fetched


def _now_ms() -> int:
    return time.monotonic_ns() // 1_000_000


class ClientCache:
    """Owned by the application container and handed to each controller.

    Last write wins per bucket; there is no locking and no refetch dedup.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or _now_ms
        self._entries: dict[str, CacheEntry[Any]] = {}

    def now_ms(self) -> int:
        return self._clock()

    def get(self, bucket_key: str) -> CacheEntry[Any] | None:
        return self._entries.get(_key(bucket_key))

    def put(self, bucket_key: str, payload: Any) -> CacheEntry[Any]:
        key = _key(bucket_key)
        entry = CacheEntry(bucket_key=key, payload=payload, fetched_at_ms=self._clock())
        self._entries[key] = entry
        return entry

    def is_fresh(self, bucket_key: str, ttl_ms: int) -> bool:
        entry = self.get(bucket_key)
        if entry is None or entry.fetched_at_ms is None:
            return False
        return self._clock() - entry.fetched_at_ms < ttl_ms

    def reconcile(self, bucket_key: str, update: Callable[[Any], Any], default: Any = None) -> CacheEntry[Any]:
        """Apply a local update to a bucket's payload without touching its fetch time."""
        key = _key(bucket_key)
        current = self._entries.get(key)
        if current is None:
            entry: CacheEntry[Any] = CacheEntry(bucket_key=key, payload=update(default), fetched_at_ms=None)
        else:
            entry = CacheEntry(bucket_key=key, payload=update(current.payload), fetched_at_ms=current.fetched_at_ms)
        self._entries[key] = entry
        return entry

    def invalidate(self, bucket_key: str) -> None:
        self._entries.pop(_key(bucket_key), None)

    def clear(self) -> None:
        self._entries.clear()


def replace_if_changed(current: T, fresh: T) -> T:
    """Keep the held object when the fresh one is structurally equal to it."""
    if current is not None and current == fresh:
        return current
    return fresh


def _key(bucket_key: str) -> str:
    return bucket_key.value if isinstance(bucket_key, Bucket) else bucket_key

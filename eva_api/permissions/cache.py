"""In-memory TTL cache with a pluggable clock.

Entries are stored as ``key -> (value, expiry)``. Expired entries are dropped
whenever a new entry is stored, and ``max_entries`` bounds the map by
evicting the oldest entry, so keys taken from request headers cannot grow
it without limit.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Key-value cache whose entries expire a fixed time after being set.

    Args:
        ttl_seconds: Lifetime of each entry.
        clock: Monotonic clock returning seconds. Tests pass a fake.
        max_entries: Upper bound on stored entries; None means unbounded.
    """

    def __init__(
        self,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = None,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[K, tuple[V, float]] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, key: K) -> V | None:
        """Return the cached value, or None when missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expiry = entry
        if self._clock() >= expiry:
            del self._entries[key]
            return None
        return value

    def set(self, key: K, value: V) -> None:
        now = self._clock()
        self._purge_expired(now)
        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(key, None)
        if self._max_entries is not None:
            while self._entries and len(self._entries) >= self._max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicted cache entry key=%s", oldest)
        self._entries[key] = (value, now + self._ttl_seconds)

    def get_or_compute(self, key: K, compute: Callable[[], V]) -> V:
        """Return the live entry for ``key`` or compute, store and return it."""
        entry = self._entries.get(key)
        if entry is not None:
            value, expiry = entry
            if self._clock() < expiry:
                logger.debug("Cache hit for key=%s", key)
                return value

        value = compute()
        self.set(key, value)
        return value

    def invalidate(self, key: K) -> None:
        """Remove a cached entry."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expiry) in self._entries.items() if now >= expiry]
        for key in expired:
            del self._entries[key]

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        """Number of live entries."""
        self._purge_expired(self._clock())
        return len(self._entries)

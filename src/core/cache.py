"""Bounded read-through cache with per-value TTL and LRU eviction.

A miss or a stale entry is read through to the loader supplied at
construction. Values carry their own ``cache_seconds``; the store keeps
at most ``max_size`` entries and drops the least recently accessed one
when full. Expired entries are only detected when next requested.

The loader always runs outside the store lock. Concurrent misses for the
same key may each call the loader; the last write wins.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Generic, Hashable, List, Optional, TypeVar

from core.errors import ValidationError
from core.interfaces import AsyncLoader, Cacheable, Loader, lookup_key

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V", bound=Cacheable)


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[V]):
    # Stored value + monotonic store time in milliseconds
    value: V
    stored_at_ms: int


def _now_ms() -> int:
    return int(time.monotonic() * 1000)


def _is_fresh(entry: CacheEntry[V], now_ms: int) -> bool:
    cache_seconds = int(entry.value.cache_seconds)
    if cache_seconds < 0:
        return True
    return now_ms - entry.stored_at_ms < cache_seconds * 1000


class _KeyedStore(Generic[K, V]):
    # Shared store + locking for the sync and async caches
    def __init__(self, *, max_size: int, loader: object) -> None:
        if isinstance(max_size, bool) or not isinstance(max_size, int):
            raise ValidationError("max_size must be an integer")
        if max_size <= 0:
            raise ValidationError("max_size must be positive")
        if not callable(loader):
            raise ValidationError("loader must be callable")

        self._max_size = max_size
        self._lock = threading.Lock()
        self._store: "OrderedDict[Hashable, CacheEntry[V]]" = OrderedDict()

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def keys(self) -> List[Hashable]:
        """Lookup keys currently held, least recently used first."""
        with self._lock:
            return list(self._store.keys())

    def _read(self, cache_key: Hashable, now_ms: int) -> Optional[V]:
        # Returns the cached value if fresh, else None (miss or stale).
        with self._lock:
            entry = self._store.get(cache_key)
            if entry is not None:
                # A read counts as an access for eviction order
                self._store.move_to_end(cache_key, last=True)

        if entry is None or entry.value is None:
            return None

        if _is_fresh(entry, now_ms):
            return entry.value

        logger.debug("cache.expired key=%r", cache_key)
        return None

    def _write(self, cache_key: Hashable, value: V, now_ms: int) -> None:
        entry = CacheEntry(value=value, stored_at_ms=now_ms)
        with self._lock:
            self._store[cache_key] = entry
            self._store.move_to_end(cache_key, last=True)
            logger.debug("cache.put key=%r", cache_key)

            while len(self._store) > self._max_size:
                evicted, _ = self._store.popitem(last=False)
                logger.debug("cache.evicted key=%r", evicted)


class KeyedCache(_KeyedStore[K, V]):
    """Read-through cache for values exposing ``cache_seconds``.

    Parameters
    ----------
    max_size: int
        Maximum number of entries; the least recently accessed is evicted
        when exceeded.
    loader: Loader
        Called with the original key on a miss. Returning None means
        "not found" and is never cached. Exceptions propagate unchanged.
    """

    def __init__(self, *, max_size: int, loader: Loader[K, V]) -> None:
        super().__init__(max_size=max_size, loader=loader)
        self._loader = loader

    def get(self, key: K) -> Optional[V]:
        cache_key = lookup_key(key)
        now_ms = _now_ms()

        cached = self._read(cache_key, now_ms)
        if cached is not None:
            return cached

        # Miss or stale: read through with the original key
        value = self._loader(key)
        if value is None:
            return None

        self._write(cache_key, value, now_ms)
        return value


class AsyncKeyedCache(_KeyedStore[K, V]):
    """Async variant of :class:`KeyedCache` for coroutine loaders.

    Store operations never await, so the lock is held only for the map
    access and never across the loader call.
    """

    def __init__(self, *, max_size: int, loader: AsyncLoader[K, V]) -> None:
        super().__init__(max_size=max_size, loader=loader)
        self._loader = loader

    async def get(self, key: K) -> Optional[V]:
        cache_key = lookup_key(key)
        now_ms = _now_ms()

        cached = self._read(cache_key, now_ms)
        if cached is not None:
            return cached

        value = await self._loader(key)
        if value is None:
            return None

        self._write(cache_key, value, now_ms)
        return value

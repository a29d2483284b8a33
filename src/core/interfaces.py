"""Capability protocols for the read-through cache.

Values must expose ``cache_seconds``; keys may optionally expose
``cache_key()`` to collapse structurally equal keys into one slot.
Loaders are plain callables (sync or async) returning a value or None.
"""

from __future__ import annotations

from typing import Any, Awaitable, Hashable, Optional, Protocol, TypeVar, runtime_checkable

K_contra = TypeVar("K_contra", contravariant=True)
V_co = TypeVar("V_co", covariant=True)


class Cacheable(Protocol):
    """Contract for values that can be stored with a per-value TTL.

    cache_seconds > 0: fresh for that many seconds.
    cache_seconds == 0: never fresh.
    cache_seconds < 0: never expires (only capacity eviction removes it).
    """

    @property
    def cache_seconds(self) -> int:
        ...


@runtime_checkable
class HasCacheKey(Protocol):
    """Keys implementing this are stored under ``cache_key()`` instead of themselves."""

    def cache_key(self) -> Hashable:
        ...


class Loader(Protocol[K_contra, V_co]):
    # Backing source called on a miss; None means "not found"
    def __call__(self, key: K_contra) -> Optional[V_co]:
        ...


class AsyncLoader(Protocol[K_contra, V_co]):
    def __call__(self, key: K_contra) -> Awaitable[Optional[V_co]]:
        ...


def lookup_key(key: Any) -> Hashable:
    """Return the key used for store indexing."""
    if isinstance(key, HasCacheKey):
        return key.cache_key()
    return key

"""Immutable dataclasses for keys and values flowing through the cache.

ResourceKey is a composite key that collapses to a canonical string via
``cache_key()``; HttpDocument is the cacheable value produced by the
HTTP loaders.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from urllib.parse import urlencode

from core.paths import normalize_path


@dataclass(frozen=True)
class ResourceKey:
    """Key for an upstream document: a relative path plus query params.

    Params are kept as a tuple of pairs so the key stays hashable; two keys
    with the same params in a different order share one cache slot.
    The path is normalized on construction, so "/docs/a", "./docs/a" and
    "docs\\a" all map to "docs/a".
    """

    path: str
    params: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_path(self.path))

    @classmethod
    def of(cls, path: str, params: Optional[Mapping[str, object]] = None) -> "ResourceKey":
        pairs = tuple((str(k), str(v)) for k, v in (params or {}).items())
        return cls(path=path, params=pairs)

    def cache_key(self) -> str:
        if not self.params:
            return self.path
        return f"{self.path}?{urlencode(sorted(self.params))}"


@dataclass(frozen=True)
class HttpDocument:
    """A fetched upstream document.

    Field groups:
    - Source: url, status_code
    - Body: content_type, text
    - Freshness: cache_seconds (from Cache-Control or the configured default)
    """

    url: str
    status_code: int
    text: str
    content_type: str = ""
    cache_seconds: int = 0

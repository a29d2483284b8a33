"""HTTP-backed loaders for the read-through cache.

Each loader is a callable taking a path string or a ``ResourceKey`` and
returning an ``HttpDocument`` (whose ``cache_seconds`` comes from the
response's Cache-Control header), or None when the upstream reports the
document as missing. Any other failure raises ``ExternalServiceError`` so
it propagates through the cache to the caller.
"""

from __future__ import annotations

import logging
import re
from typing import Mapping, Optional, Tuple, Union

import httpx

from core.errors import ExternalServiceError, ValidationError
from core.models import HttpDocument, ResourceKey
from core.paths import normalize_path

logger = logging.getLogger(__name__)

KeyLike = Union[str, ResourceKey]

# Upstream statuses that mean "absent" rather than failure
_ABSENT_STATUSES = frozenset({404, 410})

_MAX_AGE_RE = re.compile(r"(?:^|,)\s*max-age\s*=\s*\"?(\d+)\"?\s*(?:,|$)", re.IGNORECASE)


def parse_cache_seconds(headers: Mapping[str, str], default: int) -> int:
    """Derive a TTL in seconds from a Cache-Control header.

    no-store / no-cache -> 0, max-age=N -> N, otherwise `default`.
    """
    raw = (headers.get("Cache-Control") or "").strip()
    if not raw:
        return int(default)

    directives = {d.strip().split("=", 1)[0].lower() for d in raw.split(",") if d.strip()}
    if "no-store" in directives or "no-cache" in directives:
        return 0

    m = _MAX_AGE_RE.search(raw)
    if m:
        return int(m.group(1))
    return int(default)


def _split_key(key: KeyLike) -> Tuple[str, Tuple[Tuple[str, str], ...]]:
    if isinstance(key, ResourceKey):
        return key.path, key.params
    if isinstance(key, str):
        return normalize_path(key), ()
    raise ValidationError(f"Unsupported key type: {type(key).__name__}")


class _HttpLoaderBase:
    USER_AGENT = "readthru-cache"

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 20.0,
        verify: bool = False,
        default_cache_seconds: int = 60,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        base = (base_url or "").strip().rstrip("/")
        if not base:
            raise ValidationError("base_url must be non-empty")

        self._base_url = base
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._default_cache_seconds = int(default_cache_seconds)
        self._headers = {"User-Agent": self.USER_AGENT, **dict(headers or {})}

    @property
    def base_url(self) -> str:
        return self._base_url

    def _to_document(self, resp: httpx.Response) -> Optional[HttpDocument]:
        url = str(resp.request.url)

        if resp.status_code in _ABSENT_STATUSES:
            logger.debug("loader.absent url=%s status=%s", url, resp.status_code)
            return None

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning("loader.failed url=%s status=%s", url, resp.status_code)
            raise ExternalServiceError(f"Upstream returned an error: {e}") from e

        return HttpDocument(
            url=url,
            status_code=resp.status_code,
            text=resp.text or "",
            content_type=resp.headers.get("Content-Type", ""),
            cache_seconds=parse_cache_seconds(resp.headers, self._default_cache_seconds),
        )

    def _transport_error(self, path: str, err: httpx.HTTPError) -> ExternalServiceError:
        logger.warning("loader.failed path=%s error=%s", path, err)
        return ExternalServiceError(f"Failed to call upstream ({path}): {err}")


class HttpLoader(_HttpLoaderBase):
    """Blocking loader for use with :class:`core.cache.KeyedCache`."""

    def _create_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    def __call__(self, key: KeyLike) -> Optional[HttpDocument]:
        path, params = _split_key(key)
        try:
            with self._create_client() as client:
                resp = client.get(f"/{path}", params=list(params))
        except httpx.HTTPError as e:
            raise self._transport_error(path, e) from e
        return self._to_document(resp)


class AsyncHttpLoader(_HttpLoaderBase):
    """Async loader for use with :class:`core.cache.AsyncKeyedCache`."""

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
        )

    async def __call__(self, key: KeyLike) -> Optional[HttpDocument]:
        path, params = _split_key(key)
        try:
            async with self._create_client() as client:
                resp = await client.get(f"/{path}", params=list(params))
        except httpx.HTTPError as e:
            raise self._transport_error(path, e) from e
        return self._to_document(resp)

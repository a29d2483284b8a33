"""MCP tool that reads upstream documents through the read-through cache.

Registers the 'fetch_cached' tool, which validates inputs, builds a
ResourceKey and returns the document text from an AsyncKeyedCache.
"""

from __future__ import annotations

from typing import Dict, Optional

from mcp.server.fastmcp import FastMCP

from core.cache import AsyncKeyedCache
from core.errors import NotFoundError, ValidationError
from core.models import HttpDocument, ResourceKey


def register(mcp: FastMCP, *, cache: AsyncKeyedCache[ResourceKey, HttpDocument]) -> None:
    @mcp.tool(name="fetch_cached")
    async def fetch_cached(
        path: str = "",
        params: Optional[Dict[str, str]] = None,
    ) -> str:
        """Fetch an upstream document, served from cache while it is fresh.

        Parameters:
          - path: document path relative to the upstream base URL (required).
          - params: optional query parameters; their order does not matter.

        Returns:
          The document text.

        Raises:
          ValidationError for a missing path, NotFoundError when the upstream
          reports the document as missing, and ExternalServiceError when the
          upstream fails.
        """
        if not path or not path.strip():
            raise ValidationError("Missing document path")

        doc = await cache.get(ResourceKey.of(path.strip(), params))
        if doc is None:
            raise NotFoundError(f"Document not found: {path.strip()}")
        return doc.text

"""Server bootstrap for the read-through cache MCP service.

Creates the FastMCP instance, wires the HTTP loader and cache from
config, registers tools and starts the MCP server (stdio transport).
"""

from mcp.server.fastmcp import FastMCP

from clients.http_loader import AsyncHttpLoader
from config import (
    CACHE_DEFAULT_SECONDS,
    CACHE_MAX_SIZE,
    HTTP_TIMEOUT,
    HTTP_VERIFY,
    LOG_LEVEL,
    UPSTREAM_BASE_URL,
    setup_logging,
)
from core.cache import AsyncKeyedCache

from tools.fetch_cached import register as register_fetch_cached

mcp = FastMCP("readthru-cache")


def register_tools() -> None:
    loader = AsyncHttpLoader(
        base_url=UPSTREAM_BASE_URL,
        timeout=HTTP_TIMEOUT,
        verify=HTTP_VERIFY,
        default_cache_seconds=CACHE_DEFAULT_SECONDS,
    )
    cache = AsyncKeyedCache(max_size=CACHE_MAX_SIZE, loader=loader)

    register_fetch_cached(mcp, cache=cache)


def main() -> None:
    setup_logging(LOG_LEVEL)
    register_tools()
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()

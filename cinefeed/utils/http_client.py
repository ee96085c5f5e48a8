"""Persistent httpx client shared by catalog requests.

One pooled client per process keeps TCP and TLS sessions alive across the
many small TMDB listing calls a feed refresh makes.
"""

import httpx

from cinefeed.config import Settings, get_settings

# Connection pool limits
_POOL_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
    keepalive_expiry=30,
)

_tmdb_client: httpx.AsyncClient | None = None


def get_tmdb_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Shared TMDB client, created on first use with the settings' timeout."""
    global _tmdb_client
    if _tmdb_client is None or _tmdb_client.is_closed:
        settings = settings or get_settings()
        _tmdb_client = httpx.AsyncClient(
            timeout=settings.http_timeout,
            limits=_POOL_LIMITS,
            headers={"User-Agent": settings.app_name},
        )
    return _tmdb_client


async def close_all_clients() -> None:
    """Close the shared client. Safe to call when none was created."""
    global _tmdb_client
    if _tmdb_client is not None:
        await _tmdb_client.aclose()
        _tmdb_client = None

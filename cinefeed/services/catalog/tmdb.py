"""TMDB API integration for catalog listings, search and genres."""

from typing import Any

import httpx
from pydantic import ValidationError

from cinefeed.config import Settings, get_settings
from cinefeed.constants import TMDB_RATE_LIMIT_SERVICE
from cinefeed.exceptions import (
    CatalogError,
    NetworkFailureError,
    NotConfiguredError,
    RateLimitedError,
)
from cinefeed.models import ContentItem, Genre, MediaType, PagedResponse
from cinefeed.services.catalog.base import CatalogClient
from cinefeed.utils.http_client import get_tmdb_client
from cinefeed.utils.logging import get_logger
from cinefeed.utils.rate_limiter import RateLimiter, rate_limiter
from cinefeed.utils.retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry_async

logger = get_logger(__name__)

# Currently-showing listing differs per media type
_NOW_PATHS = {
    MediaType.MOVIE: "now_playing",
    MediaType.TV: "on_the_air",
}


class TMDBCatalogClient(CatalogClient):
    """Catalog client backed by The Movie Database v3 API."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        limiter: RateLimiter | None = None,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.api_key = self.settings.tmdb_api_key
        self.base_url = self.settings.tmdb_base_url.rstrip("/")
        self._http_client = http_client
        self._limiter = limiter or rate_limiter
        self._retry_config = retry_config or DEFAULT_RETRY_CONFIG

        # Support both API key v3 and Bearer token
        if self.api_key and self.api_key.startswith("eyJ"):
            # Bearer token (API Read Access Token)
            self.headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            }
            self.use_api_key_param = False
        else:
            # API key v3 - pass as query parameter
            self.headers = {"Accept": "application/json"}
            self.use_api_key_param = True

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _add_api_key(self, params: dict) -> dict:
        """Add API key to params if using v3 key."""
        if self.use_api_key_param:
            params["api_key"] = self.api_key
        return params

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            return get_tmdb_client(self.settings)
        return self._http_client

    async def _get(self, path: str, params: dict | None = None) -> dict[str, Any]:
        """Make an authenticated, rate limited GET request to TMDB.

        Raises:
            NotConfiguredError: No credentials, or TMDB rejected them
            RateLimitedError: Still throttled after retries
            NetworkFailureError: Timeout, connection error or 5xx
            CatalogError: Any other non-200 answer, or a body that is not a JSON object
        """
        if not self.is_configured:
            raise NotConfiguredError("TMDB API is not configured. Please check your API keys.")

        query = self._add_api_key({"language": self.settings.tmdb_language, **(params or {})})
        url = f"{self.base_url}{path}"

        await self._limiter.acquire(TMDB_RATE_LIMIT_SERVICE)
        try:
            response = await retry_async(
                self._client().get,
                url,
                params=query,
                headers=self.headers,
                config=self._retry_config,
                operation_name=f"TMDB GET {path}",
            )
        except httpx.TimeoutException as e:
            raise NetworkFailureError(f"TMDB request timed out: {path}") from e
        except (httpx.TransportError, ConnectionError, TimeoutError) as e:
            raise NetworkFailureError(f"TMDB network error for {path}: {e}") from e

        if response.status_code == 200:
            try:
                data = response.json()
            except ValueError as e:
                raise _unreadable(path, e) from e
            if not isinstance(data, dict):
                raise _unreadable(path, f"expected an object, got {type(data).__name__}")
            logger.debug(f"TMDB API request successful: {path}")
            return data

        logger.error(f"TMDB API error for {path}: status {response.status_code}")
        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitedError(
                f"TMDB rate limit exceeded for {path}",
                retry_after=float(retry_after) if retry_after else None,
            )
        if response.status_code == 401:
            raise NotConfiguredError(
                f"TMDB rejected the configured credentials for {path}",
                status_code=401,
            )
        if response.status_code >= 500:
            raise NetworkFailureError(
                f"TMDB server error {response.status_code} for {path}",
                status_code=response.status_code,
            )
        raise CatalogError(
            f"TMDB API error {response.status_code} for {path}",
            status_code=response.status_code,
        )

    @staticmethod
    def _parse_page(
        path: str, data: dict[str, Any], media_type: MediaType | None = None
    ) -> PagedResponse:
        """Build a page from a TMDB list payload.

        With ``media_type`` None each result carries its own ``media_type``
        (multi-search) and anything but movies and TV is dropped.
        """
        try:
            results = []
            for item in data.get("results") or []:
                if media_type is not None:
                    results.append(ContentItem.from_tmdb(item, media_type))
                    continue
                kind = item.get("media_type")
                if kind in (MediaType.MOVIE.value, MediaType.TV.value):
                    results.append(ContentItem.from_tmdb(item, MediaType(kind)))

            return PagedResponse(
                page=data.get("page") or 1,
                results=results,
                total_pages=data.get("total_pages") or 0,
                total_results=data.get("total_results") or 0,
            )
        except (KeyError, TypeError, AttributeError, ValidationError) as e:
            raise _unreadable(path, e) from e

    async def get_popular(self, media_type: MediaType, page: int = 1) -> PagedResponse:
        path = f"/{media_type.value}/popular"
        data = await self._get(path, {"page": str(page)})
        return self._parse_page(path, data, media_type)

    async def get_top_rated(self, media_type: MediaType, page: int = 1) -> PagedResponse:
        path = f"/{media_type.value}/top_rated"
        data = await self._get(path, {"page": str(page)})
        return self._parse_page(path, data, media_type)

    async def get_now_playing_or_on_the_air(
        self, media_type: MediaType, page: int = 1
    ) -> PagedResponse:
        path = f"/{media_type.value}/{_NOW_PATHS[media_type]}"
        data = await self._get(path, {"page": str(page)})
        return self._parse_page(path, data, media_type)

    async def discover_by_genre(
        self,
        media_type: MediaType,
        genre_ids: list[int],
        page: int = 1,
        sort_by: str = "popularity.desc",
    ) -> PagedResponse:
        """Discover movies or TV shows with a genre filter.

        Args:
            media_type: Movie or TV
            genre_ids: Genre IDs to include (comma-joined for TMDB)
            page: Page number (1-based)
            sort_by: Sort order (popularity.desc, vote_average.desc, ...)

        Returns:
            One page of discovered media
        """
        params = {
            "sort_by": sort_by,
            "include_adult": "false",
            "page": str(page),
        }
        if genre_ids:
            params["with_genres"] = ",".join(str(g) for g in genre_ids)

        path = f"/discover/{media_type.value}"
        data = await self._get(path, params)
        return self._parse_page(path, data, media_type)

    async def search_multi(self, query: str, page: int = 1) -> PagedResponse:
        """Search movies and TV shows in one call; people are dropped."""
        path = "/search/multi"
        data = await self._get(
            path,
            {"query": query, "page": str(page), "include_adult": "false"},
        )
        return self._parse_page(path, data)

    async def get_genre_list(self, media_type: MediaType) -> list[Genre]:
        """Get the list of official genres for movies or TV shows."""
        path = f"/genre/{media_type.value}/list"
        data = await self._get(path)
        try:
            return [Genre(id=g["id"], name=g["name"]) for g in data.get("genres") or []]
        except (KeyError, TypeError, ValidationError) as e:
            raise _unreadable(path, e) from e


def _unreadable(path: str, reason: object) -> CatalogError:
    logger.error(f"TMDB returned an unreadable payload for {path}: {reason}")
    return CatalogError(f"TMDB returned an unreadable payload for {path}: {reason}")

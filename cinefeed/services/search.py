"""Catalog search with a small insertion-ordered result cache."""

from collections import OrderedDict
from collections.abc import Iterable

from cinefeed.constants import (
    MAX_SEARCH_RESULTS,
    SEARCH_CACHE_MAX_SIZE,
    SEARCH_HISTORY_SIZE,
    SEARCH_MIN_LENGTH,
    SEARCH_POPULARITY_WEIGHT,
    SEARCH_RATING_WEIGHT,
)
from cinefeed.models import ContentItem
from cinefeed.services.catalog.base import CatalogClient
from cinefeed.services.preferences import GenrePreferenceStore
from cinefeed.services.recommendations.engine import preference_score
from cinefeed.storage.profile import ProfileStore
from cinefeed.utils.logging import get_logger

logger = get_logger(__name__)


def make_search_key(query: str, genre_filters: Iterable[int]) -> str:
    """Cache key: normalized query plus the sorted active genre filters."""
    filters = ",".join(str(g) for g in sorted(set(genre_filters)))
    return f"{query.strip().lower()}:{filters}"


class SearchCache:
    """Bounded cache evicting the oldest *inserted* key.

    Reads do not refresh an entry's position, so this is FIFO, not LRU.
    """

    def __init__(self, max_size: int = SEARCH_CACHE_MAX_SIZE):
        self._cache: OrderedDict[str, list[ContentItem]] = OrderedDict()
        self._max_size = max_size

    def get(self, key: str) -> list[ContentItem] | None:
        results = self._cache.get(key)
        return list(results) if results is not None else None

    def set(self, key: str, results: list[ContentItem]) -> None:
        # Re-storing a key keeps its original insertion slot
        self._cache[key] = list(results)
        if len(self._cache) > self._max_size:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug(f"Search cache evicted: {evicted}")

    def clear(self) -> None:
        self._cache.clear()

    def keys(self) -> list[str]:
        return list(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)


def _popularity_rating_score(item: ContentItem) -> float:
    return SEARCH_POPULARITY_WEIGHT * item.popularity + SEARCH_RATING_WEIGHT * item.vote_average


class SearchService:
    """Interactive movie/TV search.

    Queries shorter than ``SEARCH_MIN_LENGTH`` after trimming never reach the
    catalog. Catalog errors propagate to the caller and are never cached.
    Every answered query, cached or fetched, is recorded in the profile
    record's search history.
    """

    def __init__(
        self,
        client: CatalogClient,
        preferences: GenrePreferenceStore,
        cache: SearchCache | None = None,
        profile_store: ProfileStore | None = None,
    ) -> None:
        self.client = client
        self.preferences = preferences
        self.cache = cache if cache is not None else SearchCache()
        self.profile_store = profile_store or preferences.profile_store

    async def search(
        self, query: str, genre_filters: Iterable[int] = ()
    ) -> list[ContentItem]:
        """Search, filter by genre and rank results.

        Args:
            query: Free text, at least 3 characters once trimmed
            genre_filters: Keep only items sharing at least one of these genres

        Returns:
            Ranked results (possibly empty)

        Raises:
            CatalogError: Upstream search failed
        """
        query = query.strip()
        if len(query) < SEARCH_MIN_LENGTH:
            logger.debug(f"Search query too short, skipped: {query!r}")
            return []

        filters = set(genre_filters)
        key = make_search_key(query, filters)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"Search cache HIT: {key}")
            await self._record_query(query)
            return cached

        logger.debug(f"Search cache MISS: {key}")
        response = await self.client.search_multi(query, 1)
        results = response.results[:MAX_SEARCH_RESULTS]

        if filters:
            results = [item for item in results if filters.intersection(item.genre_ids)]

        preferences = await self.preferences.get()
        if preferences:
            results.sort(key=lambda item: preference_score(item, preferences), reverse=True)
        else:
            results.sort(key=_popularity_rating_score, reverse=True)

        self.cache.set(key, results)
        await self._record_query(query)
        return results

    def clear_cache(self) -> None:
        self.cache.clear()

    async def history(self) -> list[str]:
        """Recent dispatched queries, newest first."""
        record = await self.profile_store.get_preferences()
        return list(record.search_history)

    async def _record_query(self, query: str) -> list[str]:
        history = await self.history()
        updated = [query, *(q for q in history if q != query)][:SEARCH_HISTORY_SIZE]
        await self.profile_store.update_preferences(search_history=updated)
        return updated

    async def remove_from_history(self, query: str) -> list[str]:
        history = await self.history()
        updated = [q for q in history if q != query]
        await self.profile_store.update_preferences(search_history=updated)
        return updated

    async def clear_history(self) -> None:
        await self.profile_store.update_preferences(search_history=[])

"""Time-bounded cache of merged catalog pools.

Two entries live at most: the general pool (no preferences) and the pool of
the current personalized genre set. A new personalized fingerprint replaces
the previous one.
"""

import asyncio
import time
from collections.abc import Callable, Coroutine, Iterable
from dataclasses import dataclass, field
from typing import Any

from cinefeed.constants import RECOMMENDATION_CACHE_TTL
from cinefeed.exceptions import CatalogError
from cinefeed.models import ContentItem, MediaType, PagedResponse
from cinefeed.services.catalog.base import CatalogClient
from cinefeed.utils.logging import LogContext, get_logger
from cinefeed.utils.tasks import gather_or_cancel

logger = get_logger(__name__)

Fingerprint = frozenset[int]

_LATEST_SORT = {
    MediaType.MOVIE: "release_date.desc",
    MediaType.TV: "first_air_date.desc",
}


def make_fingerprint(genre_ids: Iterable[int]) -> Fingerprint:
    """Order-independent identity of a genre selection."""
    return frozenset(genre_ids)


def merge_unique(pages: Iterable[PagedResponse]) -> list[ContentItem]:
    """Concatenate page results, keeping the first item seen per identity."""
    seen: set[tuple[MediaType, int]] = set()
    merged = []
    for page in pages:
        for item in page.results:
            if item.key not in seen:
                seen.add(item.key)
                merged.append(item)
    return merged


@dataclass
class PoolSnapshot:
    """Merged items of one media type and when they were fetched."""

    items: list[ContentItem]
    refreshed_at: float


@dataclass
class CacheEntry:
    """Pools computed for one genre fingerprint."""

    fingerprint: Fingerprint
    pools: dict[MediaType, PoolSnapshot] = field(default_factory=dict)


class RecommendationCache:
    """Serves merged movie/TV pools, refetching once the freshness window ends.

    A refresh issues four concurrent catalog calls. If any of them fails the
    whole round fails; the previous pool for the same fingerprint is then
    served even if expired, otherwise the error propagates.

    Population of a pool is single-flight: concurrent callers for the same
    stale pool wait on one lock and reuse the first caller's result.
    """

    def __init__(
        self,
        client: CatalogClient,
        ttl: float = RECOMMENDATION_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.ttl = ttl
        self._clock = clock
        self._general = CacheEntry(fingerprint=frozenset())
        self._personalized: CacheEntry | None = None
        self._locks: dict[tuple[bool, MediaType], asyncio.Lock] = {}

    def _entry_for(self, fingerprint: Fingerprint) -> CacheEntry:
        if not fingerprint:
            return self._general
        if self._personalized is None or self._personalized.fingerprint != fingerprint:
            self._personalized = CacheEntry(fingerprint=fingerprint)
        return self._personalized

    def _lock_for(self, fingerprint: Fingerprint, media_type: MediaType) -> asyncio.Lock:
        key = (bool(fingerprint), media_type)
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def _is_fresh(self, snapshot: PoolSnapshot | None) -> bool:
        return snapshot is not None and self._clock() - snapshot.refreshed_at < self.ttl

    def _requests(
        self, media_type: MediaType, genre_ids: list[int]
    ) -> list[Coroutine[Any, Any, PagedResponse]]:
        """The four calls of one refresh, in dedup priority order."""
        if genre_ids:
            return [
                self.client.discover_by_genre(media_type, genre_ids, 1, "popularity.desc"),
                self.client.discover_by_genre(media_type, genre_ids, 2, "popularity.desc"),
                self.client.discover_by_genre(media_type, genre_ids, 1, "vote_average.desc"),
                self.client.discover_by_genre(media_type, genre_ids, 1, _LATEST_SORT[media_type]),
            ]
        return [
            self.client.get_popular(media_type, 1),
            self.client.get_popular(media_type, 2),
            self.client.get_top_rated(media_type, 1),
            self.client.get_now_playing_or_on_the_air(media_type, 1),
        ]

    async def get_pool(
        self, media_type: MediaType, genre_ids: Iterable[int] = ()
    ) -> list[ContentItem]:
        """Merged pool for a media type and genre selection.

        Raises:
            CatalogError: Refresh failed and no earlier pool exists
        """
        fingerprint = make_fingerprint(genre_ids)
        log = LogContext(
            logger,
            mode="personalized" if fingerprint else "general",
            media=media_type.value,
        )

        snapshot = self._entry_for(fingerprint).pools.get(media_type)
        if self._is_fresh(snapshot):
            log.debug("Cache HIT")
            return list(snapshot.items)

        async with self._lock_for(fingerprint, media_type):
            entry = self._entry_for(fingerprint)
            snapshot = entry.pools.get(media_type)
            if self._is_fresh(snapshot):
                log.debug("Cache HIT after waiting for refresh")
                return list(snapshot.items)

            log.debug("Cache MISS, fetching pool")
            started_at = self._clock()
            try:
                pages = await gather_or_cancel(
                    *self._requests(media_type, sorted(fingerprint))
                )
            except CatalogError as e:
                if snapshot is not None:
                    log.warning(f"Refresh failed, serving stale pool: {e}")
                    return list(snapshot.items)
                log.error(f"Refresh failed with nothing cached: {e}")
                raise

            items = merge_unique(pages)
            entry.pools[media_type] = PoolSnapshot(items=items, refreshed_at=started_at)
            log.info(f"Cached {len(items)} items")
            return list(items)

    def invalidate(self) -> None:
        """Drop every cached pool."""
        self._general = CacheEntry(fingerprint=frozenset())
        self._personalized = None
        logger.debug("Recommendation cache cleared")

    def invalidate_personalized(self) -> None:
        """Drop the personalized pools only."""
        self._personalized = None

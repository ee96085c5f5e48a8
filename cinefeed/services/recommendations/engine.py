"""Recommendation engine building the home feed categories."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from cinefeed.constants import (
    CATEGORY_SIZE,
    GENRE_CATEGORY_COUNT,
    GENRE_WEIGHT,
    MIN_PREFERENCES_FOR_PERSONALIZATION,
    RATING_WEIGHT,
)
from cinefeed.exceptions import CatalogError
from cinefeed.models import Category, ContentItem, MediaType
from cinefeed.services.catalog.genres import GenreTable
from cinefeed.services.preferences import GenrePreferenceStore
from cinefeed.services.recommendations.cache import RecommendationCache
from cinefeed.utils.logging import get_logger
from cinefeed.utils.tasks import gather_or_cancel

logger = get_logger(__name__)


def preference_score(item: ContentItem, preferences: list[int]) -> float:
    """Blend of genre overlap with the preferences and the item rating.

    Without preferences this is the rating alone, scaled to [0, 1].
    """
    rating_score = item.vote_average / 10
    if not preferences:
        return rating_score

    preferred = set(preferences)
    matching = sum(1 for genre_id in set(item.genre_ids) if genre_id in preferred)
    genre_score = matching / len(preferred)
    return GENRE_WEIGHT * genre_score + RATING_WEIGHT * rating_score


def _by_popularity(items: Iterable[ContentItem]) -> list[ContentItem]:
    return sorted(items, key=lambda item: item.popularity, reverse=True)[:CATEGORY_SIZE]


def _by_rating(items: Iterable[ContentItem]) -> list[ContentItem]:
    return sorted(items, key=lambda item: item.vote_average, reverse=True)[:CATEGORY_SIZE]


@dataclass
class RecommendationResult:
    """Feed categories plus the upstream error, if one prevented building them."""

    categories: list[Category] = field(default_factory=list)
    error: CatalogError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RecommendationEngine:
    """Engine for building the personalized home feed.

    Strategy:
    1. Fewer than 3 preferred genres: general feed from popular/top rated pools
    2. Otherwise: genre-discovered pools, scored by genre overlap + rating
    3. Upstream failures never raise; they come back in the result
    """

    def __init__(
        self,
        preferences: GenrePreferenceStore,
        cache: RecommendationCache,
        genres: GenreTable,
    ) -> None:
        self.preferences = preferences
        self.cache = cache
        self.genres = genres

    async def _mode_genres(self) -> list[int]:
        """Preferences when personalization applies, else an empty list."""
        preferences = await self.preferences.get()
        if len(preferences) < MIN_PREFERENCES_FOR_PERSONALIZATION:
            return []
        return preferences

    async def _pools(self, genre_ids: list[int]) -> tuple[list[ContentItem], list[ContentItem]]:
        movies, shows = await gather_or_cancel(
            self.cache.get_pool(MediaType.MOVIE, genre_ids),
            self.cache.get_pool(MediaType.TV, genre_ids),
        )
        return movies, shows

    async def get_recommendations(self) -> RecommendationResult:
        """Build the ordered feed categories for the current preferences."""
        preferences = await self._mode_genres()

        if preferences:
            try:
                movies, shows = await self._pools(preferences)
                return RecommendationResult(
                    categories=self.personalized_categories(movies, shows, preferences)
                )
            except CatalogError as e:
                logger.warning(f"Personalized feed unavailable, falling back to general: {e}")

        try:
            movies, shows = await self._pools([])
        except CatalogError as e:
            logger.error(f"Recommendations unavailable: {e}")
            return RecommendationResult(error=e)

        return RecommendationResult(categories=self.general_categories(movies, shows))

    def general_categories(
        self, movies: list[ContentItem], shows: list[ContentItem]
    ) -> list[Category]:
        return [
            Category(id="popular-movies", title="Popular Movies", items=_by_popularity(movies)),
            Category(id="top-rated-movies", title="Top Rated Movies", items=_by_rating(movies)),
            Category(id="popular-tv", title="Popular TV Shows", items=_by_popularity(shows)),
            Category(id="top-rated-tv", title="Top Rated TV Shows", items=_by_rating(shows)),
        ]

    def personalized_categories(
        self,
        movies: list[ContentItem],
        shows: list[ContentItem],
        preferences: list[int],
    ) -> list[Category]:
        content = movies + shows

        for_you = sorted(
            content,
            key=lambda item: preference_score(item, preferences),
            reverse=True,
        )[:CATEGORY_SIZE]

        categories = [
            Category(
                id="for-you",
                title="For You",
                subtitle="Handpicked based on your preferences",
                items=for_you,
            ),
            Category(
                id="trending",
                title="Trending Now",
                subtitle="Popular content in your favorite genres",
                items=_by_popularity(content),
            ),
        ]

        for genre_id in preferences[:GENRE_CATEGORY_COUNT]:
            genre_items = _by_rating(item for item in content if genre_id in item.genre_ids)
            if not genre_items:
                continue
            name = self.genres.name_for(genre_id)
            categories.append(
                Category(
                    id=f"genre-{genre_id}",
                    title=f"Best {name}",
                    subtitle=f"Top-rated {name.lower()} content",
                    items=genre_items,
                )
            )

        return categories

    async def refresh(self) -> CatalogError | None:
        """Drop cached pools and prefetch both pools for the current mode.

        Returns:
            The prefetch error, if any (also logged)
        """
        self.cache.invalidate()
        preferences = await self._mode_genres()
        try:
            await self._pools(preferences)
        except CatalogError as e:
            logger.error(f"Error pre-fetching data during refresh: {e}")
            return e
        return None

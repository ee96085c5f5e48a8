"""Library entry point wiring catalog, caches, preferences and search."""

from collections.abc import Iterable

from cinefeed.config import Settings, get_settings
from cinefeed.exceptions import CatalogError
from cinefeed.models import ContentItem, Genre
from cinefeed.services.catalog import CatalogClient, GenreTable, TMDBCatalogClient
from cinefeed.services.preferences import GenrePreferenceStore
from cinefeed.services.recommendations import (
    RecommendationCache,
    RecommendationEngine,
    RecommendationResult,
)
from cinefeed.services.search import SearchService
from cinefeed.storage import InMemoryProfileStore, ProfileStore, RedisProfileStore
from cinefeed.utils.http_client import close_all_clients
from cinefeed.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class CineFeed:
    """Operations exposed to the UI shell.

    Usage:
        feed = await CineFeed.create()
        await feed.preferences.set([28, 12, 16])
        result = await feed.get_recommendations()
        hits = await feed.search("batman")
        await feed.aclose()
    """

    def __init__(
        self,
        client: CatalogClient,
        profile_store: ProfileStore,
        genres: GenreTable,
    ) -> None:
        self.client = client
        self.profile_store = profile_store
        self.genres = genres

        self.preferences = GenrePreferenceStore(profile_store, genres)
        self.recommendation_cache = RecommendationCache(client)
        self.engine = RecommendationEngine(self.preferences, self.recommendation_cache, genres)
        self.search_service = SearchService(client, self.preferences)

        self.preferences.subscribe(self._on_preferences_changed)

    @classmethod
    async def create(
        cls,
        settings: Settings | None = None,
        profile_store: ProfileStore | None = None,
        client: CatalogClient | None = None,
    ) -> "CineFeed":
        """Build a feed and load the genre reference table."""
        settings = settings or get_settings()
        setup_logging(settings=settings)
        if client is None:
            client = TMDBCatalogClient(settings)
            if not settings.has_tmdb:
                logger.warning("TMDB API key not configured; catalog calls will fail")
        if profile_store is None:
            if settings.redis_url:
                profile_store = RedisProfileStore(str(settings.redis_url))
            else:
                profile_store = InMemoryProfileStore()

        genres = await GenreTable.load(client)
        return cls(client, profile_store, genres)

    def _on_preferences_changed(self) -> None:
        self.recommendation_cache.invalidate_personalized()
        self.search_service.clear_cache()

    async def get_recommendations(self) -> RecommendationResult:
        return await self.engine.get_recommendations()

    async def refresh(self) -> CatalogError | None:
        return await self.engine.refresh()

    async def search(self, query: str, genre_filters: Iterable[int] = ()) -> list[ContentItem]:
        return await self.search_service.search(query, genre_filters)

    async def search_history(self) -> list[str]:
        return await self.search_service.history()

    async def clear_search_history(self) -> None:
        await self.search_service.clear_history()

    def all_genres(self) -> list[Genre]:
        return self.genres.all()

    async def aclose(self) -> None:
        """Release HTTP and Redis connections."""
        await close_all_clients()
        if isinstance(self.profile_store, RedisProfileStore):
            await self.profile_store.close()

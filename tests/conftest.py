"""Pytest configuration and fixtures."""

from collections.abc import Iterable

import pytest

from cinefeed.exceptions import CatalogError
from cinefeed.models import ContentItem, Genre, MediaType, PagedResponse
from cinefeed.services.catalog.base import CatalogClient
from cinefeed.services.catalog.genres import GenreTable
from cinefeed.services.preferences import GenrePreferenceStore
from cinefeed.services.recommendations.cache import RecommendationCache
from cinefeed.services.recommendations.engine import RecommendationEngine
from cinefeed.services.search import SearchService
from cinefeed.storage.profile import InMemoryProfileStore


def make_item(
    item_id: int,
    media_type: MediaType = MediaType.MOVIE,
    *,
    title: str | None = None,
    popularity: float = 10.0,
    vote_average: float = 5.0,
    genre_ids: Iterable[int] = (),
) -> ContentItem:
    """Build a catalog item with just the fields a test cares about."""
    return ContentItem(
        id=item_id,
        media_type=media_type,
        title=title or f"{media_type.value}-{item_id}",
        popularity=popularity,
        vote_average=vote_average,
        genre_ids=tuple(genre_ids),
    )


def page_of(*items: ContentItem, page: int = 1) -> PagedResponse:
    return PagedResponse(page=page, results=list(items), total_pages=5, total_results=100)


class FakeCatalogClient(CatalogClient):
    """Scripted catalog recording every call.

    Responses are keyed by the call tuple recorded in ``calls``; unknown calls
    return an empty page. Setting ``error`` makes every call raise it.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.responses: dict[tuple, PagedResponse] = {}
        self.genres: dict[MediaType, list[Genre]] = {
            MediaType.MOVIE: [Genre(id=28, name="Action"), Genre(id=12, name="Adventure")],
            MediaType.TV: [Genre(id=10759, name="Action & Adventure"), Genre(id=12, name="Adventure")],
        }
        self.error: CatalogError | None = None
        self.fail_on: set[tuple] = set()

    async def _answer(self, call: tuple) -> PagedResponse:
        self.calls.append(call)
        if self.error is not None and (not self.fail_on or call in self.fail_on):
            raise self.error
        return self.responses.get(call, PagedResponse())

    async def get_popular(self, media_type: MediaType, page: int = 1) -> PagedResponse:
        return await self._answer(("popular", media_type, page))

    async def get_top_rated(self, media_type: MediaType, page: int = 1) -> PagedResponse:
        return await self._answer(("top_rated", media_type, page))

    async def get_now_playing_or_on_the_air(
        self, media_type: MediaType, page: int = 1
    ) -> PagedResponse:
        return await self._answer(("now", media_type, page))

    async def discover_by_genre(
        self,
        media_type: MediaType,
        genre_ids: list[int],
        page: int = 1,
        sort_by: str = "popularity.desc",
    ) -> PagedResponse:
        return await self._answer(("discover", media_type, tuple(genre_ids), page, sort_by))

    async def search_multi(self, query: str, page: int = 1) -> PagedResponse:
        return await self._answer(("search", query, page))

    async def get_genre_list(self, media_type: MediaType) -> list[Genre]:
        self.calls.append(("genres", media_type))
        if self.error is not None:
            raise self.error
        return self.genres[media_type]

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def catalog() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def genre_table() -> GenreTable:
    return GenreTable.fallback()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def preference_store(
    profile_store: InMemoryProfileStore, genre_table: GenreTable
) -> GenrePreferenceStore:
    return GenrePreferenceStore(profile_store, genre_table)


@pytest.fixture
def recommendation_cache(catalog: FakeCatalogClient, clock: FakeClock) -> RecommendationCache:
    return RecommendationCache(catalog, clock=clock)


@pytest.fixture
def engine(
    preference_store: GenrePreferenceStore,
    recommendation_cache: RecommendationCache,
    genre_table: GenreTable,
) -> RecommendationEngine:
    return RecommendationEngine(preference_store, recommendation_cache, genre_table)


@pytest.fixture
def search_service(
    catalog: FakeCatalogClient, preference_store: GenrePreferenceStore
) -> SearchService:
    return SearchService(catalog, preference_store)

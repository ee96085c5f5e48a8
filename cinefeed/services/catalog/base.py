"""Abstract interface for upstream content catalogs.

TMDB is the shipped implementation; tests provide scripted fakes.
"""

from abc import ABC, abstractmethod

from cinefeed.models import Genre, MediaType, PagedResponse


class CatalogClient(ABC):
    """Contract for paginated movie/TV catalogs.

    Every method raises a ``CatalogError`` subclass on failure. An empty
    ``results`` list is a valid answer, not an error.
    """

    @abstractmethod
    async def get_popular(self, media_type: MediaType, page: int = 1) -> PagedResponse:
        """Most popular titles."""
        ...

    @abstractmethod
    async def get_top_rated(self, media_type: MediaType, page: int = 1) -> PagedResponse:
        """Highest rated titles."""
        ...

    @abstractmethod
    async def get_now_playing_or_on_the_air(
        self, media_type: MediaType, page: int = 1
    ) -> PagedResponse:
        """Movies in theaters, or series currently airing."""
        ...

    @abstractmethod
    async def discover_by_genre(
        self,
        media_type: MediaType,
        genre_ids: list[int],
        page: int = 1,
        sort_by: str = "popularity.desc",
    ) -> PagedResponse:
        """Titles carrying the given genres, in the given sort order."""
        ...

    @abstractmethod
    async def search_multi(self, query: str, page: int = 1) -> PagedResponse:
        """Free-text search over movies and series (other result types dropped)."""
        ...

    @abstractmethod
    async def get_genre_list(self, media_type: MediaType) -> list[Genre]:
        """Official genre list for a media type."""
        ...

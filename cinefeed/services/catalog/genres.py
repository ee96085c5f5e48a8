"""Genre reference table, loaded once per session."""

from collections.abc import Iterable, Iterator

from cinefeed.constants import FALLBACK_MOVIE_GENRES, FALLBACK_TV_GENRES
from cinefeed.exceptions import CatalogError
from cinefeed.models import Genre, MediaType
from cinefeed.services.catalog.base import CatalogClient
from cinefeed.utils.logging import get_logger
from cinefeed.utils.tasks import gather_or_cancel

logger = get_logger(__name__)


class GenreTable:
    """Fixed id -> name lookup of movie and TV genres."""

    def __init__(
        self,
        movie_genres: Iterable[Genre],
        tv_genres: Iterable[Genre],
    ) -> None:
        movie_genres = list(movie_genres)
        tv_genres = list(tv_genres)
        self.movie_ids = frozenset(g.id for g in movie_genres)
        self.tv_ids = frozenset(g.id for g in tv_genres)

        by_id: dict[int, Genre] = {}
        for genre in movie_genres + tv_genres:
            by_id.setdefault(genre.id, genre)
        self._genres = sorted(by_id.values(), key=lambda g: g.name.lower())
        self._by_id = by_id

    @classmethod
    def fallback(cls) -> "GenreTable":
        """Table built from the bundled TMDB genre list."""
        return cls(
            [Genre(id=i, name=n) for i, n in FALLBACK_MOVIE_GENRES],
            [Genre(id=i, name=n) for i, n in FALLBACK_TV_GENRES],
        )

    @classmethod
    async def load(cls, client: CatalogClient) -> "GenreTable":
        """Fetch movie and TV genres concurrently; use the bundled list on failure."""
        try:
            movie_genres, tv_genres = await gather_or_cancel(
                client.get_genre_list(MediaType.MOVIE),
                client.get_genre_list(MediaType.TV),
            )
        except CatalogError as e:
            logger.warning(f"Genre list unavailable, using bundled genres: {e}")
            return cls.fallback()

        logger.info(f"Loaded {len(movie_genres)} movie and {len(tv_genres)} TV genres")
        return cls(movie_genres, tv_genres)

    def __contains__(self, genre_id: object) -> bool:
        return genre_id in self._by_id

    def __iter__(self) -> Iterator[Genre]:
        return iter(self._genres)

    def __len__(self) -> int:
        return len(self._genres)

    def all(self) -> list[Genre]:
        """All genres sorted by name."""
        return list(self._genres)

    def get(self, genre_id: int) -> Genre | None:
        return self._by_id.get(genre_id)

    def name_for(self, genre_id: int) -> str:
        """Display name, or ``Genre {id}`` for unknown ids."""
        genre = self._by_id.get(genre_id)
        return genre.name if genre else f"Genre {genre_id}"

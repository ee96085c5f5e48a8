"""Catalog content models: items, genres, categories and paged envelopes."""

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cinefeed.config import get_settings


class MediaType(str, enum.Enum):
    """Type of catalog content."""

    MOVIE = "movie"
    TV = "tv"


class Genre(BaseModel):
    """Genre reference entry."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


class ContentItem(BaseModel):
    """A movie or TV show from the catalog.

    ``media_type`` is always set explicitly by whoever builds the item; the
    same ``id`` may exist for a movie and a series, so identity is ``key``.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    media_type: MediaType
    title: str
    original_title: str = ""
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: str = ""  # first air date for series
    vote_average: float = Field(default=0.0, ge=0.0, le=10.0)
    vote_count: int = Field(default=0, ge=0)
    popularity: float = 0.0
    genre_ids: tuple[int, ...] = ()
    original_language: str = ""
    adult: bool = False

    @classmethod
    def from_tmdb(cls, raw: dict[str, Any], media_type: MediaType) -> "ContentItem":
        """Build an item from a TMDB list/search payload."""
        if media_type == MediaType.MOVIE:
            title = raw.get("title") or raw.get("original_title") or ""
            original_title = raw.get("original_title") or title
            release_date = raw.get("release_date") or ""
        else:
            title = raw.get("name") or raw.get("original_name") or ""
            original_title = raw.get("original_name") or title
            release_date = raw.get("first_air_date") or ""

        return cls(
            id=raw["id"],
            media_type=media_type,
            title=title,
            original_title=original_title,
            overview=raw.get("overview") or "",
            poster_path=raw.get("poster_path") or None,
            backdrop_path=raw.get("backdrop_path") or None,
            release_date=release_date,
            vote_average=raw.get("vote_average") or 0.0,
            vote_count=raw.get("vote_count") or 0,
            popularity=raw.get("popularity") or 0.0,
            genre_ids=tuple(raw.get("genre_ids") or ()),
            original_language=raw.get("original_language") or "",
            adult=bool(raw.get("adult", False)),
        )

    @property
    def key(self) -> tuple[MediaType, int]:
        """Identity of the item across media types."""
        return (self.media_type, self.id)

    @property
    def year(self) -> str | None:
        return self.release_date[:4] or None

    @property
    def poster_url(self) -> str | None:
        if not self.poster_path:
            return None
        return f"{get_settings().tmdb_image_base}/w342{self.poster_path}"

    @property
    def backdrop_url(self) -> str | None:
        if not self.backdrop_path:
            return None
        return f"{get_settings().tmdb_image_base}/w780{self.backdrop_path}"


class PagedResponse(BaseModel):
    """Paginated result envelope returned by catalog listings."""

    page: int = 1
    results: list[ContentItem] = Field(default_factory=list)
    total_pages: int = 0
    total_results: int = 0


class Category(BaseModel):
    """Named row of content for the home feed."""

    id: str
    title: str
    subtitle: str | None = None
    items: list[ContentItem] = Field(default_factory=list)

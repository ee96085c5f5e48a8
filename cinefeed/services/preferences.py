"""Genre preference store: persistence, scoring and completion checks."""

from collections.abc import Callable, Iterable

from cinefeed.constants import (
    DEFAULT_MIN_MATCH_SCORE,
    EXCELLENT_PREFERENCE_COUNT,
    MATCH_COVERAGE_WEIGHT,
    MATCH_FOCUS_WEIGHT,
    MAX_RECOMMENDED_PREFERENCES,
    MIN_PREFERENCES_FOR_PERSONALIZATION,
)
from cinefeed.exceptions import InvalidGenreIdError
from cinefeed.models import (
    CompletionStatus,
    ContentItem,
    Genre,
    PreferenceStats,
    ValidationResult,
)
from cinefeed.services.catalog.genres import GenreTable
from cinefeed.storage.profile import ProfileStore
from cinefeed.utils.logging import get_logger

logger = get_logger(__name__)


def _unique(ids: Iterable[int]) -> list[int]:
    """Drop repeated ids, keeping first occurrence order."""
    return list(dict.fromkeys(ids))


def genre_match_score(preferences: Iterable[int], item_genre_ids: Iterable[int]) -> float:
    """Score in [0, 1] of how well an item's genres fit the preferences.

    Rewards items that cover many preferred genres and items that are mostly
    about preferred genres. 0 when either side is empty.
    """
    preferred = set(preferences)
    item_genres = set(item_genre_ids)
    if not preferred or not item_genres:
        return 0.0

    matching = len(preferred & item_genres)
    return (
        MATCH_COVERAGE_WEIGHT * matching / len(preferred)
        + MATCH_FOCUS_WEIGHT * matching / len(item_genres)
    )


class GenrePreferenceStore:
    """The user's selected genre ids, validated against the genre table.

    Writes are validated: ``set`` refuses ids missing from the table and
    raises ``InvalidGenreIdError`` without touching the stored record.
    Listeners registered with ``subscribe`` run after every effective change.
    """

    def __init__(self, profile_store: ProfileStore, genres: GenreTable) -> None:
        self.profile_store = profile_store
        self.genres = genres
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> None:
        """Register a callback run after the preferences change."""
        self._listeners.append(callback)

    async def get(self) -> list[int]:
        """Selected genre ids in selection order, empty if none set."""
        return _unique(await self.profile_store.get_favorite_genres())

    async def set(self, genre_ids: Iterable[int]) -> None:
        """Replace the full selection.

        Raises:
            InvalidGenreIdError: Some ids are not in the genre table
        """
        ids = _unique(genre_ids)
        invalid = [genre_id for genre_id in ids if genre_id not in self.genres]
        if invalid:
            raise InvalidGenreIdError(invalid)

        current = await self.get()
        await self.profile_store.set_favorite_genres(ids)
        if ids != current:
            logger.info(f"Genre preferences updated: {ids}")
            for callback in self._listeners:
                callback()

    async def add(self, genre_id: int) -> None:
        current = await self.get()
        if genre_id not in current:
            await self.set([*current, genre_id])

    async def remove(self, genre_id: int) -> None:
        current = await self.get()
        if genre_id in current:
            await self.set([g for g in current if g != genre_id])

    async def is_preferred(self, genre_id: int) -> bool:
        return genre_id in await self.get()

    async def match_score(self, item_genre_ids: Iterable[int]) -> float:
        """Genre match score of an item against the stored preferences."""
        return genre_match_score(await self.get(), item_genre_ids)

    async def filter_by_preferences(
        self, items: Iterable[ContentItem], min_score: float = DEFAULT_MIN_MATCH_SCORE
    ) -> list[ContentItem]:
        """Items whose match score reaches ``min_score``; all items when none are preferred."""
        preferences = await self.get()
        items = list(items)
        if not preferences:
            return items
        return [
            item for item in items
            if genre_match_score(preferences, item.genre_ids) >= min_score
        ]

    async def sort_by_preferences(self, items: Iterable[ContentItem]) -> list[ContentItem]:
        """Best genre match first; ties keep their input order."""
        preferences = await self.get()
        return sorted(
            items,
            key=lambda item: genre_match_score(preferences, item.genre_ids),
            reverse=True,
        )

    async def completion_status(self) -> CompletionStatus:
        preferences = await self.get()
        count = len(preferences)

        recommendation_text = []
        if count == 0:
            recommendation_text.append(
                f"Select at least {MIN_PREFERENCES_FOR_PERSONALIZATION} genres "
                "to get personalized recommendations"
            )
        elif count < MIN_PREFERENCES_FOR_PERSONALIZATION:
            recommendation_text.append(
                f"Select {MIN_PREFERENCES_FOR_PERSONALIZATION - count} more genres "
                "for better recommendations"
            )
        elif count >= EXCELLENT_PREFERENCE_COUNT:
            recommendation_text.append(
                "Great! You have enough genre preferences for excellent personalization"
            )

        return CompletionStatus(
            is_complete=count >= MIN_PREFERENCES_FOR_PERSONALIZATION,
            coverage_percent=min(count / MIN_PREFERENCES_FOR_PERSONALIZATION, 1.0) * 100,
            missing_genres=[g for g in self.genres if g.id not in preferences],
            recommendation_text=recommendation_text,
        )

    async def validate(self) -> ValidationResult:
        """Check the stored record as-is, including anything written elsewhere."""
        stored = await self.profile_store.get_favorite_genres()
        errors: list[str] = []
        warnings: list[str] = []

        invalid = [genre_id for genre_id in _unique(stored) if genre_id not in self.genres]
        if invalid:
            errors.append(f"Invalid genre IDs found: {', '.join(str(i) for i in invalid)}")

        if len(set(stored)) != len(stored):
            warnings.append("Duplicate genre preferences found")

        if not stored:
            warnings.append("No genre preferences set - personalization will be limited")
        elif len(set(stored)) > MAX_RECOMMENDED_PREFERENCES:
            warnings.append(
                "Very large number of genre preferences - "
                "may reduce specificity of recommendations"
            )

        return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)

    async def stats(self) -> PreferenceStats:
        preferences = await self.get()
        return PreferenceStats(
            total_selected=len(preferences),
            movie_genres=sum(1 for g in preferences if g in self.genres.movie_ids),
            tv_genres=sum(1 for g in preferences if g in self.genres.tv_ids),
            common_genres=sum(
                1 for g in preferences
                if g in self.genres.movie_ids and g in self.genres.tv_ids
            ),
            preferred_genre_names=[
                self.genres.name_for(g) for g in preferences if g in self.genres
            ],
        )

    async def recommended_genres(self, exclude_selected: bool = True) -> list[Genre]:
        """Genres to suggest in the picker."""
        if not exclude_selected:
            return self.genres.all()
        preferences = set(await self.get())
        return [g for g in self.genres if g.id not in preferences]

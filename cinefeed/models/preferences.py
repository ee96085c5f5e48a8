"""User preference record and genre preference result schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from cinefeed.models.content import Genre


class UserPreferences(BaseModel):
    """Persisted user preferences record."""

    favorite_genres: list[int] = Field(default_factory=list)
    preferred_language: str = "en"
    adult_content: bool = False
    sort_method: Literal["popularity", "rating", "release_date"] = "popularity"
    theme: Literal["light", "dark"] = "dark"
    search_history: list[str] = Field(default_factory=list)


class CompletionStatus(BaseModel):
    """How far the user is from a personalized feed."""

    is_complete: bool
    coverage_percent: float
    missing_genres: list[Genre] = Field(default_factory=list)
    recommendation_text: list[str] = Field(default_factory=list)


class ValidationResult(BaseModel):
    """Outcome of checking the stored preferences against the genre table."""

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class PreferenceStats(BaseModel):
    """Breakdown of the selected genres."""

    total_selected: int = 0
    movie_genres: int = 0
    tv_genres: int = 0
    common_genres: int = 0
    preferred_genre_names: list[str] = Field(default_factory=list)

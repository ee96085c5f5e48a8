"""Data models."""

from cinefeed.models.content import (
    Category,
    ContentItem,
    Genre,
    MediaType,
    PagedResponse,
)
from cinefeed.models.preferences import (
    CompletionStatus,
    PreferenceStats,
    UserPreferences,
    ValidationResult,
)

__all__ = [
    "Category",
    "CompletionStatus",
    "ContentItem",
    "Genre",
    "MediaType",
    "PagedResponse",
    "PreferenceStats",
    "UserPreferences",
    "ValidationResult",
]

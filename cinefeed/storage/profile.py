"""Local user profile storage.

The profile record holds the favorite genres together with unrelated UI
preferences (sort method, theme, ...). Genre preference logic lives in
``cinefeed.services.preferences``; these stores only persist the record.
"""

import json
from abc import ABC, abstractmethod
from typing import Any

import redis.asyncio as redis

from cinefeed.constants import DEFAULT_USER_ID, PROFILE_KEY_PREFIX
from cinefeed.models import UserPreferences
from cinefeed.utils.logging import get_logger

logger = get_logger(__name__)


class ProfileStore(ABC):
    """Backing store for the user preferences record."""

    @abstractmethod
    async def get_preferences(self) -> UserPreferences:
        """Stored record, or defaults when nothing was saved yet."""
        ...

    @abstractmethod
    async def save_preferences(self, preferences: UserPreferences) -> None:
        """Persist the full record."""
        ...

    async def update_preferences(self, **changes: Any) -> UserPreferences:
        """Merge ``changes`` into the stored record and persist it."""
        current = await self.get_preferences()
        updated = UserPreferences.model_validate({**current.model_dump(), **changes})
        await self.save_preferences(updated)
        return updated

    async def get_favorite_genres(self) -> list[int]:
        preferences = await self.get_preferences()
        return list(preferences.favorite_genres)

    async def set_favorite_genres(self, genre_ids: list[int]) -> None:
        await self.update_preferences(favorite_genres=list(genre_ids))


class InMemoryProfileStore(ProfileStore):
    """Process-local store, mainly for tests and embedding."""

    def __init__(self, preferences: UserPreferences | None = None) -> None:
        self._record = (preferences or UserPreferences()).model_dump()

    async def get_preferences(self) -> UserPreferences:
        return UserPreferences.model_validate(self._record)

    async def save_preferences(self, preferences: UserPreferences) -> None:
        self._record = preferences.model_dump()


class RedisProfileStore(ProfileStore):
    """Async Redis store with JSON serialization, one key per user."""

    def __init__(
        self,
        redis_url: str | None = None,
        user_id: str = DEFAULT_USER_ID,
        client: redis.Redis | None = None,
    ) -> None:
        if client is None and redis_url is None:
            raise ValueError("RedisProfileStore needs a redis_url or a client")
        self._redis_url = redis_url
        self._client = client
        self.key = f"{PROFILE_KEY_PREFIX}:{user_id}"

    async def _get_client(self) -> redis.Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = redis.from_url(
                str(self._redis_url),
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def get_preferences(self) -> UserPreferences:
        client = await self._get_client()
        data = await client.get(self.key)
        if not data:
            return UserPreferences()
        try:
            return UserPreferences.model_validate(json.loads(data))
        except ValueError as e:
            logger.warning(f"Discarding unreadable preferences record {self.key}: {e}")
            return UserPreferences()

    async def save_preferences(self, preferences: UserPreferences) -> None:
        client = await self._get_client()
        await client.set(self.key, preferences.model_dump_json())

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None

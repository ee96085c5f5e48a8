"""Persistence backends."""

from cinefeed.storage.profile import InMemoryProfileStore, ProfileStore, RedisProfileStore

__all__ = ["InMemoryProfileStore", "ProfileStore", "RedisProfileStore"]

"""Recommendation feed: pool cache and category engine."""

from cinefeed.services.recommendations.cache import RecommendationCache
from cinefeed.services.recommendations.engine import (
    RecommendationEngine,
    RecommendationResult,
)

__all__ = ["RecommendationCache", "RecommendationEngine", "RecommendationResult"]

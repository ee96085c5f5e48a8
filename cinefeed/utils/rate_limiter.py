"""Client-side throttling of catalog requests."""

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass

from cinefeed.constants import (
    DEFAULT_BURST_SIZE,
    DEFAULT_REQUESTS_PER_SECOND,
    TMDB_BURST_SIZE,
    TMDB_RATE_LIMIT_SERVICE,
    TMDB_REQUESTS_PER_SECOND,
)
from cinefeed.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimitConfig:
    requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND
    burst_size: int = DEFAULT_BURST_SIZE


class TokenBucket:
    """Holds up to ``burst_size`` request tokens, refilled continuously."""

    def __init__(self, config: RateLimitConfig, clock: Callable[[], float]) -> None:
        self.capacity = config.burst_size
        self.refill_rate = config.requests_per_second
        self.tokens = float(self.capacity)
        self._clock = clock
        self._refilled_at = clock()

    def refill(self) -> None:
        now = self._clock()
        self.tokens = min(self.capacity, self.tokens + (now - self._refilled_at) * self.refill_rate)
        self._refilled_at = now

    def take(self) -> float:
        """Take one token, or return how long to wait for it."""
        self.refill()
        if self.tokens >= 1:
            self.tokens -= 1
            return 0.0
        return (1 - self.tokens) / self.refill_rate


class RateLimiter:
    """Per-service token buckets shared by every catalog call.

    Unknown services fall back to the default limits. Callers wait in
    ``acquire`` instead of being refused.
    """

    def __init__(
        self,
        limits: dict[str, RateLimitConfig] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._limits = {
            TMDB_RATE_LIMIT_SERVICE: RateLimitConfig(TMDB_REQUESTS_PER_SECOND, TMDB_BURST_SIZE),
            **(limits or {}),
        }
        self._clock = clock
        self._buckets: dict[str, TokenBucket] = {}
        self._lock = asyncio.Lock()

    def _bucket(self, service: str) -> TokenBucket:
        if service not in self._buckets:
            config = self._limits.get(service, RateLimitConfig())
            self._buckets[service] = TokenBucket(config, self._clock)
        return self._buckets[service]

    async def acquire(self, service: str = TMDB_RATE_LIMIT_SERVICE) -> None:
        """Wait until one request to ``service`` may go out."""
        async with self._lock:
            bucket = self._bucket(service)
            wait = bucket.take()
            while wait > 0:
                logger.debug(f"Rate limit [{service}]: waiting {wait:.2f}s")
                await asyncio.sleep(wait)
                wait = bucket.take()

    def available(self, service: str) -> float:
        """Tokens currently left for ``service``."""
        bucket = self._bucket(service)
        bucket.refill()
        return bucket.tokens


rate_limiter = RateLimiter()

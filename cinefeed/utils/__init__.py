"""Utility modules for the CineFeed library."""

from cinefeed.utils.logging import get_logger, LogContext, setup_logging
from cinefeed.utils.rate_limiter import rate_limiter, RateLimitConfig, RateLimiter
from cinefeed.utils.retry import retry_async, RetryConfig

__all__ = [
    # Logging
    "get_logger",
    "LogContext",
    "setup_logging",
    # Rate limiting
    "rate_limiter",
    "RateLimitConfig",
    "RateLimiter",
    # Retry
    "retry_async",
    "RetryConfig",
]

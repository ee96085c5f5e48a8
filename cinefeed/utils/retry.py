"""Retry utilities with exponential backoff for external API calls."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 2
    base_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    retryable_exceptions: tuple = (
        httpx.TimeoutException,
        httpx.ConnectError,
        httpx.ReadError,
        ConnectionError,
        TimeoutError,
    )
    retryable_status_codes: tuple = (429, 500, 502, 503, 504)

    def delay_for(self, attempt: int) -> float:
        """Backoff delay before retrying after the given 0-based attempt."""
        return min(self.base_delay * (self.exponential_base**attempt), self.max_delay)


DEFAULT_RETRY_CONFIG = RetryConfig()


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    operation_name: str = "operation",
    **kwargs: Any,
) -> T:
    """Execute an async function with retry logic and exponential backoff.

    Args:
        func: Async function to execute
        *args: Positional arguments for the function
        config: Retry configuration
        operation_name: Name of the operation for logging
        **kwargs: Keyword arguments for the function

    Returns:
        The result of the last attempt. For ``httpx.Response`` results this may
        still carry a retryable status code once retries are exhausted; the
        caller decides how to map it.

    Raises:
        The last retryable exception once all attempts failed, or any
        non-retryable exception immediately.
    """
    attempt = 0
    while True:
        try:
            result = await func(*args, **kwargs)
        except config.retryable_exceptions as e:
            if attempt >= config.max_retries:
                logger.error(
                    f"{operation_name}: Failed after {config.max_retries + 1} attempts: {e!r}"
                )
                raise
            reason = type(e).__name__
        else:
            if not (
                isinstance(result, httpx.Response)
                and result.status_code in config.retryable_status_codes
                and attempt < config.max_retries
            ):
                return result
            reason = f"Got status {result.status_code}"

        delay = config.delay_for(attempt)
        logger.warning(
            f"{operation_name}: {reason}, "
            f"retrying in {delay:.1f}s (attempt {attempt + 1}/{config.max_retries + 1})"
        )
        await asyncio.sleep(delay)
        attempt += 1

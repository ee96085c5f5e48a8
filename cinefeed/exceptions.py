"""Exception types shared across the library."""


class CineFeedError(Exception):
    """Base exception for CineFeed errors."""

    user_message = "Something went wrong. Please try again."


class CatalogError(CineFeedError):
    """Upstream catalog request failed."""

    retryable = False
    user_message = "Something went wrong while contacting the movie database. Please try again."

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotConfiguredError(CatalogError):
    """Catalog credentials are missing or were rejected."""

    user_message = "Movie database is currently unavailable."


class NetworkFailureError(CatalogError):
    """Transient failure (timeout, connection error, upstream 5xx)."""

    retryable = True
    user_message = (
        "Unable to connect to the movie database. "
        "Please check your internet connection and try again."
    )


class RateLimitedError(CatalogError):
    """Upstream rejected the request with HTTP 429."""

    retryable = True
    user_message = "We've received too many requests. Please wait a moment and try again."

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


class InvalidGenreIdError(CineFeedError, ValueError):
    """Genre preference write referenced ids missing from the genre table."""

    user_message = "Some of the selected genres are not available."

    def __init__(self, invalid_ids: list[int]) -> None:
        self.invalid_ids = invalid_ids
        super().__init__(
            f"Invalid genre IDs found: {', '.join(str(i) for i in invalid_ids)}"
        )

"""Custom exception classes for the application."""

from typing import Optional


class BidTrackerException(Exception):
    """Base exception for all bidtracker errors."""

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(BidTrackerException):
    """Raised when a requested resource is not found.

    Used both for unknown stored items and for listings the upstream
    source answers with HTTP 404. Never retried.
    """

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with identifier '{identifier}' not found")


class ScraperError(BidTrackerException):
    """Raised when a scraper encounters an error."""

    def __init__(self, platform: str, message: str):
        self.platform = platform
        super().__init__(f"Scraper error for {platform}: {message}")


class NoAdapterError(ScraperError):
    """Raised when no registered adapter matches a source URL."""

    def __init__(self, url: str):
        self.url = url
        super().__init__("registry", f"no adapter available for URL '{url}'")


class ValidationError(ScraperError):
    """Raised when an adapter rejects the shape of an upstream payload."""

    def __init__(self, platform: str, message: str = "invalid data received from source"):
        super().__init__(platform, message)


class FetchError(ScraperError):
    """Raised when every fetch attempt failed with a transient error.

    The last underlying error is kept on ``cause`` (and chained as
    ``__cause__`` by the raiser).
    """

    def __init__(self, platform: str, url: str, attempts: int, cause: Optional[BaseException] = None):
        self.url = url
        self.attempts = attempts
        self.cause = cause
        detail = f": {cause!r}" if cause is not None else ""
        super().__init__(platform, f"failed to fetch '{url}' after {attempts} attempts{detail}")


class AdapterConfigurationError(ScraperError):
    """Raised when an adapter is missing credentials or settings it needs."""

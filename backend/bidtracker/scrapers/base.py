"""Base adapter interface and the normalized record shape.

Every source-specific adapter inherits from BaseAdapter and supplies the
URL pattern, payload shape-check, and extraction logic for its source.
The FetchPipeline owns everything else (caching, rate limiting, retries).
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Pattern

import httpx
import structlog


@dataclass
class NormalizedRecord:
    """Canonical item shape produced by adapters and persisted by storage."""

    name: str
    source_url: str  # Detail-page URL; adapter dispatch key and cache key
    image_url: str
    seller_ref: str  # Seller URL or opaque id used for grouping
    closes_at: datetime
    current_bid: Decimal = Decimal("0")
    my_bid: Decimal = Decimal("0")
    reference_value: Decimal = Decimal("0")  # "Market value", ranking key for grouping
    archived: bool = False
    id: Optional[int] = None  # Assigned by storage once persisted

    def __post_init__(self):
        """Validate data after initialization."""
        if not self.source_url:
            raise ValueError("source_url is required")
        if not isinstance(self.closes_at, datetime):
            raise ValueError("closes_at must be a datetime")
        # Storage backends without timezone support hand back naive UTC values
        if self.closes_at.tzinfo is None:
            self.closes_at = self.closes_at.replace(tzinfo=timezone.utc)

    def without_id(self) -> "NormalizedRecord":
        """Return a copy with no storage id."""
        return replace(self, id=None)


@dataclass(frozen=True)
class RateLimit:
    """Sliding-window request ceiling for one adapter."""

    max_requests: int
    time_window: float  # seconds

    def __post_init__(self):
        if self.max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if self.time_window <= 0:
            raise ValueError("time_window must be positive")


class BaseAdapter(ABC):
    """Abstract base class for all source adapters.

    Subclasses set ``slug``, ``name`` and ``url_pattern`` and implement
    request(), validate() and extract(). request() performs exactly one
    HTTP attempt; retries, timeouts and status handling belong to the
    pipeline.
    """

    slug: str = ""  # Must be overridden in subclass (e.g., "cardhobby")
    name: str = ""  # Must be overridden in subclass (e.g., "Card Hobby")
    url_pattern: Pattern[str] = re.compile(r"(?!)")  # Matches nothing
    default_rate_limit: RateLimit = RateLimit(max_requests=10, time_window=60.0)

    def __init__(self, rate_limit: Optional[RateLimit] = None):
        """Initialize the adapter.

        Args:
            rate_limit: Override for the adapter's default request ceiling
        """
        self.rate_limit = rate_limit or self.default_rate_limit
        self.logger = structlog.get_logger(adapter=self.slug)

    def matches(self, url: str) -> bool:
        """Check whether this adapter handles the given source URL."""
        return bool(self.url_pattern.search(url))

    @abstractmethod
    async def request(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        """Issue a single HTTP request for the source URL.

        Args:
            client: Shared HTTP client
            url: Source detail-page URL

        Returns:
            The raw response; status is checked by the caller
        """

    @abstractmethod
    def validate(self, payload: Any) -> bool:
        """Shape-check the decoded payload.

        Returns:
            True if extract() can safely be called on the payload
        """

    @abstractmethod
    def extract(self, url: str, payload: Any) -> NormalizedRecord:
        """Build a record (without id) from a validated payload."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(slug='{self.slug}')>"

"""Scraper utilities for rate limiting, retries, caching, and data normalization."""

from .rate_limiter import AdapterRateLimiter, SlidingWindow
from .retry import retry_with_backoff, is_transient_error
from .cache import CacheEntry, RecordCache
from .normalizer import (
    PriceNormalizer,
    clean_title,
    default_close_time,
    parse_source_datetime,
)
from .user_agents import get_firefox_user_agent


__all__ = [
    # Rate limiting
    "AdapterRateLimiter",
    "SlidingWindow",
    # Retry
    "retry_with_backoff",
    "is_transient_error",
    # Caching
    "CacheEntry",
    "RecordCache",
    # Normalization
    "PriceNormalizer",
    "clean_title",
    "default_close_time",
    "parse_source_datetime",
    # User agents
    "get_firefox_user_agent",
]

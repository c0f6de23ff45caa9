"""Scraper system for fetching current bid data from auction sources.

This package provides:
- The normalized record shape and the base adapter interface
- Source adapters (Card Hobby, eBay) and the registry that dispatches to them
- The fetch pipeline with caching, rate limiting, and retry
- Scheduler for periodic refresh of tracked items
"""

from .base import BaseAdapter, NormalizedRecord, RateLimit
from .registry import AdapterRegistry
from .pipeline import FetchPipeline

__all__ = [
    # Base classes
    "BaseAdapter",
    # Data structures
    "NormalizedRecord",
    "RateLimit",
    # Dispatch and fetching
    "AdapterRegistry",
    "FetchPipeline",
]

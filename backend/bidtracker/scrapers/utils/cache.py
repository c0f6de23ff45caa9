"""In-memory TTL cache for normalized records.

Entries are keyed by source URL and evicted by age only, never by size.
"""

import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

import structlog

from bidtracker.scrapers.base import NormalizedRecord


logger = structlog.get_logger(__name__)


@dataclass
class CacheEntry:
    """A cached record and the clock reading when it was stored."""

    record: NormalizedRecord
    cached_at: float


class RecordCache:
    """Time-bounded cache of normalized records.

    Records are copied on the way in and out, so callers may mutate what
    they receive. Expired entries are dropped lazily when read.
    """

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        """Initialize cache.

        Args:
            ttl: Time-to-live in seconds (default: 300 = 5 minutes)
            clock: Monotonic time source
        """
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.logger = logger.bind(service="record_cache")

    def _is_valid(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.cached_at < self.ttl

    def get(self, key: str) -> Optional[NormalizedRecord]:
        """Get a record from cache.

        Args:
            key: Source URL

        Returns:
            The cached record, or None if absent or expired
        """
        entry = self._entries.get(key)
        if entry is None:
            self.logger.debug("cache_miss", key=key)
            return None
        if not self._is_valid(entry):
            del self._entries[key]
            self.logger.debug("cache_expired", key=key)
            return None
        self.logger.debug("cache_hit", key=key)
        return replace(entry.record)

    def set(self, key: str, record: NormalizedRecord) -> None:
        """Store a record, replacing any previous entry for the key."""
        self._entries[key] = CacheEntry(record=replace(record), cached_at=self._clock())
        self.logger.debug("cache_set", key=key, ttl=self.ttl)

    def clear(self, key: Optional[str] = None) -> int:
        """Clear one key, or everything when no key is given.

        Returns:
            Number of entries removed
        """
        if key is not None:
            removed = 1 if self._entries.pop(key, None) is not None else 0
            self.logger.info("cache_cleared", key=key, removed=removed)
            return removed
        removed = len(self._entries)
        self._entries.clear()
        self.logger.info("cache_cleared_all", removed=removed)
        return removed

    def __len__(self) -> int:
        return len(self._entries)

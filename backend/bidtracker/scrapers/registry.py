"""Ordered registry of source adapters."""

from typing import List, Optional

import structlog

from bidtracker.core.exceptions import NoAdapterError
from bidtracker.scrapers.base import BaseAdapter


logger = structlog.get_logger(__name__)


class AdapterRegistry:
    """Ordered collection of adapter instances.

    Dispatch walks the adapters in registration order and picks the first
    whose URL pattern matches, so adding a source means registering an
    adapter rather than touching pipeline code.
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._adapters: List[BaseAdapter] = []

    def register(self, adapter: BaseAdapter) -> None:
        """Register an adapter instance.

        Args:
            adapter: Adapter to add (must inherit from BaseAdapter)

        Raises:
            ValueError: If the object is not an adapter or the slug is taken
        """
        if not isinstance(adapter, BaseAdapter):
            raise ValueError(f"Adapter must inherit from BaseAdapter: {adapter!r}")
        if self.has_adapter(adapter.slug):
            raise ValueError(f"Adapter already registered: {adapter.slug}")

        self._adapters.append(adapter)
        logger.info(
            "adapter_registered",
            slug=adapter.slug,
            pattern=adapter.url_pattern.pattern,
            max_requests=adapter.rate_limit.max_requests,
            time_window=adapter.rate_limit.time_window,
        )

    def find(self, url: str) -> Optional[BaseAdapter]:
        """Return the first adapter whose pattern matches the URL, if any."""
        for adapter in self._adapters:
            if adapter.matches(url):
                return adapter
        return None

    def resolve(self, url: str) -> BaseAdapter:
        """Return the adapter for a URL.

        Raises:
            NoAdapterError: If no registered adapter matches
        """
        adapter = self.find(url)
        if adapter is None:
            logger.warning("adapter_not_found", url=url)
            raise NoAdapterError(url)
        return adapter

    def get(self, slug: str) -> Optional[BaseAdapter]:
        """Look up an adapter by slug."""
        for adapter in self._adapters:
            if adapter.slug == slug:
                return adapter
        return None

    def get_registered_slugs(self) -> List[str]:
        """Get list of registered adapter slugs, in dispatch order."""
        return [adapter.slug for adapter in self._adapters]

    def has_adapter(self, slug: str) -> bool:
        """Check if an adapter is registered under a slug."""
        return self.get(slug) is not None

    def __len__(self) -> int:
        return len(self._adapters)

"""Build the adapter registry used by the application.

Called once during startup; the resulting registry is handed to the
FetchPipeline.
"""

import structlog

from bidtracker.config import settings
from bidtracker.scrapers.adapters import CardHobbyAdapter, EbayAdapter
from bidtracker.scrapers.base import RateLimit
from bidtracker.scrapers.registry import AdapterRegistry

logger = structlog.get_logger(__name__)


def build_registry() -> AdapterRegistry:
    """Create a registry with every available adapter, configured from settings."""
    registry = AdapterRegistry()

    adapters = [
        CardHobbyAdapter(
            time_offset_hours=settings.CARDHOBBY_TIME_OFFSET_HOURS,
            rate_limit=RateLimit(
                max_requests=settings.CARDHOBBY_MAX_REQUESTS,
                time_window=settings.CARDHOBBY_TIME_WINDOW_SECONDS,
            ),
        ),
        EbayAdapter(
            rate_limit=RateLimit(
                max_requests=settings.EBAY_MAX_REQUESTS,
                time_window=settings.EBAY_TIME_WINDOW_SECONDS,
            ),
        ),
    ]

    for adapter in adapters:
        registry.register(adapter)

    logger.info(
        "all_adapters_registered",
        count=len(registry),
        adapters=registry.get_registered_slugs(),
    )
    return registry

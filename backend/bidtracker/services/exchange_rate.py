"""CAD -> USD exchange rate with hourly caching.

Bids are entered in Canadian dollars while eBay reports US dollars, so the
dashboard shows both. A live rate is fetched at most once per TTL; when the
rate API is unavailable the last known (or fallback) rate is served.
"""

import time
from decimal import Decimal
from typing import Callable, Optional

import httpx
import structlog

from bidtracker.config import settings

logger = structlog.get_logger(__name__)


class ExchangeRateService:
    """Caches the CAD -> USD conversion rate."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_url: Optional[str] = None,
        fallback_rate: Optional[float] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.api_url = api_url or settings.EXCHANGE_RATE_API_URL
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.EXCHANGE_RATE_TTL_SECONDS
        self._clock = clock
        fallback = fallback_rate if fallback_rate is not None else settings.EXCHANGE_RATE_FALLBACK
        self._rate = Decimal(str(fallback))
        self._last_fetched: Optional[float] = None
        self.logger = logger.bind(service="exchange_rate")

    @property
    def is_live(self) -> bool:
        """True once a live rate has been fetched."""
        return self._last_fetched is not None

    async def get_rate(self) -> Decimal:
        """Return the CAD -> USD rate, refreshing it if the cached one is stale."""
        if self._last_fetched is not None and self._clock() - self._last_fetched < self.ttl_seconds:
            return self._rate

        try:
            response = await self.client.get(self.api_url)
            response.raise_for_status()
            data = response.json()
            usd = data.get("rates", {}).get("USD")
            if not usd or float(usd) <= 0:
                raise ValueError(f"USD rate missing from response: {usd!r}")
        except (httpx.HTTPError, ValueError) as e:
            # Serve the previous rate; the next call retries the API
            self.logger.warning("exchange_rate_fetch_failed", error=str(e), rate=str(self._rate))
            return self._rate

        self._rate = Decimal(str(usd))
        self._last_fetched = self._clock()
        self.logger.info("exchange_rate_updated", rate=str(self._rate))
        return self._rate

    async def cad_to_usd(self, amount: Decimal) -> Decimal:
        """Convert a CAD amount to USD, rounded to cents."""
        rate = await self.get_rate()
        return (amount * rate).quantize(Decimal("0.01"))

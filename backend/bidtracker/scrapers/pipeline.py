"""Fetch pipeline: source URL in, validated normalized record out.

The pipeline owns the record cache and the per-adapter rate-limit windows.
One instance is built at startup and shared by every caller.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional

import httpx
import structlog

from bidtracker.config import settings
from bidtracker.core.exceptions import FetchError, NotFoundError, ValidationError
from bidtracker.scrapers.base import BaseAdapter, NormalizedRecord
from bidtracker.scrapers.registry import AdapterRegistry
from bidtracker.scrapers.utils.cache import RecordCache
from bidtracker.scrapers.utils.rate_limiter import AdapterRateLimiter
from bidtracker.scrapers.utils.retry import is_transient_error, retry_with_backoff

logger = structlog.get_logger(__name__)


class FetchPipeline:
    """Cache -> dispatch -> rate limit -> fetch with retry -> validate -> extract -> cache.

    Concurrent calls for the same URL are not deduplicated: the cache is
    consulted once at the start of each call, and the last successful
    write wins.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        client: httpx.AsyncClient,
        cache_ttl: Optional[float] = None,
        request_timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the pipeline; unset tuning values come from settings.

        Args:
            registry: Adapters to dispatch to
            client: Shared HTTP client used for every source request
            cache_ttl: Seconds a normalized record stays cached
            request_timeout: Per-attempt timeout in seconds
            max_retries: Total fetch attempts per call
            retry_delay: Delay before the first retry, doubled for each later one
            clock: Monotonic time source for cache and rate limits
            sleep: Coroutine used for rate-limit and retry waits
        """
        self.registry = registry
        self.client = client
        self.request_timeout = request_timeout if request_timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else settings.MAX_RETRIES
        self.retry_delay = retry_delay if retry_delay is not None else settings.RETRY_DELAY_SECONDS
        self._sleep = sleep
        self.cache = RecordCache(
            ttl=cache_ttl if cache_ttl is not None else settings.CACHE_TTL_SECONDS,
            clock=clock,
        )
        self.rate_limiter = AdapterRateLimiter(clock=clock, sleep=sleep)
        self.logger = logger.bind(service="fetch_pipeline")

    async def fetch_normalized_record(self, url: str) -> NormalizedRecord:
        """Fetch and normalize the record behind a source URL.

        Args:
            url: Source detail-page URL

        Returns:
            NormalizedRecord without an id

        Raises:
            NoAdapterError: If no adapter handles the URL
            NotFoundError: If the source answers 404
            ValidationError: If the payload fails the adapter's shape-check or extraction
            FetchError: If every attempt failed with a transient error
        """
        cached = self.cache.get(url)
        if cached is not None:
            self.logger.info("returning_cached_record", url=url)
            return cached

        adapter = self.registry.resolve(url)
        self.logger.info("adapter_selected", url=url, adapter=adapter.slug)

        # The slot is consumed by the attempt, whether or not it succeeds
        await self.rate_limiter.acquire(adapter.slug, adapter.rate_limit)

        payload = await self._fetch_payload(adapter, url)

        if not adapter.validate(payload):
            self.logger.error("invalid_payload", url=url, adapter=adapter.slug)
            raise ValidationError(adapter.slug)

        try:
            record = adapter.extract(url, payload)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            self.logger.error("extraction_failed", url=url, adapter=adapter.slug, error=repr(e))
            raise ValidationError(adapter.slug, f"could not extract record: {e!r}") from e

        self.cache.set(url, record)

        self.logger.info(
            "record_fetched",
            url=url,
            adapter=adapter.slug,
            current_bid=str(record.current_bid),
            closes_at=record.closes_at.isoformat(),
        )
        return record

    async def _fetch_payload(self, adapter: BaseAdapter, url: str) -> Any:
        """Run the adapter's request with timeout and retries, then decode JSON."""
        attempts = 0

        async def attempt() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            self.logger.debug("fetch_attempt", url=url, adapter=adapter.slug, attempt=attempts)
            response = await asyncio.wait_for(
                adapter.request(self.client, url),
                timeout=self.request_timeout,
            )
            if response.status_code == 404:
                raise NotFoundError("Listing", url)
            response.raise_for_status()
            return response

        try:
            response = await retry_with_backoff(
                attempt,
                max_attempts=self.max_retries,
                base_delay=self.retry_delay,
                is_retryable=is_transient_error,
                sleep=self._sleep,
            )
        except NotFoundError:
            self.logger.warning("listing_not_found", url=url, adapter=adapter.slug)
            raise
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            self.logger.error(
                "fetch_failed",
                url=url,
                adapter=adapter.slug,
                attempts=attempts,
                error=repr(e),
            )
            raise FetchError(adapter.slug, url, attempts, cause=e) from e

        try:
            return response.json()
        except ValueError as e:
            raise ValidationError(adapter.slug, "response body is not valid JSON") from e

    def clear_cache(self, url: Optional[str] = None) -> int:
        """Clear the cached record for one URL, or every cached record.

        Returns:
            Number of entries removed
        """
        return self.cache.clear(url)

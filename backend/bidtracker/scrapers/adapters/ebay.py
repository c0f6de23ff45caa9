"""eBay Browse API adapter.

Resolves eBay listing URLs (https://www.ebay.com/itm/<legacy id>) through
the Browse API's get_item_by_legacy_id call.
Documentation: https://developer.ebay.com/api-docs/buy/browse/overview.html
"""

import base64
import re
import time
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
import structlog

from bidtracker.config import settings
from bidtracker.core.exceptions import AdapterConfigurationError, ValidationError
from bidtracker.scrapers.base import BaseAdapter, NormalizedRecord, RateLimit
from bidtracker.scrapers.utils.normalizer import (
    PriceNormalizer,
    clean_title,
    default_close_time,
    parse_source_datetime,
)


logger = structlog.get_logger()


class EbayAdapter(BaseAdapter):
    """eBay Browse API adapter.

    Uses the OAuth 2.0 Client Credentials flow. Requires EBAY_CLIENT_ID and
    EBAY_CLIENT_SECRET in environment variables.
    """

    slug = "ebay"
    name = "eBay"
    url_pattern = re.compile(r"ebay\.[a-z.]+/itm/(?:[^/?#]+/)?(\d+)")
    # eBay allows ~5,000 calls per day; 5 req/min stays well under it
    default_rate_limit = RateLimit(max_requests=5, time_window=60.0)

    OAUTH_PATH = "/identity/v1/oauth2/token"
    ITEM_PATH = "/buy/browse/v1/item/get_item_by_legacy_id"
    OAUTH_SCOPE = "https://api.ebay.com/oauth/api_scope"
    SELLER_URL_TEMPLATE = "https://www.ebay.com/usr/{username}"

    # Refresh the token this many seconds before eBay says it expires
    TOKEN_EXPIRY_MARGIN = 60

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        marketplace_id: Optional[str] = None,
        rate_limit: Optional[RateLimit] = None,
    ):
        """Initialize eBay adapter; unset arguments come from settings."""
        super().__init__(rate_limit=rate_limit)
        self.client_id = client_id if client_id is not None else settings.EBAY_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.EBAY_CLIENT_SECRET
        self.base_url = base_url or settings.ebay_base_url
        self.marketplace_id = marketplace_id or settings.EBAY_MARKETPLACE_ID

        if not self.client_id or not self.client_secret:
            logger.warning(
                "ebay_credentials_missing",
                message="EBAY_CLIENT_ID or EBAY_CLIENT_SECRET not set",
            )

        # OAuth token caching
        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0.0

    def item_id(self, url: str) -> str:
        """Extract the legacy item id from a listing URL."""
        match = self.url_pattern.search(url)
        if not match:
            raise ValueError(f"Not an eBay listing URL: {url}")
        return match.group(1)

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        """Return a cached application token, requesting a new one when stale.

        Raises:
            AdapterConfigurationError: If credentials are not configured
            httpx.HTTPStatusError: If the token endpoint rejects the request
            ValidationError: If the token response has no access_token
        """
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        if not self.client_id or not self.client_secret:
            raise AdapterConfigurationError(
                self.slug,
                "eBay API credentials not configured. "
                "Set EBAY_CLIENT_ID and EBAY_CLIENT_SECRET in .env file.",
            )

        basic = base64.b64encode(f"{self.client_id}:{self.client_secret}".encode()).decode()
        response = await client.post(
            f"{self.base_url}{self.OAUTH_PATH}",
            data={"grant_type": "client_credentials", "scope": self.OAUTH_SCOPE},
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Authorization": f"Basic {basic}",
            },
        )
        response.raise_for_status()
        try:
            token_data = response.json()
            access_token = token_data["access_token"]
            expires_in = int(token_data.get("expires_in", 7200))
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ValidationError(self.slug, "OAuth token response is missing access_token") from e

        self._access_token = access_token
        self._token_expires_at = time.monotonic() + max(0, expires_in - self.TOKEN_EXPIRY_MARGIN)
        logger.info("ebay_token_acquired", expires_in=expires_in)
        return self._access_token

    async def request(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        item_id = self.item_id(url)
        token = await self._get_access_token(client)
        self.logger.info("fetching_ebay_item", item_id=item_id)
        return await client.get(
            f"{self.base_url}{self.ITEM_PATH}",
            params={"legacy_item_id": item_id},
            headers={
                "Authorization": f"Bearer {token}",
                "X-EBAY-C-MARKETPLACE-ID": self.marketplace_id,
                "Content-Type": "application/json",
            },
        )

    def validate(self, payload: Any) -> bool:
        if not isinstance(payload, dict):
            return False
        if not isinstance(payload.get("title"), str):
            return False
        if self._current_price(payload) is None:
            return False
        # extract() reads these as objects when present
        for key in ("image", "seller"):
            if payload.get(key) is not None and not isinstance(payload[key], dict):
                return False
        end_date = payload.get("itemEndDate")
        if end_date is not None and parse_source_datetime(end_date) is None:
            return False
        return True

    def extract(self, url: str, payload: Any) -> NormalizedRecord:
        image = payload.get("image") or {}
        closes_at = parse_source_datetime(payload.get("itemEndDate"))
        if closes_at is None:
            # Fixed-price listings have no end date
            closes_at = default_close_time(hours=24)

        return NormalizedRecord(
            name=clean_title(payload.get("title")),
            source_url=url,
            image_url=image.get("imageUrl", ""),
            seller_ref=self._seller_ref(payload),
            current_bid=self._current_price(payload) or Decimal("0"),
            closes_at=closes_at,
        )

    @staticmethod
    def _current_price(payload: Dict[str, Any]) -> Optional[Decimal]:
        """Current bid for auctions, otherwise the listing price."""
        for key in ("currentBidPrice", "price"):
            amount = payload.get(key)
            if isinstance(amount, dict):
                value = PriceNormalizer.to_decimal(amount.get("value"))
                if value is not None:
                    return value
        return None

    def _seller_ref(self, payload: Dict[str, Any]) -> str:
        seller = payload.get("seller") or {}
        username = seller.get("username")
        if username:
            return self.SELLER_URL_TEMPLATE.format(username=username)
        return payload.get("itemWebUrl", "")

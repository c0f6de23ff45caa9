"""Card Hobby adapter.

Card Hobby detail pages are a client-rendered SPA
(https://www.cardhobby.com/#/carddetails/<id>); the data behind them
comes from a JSON gateway endpoint keyed by the card id.
"""

import re
from decimal import Decimal
from typing import Any, Optional

import httpx
import structlog

from bidtracker.config import settings
from bidtracker.scrapers.base import BaseAdapter, NormalizedRecord, RateLimit
from bidtracker.scrapers.utils.normalizer import (
    PriceNormalizer,
    clean_title,
    default_close_time,
    parse_source_datetime,
)
from bidtracker.scrapers.utils.user_agents import get_firefox_user_agent


logger = structlog.get_logger()


class CardHobbyAdapter(BaseAdapter):
    """Card Hobby gateway adapter.

    Card Hobby reports auction end times shifted by a fixed number of
    hours; ``time_offset_hours`` is subtracted from every parsed end time.
    """

    slug = "cardhobby"
    name = "Card Hobby"
    url_pattern = re.compile(r"cardhobby\.com/#/carddetails/(\d+)")
    default_rate_limit = RateLimit(max_requests=10, time_window=60.0)

    # API Configuration
    SITE_URL = "https://www.cardhobby.com"
    API_URL = "https://gatewayapi.cardhobby.com/card/NewMyCommodity/GetCardDetail"
    SELLER_URL_TEMPLATE = "https://www.cardhobby.com/#/seller/detail/{seller_id}"

    def __init__(
        self,
        time_offset_hours: Optional[float] = None,
        rate_limit: Optional[RateLimit] = None,
    ):
        """Initialize Card Hobby adapter.

        Args:
            time_offset_hours: Hours subtracted from source end times;
                defaults to CARDHOBBY_TIME_OFFSET_HOURS
            rate_limit: Override for the request ceiling
        """
        super().__init__(rate_limit=rate_limit)
        if time_offset_hours is None:
            time_offset_hours = settings.CARDHOBBY_TIME_OFFSET_HOURS
        self.time_offset_hours = time_offset_hours

    def card_id(self, url: str) -> str:
        """Extract the numeric card id from a detail-page URL."""
        match = self.url_pattern.search(url)
        if not match:
            raise ValueError(f"Not a Card Hobby detail URL: {url}")
        return match.group(1)

    async def request(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        card_id = self.card_id(url)
        params = {
            "cardId": card_id,
            "lag": "en",
            "device": "Web",
            "version": "1",
            "appname": "Card Hobby",
        }
        headers = {
            "Accept": "*/*",
            "Content-Type": "application/json",
            "User-Agent": get_firefox_user_agent(),
            "Accept-Language": "en-CA,en-US;q=0.7,en;q=0.3",
        }
        self.logger.info("fetching_card_detail", card_id=card_id)
        return await client.get(self.API_URL, params=params, headers=headers)

    def validate(self, payload: Any) -> bool:
        """Check the gateway envelope and the fields extract() relies on."""
        if not isinstance(payload, dict):
            return False
        data = payload.get("data")
        if not isinstance(data, dict):
            return False

        price = data.get("price")
        is_valid = (
            data.get("imageUrl") is not None
            and isinstance(price, (int, float))
            and not isinstance(price, bool)
            and isinstance(data.get("title"), str)
        )

        # An end time that is present must also be readable
        end_time = data.get("endTime")
        if is_valid and end_time not in (None, ""):
            is_valid = parse_source_datetime(end_time) is not None

        if not is_valid:
            self.logger.warning("card_detail_invalid", keys=sorted(data.keys()))
        return is_valid

    def extract(self, url: str, payload: Any) -> NormalizedRecord:
        data = payload["data"]

        closes_at = parse_source_datetime(data.get("endTime"), offset_hours=self.time_offset_hours)
        if closes_at is None:
            closes_at = default_close_time(hours=24)

        return NormalizedRecord(
            name=clean_title(data.get("title")),
            source_url=url,
            image_url=data.get("imageUrl") or "",
            seller_ref=self._seller_ref(data),
            current_bid=PriceNormalizer.to_decimal(data.get("price")) or Decimal("0"),
            closes_at=closes_at,
        )

    def _seller_ref(self, data: dict) -> str:
        """Seller URL from the payload, falling back to the seller id, then the site."""
        seller_url = data.get("sellerUrl")
        if seller_url:
            return seller_url
        seller_id = data.get("sellerId")
        if seller_id not in (None, ""):
            return self.SELLER_URL_TEMPLATE.format(seller_id=seller_id)
        return self.SITE_URL

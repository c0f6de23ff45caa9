"""Tests for the Card Hobby and eBay adapters and the adapter registry."""

import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest

from bidtracker.core.exceptions import AdapterConfigurationError, NoAdapterError
from bidtracker.scrapers.adapters import CardHobbyAdapter, EbayAdapter
from bidtracker.scrapers.base import RateLimit
from bidtracker.scrapers.registry import AdapterRegistry

from conftest import CARD_URL, MockSource, card_payload


EBAY_URL = "https://www.ebay.com/itm/Shohei-Ohtani-Topps-Chrome/256123456789?hash=item3ba1"


def ebay_payload(**overrides) -> dict:
    """A Browse API get_item_by_legacy_id response."""
    data = {
        "itemId": "v1|256123456789|0",
        "title": "2018 Topps Chrome Shohei Ohtani RC PSA 10",
        "price": {"value": "150.00", "currency": "USD"},
        "currentBidPrice": {"value": "171.50", "currency": "USD"},
        "image": {"imageUrl": "https://i.ebayimg.com/images/g/abc/s-l1600.jpg"},
        "seller": {"username": "card_vault", "feedbackScore": 1520},
        "itemEndDate": "2025-03-01T18:30:00.000Z",
        "itemWebUrl": "https://www.ebay.com/itm/256123456789",
    }
    data.update(overrides)
    return data


class TestCardHobbyAdapter:
    """Card Hobby URL matching, validation and extraction."""

    def setup_method(self):
        self.adapter = CardHobbyAdapter(time_offset_hours=12)

    def test_matches_detail_urls(self):
        assert self.adapter.matches(CARD_URL)
        assert self.adapter.matches("http://cardhobby.com/#/carddetails/1")
        assert not self.adapter.matches("https://www.cardhobby.com/#/seller/detail/387957")
        assert not self.adapter.matches("https://www.ebay.com/itm/123")

    def test_card_id(self):
        assert self.adapter.card_id(CARD_URL) == "67180979"
        with pytest.raises(ValueError):
            self.adapter.card_id("https://www.cardhobby.com/")

    def test_default_rate_limit(self):
        assert CardHobbyAdapter().rate_limit == RateLimit(max_requests=10, time_window=60.0)

    def test_validate_accepts_complete_payload(self):
        assert self.adapter.validate(card_payload())

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {"code": 0},
            {"code": 0, "data": "oops"},
            card_payload(title=None),
            card_payload(price="125.50"),
            card_payload(price=True),
            card_payload(imageUrl=None),
            card_payload(endTime="next tuesday"),
        ],
    )
    def test_validate_rejects_bad_shapes(self, payload):
        assert not self.adapter.validate(payload)

    def test_validate_allows_missing_end_time(self):
        payload = card_payload()
        del payload["data"]["endTime"]
        assert self.adapter.validate(payload)

    def test_extract_cleans_title(self):
        record = self.adapter.extract(CARD_URL, card_payload())
        assert record.name == "2023 Topps Chrome Shohei Ohtani PSA 10"

    def test_extract_title_falls_back_when_only_cjk(self):
        record = self.adapter.extract(CARD_URL, card_payload(title="球星卡"))
        assert record.name == "Unknown Item"

    def test_extract_applies_time_offset(self):
        record = self.adapter.extract(CARD_URL, card_payload(endTime="2025-01-02 20:00:00"))
        assert record.closes_at == datetime(2025, 1, 2, 8, 0, tzinfo=timezone.utc)

    def test_offset_not_applied_to_zoned_end_time(self):
        record = self.adapter.extract(CARD_URL, card_payload(endTime="2025-01-02T20:00:00+08:00"))
        assert record.closes_at == datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)

    def test_offset_not_applied_to_utc_marker(self):
        record = self.adapter.extract(CARD_URL, card_payload(endTime="2025-01-02T20:00:00Z"))
        assert record.closes_at == datetime(2025, 1, 2, 20, 0, tzinfo=timezone.utc)

    def test_offset_is_configurable(self):
        adapter = CardHobbyAdapter(time_offset_hours=0)
        record = adapter.extract(CARD_URL, card_payload(endTime="2025-01-02 20:00:00"))
        assert record.closes_at == datetime(2025, 1, 2, 20, 0, tzinfo=timezone.utc)

    def test_missing_end_time_defaults_to_a_day_out(self):
        payload = card_payload()
        del payload["data"]["endTime"]

        before = datetime.now(timezone.utc)
        record = self.adapter.extract(CARD_URL, payload)

        assert before + timedelta(hours=23, minutes=59) <= record.closes_at
        assert record.closes_at <= datetime.now(timezone.utc) + timedelta(hours=24)

    def test_extract_prices_and_defaults(self):
        record = self.adapter.extract(CARD_URL, card_payload(price=99))
        assert record.current_bid == Decimal("99")
        assert record.my_bid == Decimal("0")
        assert record.reference_value == Decimal("0")
        assert record.archived is False
        assert record.id is None
        assert record.source_url == CARD_URL
        assert record.image_url == "https://img.cardhobby.com/card/67180979.jpg"

    def test_seller_ref_prefers_seller_url(self):
        payload = card_payload(sellerUrl="https://www.cardhobby.com/#/seller/detail/42")
        assert self.adapter.extract(CARD_URL, payload).seller_ref.endswith("/detail/42")

    def test_seller_ref_from_seller_id(self):
        record = self.adapter.extract(CARD_URL, card_payload())
        assert record.seller_ref == "https://www.cardhobby.com/#/seller/detail/387957"

    def test_seller_ref_falls_back_to_site(self):
        payload = card_payload()
        del payload["data"]["sellerId"]
        assert self.adapter.extract(CARD_URL, payload).seller_ref == "https://www.cardhobby.com"

    async def test_request_sends_gateway_params(self):
        source = MockSource(httpx.Response(200, json=card_payload()))
        async with httpx.AsyncClient(transport=httpx.MockTransport(source)) as client:
            response = await self.adapter.request(client, CARD_URL)

        assert response.status_code == 200
        request = source.requests[0]
        assert request.url.path == "/card/NewMyCommodity/GetCardDetail"
        assert request.url.params["cardId"] == "67180979"
        assert request.url.params["lag"] == "en"
        assert "Firefox" in request.headers["User-Agent"]


class TestEbayAdapter:
    """eBay URL matching, OAuth token handling and extraction."""

    def setup_method(self):
        self.adapter = EbayAdapter(
            client_id="test-id",
            client_secret="test-secret",
            base_url="https://api.sandbox.ebay.com",
            marketplace_id="EBAY_US",
        )

    @pytest.mark.parametrize(
        "url,item_id",
        [
            ("https://www.ebay.com/itm/256123456789", "256123456789"),
            (EBAY_URL, "256123456789"),
            ("https://www.ebay.co.uk/itm/134000000001", "134000000001"),
        ],
    )
    def test_item_id(self, url, item_id):
        assert self.adapter.matches(url)
        assert self.adapter.item_id(url) == item_id

    def test_does_not_match_other_pages(self):
        assert not self.adapter.matches("https://www.ebay.com/usr/card_vault")
        assert not self.adapter.matches(CARD_URL)

    def test_validate(self):
        assert self.adapter.validate(ebay_payload())
        assert not self.adapter.validate(ebay_payload(title=None))
        assert not self.adapter.validate(ebay_payload(price=None, currentBidPrice=None))
        assert not self.adapter.validate(ebay_payload(itemEndDate="soon"))
        assert not self.adapter.validate(ebay_payload(seller="card_vault"))
        assert not self.adapter.validate(ebay_payload(image=["a.jpg"]))
        assert self.adapter.validate(ebay_payload(seller=None, image=None))
        assert not self.adapter.validate("not a dict")

    def test_extract_prefers_current_bid(self):
        record = self.adapter.extract(EBAY_URL, ebay_payload())

        assert record.name == "2018 Topps Chrome Shohei Ohtani RC PSA 10"
        assert record.current_bid == Decimal("171.50")
        assert record.seller_ref == "https://www.ebay.com/usr/card_vault"
        assert record.image_url == "https://i.ebayimg.com/images/g/abc/s-l1600.jpg"
        assert record.closes_at == datetime(2025, 3, 1, 18, 30, tzinfo=timezone.utc)

    def test_extract_fixed_price_listing(self):
        payload = ebay_payload(currentBidPrice=None, seller=None)
        del payload["itemEndDate"]

        record = self.adapter.extract(EBAY_URL, payload)

        assert record.current_bid == Decimal("150.00")
        assert record.seller_ref == "https://www.ebay.com/itm/256123456789"
        assert record.closes_at > datetime.now(timezone.utc)

    async def test_token_is_fetched_once_and_reused(self):
        token_calls = []
        item_calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/identity/v1/oauth2/token":
                token_calls.append(request)
                return httpx.Response(200, json={"access_token": "tok-1", "expires_in": 7200})
            item_calls.append(request)
            return httpx.Response(200, json=ebay_payload())

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            await self.adapter.request(client, EBAY_URL)
            await self.adapter.request(client, "https://www.ebay.com/itm/256000000002")

        assert len(token_calls) == 1
        assert token_calls[0].headers["Authorization"].startswith("Basic ")
        assert b"grant_type=client_credentials" in token_calls[0].content
        assert len(item_calls) == 2
        assert item_calls[0].headers["Authorization"] == "Bearer tok-1"
        assert item_calls[0].headers["X-EBAY-C-MARKETPLACE-ID"] == "EBAY_US"
        assert item_calls[1].url.params["legacy_item_id"] == "256000000002"

    async def test_missing_credentials(self):
        adapter = EbayAdapter(client_id="", client_secret="", base_url="https://api.sandbox.ebay.com")
        source = MockSource()

        async with httpx.AsyncClient(transport=httpx.MockTransport(source)) as client:
            with pytest.raises(AdapterConfigurationError):
                await adapter.request(client, EBAY_URL)

        assert source.calls == 0

    async def test_missing_credentials_are_not_retried_by_pipeline(self, clock):
        from bidtracker.scrapers.pipeline import FetchPipeline

        registry = AdapterRegistry()
        registry.register(EbayAdapter(client_id="", client_secret="", base_url="https://api.sandbox.ebay.com"))
        source = MockSource()
        pipeline = FetchPipeline(
            registry=registry,
            client=httpx.AsyncClient(transport=httpx.MockTransport(source)),
            clock=clock,
            sleep=clock.sleep,
        )

        with pytest.raises(AdapterConfigurationError):
            await pipeline.fetch_normalized_record(EBAY_URL)

        assert clock.sleeps == []
        assert source.calls == 0


class TestAdapterRegistry:
    """Registration and dispatch order."""

    def test_resolve_picks_matching_adapter(self):
        registry = AdapterRegistry()
        registry.register(CardHobbyAdapter())
        registry.register(EbayAdapter(client_id="x", client_secret="y"))

        assert registry.resolve(CARD_URL).slug == "cardhobby"
        assert registry.resolve(EBAY_URL).slug == "ebay"
        assert registry.get_registered_slugs() == ["cardhobby", "ebay"]
        assert len(registry) == 2

    def test_first_registered_match_wins(self):
        class CatchAll(CardHobbyAdapter):
            slug = "catch_all"
            url_pattern = re.compile(r".*")

        registry = AdapterRegistry()
        registry.register(CardHobbyAdapter())
        registry.register(CatchAll())

        assert registry.resolve(CARD_URL).slug == "cardhobby"
        assert registry.resolve("https://example.com/x").slug == "catch_all"

    def test_unknown_url(self):
        registry = AdapterRegistry()
        registry.register(CardHobbyAdapter())

        assert registry.find("https://example.com/x") is None
        with pytest.raises(NoAdapterError):
            registry.resolve("https://example.com/x")

    def test_rejects_duplicates_and_non_adapters(self):
        registry = AdapterRegistry()
        registry.register(CardHobbyAdapter())

        with pytest.raises(ValueError):
            registry.register(CardHobbyAdapter())
        with pytest.raises(ValueError):
            registry.register(object())

"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from bidtracker.models import Base
from bidtracker.scrapers.adapters import CardHobbyAdapter
from bidtracker.scrapers.base import NormalizedRecord, RateLimit
from bidtracker.scrapers.pipeline import FetchPipeline
from bidtracker.scrapers.registry import AdapterRegistry


CARD_URL = "https://www.cardhobby.com/#/carddetails/67180979"
OTHER_CARD_URL = "https://www.cardhobby.com/#/carddetails/67180980"


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


class FakeClock:
    """Controllable monotonic clock whose sleep() advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def card_payload(**overrides) -> dict:
    """A Card Hobby gateway response."""
    data = {
        "title": "2023 Topps Chrome 球星卡  Shohei   Ohtani PSA 10",
        "price": 125.5,
        "imageUrl": "https://img.cardhobby.com/card/67180979.jpg",
        "sellerId": 387957,
        "endTime": "2025-01-02 20:00:00",
    }
    data.update(overrides)
    return {"code": 0, "data": data}


class MockSource:
    """Scriptable handler for httpx.MockTransport.

    Each queued response is returned once, in order; the last one repeats.
    Queue entries may be httpx.Response objects or exceptions to raise.
    """

    def __init__(self, *responses):
        self.responses = list(responses) or [httpx.Response(200, json=card_payload())]
        self.requests: List[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if isinstance(response, Exception):
            raise response
        # Fresh object per call; the client binds each response to its request
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            content=response.content,
        )


@pytest.fixture
def make_pipeline(clock: FakeClock) -> Callable[..., FetchPipeline]:
    """Build a pipeline with one Card Hobby adapter, a mock transport and the fake clock."""

    def _make(source: MockSource, rate_limit: RateLimit = RateLimit(10, 60.0), **kwargs) -> FetchPipeline:
        registry = AdapterRegistry()
        registry.register(CardHobbyAdapter(time_offset_hours=12, rate_limit=rate_limit))
        client = httpx.AsyncClient(transport=httpx.MockTransport(source))
        kwargs.setdefault("cache_ttl", 300.0)
        kwargs.setdefault("request_timeout", 5.0)
        kwargs.setdefault("max_retries", 3)
        kwargs.setdefault("retry_delay", 1.0)
        return FetchPipeline(
            registry=registry,
            client=client,
            clock=clock,
            sleep=clock.sleep,
            **kwargs,
        )

    return _make


def make_record(
    seller_ref: str = "https://www.cardhobby.com/#/seller/detail/387957",
    reference_value: str = "0",
    closes_at: str = "2025-01-01",
    name: str = "Card",
    **overrides,
) -> NormalizedRecord:
    """Build a record with the fields grouping cares about."""
    values = dict(
        name=name,
        source_url=f"https://example.com/listing/{name}",
        image_url="",
        seller_ref=seller_ref,
        reference_value=Decimal(reference_value),
        closes_at=datetime.fromisoformat(closes_at).replace(tzinfo=timezone.utc),
    )
    values.update(overrides)
    return NormalizedRecord(**values)


@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite database shared by every session from the factory."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory):
    """A single session on the in-memory database."""
    async with session_factory() as session:
        yield session

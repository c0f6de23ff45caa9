"""FastAPI dependency injection providers.

Long-lived services (fetch pipeline, refresher, exchange rates) are built
once in the application lifespan and stored on ``app.state``; these
providers hand them to request handlers.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from bidtracker.db.session import async_session_factory
from bidtracker.scrapers.pipeline import FetchPipeline
from bidtracker.services.exchange_rate import ExchangeRateService
from bidtracker.services.refresh_service import ItemRefresher


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    Always closed after the request completes.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_fetch_pipeline(request: Request) -> FetchPipeline:
    """Return the application's shared fetch pipeline."""
    return request.app.state.fetch_pipeline


def get_refresher(request: Request) -> ItemRefresher:
    """Return the application's item refresher."""
    return request.app.state.refresher


def get_exchange_rate_service(request: Request) -> ExchangeRateService:
    """Return the application's exchange rate service."""
    return request.app.state.exchange_rate_service

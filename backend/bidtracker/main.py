"""bidtracker Backend -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bidtracker.api.v1.router import api_v1_router
from bidtracker.config import settings
from bidtracker.core.exceptions import (
    AdapterConfigurationError,
    BidTrackerException,
    FetchError,
    NoAdapterError,
    NotFoundError,
    ValidationError,
)
from bidtracker.db.session import async_session_factory, engine
from bidtracker.models import Base
from bidtracker.schemas import ErrorDetail, ErrorResponse
from bidtracker.scrapers.pipeline import FetchPipeline
from bidtracker.scrapers.register_adapters import build_registry
from bidtracker.scrapers.scheduler import RefreshScheduler
from bidtracker.services.exchange_rate import ExchangeRateService
from bidtracker.services.refresh_service import ItemRefresher

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Most specific first; the first isinstance match decides the status
ERROR_STATUS = [
    (NotFoundError, 404, "not_found"),
    (NoAdapterError, 422, "unsupported_source"),
    (ValidationError, 502, "invalid_source_data"),
    (FetchError, 502, "fetch_failed"),
    (AdapterConfigurationError, 503, "adapter_not_configured"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting bidtracker API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables verified/created")

    # One HTTP client, pipeline and refresher for the whole process
    http_client = httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT_SECONDS, follow_redirects=True)
    pipeline = FetchPipeline(registry=build_registry(), client=http_client)
    refresher = ItemRefresher(pipeline, async_session_factory)

    app.state.fetch_pipeline = pipeline
    app.state.refresher = refresher
    app.state.exchange_rate_service = ExchangeRateService(http_client)

    scheduler = None
    if settings.ENVIRONMENT != "test":
        scheduler = RefreshScheduler(refresher)
        scheduler.start()
        scheduler.add_refresh_job(interval_minutes=settings.REFRESH_INTERVAL_MINUTES)
        logger.info(f"Refresh scheduled every {settings.REFRESH_INTERVAL_MINUTES} minutes")
    else:
        logger.info("Scheduler disabled (test environment)")

    yield

    logger.info("Shutting down bidtracker API server...")
    if scheduler:
        scheduler.stop()
    await http_client.aclose()
    await engine.dispose()


app = FastAPI(
    title="bidtracker API",
    description="Auction bid tracking API",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BidTrackerException)
async def bidtracker_exception_handler(request: Request, exc: BidTrackerException) -> JSONResponse:
    """Render domain errors in the standard error envelope."""
    status_code, code = 500, "internal_error"
    for exc_type, mapped_status, mapped_code in ERROR_STATUS:
        if isinstance(exc, exc_type):
            status_code, code = mapped_status, mapped_code
            break

    body = ErrorResponse(error=ErrorDetail(code=code, message=exc.message))
    return JSONResponse(status_code=status_code, content=body.model_dump())


app.include_router(api_v1_router, prefix="/api/v1")

"""Pydantic schemas for the bidtracker API.

All request/response models are defined here for easy import.
"""

from bidtracker.schemas.common import ApiResponse, ErrorDetail, ErrorResponse
from bidtracker.schemas.health import HealthCheckResponse
from bidtracker.schemas.item import (
    CacheClearResponse,
    GroupedItemResponse,
    ItemCreate,
    ItemCreatedResponse,
    ItemResponse,
    RefreshStatsResponse,
    ScrapeRequest,
)
from bidtracker.schemas.seller import ExchangeRateResponse, SellerResponse

__all__ = [
    # Common
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    # Health
    "HealthCheckResponse",
    # Items
    "CacheClearResponse",
    "GroupedItemResponse",
    "ItemCreate",
    "ItemCreatedResponse",
    "ItemResponse",
    "RefreshStatsResponse",
    "ScrapeRequest",
    # Sellers
    "ExchangeRateResponse",
    "SellerResponse",
]

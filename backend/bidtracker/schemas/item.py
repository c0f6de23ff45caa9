"""Item Pydantic schemas for request/response validation."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ItemBase(BaseModel):
    """Fields shared by item requests and responses."""

    name: str = Field(..., min_length=1, max_length=500)
    source_url: str = Field(..., min_length=1, max_length=1000)
    image_url: str = Field("", max_length=1000)
    seller_ref: str = Field(..., max_length=500)
    my_bid: Decimal = Field(Decimal("0"), ge=0)
    current_bid: Decimal = Field(Decimal("0"), ge=0)
    reference_value: Decimal = Field(Decimal("0"), ge=0, description="Market value; ranks items within a seller")
    closes_at: datetime
    archived: bool = False


class ItemCreate(ItemBase):
    """Request body for creating or replacing an item."""


class ItemResponse(ItemBase):
    """Item response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None


class GroupedItemResponse(ItemResponse):
    """Primary item of a seller group with the seller's other items."""

    seller_name: Optional[str] = None
    secondary_records: Optional[List[ItemResponse]] = None


class ScrapeRequest(BaseModel):
    """Request body for fetching a listing without saving it."""

    url: str = Field(..., min_length=1)


class ItemCreatedResponse(BaseModel):
    """Id assigned to a newly stored item."""

    id: int


class RefreshStatsResponse(BaseModel):
    """Outcome of a refresh run."""

    items_checked: int = 0
    items_updated: int = 0
    items_unchanged: int = 0
    items_skipped: int = 0
    errors: int = 0


class CacheClearResponse(BaseModel):
    """Number of cache entries removed."""

    removed: int

"""Items API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidtracker.dependencies import get_db, get_fetch_pipeline, get_refresher
from bidtracker.scrapers.base import NormalizedRecord
from bidtracker.scrapers.pipeline import FetchPipeline
from bidtracker.schemas import (
    ApiResponse,
    CacheClearResponse,
    GroupedItemResponse,
    ItemCreate,
    ItemCreatedResponse,
    ItemResponse,
    RefreshStatsResponse,
    ScrapeRequest,
)
from bidtracker.services.grouping import group_by_seller
from bidtracker.services.item_service import ItemService
from bidtracker.services.refresh_service import ItemRefresher
from bidtracker.services.sellers import find_seller

router = APIRouter()


def _to_record(body: ItemCreate, item_id: Optional[int] = None) -> NormalizedRecord:
    return NormalizedRecord(id=item_id, **body.model_dump())


@router.get("", response_model=ApiResponse[List[ItemResponse]])
async def list_items(
    archived: bool = Query(False, description="Return archived items instead of active ones"),
    db: AsyncSession = Depends(get_db),
):
    """List tracked items, soonest closing first."""
    records = await ItemService(db).list_items(archived=archived)
    return ApiResponse(data=[ItemResponse.model_validate(r) for r in records])


@router.get(
    "/grouped",
    response_model=ApiResponse[List[GroupedItemResponse]],
    response_model_exclude_none=True,
)
async def list_grouped_items(
    archived: bool = Query(False, description="Group archived items instead of active ones"),
    db: AsyncSession = Depends(get_db),
):
    """Dashboard view: one row per seller.

    The item with the highest market value leads each row; the seller's
    other items are nested under ``secondary_records``, which is left out
    when the seller has a single item.
    """
    records = await ItemService(db).list_items(archived=archived)
    groups = []
    for group in group_by_seller(records):
        seller = find_seller(group.seller_ref)
        response = GroupedItemResponse.model_validate(group)
        response.seller_name = seller.name if seller else None
        groups.append(response)
    return ApiResponse(data=groups)


@router.post("/scrape", response_model=ApiResponse[ItemResponse])
async def scrape_item(
    body: ScrapeRequest,
    pipeline: FetchPipeline = Depends(get_fetch_pipeline),
):
    """Fetch a listing through its source adapter without saving it.

    The add-item form uses this to pre-fill name, image, seller and
    current bid from a pasted URL.
    """
    record = await pipeline.fetch_normalized_record(body.url)
    return ApiResponse(data=ItemResponse.model_validate(record))


@router.post("/refresh", response_model=ApiResponse[RefreshStatsResponse])
async def refresh_items(refresher: ItemRefresher = Depends(get_refresher)):
    """Re-fetch the current bid of every active item now."""
    stats = await refresher.refresh_all()
    return ApiResponse(data=RefreshStatsResponse(**stats))


@router.delete("/cache", response_model=ApiResponse[CacheClearResponse])
async def clear_cache(
    url: Optional[str] = Query(None, description="Only clear this source URL"),
    pipeline: FetchPipeline = Depends(get_fetch_pipeline),
):
    """Drop cached listings so the next fetch goes to the source."""
    removed = pipeline.clear_cache(url)
    return ApiResponse(data=CacheClearResponse(removed=removed))


@router.post("", response_model=ApiResponse[ItemCreatedResponse], status_code=status.HTTP_201_CREATED)
async def create_item(body: ItemCreate, db: AsyncSession = Depends(get_db)):
    """Store a new item."""
    item_id = await ItemService(db).insert(_to_record(body))
    return ApiResponse(data=ItemCreatedResponse(id=item_id))


@router.get("/{item_id}", response_model=ApiResponse[ItemResponse])
async def get_item(item_id: int, db: AsyncSession = Depends(get_db)):
    """Get a single item by id."""
    record = await ItemService(db).get(item_id)
    return ApiResponse(data=ItemResponse.model_validate(record))


@router.put("/{item_id}", response_model=ApiResponse[ItemResponse])
async def update_item(item_id: int, body: ItemCreate, db: AsyncSession = Depends(get_db)):
    """Replace an item's fields."""
    record = await ItemService(db).update(_to_record(body, item_id))
    return ApiResponse(data=ItemResponse.model_validate(record))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: int, db: AsyncSession = Depends(get_db)):
    """Delete an item permanently."""
    await ItemService(db).delete(item_id)


@router.post("/{item_id}/archive", response_model=ApiResponse[ItemResponse])
async def archive_item(item_id: int, db: AsyncSession = Depends(get_db)):
    """Move an item to the archive."""
    record = await ItemService(db).archive(item_id)
    return ApiResponse(data=ItemResponse.model_validate(record))


@router.post("/{item_id}/restore", response_model=ApiResponse[ItemResponse])
async def restore_item(item_id: int, db: AsyncSession = Depends(get_db)):
    """Bring an archived item back."""
    record = await ItemService(db).restore(item_id)
    return ApiResponse(data=ItemResponse.model_validate(record))

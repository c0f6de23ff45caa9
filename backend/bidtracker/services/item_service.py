"""Item service: storage for tracked items.

Handles item CRUD, archiving, and conversion between the ORM model and
NormalizedRecord. The fetch pipeline and grouping never touch storage;
callers load records here, hand them on, and persist the results.
"""

from decimal import Decimal
from typing import List

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bidtracker.core.exceptions import NotFoundError
from bidtracker.models.item import Item
from bidtracker.scrapers.base import NormalizedRecord

logger = structlog.get_logger(__name__)


def to_record(item: Item) -> NormalizedRecord:
    """Convert an ORM item into a NormalizedRecord."""
    return NormalizedRecord(
        id=item.id,
        name=item.name,
        source_url=item.source_url,
        image_url=item.image_url,
        seller_ref=item.seller_ref,
        my_bid=Decimal(item.my_bid),
        current_bid=Decimal(item.current_bid),
        reference_value=Decimal(item.reference_value),
        closes_at=item.closes_at,
        archived=item.archived,
    )


class ItemService:
    """Service for storing and querying tracked items."""

    def __init__(self, db: AsyncSession):
        """Initialize item service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="item_service")

    async def _get_item(self, item_id: int) -> Item:
        item = await self.db.get(Item, item_id)
        if item is None:
            raise NotFoundError("Item", str(item_id))
        return item

    async def list_items(self, archived: bool = False) -> List[NormalizedRecord]:
        """List active or archived items, soonest closing first.

        Args:
            archived: True for archived items, False for active ones
        """
        result = await self.db.execute(
            select(Item)
            .where(Item.archived == archived)
            .order_by(Item.closes_at.asc(), Item.id.asc())
        )
        return [to_record(item) for item in result.scalars().all()]

    async def get(self, item_id: int) -> NormalizedRecord:
        """Get one item by id.

        Raises:
            NotFoundError: If the item does not exist
        """
        return to_record(await self._get_item(item_id))

    async def insert(self, record: NormalizedRecord) -> int:
        """Persist a new item and return its id.

        Any id on the incoming record is ignored; storage assigns ids.
        """
        item = Item(
            name=record.name,
            source_url=record.source_url,
            image_url=record.image_url,
            seller_ref=record.seller_ref,
            my_bid=record.my_bid,
            current_bid=record.current_bid,
            reference_value=record.reference_value,
            closes_at=record.closes_at,
            archived=record.archived,
        )
        self.db.add(item)
        await self.db.flush()
        await self.db.refresh(item)

        self.logger.info("item_created", item_id=item.id, source_url=record.source_url)
        return item.id

    async def update(self, record: NormalizedRecord) -> NormalizedRecord:
        """Overwrite a stored item with the record's fields.

        Raises:
            ValueError: If the record has no id
            NotFoundError: If the item does not exist
        """
        if record.id is None:
            raise ValueError("Cannot update a record without an id")

        item = await self._get_item(record.id)
        item.name = record.name
        item.source_url = record.source_url
        item.image_url = record.image_url
        item.seller_ref = record.seller_ref
        item.my_bid = record.my_bid
        item.current_bid = record.current_bid
        item.reference_value = record.reference_value
        item.closes_at = record.closes_at
        item.archived = record.archived

        await self.db.flush()
        await self.db.refresh(item)

        self.logger.info("item_updated", item_id=item.id)
        return to_record(item)

    async def update_current_bid(self, item_id: int, current_bid: Decimal) -> Decimal:
        """Set only the current bid of an item.

        Returns:
            The previous current bid
        """
        item = await self._get_item(item_id)
        previous = Decimal(item.current_bid)
        item.current_bid = current_bid
        await self.db.flush()
        return previous

    async def delete(self, item_id: int) -> None:
        """Delete an item permanently.

        Raises:
            NotFoundError: If the item does not exist
        """
        item = await self._get_item(item_id)
        await self.db.delete(item)
        await self.db.flush()
        self.logger.info("item_deleted", item_id=item_id)

    async def archive(self, item_id: int) -> NormalizedRecord:
        """Soft-delete an item."""
        return await self._set_archived(item_id, True)

    async def restore(self, item_id: int) -> NormalizedRecord:
        """Bring an archived item back to the active list."""
        return await self._set_archived(item_id, False)

    async def _set_archived(self, item_id: int, archived: bool) -> NormalizedRecord:
        item = await self._get_item(item_id)
        item.archived = archived
        await self.db.flush()
        await self.db.refresh(item)
        self.logger.info("item_archive_state_changed", item_id=item_id, archived=archived)
        return to_record(item)

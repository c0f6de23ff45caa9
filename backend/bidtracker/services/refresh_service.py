"""Refresh current bids for every tracked item.

Connects the fetch pipeline with storage: load active items, re-fetch each
one whose URL has an adapter, and write back the new current bid. Only
current_bid changes; user-entered fields (bids, market value, seller) are
left alone.
"""

from decimal import Decimal
from typing import Dict

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bidtracker.core.exceptions import BidTrackerException
from bidtracker.scrapers.pipeline import FetchPipeline
from bidtracker.services.item_service import ItemService

logger = structlog.get_logger(__name__)


class ItemRefresher:
    """Re-fetches current bids for active items.

    Runs from the scheduler and from the refresh endpoint. Two refreshes
    may overlap; both write the latest value they saw.

    No transaction is held while fetching: items are loaded in one short
    session and each changed bid is committed in its own, so API writes
    are never blocked behind network waits.
    """

    def __init__(
        self,
        pipeline: FetchPipeline,
        db_session_factory: async_sessionmaker[AsyncSession],
    ):
        """Initialize item refresher.

        Args:
            pipeline: Shared fetch pipeline
            db_session_factory: Async session factory for database access
        """
        self.pipeline = pipeline
        self.db_session_factory = db_session_factory
        self.logger = logger.bind(service="item_refresher")

    async def refresh_all(self) -> Dict[str, int]:
        """Refresh every active item.

        A failure on one item is logged and counted; the remaining items
        are still refreshed and earlier updates stay committed.

        Returns:
            Dict with processing statistics:
                - items_checked: Active items considered
                - items_updated: Items whose current bid changed
                - items_unchanged: Items fetched with the same bid
                - items_skipped: Items with no matching adapter
                - errors: Items whose fetch or write failed
        """
        stats = {
            "items_checked": 0,
            "items_updated": 0,
            "items_unchanged": 0,
            "items_skipped": 0,
            "errors": 0,
        }

        async with self.db_session_factory() as db:
            items = await ItemService(db).list_items(archived=False)
        stats["items_checked"] = len(items)
        self.logger.info("refresh_started", item_count=len(items))

        for item in items:
            if self.pipeline.registry.find(item.source_url) is None:
                stats["items_skipped"] += 1
                continue

            try:
                fetched = await self.pipeline.fetch_normalized_record(item.source_url)
                if fetched.current_bid == item.current_bid:
                    stats["items_unchanged"] += 1
                    continue
                await self._write_current_bid(item.id, fetched.current_bid)
            except BidTrackerException as e:
                stats["errors"] += 1
                self.logger.warning(
                    "item_refresh_failed",
                    item_id=item.id,
                    source_url=item.source_url,
                    error=e.message,
                    error_type=type(e).__name__,
                )
                continue
            except Exception as e:
                stats["errors"] += 1
                self.logger.error(
                    "item_refresh_failed",
                    item_id=item.id,
                    source_url=item.source_url,
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                continue

            stats["items_updated"] += 1
            self.logger.info(
                "item_bid_updated",
                item_id=item.id,
                previous_bid=str(item.current_bid),
                current_bid=str(fetched.current_bid),
            )

        self.logger.info("refresh_complete", **stats)
        return stats

    async def _write_current_bid(self, item_id: int, current_bid: Decimal) -> None:
        """Store one bid in a short transaction of its own."""
        async with self.db_session_factory() as db:
            await ItemService(db).update_current_bid(item_id, current_bid)
            await db.commit()

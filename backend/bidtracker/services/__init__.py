"""Services module for business logic and data operations.

Service classes implement storage, refresh orchestration, seller grouping
and currency conversion on top of the scraper layer.
"""

from bidtracker.services.exchange_rate import ExchangeRateService
from bidtracker.services.grouping import GroupedRecord, flatten_groups, group_by_seller
from bidtracker.services.item_service import ItemService
from bidtracker.services.refresh_service import ItemRefresher
from bidtracker.services.sellers import KNOWN_SELLERS, Seller, find_seller

__all__ = [
    "ExchangeRateService",
    "GroupedRecord",
    "flatten_groups",
    "group_by_seller",
    "ItemService",
    "ItemRefresher",
    "KNOWN_SELLERS",
    "Seller",
    "find_seller",
]

"""Source-specific adapter implementations.

Each adapter module implements a class that inherits from BaseAdapter.
"""

from .cardhobby import CardHobbyAdapter
from .ebay import EbayAdapter

__all__ = [
    "CardHobbyAdapter",
    "EbayAdapter",
]

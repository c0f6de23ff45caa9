"""SQLAlchemy models for bidtracker.

All models are imported here so metadata.create_all() sees them.
"""

from bidtracker.models.base import Base, TimestampMixin
from bidtracker.models.item import Item

__all__ = [
    "Base",
    "TimestampMixin",
    "Item",
]

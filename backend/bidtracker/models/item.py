"""Tracked auction item model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from bidtracker.models.base import Base, TimestampMixin


class Item(TimestampMixin, Base):
    """An item the user is bidding on or watching.

    Ids come from an autoincrement sequence and are never reused after a
    delete (SQLite needs AUTOINCREMENT for that guarantee).
    """

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Listing info
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    source_url: Mapped[str] = mapped_column(String(1000), nullable=False, comment="Listing detail-page URL")
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    seller_ref: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        index=True,
        comment="Seller URL or id; items are grouped by this value",
    )

    # Prices
    my_bid: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    current_bid: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Latest observed bid/price, updated by refresh",
    )
    reference_value: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        default=Decimal("0"),
        comment="User-supplied market value",
    )

    closes_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_items_archived_closes", "archived", "closes_at"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name='{self.name[:30]}', seller_ref='{self.seller_ref}')>"

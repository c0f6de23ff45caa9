"""Seller and exchange-rate schemas."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class SellerResponse(BaseModel):
    """Known seller."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    url: str


class ExchangeRateResponse(BaseModel):
    """CAD -> USD conversion rate."""

    base: str = "CAD"
    target: str = "USD"
    rate: Decimal
    live: bool

"""Seller and currency endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from bidtracker.dependencies import get_exchange_rate_service
from bidtracker.schemas import ApiResponse, ExchangeRateResponse, SellerResponse
from bidtracker.services.exchange_rate import ExchangeRateService
from bidtracker.services.sellers import KNOWN_SELLERS

router = APIRouter()


@router.get("/sellers", response_model=ApiResponse[List[SellerResponse]])
async def list_sellers():
    """List known sellers for the add-item form."""
    return ApiResponse(data=[SellerResponse.model_validate(s) for s in KNOWN_SELLERS])


@router.get("/exchange-rate", response_model=ApiResponse[ExchangeRateResponse])
async def get_exchange_rate(service: ExchangeRateService = Depends(get_exchange_rate_service)):
    """Current CAD -> USD rate (cached for an hour)."""
    rate = await service.get_rate()
    return ApiResponse(data=ExchangeRateResponse(rate=rate, live=service.is_live))

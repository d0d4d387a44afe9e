"""Price routes: latest value, history, manual refresh, commission, cleanup."""
import logging

from dependency_injector.wiring import inject
from fastapi import APIRouter, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError

from price_ticker.container import (ErrorMapperDep, PriceServiceDep,
                                    SettingsDep)
from price_ticker.db import PriceRecordRead
from price_ticker.exceptions import InvalidCommissionError, PriceServiceError
from price_ticker.schemas import (CleanupResponse, CommissionUpdate,
                                  PriceHistoryItem, PriceHistoryResponse,
                                  PriceResponse)
from price_ticker.services import PriceCalculator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/price", tags=["price"])


def _price_response(record: PriceRecordRead) -> PriceResponse:
    spread = PriceCalculator.spread(record.bid_price, record.ask_price)
    spread_percentage = PriceCalculator.spread_percentage(record.bid_price, record.ask_price)
    return PriceResponse(
        id=record.id,
        symbol=record.symbol,
        bid_price=float(record.bid_price),
        ask_price=float(record.ask_price),
        mid_price=float(record.mid_price),
        commission=float(record.commission),
        spread=float(PriceCalculator.round_price(spread)),
        spread_percentage=float(PriceCalculator.round_percentage(spread_percentage)),
        timestamp=record.timestamp,
    )


@router.get("", response_model=PriceResponse)
@inject
async def get_current_price(service: PriceServiceDep) -> PriceResponse:
    """Get the latest commission-adjusted price.

    Returns 503 until the first cycle has stored a price.
    """
    record = await service.latest()
    if record is None:
        raise HTTPException(
            status_code=503,
            detail="No price data available. Please try again later.",
        )
    return _price_response(record)


@router.get("/history", response_model=PriceHistoryResponse)
@inject
async def get_price_history(
    service: PriceServiceDep,
    limit: int = Query(default=100, ge=1, le=1000, description="Max records, newest first"),
) -> PriceHistoryResponse:
    """Get stored prices, newest first."""
    records = await service.history(limit)
    items = [
        PriceHistoryItem(
            id=r.id,
            symbol=r.symbol,
            bid_price=float(r.bid_price),
            ask_price=float(r.ask_price),
            mid_price=float(r.mid_price),
            commission=float(r.commission),
            timestamp=r.timestamp,
        )
        for r in records
    ]
    return PriceHistoryResponse(data=items, count=len(items), limit=limit)


@router.post("/refresh", response_model=PriceResponse)
@inject
async def refresh_price(
    service: PriceServiceDep, error_mapper: ErrorMapperDep
) -> PriceResponse:
    """Run one fetch/compute/store cycle now, outside the worker schedule."""
    try:
        record = await service.fetch_and_store()
    except (PriceServiceError, SQLAlchemyError) as exc:
        error_mapper.raise_http(exc)
    return _price_response(record)


@router.put("/commission")
@inject
async def update_commission(
    body: CommissionUpdate, service: PriceServiceDep, error_mapper: ErrorMapperDep
) -> dict[str, float]:
    """Change the commission applied from the next cycle on."""
    try:
        service.set_commission(body.commission)
    except InvalidCommissionError as exc:
        error_mapper.raise_http(exc)
    return {"commission": float(service.commission)}


@router.delete("/history", response_model=CleanupResponse)
@inject
async def cleanup_price_history(
    service: PriceServiceDep,
    settings: SettingsDep,
    older_than_days: int | None = Query(default=None, ge=1, le=3650),
) -> CleanupResponse:
    """Delete stored prices older than the given number of days.

    Defaults to the configured retention window (RETENTION_DAYS).
    """
    days = older_than_days or settings.retention_days
    deleted = await service.cleanup(days)
    return CleanupResponse(deleted=deleted, older_than_days=days)

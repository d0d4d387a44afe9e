"""Pydantic schemas for runtime values and API payloads. Not persisted to DB."""
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from price_ticker.utils import utcnow


class Quote(BaseModel):
    """Raw best bid/ask from the feed, prices kept as received."""

    symbol: str
    bid_price: str
    ask_price: str
    bid_qty: str | None = None
    ask_qty: str | None = None
    received_at: datetime = Field(default_factory=utcnow)


class ComputedPrice(BaseModel):
    """Commission-adjusted prices, rounded to 8 decimal places."""

    model_config = ConfigDict(frozen=True)

    bid_price: Decimal
    ask_price: Decimal
    mid_price: Decimal
    original_bid_price: Decimal
    original_ask_price: Decimal
    commission: Decimal
    timestamp: datetime


class WorkerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    HALTED = "halted"


class WorkerStatus(BaseModel):
    """Point-in-time view of the polling worker."""

    is_running: bool
    state: WorkerState
    consecutive_errors: int
    max_retries: int
    update_interval_ms: int


class PriceResponse(BaseModel):
    """Latest price as served over HTTP."""

    id: int
    symbol: str
    bid_price: float
    ask_price: float
    mid_price: float
    commission: float
    spread: float
    spread_percentage: float
    timestamp: datetime


class PriceHistoryItem(BaseModel):
    id: int
    symbol: str
    bid_price: float
    ask_price: float
    mid_price: float
    commission: float
    timestamp: datetime


class PriceHistoryResponse(BaseModel):
    data: list[PriceHistoryItem]
    count: int
    limit: int


class CommissionUpdate(BaseModel):
    """Body of a commission change request; range is enforced by the calculator."""

    commission: Decimal


class CleanupResponse(BaseModel):
    deleted: int
    older_than_days: int


__all__ = [
    "CleanupResponse",
    "CommissionUpdate",
    "ComputedPrice",
    "PriceHistoryItem",
    "PriceHistoryResponse",
    "PriceResponse",
    "Quote",
    "WorkerState",
    "WorkerStatus",
]

"""Database models for the price ticker.

One table, ``prices``: a row per successful fetch cycle. Rows are never
updated; they are removed only by retention cleanup.
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from price_ticker.utils import utcnow


class PriceRecordBase(SQLModel):
    """Fields shared by the table, the insert payload and the read snapshot."""

    symbol: str = Field(max_length=20)
    bid_price: Decimal = Field(max_digits=20, decimal_places=8)
    ask_price: Decimal = Field(max_digits=20, decimal_places=8)
    mid_price: Decimal = Field(max_digits=20, decimal_places=8)
    original_bid_price: Decimal = Field(max_digits=20, decimal_places=8)
    original_ask_price: Decimal = Field(max_digits=20, decimal_places=8)
    commission: Decimal = Field(max_digits=5, decimal_places=4)
    timestamp: datetime


class PriceRecord(PriceRecordBase, table=True):
    """Persisted commission-adjusted price."""

    __tablename__ = "prices"
    __table_args__ = (
        Index("ix_prices_symbol_timestamp", "symbol", "timestamp"),
        Index("ix_prices_timestamp", "timestamp"),
    )

    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class PriceRecordCreate(PriceRecordBase):
    """A price record before the store assigns id and timestamps."""


class PriceRecordRead(PriceRecordBase):
    """Detached snapshot of a stored row, safe to hand to any caller."""

    id: int
    created_at: datetime
    updated_at: datetime


def validate_new_record(record: PriceRecordCreate) -> None:
    """Check a record once at the store boundary.

    Raises:
        ValueError: on an empty symbol, non-positive original prices, negative
            adjusted prices, commission outside [0, 1] or bid > mid > ask
            ordering violations.
    """
    if not record.symbol:
        raise ValueError("symbol must not be empty")
    if record.original_bid_price <= 0 or record.original_ask_price <= 0:
        raise ValueError("original prices must be positive")
    if record.bid_price < 0 or record.ask_price <= 0 or record.mid_price < 0:
        raise ValueError("adjusted prices must not be negative")
    if not 0 <= record.commission <= 1:
        raise ValueError("commission must be between 0 and 1")
    if not record.bid_price <= record.mid_price <= record.ask_price:
        raise ValueError(
            f"expected bid <= mid <= ask, got {record.bid_price} / "
            f"{record.mid_price} / {record.ask_price}"
        )

"""Shared fixtures for price ticker tests."""
from datetime import datetime
from decimal import Decimal

import pytest

from price_ticker.db import PriceRecordCreate, PriceStore, create_db_engine, init_db
from price_ticker.schemas import Quote


@pytest.fixture
def engine(tmp_path):
    """Temporary SQLite database with the prices table created."""
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'prices.db'}")
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def store(engine):
    return PriceStore(engine)


@pytest.fixture
def make_quote():
    """Build a raw quote as the feed would return it."""

    def _make(bid: str = "50000.00", ask: str = "50100.00", symbol: str = "BTCUSDT") -> Quote:
        return Quote(symbol=symbol, bid_price=bid, ask_price=ask)

    return _make


@pytest.fixture
def make_record():
    """Build a valid insert payload with a given timestamp."""

    def _make(
        timestamp: datetime,
        symbol: str = "BTCUSDT",
        mid: str = "50050.05",
    ) -> PriceRecordCreate:
        return PriceRecordCreate(
            symbol=symbol,
            bid_price=Decimal("49950"),
            ask_price=Decimal("50150.1"),
            mid_price=Decimal(mid),
            original_bid_price=Decimal("50000"),
            original_ask_price=Decimal("50100"),
            commission=Decimal("0.001"),
            timestamp=timestamp,
        )

    return _make

"""Price pipeline for one symbol: fetch, apply commission, persist.

PriceService composes the market data client, the calculator and the store.
Cycles are serialized by a lock, so the polling worker and a manual refresh
never have two fetches in flight. It neither retries nor swallows errors; every failure from the feed, the
calculator or the store propagates unchanged to the caller (normally the
polling worker, which owns the retry policy).
"""
import asyncio
import logging
from datetime import timedelta
from decimal import Decimal

from price_ticker import metrics
from price_ticker.db import PriceRecordCreate, PriceRecordRead, PriceStore
from price_ticker.providers.core import MarketDataClientABC
from price_ticker.services.price_calculator import PriceCalculator
from price_ticker.utils import utcnow

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100
DEFAULT_RETENTION_DAYS = 30


class PriceService:
    """Fetch → compute → store for the configured symbol, plus read paths."""

    def __init__(
        self,
        client: MarketDataClientABC,
        calculator: PriceCalculator,
        store: PriceStore,
        *,
        symbol: str = "BTCUSDT",
    ) -> None:
        """Initialize with explicit collaborators.

        Args:
            client: Feed client used for every fetch.
            calculator: Commission engine; its commission is read once per cycle.
            store: Persistence for price records.
            symbol: The single symbol this pipeline serves.
        """
        self._client = client
        self._calculator = calculator
        self._store = store
        self._symbol = symbol
        self._cycle_lock = asyncio.Lock()

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def commission(self) -> Decimal:
        return self._calculator.commission

    def set_commission(self, value: Decimal | float | str) -> None:
        """Update the commission used from the next cycle on."""
        self._calculator.set_commission(value)

    async def fetch_and_store(self) -> PriceRecordRead:
        """Run one cycle and return the stored record snapshot.

        A call made while another cycle is in flight waits for it to finish.
        The record keeps the commission rounded to the column's 4 decimal
        places; prices are computed with the exact value.
        """
        async with self._cycle_lock:
            logger.debug("Fetching price data for %s", self._symbol)
            try:
                quote = await self._client.fetch_quote(self._symbol)
                commission = self._calculator.commission
                computed = self._calculator.compute(quote, commission)
                new_record = PriceRecordCreate(
                    symbol=self._symbol,
                    bid_price=computed.bid_price,
                    ask_price=computed.ask_price,
                    mid_price=computed.mid_price,
                    original_bid_price=PriceCalculator.round_price(computed.original_bid_price),
                    original_ask_price=PriceCalculator.round_price(computed.original_ask_price),
                    commission=PriceCalculator.round_commission(commission),
                    timestamp=computed.timestamp,
                )
                record = await asyncio.to_thread(self._store.insert, new_record)
            except Exception as exc:
                metrics.PRICE_UPDATES.labels(status="error").inc()
                logger.error("Failed to fetch and store price data for %s: %s", self._symbol, exc)
                raise
        metrics.PRICE_UPDATES.labels(status="success").inc()
        metrics.record_price(
            record.symbol, record.bid_price, record.ask_price, record.mid_price, record.timestamp
        )
        logger.info(
            "Stored price %s for %s: mid=%s", record.id, record.symbol, record.mid_price
        )
        return record

    async def latest(self) -> PriceRecordRead | None:
        """Most recent record, or None when nothing has been stored yet."""
        record = await asyncio.to_thread(self._store.latest, self._symbol)
        if record is None:
            logger.warning("No price data found for %s", self._symbol)
        return record

    async def history(self, limit: int = DEFAULT_HISTORY_LIMIT) -> list[PriceRecordRead]:
        """Newest-first records; callers keep limit within [1, 1000]."""
        return await asyncio.to_thread(self._store.history, self._symbol, limit)

    async def cleanup(self, older_than_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """Delete records older than the given number of days."""
        cutoff = utcnow() - timedelta(days=older_than_days)
        deleted = await asyncio.to_thread(
            self._store.delete_older_than, self._symbol, cutoff
        )
        logger.info(
            "Cleaned up %d price records older than %d days", deleted, older_than_days
        )
        return deleted

    async def test_connectivity(self) -> bool:
        return await self._client.test_connectivity()

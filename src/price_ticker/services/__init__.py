"""Service layer: commission engine, price pipeline and polling worker."""
from price_ticker.services.polling_worker import PollingWorker, backoff_delay_ms
from price_ticker.services.price_calculator import PriceCalculator
from price_ticker.services.price_service import PriceService

__all__ = [
    "PollingWorker",
    "PriceCalculator",
    "PriceService",
    "backoff_delay_ms",
]

"""Core provider abstractions."""
from price_ticker.providers.core.market_provider_abc import MarketDataClientABC

__all__ = ["MarketDataClientABC"]

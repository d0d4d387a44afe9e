"""Binance REST book ticker provider."""
from price_ticker.providers.binance.provider import BinanceBookTickerClient

__all__ = ["BinanceBookTickerClient"]

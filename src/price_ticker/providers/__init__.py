"""Market data clients feeding the price pipeline.

- BinanceBookTickerClient: best bid/ask via the Binance REST API

All clients implement MarketDataClientABC and return Quote objects.

Example:
    async with BinanceBookTickerClient(symbol="BTCUSDT") as client:
        quote = await client.fetch_quote()
        print(f"{quote.symbol}: {quote.bid_price} / {quote.ask_price}")
"""
from price_ticker.providers.binance import BinanceBookTickerClient
from price_ticker.providers.core import MarketDataClientABC

__all__ = [
    "BinanceBookTickerClient",
    "MarketDataClientABC",
]

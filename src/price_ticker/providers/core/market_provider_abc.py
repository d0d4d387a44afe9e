"""Abstract base class for market data clients."""
from abc import ABC, abstractmethod

from price_ticker.schemas import Quote


class MarketDataClientABC(ABC):
    """Base interface for best bid/ask feeds.

    Implementations classify every failure into the shared error taxonomy
    (see price_ticker.exceptions) and never retry internally; retry policy
    belongs to the polling worker.
    """

    @abstractmethod
    async def fetch_quote(self, symbol: str | None = None) -> Quote:
        """Fetch the current best bid/ask for a symbol.

        Args:
            symbol: Trading symbol (e.g. "BTCUSDT"). Defaults to the client's symbol.

        Returns:
            A Quote whose prices passed payload validation.
        """

    @abstractmethod
    async def test_connectivity(self) -> bool:
        """Lightweight liveness check. Returns False on any failure, never raises."""

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "MarketDataClientABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()

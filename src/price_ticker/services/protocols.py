"""Protocols for service-layer collaborators."""
from typing import Protocol


class PriceCycle(Protocol):
    """Anything the polling worker can drive (e.g. PriceService)."""

    async def fetch_and_store(self) -> object:
        """Run one fetch/compute/store cycle; raise on failure."""
        ...

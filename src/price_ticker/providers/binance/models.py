"""Models for the Binance provider (API params and payloads)."""
from pydantic import BaseModel


class BookTickerParams(BaseModel):
    """Params for /api/v3/ticker/bookTicker."""

    symbol: str


class BookTickerPayload(BaseModel):
    """Raw /api/v3/ticker/bookTicker response body. Fields stay optional so
    missing values are reported as invalid quotes, not as parse failures."""

    symbol: str | None = None
    bidPrice: str | None = None  # noqa: N815
    bidQty: str | None = None  # noqa: N815
    askPrice: str | None = None  # noqa: N815
    askQty: str | None = None  # noqa: N815

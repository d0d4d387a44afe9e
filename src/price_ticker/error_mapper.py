"""Maps pipeline exceptions to HTTP responses."""
from dataclasses import dataclass

from fastapi import HTTPException

from price_ticker.exceptions import ErrorKind, PriceServiceError

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.INVALID_QUOTE: 502,
    ErrorKind.INVERTED_SPREAD: 502,
    ErrorKind.INVALID_COMMISSION: 422,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.INVALID_SYMBOL: 400,
    ErrorKind.TIMEOUT: 504,
    ErrorKind.UNREACHABLE: 503,
    ErrorKind.UPSTREAM_ERROR: 502,
}


@dataclass(frozen=True)
class ServiceErrorMapper:
    """Maps classified errors to (status_code, detail) by their ErrorKind.

    Anything outside the taxonomy (storage failures, bugs) becomes a 500
    without leaking its message.
    """

    api_name: str = "Binance"

    def to_http(self, exc: Exception) -> tuple[int, str]:
        """Map an exception to (status_code, detail) for HTTP responses."""
        if isinstance(exc, PriceServiceError):
            status = _STATUS_BY_KIND.get(exc.kind, 500)
            if exc.kind is ErrorKind.TIMEOUT:
                return (status, f"Request to {self.api_name} timed out")
            return (status, str(exc))
        return (500, "Internal server error")

    def raise_http(self, exc: Exception) -> None:
        """Map exception to HTTP and raise HTTPException. Never returns."""
        status_code, detail = self.to_http(exc)
        raise HTTPException(status_code=status_code, detail=detail) from exc

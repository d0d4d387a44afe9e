"""Error taxonomy shared by the feed client, the calculator and the worker.

Validation kinds (bad quote data, bad commission) are the caller's fault and
are never retried. Transport kinds are transient; only the polling worker
retries them.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Classification of every failure the price pipeline can raise."""

    INVALID_QUOTE = "invalid_quote"
    INVERTED_SPREAD = "inverted_spread"
    INVALID_COMMISSION = "invalid_commission"
    RATE_LIMITED = "rate_limited"
    INVALID_SYMBOL = "invalid_symbol"
    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    UPSTREAM_ERROR = "upstream_error"


TRANSIENT_KINDS = frozenset(
    {
        ErrorKind.RATE_LIMITED,
        ErrorKind.INVALID_SYMBOL,
        ErrorKind.TIMEOUT,
        ErrorKind.UNREACHABLE,
        ErrorKind.UPSTREAM_ERROR,
    }
)


class PriceServiceError(Exception):
    """Base class for classified pipeline errors."""

    kind: ErrorKind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind.value)

    @property
    def transient(self) -> bool:
        """True for transport failures that a later cycle may not hit."""
        return self.kind in TRANSIENT_KINDS


class InvalidQuoteError(PriceServiceError):
    """A quote price is missing, unparseable, non-finite or not positive."""

    kind = ErrorKind.INVALID_QUOTE


class InvertedSpreadError(PriceServiceError):
    """The raw bid is greater than or equal to the raw ask."""

    kind = ErrorKind.INVERTED_SPREAD


class InvalidCommissionError(PriceServiceError):
    """Commission outside [0, 1]."""

    kind = ErrorKind.INVALID_COMMISSION


class RateLimitedError(PriceServiceError):
    kind = ErrorKind.RATE_LIMITED


class InvalidSymbolError(PriceServiceError):
    kind = ErrorKind.INVALID_SYMBOL


class FeedTimeoutError(PriceServiceError):
    kind = ErrorKind.TIMEOUT


class UnreachableError(PriceServiceError):
    kind = ErrorKind.UNREACHABLE


class UpstreamError(PriceServiceError):
    """Any other non-2xx answer or malformed payload from the feed."""

    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, message: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

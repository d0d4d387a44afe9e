"""Shared utilities for the price ticker."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from price_ticker.exceptions import InvalidQuoteError

PRICE_QUANTUM = Decimal("0.00000001")
PERCENT_QUANTUM = Decimal("0.0001")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc)


def round_half_up(value: Decimal, quantum: Decimal) -> Decimal:
    """Round value to the exponent of quantum, half away from zero."""
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def parse_price(raw: str | None, field: str) -> Decimal:
    """Parse a feed price string into a finite positive Decimal.

    Raises:
        InvalidQuoteError: when the value is missing, unparseable, non-finite
            or not strictly positive.
    """
    if raw is None or str(raw).strip() == "":
        raise InvalidQuoteError(f"Missing {field}")
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise InvalidQuoteError(f"Invalid {field}: {raw!r}") from exc
    if not value.is_finite():
        raise InvalidQuoteError(f"Invalid {field}: {raw!r}")
    if value <= 0:
        raise InvalidQuoteError(f"{field} must be positive, got {raw!r}")
    return value

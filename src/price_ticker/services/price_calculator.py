"""Commission transform: raw best bid/ask to quoted bid/ask/mid."""
import logging
from decimal import Decimal, InvalidOperation

from price_ticker.exceptions import InvalidCommissionError, InvertedSpreadError
from price_ticker.schemas import ComputedPrice, Quote
from price_ticker.utils import (PERCENT_QUANTUM, PRICE_QUANTUM, parse_price,
                                round_half_up, utcnow)

logger = logging.getLogger(__name__)

DEFAULT_COMMISSION = Decimal("0.0001")
COMMISSION_QUANTUM = Decimal("0.0001")

_ONE = Decimal(1)
_TWO = Decimal(2)
_HUNDRED = Decimal(100)


def _to_commission(value: Decimal | float | str) -> Decimal:
    try:
        commission = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidCommissionError(f"Commission is not a number: {value!r}") from exc
    if not commission.is_finite() or commission < 0 or commission > 1:
        raise InvalidCommissionError("Commission must be between 0 and 1")
    return commission


class PriceCalculator:
    """Applies a commission to widen the quoted spread.

    bid = raw_bid * (1 - commission), ask = raw_ask * (1 + commission),
    mid = (bid + ask) / 2, each rounded half-up to 8 decimal places.

    The commission is the only mutable state. It is replaced by rebinding a
    single attribute, so a computation that already captured it is unaffected.
    """

    def __init__(self, commission: Decimal | float | str = DEFAULT_COMMISSION) -> None:
        self._commission = _to_commission(commission)

    @property
    def commission(self) -> Decimal:
        return self._commission

    def set_commission(self, value: Decimal | float | str) -> None:
        """Replace the active commission for subsequent computations.

        Raises:
            InvalidCommissionError: when value is not a number or is outside
                [0, 1].
        """
        new_commission = _to_commission(value)
        old_commission = self._commission
        self._commission = new_commission
        logger.info("Commission updated from %s to %s", old_commission, new_commission)

    def compute(self, quote: Quote, commission: Decimal | None = None) -> ComputedPrice:
        """Compute commission-adjusted prices for a raw quote.

        Args:
            quote: Raw quote from the feed.
            commission: Commission to use; defaults to the active one.

        Raises:
            InvalidQuoteError: a price is not a finite positive decimal.
            InvertedSpreadError: raw bid >= raw ask.
        """
        rate = self._commission if commission is None else _to_commission(commission)
        raw_bid = parse_price(quote.bid_price, "bid price")
        raw_ask = parse_price(quote.ask_price, "ask price")
        if raw_bid >= raw_ask:
            raise InvertedSpreadError(
                f"Bid price {raw_bid} must be lower than ask price {raw_ask}"
            )

        bid = raw_bid * (_ONE - rate)
        ask = raw_ask * (_ONE + rate)
        mid = (bid + ask) / _TWO

        result = ComputedPrice(
            bid_price=self.round_price(bid),
            ask_price=self.round_price(ask),
            mid_price=self.round_price(mid),
            original_bid_price=raw_bid,
            original_ask_price=raw_ask,
            commission=rate,
            timestamp=utcnow(),
        )
        logger.debug(
            "Computed %s: bid %s -> %s, ask %s -> %s, mid %s (commission %s)",
            quote.symbol, raw_bid, result.bid_price, raw_ask, result.ask_price,
            result.mid_price, rate,
        )
        return result

    @staticmethod
    def round_price(value: Decimal) -> Decimal:
        """Round to 8 decimal places (price precision)."""
        return round_half_up(value, PRICE_QUANTUM)

    @staticmethod
    def round_percentage(value: Decimal) -> Decimal:
        """Round to 4 decimal places (spread percentage display precision)."""
        return round_half_up(value, PERCENT_QUANTUM)

    @staticmethod
    def round_commission(value: Decimal) -> Decimal:
        """Round to 4 decimal places (stored commission precision)."""
        return round_half_up(value, COMMISSION_QUANTUM)

    @staticmethod
    def spread(bid: Decimal, ask: Decimal) -> Decimal:
        return ask - bid

    @staticmethod
    def spread_percentage(bid: Decimal, ask: Decimal) -> Decimal:
        """Spread relative to the mid price, in percent. Not rounded."""
        mid = (bid + ask) / _TWO
        return (ask - bid) / mid * _HUNDRED

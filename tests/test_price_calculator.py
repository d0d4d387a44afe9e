"""Unit tests for the commission engine."""
from decimal import Decimal

import pytest

from price_ticker.exceptions import (ErrorKind, InvalidCommissionError,
                                     InvalidQuoteError, InvertedSpreadError)
from price_ticker.services import PriceCalculator


@pytest.fixture
def calculator():
    return PriceCalculator(Decimal("0.001"))


def test_compute_applies_commission_end_to_end(calculator, make_quote):
    result = calculator.compute(make_quote("50000.00", "50100.00"))

    assert result.bid_price == Decimal("49950")
    assert result.ask_price == Decimal("50150.1")
    assert result.mid_price == Decimal("50050.05")
    assert result.original_bid_price == Decimal("50000")
    assert result.original_ask_price == Decimal("50100")
    assert result.commission == Decimal("0.001")


def test_zero_commission_keeps_raw_prices(make_quote):
    result = PriceCalculator(0).compute(make_quote("50000.00", "50100.00"))

    assert result.bid_price == Decimal("50000")
    assert result.ask_price == Decimal("50100")
    assert result.mid_price == Decimal("50050")


def test_full_commission_zeroes_bid(make_quote):
    result = PriceCalculator(1).compute(make_quote("50000.00", "50100.00"))

    assert result.bid_price == 0
    assert result.ask_price == Decimal("100200")
    assert result.mid_price == Decimal("50100")


def test_results_are_rounded_to_eight_places(calculator, make_quote):
    result = calculator.compute(make_quote("50000.123456789", "50100.987654321"))

    assert result.bid_price == Decimal("49950.12333333")
    for value in (result.bid_price, result.ask_price, result.mid_price):
        assert value.as_tuple().exponent == -8


def test_rounding_is_half_up():
    assert PriceCalculator.round_price(Decimal("1.000000005")) == Decimal("1.00000001")
    assert PriceCalculator.round_price(Decimal("1.000000004999")) == Decimal("1.00000000")
    assert PriceCalculator.round_percentage(Decimal("0.39985")) == Decimal("0.3999")


def test_compute_is_deterministic(calculator, make_quote):
    quote = make_quote("61234.56789012", "61250.00000001")

    first = calculator.compute(quote)
    second = calculator.compute(quote)

    assert first.model_dump(exclude={"timestamp"}) == second.model_dump(exclude={"timestamp"})


@pytest.mark.parametrize(
    "bid,ask",
    [("0.00000001", "0.00000002"), ("1", "1.0001"), ("50000.00", "50100.00"), ("99999999.9", "100000000")],
)
@pytest.mark.parametrize("commission", ["0", "0.0001", "0.25", "1"])
def test_price_ordering_holds(make_quote, bid, ask, commission):
    result = PriceCalculator(commission).compute(make_quote(bid, ask))

    assert result.bid_price <= result.mid_price <= result.ask_price
    assert result.bid_price <= Decimal(bid)
    assert result.ask_price >= Decimal(ask)


@pytest.mark.parametrize(
    "bid,ask",
    [
        ("invalid", "50100.00"),
        ("50000.00", "not-a-number"),
        ("-100", "50100.00"),
        ("50000.00", "0"),
        ("NaN", "50100.00"),
        ("50000.00", "Infinity"),
        ("", "50100.00"),
    ],
)
def test_invalid_prices_are_rejected(calculator, make_quote, bid, ask):
    with pytest.raises(InvalidQuoteError) as exc_info:
        calculator.compute(make_quote(bid, ask))

    assert exc_info.value.kind is ErrorKind.INVALID_QUOTE
    assert not exc_info.value.transient


@pytest.mark.parametrize("bid,ask", [("50100.00", "50000.00"), ("50000.00", "50000.00")])
def test_inverted_spread_is_rejected(calculator, make_quote, bid, ask):
    with pytest.raises(InvertedSpreadError):
        calculator.compute(make_quote(bid, ask))


@pytest.mark.parametrize("value", [-0.1, 1.1, "abc", "NaN", "Infinity"])
def test_invalid_commission_rejected_on_construction(value):
    with pytest.raises(InvalidCommissionError):
        PriceCalculator(value)


@pytest.mark.parametrize("value", [0, 1, "0.0001", Decimal("0.5")])
def test_boundary_commissions_accepted(value):
    assert PriceCalculator(value).commission == Decimal(str(value))


def test_sub_basis_point_commission_is_applied_exactly(make_quote):
    calculator = PriceCalculator()
    calculator.set_commission(Decimal("0.00015"))

    result = calculator.compute(make_quote("50000.00", "50100.00"))

    assert calculator.commission == Decimal("0.00015")
    assert result.commission == Decimal("0.00015")
    assert result.bid_price == Decimal("49992.5")
    assert result.ask_price == Decimal("50107.515")
    assert result.mid_price == Decimal("50050.0075")


def test_round_commission_is_half_up_to_four_places():
    assert PriceCalculator.round_commission(Decimal("0.00015")) == Decimal("0.0002")
    assert PriceCalculator.round_commission(Decimal("0.00014999")) == Decimal("0.0001")
    assert PriceCalculator.round_commission(Decimal("1")) == Decimal("1")


def test_set_commission_applies_to_next_computation(calculator, make_quote):
    calculator.set_commission("0")

    result = calculator.compute(make_quote("50000.00", "50100.00"))

    assert calculator.commission == 0
    assert result.bid_price == Decimal("50000")


def test_set_commission_rejects_out_of_range_and_keeps_old_value(calculator):
    with pytest.raises(InvalidCommissionError):
        calculator.set_commission(2)

    assert calculator.commission == Decimal("0.001")


def test_explicit_commission_overrides_active_one(calculator, make_quote):
    result = calculator.compute(make_quote("50000.00", "50100.00"), Decimal("0"))

    assert result.commission == 0
    assert result.bid_price == Decimal("50000")
    assert calculator.commission == Decimal("0.001")


def test_spread_metrics():
    bid, ask = Decimal("49950"), Decimal("50150.1")

    assert PriceCalculator.spread(bid, ask) == Decimal("200.1")
    percentage = PriceCalculator.spread_percentage(bid, ask)
    assert PriceCalculator.round_percentage(percentage) == Decimal("0.3998")

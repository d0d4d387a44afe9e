"""Tests for mapping classified errors to HTTP status codes."""
import pytest
from fastapi import HTTPException

from price_ticker.error_mapper import ServiceErrorMapper
from price_ticker.exceptions import (FeedTimeoutError, InvalidCommissionError,
                                     InvalidQuoteError, InvalidSymbolError,
                                     InvertedSpreadError, RateLimitedError,
                                     UnreachableError, UpstreamError)


@pytest.mark.parametrize(
    "error,status",
    [
        (InvalidQuoteError("bad bid"), 502),
        (InvertedSpreadError("bid >= ask"), 502),
        (InvalidCommissionError("out of range"), 422),
        (RateLimitedError("Rate limit exceeded"), 429),
        (InvalidSymbolError("Invalid symbol."), 400),
        (FeedTimeoutError("read timeout"), 504),
        (UnreachableError("refused"), 503),
        (UpstreamError("HTTP 500", status_code=500), 502),
    ],
)
def test_status_by_kind(error, status):
    assert ServiceErrorMapper().to_http(error)[0] == status


def test_timeout_detail_names_the_api():
    mapper = ServiceErrorMapper(api_name="Binance")

    assert mapper.to_http(FeedTimeoutError("x")) == (504, "Request to Binance timed out")


def test_unclassified_errors_hide_details():
    assert ServiceErrorMapper().to_http(RuntimeError("secret")) == (500, "Internal server error")


def test_raise_http_chains_original():
    error = RateLimitedError("Rate limit exceeded")

    with pytest.raises(HTTPException) as exc_info:
        ServiceErrorMapper().raise_http(error)

    assert exc_info.value.status_code == 429
    assert exc_info.value.detail == "Rate limit exceeded"
    assert exc_info.value.__cause__ is error

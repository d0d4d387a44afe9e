"""Unit tests for the Binance book ticker client using httpx.MockTransport."""
import asyncio
import time

import httpx
import pytest
from prometheus_client import REGISTRY

from price_ticker.exceptions import (ErrorKind, FeedTimeoutError,
                                     InvalidQuoteError, InvalidSymbolError,
                                     RateLimitedError, UnreachableError,
                                     UpstreamError)
from price_ticker.providers import BinanceBookTickerClient

BASE_URL = "https://api.binance.test"

TICKER = {
    "symbol": "BTCUSDT",
    "bidPrice": "50000.00000000",
    "bidQty": "1.50000000",
    "askPrice": "50100.00000000",
    "askQty": "2.00000000",
}


def make_client(handler) -> BinanceBookTickerClient:
    return BinanceBookTickerClient(
        symbol="BTCUSDT",
        base_url=BASE_URL,
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_fetch_quote_returns_raw_prices():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=TICKER)

    async with make_client(handler) as client:
        quote = await client.fetch_quote()

    assert quote.symbol == "BTCUSDT"
    assert quote.bid_price == "50000.00000000"
    assert quote.ask_price == "50100.00000000"
    assert quote.bid_qty == "1.50000000"
    assert seen[0].url.path == "/api/v3/ticker/bookTicker"
    assert seen[0].url.params["symbol"] == "BTCUSDT"


@pytest.mark.asyncio
async def test_fetch_quote_uses_explicit_symbol():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=dict(TICKER, symbol="ETHUSDT"))

    async with make_client(handler) as client:
        quote = await client.fetch_quote("ETHUSDT")

    assert quote.symbol == "ETHUSDT"
    assert seen[0].url.params["symbol"] == "ETHUSDT"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status,body,expected",
    [
        (429, {"code": -1003, "msg": "Too many requests."}, RateLimitedError),
        (418, {"code": -1003, "msg": "Way too many requests."}, RateLimitedError),
        (400, {"code": -1121, "msg": "Invalid symbol."}, InvalidSymbolError),
        (401, {"code": -2015, "msg": "Invalid API-key."}, UpstreamError),
        (404, None, UpstreamError),
        (500, None, UpstreamError),
        (503, {"code": -1001, "msg": "Service unavailable."}, UpstreamError),
    ],
)
async def test_http_errors_are_classified(status, body, expected):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if body is None:
            return httpx.Response(status, text="error")
        return httpx.Response(status, json=body)

    async with make_client(handler) as client:
        with pytest.raises(expected):
            await client.fetch_quote()

    assert calls == 1


@pytest.mark.asyncio
async def test_upstream_error_keeps_status_code():
    async with make_client(lambda request: httpx.Response(502, text="bad gateway")) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_quote()

    assert exc_info.value.status_code == 502
    assert exc_info.value.transient


@pytest.mark.asyncio
async def test_invalid_symbol_message_includes_binance_detail():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})

    async with make_client(handler) as client:
        with pytest.raises(InvalidSymbolError, match="Invalid symbol."):
            await client.fetch_quote()


@pytest.mark.asyncio
async def test_timeout_is_classified():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    async with make_client(handler) as client:
        with pytest.raises(FeedTimeoutError) as exc_info:
            await client.fetch_quote()

    assert exc_info.value.kind is ErrorKind.TIMEOUT


@pytest.mark.asyncio
async def test_connection_failure_is_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    async with make_client(handler) as client:
        with pytest.raises(UnreachableError):
            await client.fetch_quote()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=[TICKER]),
    ],
)
async def test_malformed_body_is_upstream_error(response):
    async with make_client(lambda request: response) as client:
        with pytest.raises(UpstreamError):
            await client.fetch_quote()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"symbol": "BTCUSDT", "askPrice": "50100.00"},
        {"bidPrice": "50000.00", "askPrice": "50100.00"},
        dict(TICKER, bidPrice="-1"),
        dict(TICKER, askPrice="0.00000000"),
        dict(TICKER, bidPrice="abc"),
        dict(TICKER, bidPrice="50100.00", askPrice="50000.00"),
        dict(TICKER, bidPrice="50000.00", askPrice="50000.00"),
        dict(TICKER, bidPrice=50000),
    ],
)
async def test_semantically_invalid_payload_is_invalid_quote(payload):
    async with make_client(lambda request: httpx.Response(200, json=payload)) as client:
        with pytest.raises(InvalidQuoteError):
            await client.fetch_quote()


@pytest.mark.asyncio
@pytest.mark.parametrize("symbol", ["AB", "X" * 21])
async def test_bad_symbol_rejected_before_request(symbol):
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(200, json=TICKER)

    async with make_client(handler) as client:
        with pytest.raises(InvalidSymbolError):
            await client.fetch_quote(symbol)

    assert calls == 0


@pytest.mark.asyncio
async def test_connectivity_true_on_ping():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v3/ping"
        return httpx.Response(200, json={})

    async with make_client(handler) as client:
        assert await client.test_connectivity() is True


@pytest.mark.asyncio
async def test_connectivity_false_on_error_status():
    async with make_client(lambda request: httpx.Response(503)) as client:
        assert await client.test_connectivity() is False


@pytest.mark.asyncio
async def test_connectivity_never_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with make_client(handler) as client:
        assert await client.test_connectivity() is False


@pytest.mark.asyncio
async def test_slow_response_hits_overall_deadline():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200, json=TICKER)

    client = BinanceBookTickerClient(
        symbol="BTCUSDT",
        base_url=BASE_URL,
        timeout=0.05,
        transport=httpx.MockTransport(handler),
    )
    started = time.perf_counter()
    async with client:
        with pytest.raises(FeedTimeoutError):
            await client.fetch_quote()

    assert time.perf_counter() - started < 2


@pytest.mark.asyncio
async def test_requests_are_counted_by_outcome():
    def count(status: str) -> float:
        return REGISTRY.get_sample_value("price_ticker_feed_requests_total", {"status": status}) or 0

    success_before, error_before = count("success"), count("error")

    async with make_client(lambda request: httpx.Response(200, json=TICKER)) as client:
        await client.fetch_quote()
    async with make_client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(UpstreamError):
            await client.fetch_quote()

    assert count("success") == success_before + 1
    assert count("error") == error_before + 1

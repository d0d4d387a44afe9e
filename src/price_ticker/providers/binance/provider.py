"""Binance best bid/ask client."""
import asyncio
import logging
import time

import httpx
from pydantic import ValidationError

from price_ticker.exceptions import (FeedTimeoutError, InvalidQuoteError,
                                     InvalidSymbolError, PriceServiceError,
                                     RateLimitedError, UnreachableError,
                                     UpstreamError)
from price_ticker.metrics import FEED_REQUEST_DURATION, FEED_REQUESTS
from price_ticker.providers.binance.models import (BookTickerParams,
                                                   BookTickerPayload)
from price_ticker.providers.core import MarketDataClientABC
from price_ticker.schemas import Quote
from price_ticker.utils import parse_price, utcnow

logger = logging.getLogger(__name__)

# 418 is Binance's IP ban after ignoring 429s.
_RATE_LIMIT_STATUSES = frozenset({418, 429})


class BinanceBookTickerClient(MarketDataClientABC):
    """Fetches the best bid/ask for one symbol from the Binance REST API.

    Every call is a single attempt: failures are classified into the shared
    error taxonomy and raised, never retried here.
    """

    BASE_URL = "https://api.binance.com"
    BOOK_TICKER_PATH = "/api/v3/ticker/bookTicker"
    PING_PATH = "/api/v3/ping"
    USER_AGENT = "price-ticker/0.1.0"

    def __init__(
        self,
        symbol: str = "BTCUSDT",
        base_url: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Binance client.

        Args:
            symbol: Default symbol for fetch_quote().
            base_url: API root. Defaults to the public Binance endpoint.
            timeout: Hard deadline in seconds for each request.
            transport: Optional httpx transport (tests inject a MockTransport).
        """
        self._symbol = symbol
        self._timeout = timeout
        self._base_url = base_url or self.BASE_URL
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers={"Accept": "application/json", "User-Agent": self.USER_AGENT},
            transport=transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )

    @property
    def symbol(self) -> str:
        return self._symbol

    async def fetch_quote(self, symbol: str | None = None) -> Quote:
        """Fetch the current book ticker.

        Raises:
            InvalidSymbolError: symbol rejected locally or by Binance (HTTP 400).
            RateLimitedError: HTTP 429 / 418.
            FeedTimeoutError: no response within the timeout.
            UnreachableError: connection, DNS or socket failure.
            UpstreamError: other non-2xx status or malformed body.
            InvalidQuoteError: well-formed response with unusable prices.
        """
        target = symbol or self._symbol
        _validate_symbol(target)
        params = BookTickerParams(symbol=target).model_dump()
        started = time.perf_counter()
        try:
            # httpx timeouts apply per phase; wait_for bounds the whole request.
            response = await asyncio.wait_for(
                self._client.get(self.BOOK_TICKER_PATH, params=params),
                timeout=self._timeout,
            )
            response.raise_for_status()
            body = response.json()
        except asyncio.TimeoutError as exc:
            self._observe("error", started)
            raise FeedTimeoutError(
                f"Request to Binance timed out for {target} after {self._timeout}s"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            self._observe("error", started)
            raise _classify(exc, target) from exc
        self._observe("success", started)

        quote = _quote_from_payload(body)
        logger.debug(
            "Fetched %s bid=%s ask=%s in %.1fms",
            quote.symbol, quote.bid_price, quote.ask_price,
            (time.perf_counter() - started) * 1000,
        )
        return quote

    async def test_connectivity(self) -> bool:
        """Ping Binance. Returns False on any failure."""
        try:
            response = await self._client.get(self.PING_PATH)
            response.raise_for_status()
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Binance connectivity test failed: %s", exc)
            return False
        logger.info("Binance connectivity test ok (%s)", self._base_url)
        return True

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    @staticmethod
    def _observe(status: str, started: float) -> None:
        FEED_REQUESTS.labels(status=status).inc()
        FEED_REQUEST_DURATION.observe(time.perf_counter() - started)


async def _log_request(request: httpx.Request) -> None:
    logger.debug("Request %s %s", request.method, request.url)


async def _log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug("Response %s %s status=%s", request.method, request.url, response.status_code)


def _validate_symbol(symbol: str) -> None:
    if not symbol or not isinstance(symbol, str):
        raise InvalidSymbolError("Invalid symbol: symbol must be a non-empty string")
    if not 3 <= len(symbol) <= 20:
        raise InvalidSymbolError(f"Invalid symbol length: {symbol}")


def _error_message(response: httpx.Response) -> str:
    """Extract Binance's {"code", "msg"} error text when present."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase
    if isinstance(body, dict) and body.get("msg"):
        return str(body["msg"])
    return response.reason_phrase


def _classify(exc: Exception, symbol: str) -> PriceServiceError:
    """Map an httpx/JSON failure onto the error taxonomy."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        detail = _error_message(exc.response)
        if status in _RATE_LIMIT_STATUSES:
            return RateLimitedError(f"Binance rate limit exceeded ({status}): {detail}")
        if status == 400:
            return InvalidSymbolError(f"Invalid symbol {symbol}: {detail}")
        return UpstreamError(f"Binance API error {status}: {detail}", status_code=status)
    if isinstance(exc, httpx.TimeoutException):
        return FeedTimeoutError(f"Request to Binance timed out for {symbol}")
    if isinstance(exc, httpx.NetworkError):
        return UnreachableError(f"Unable to connect to Binance: {exc}")
    if isinstance(exc, httpx.HTTPError):
        return UpstreamError(f"Binance request failed: {exc}")
    return UpstreamError(f"Malformed response from Binance: {exc}")


def _quote_from_payload(body: object) -> Quote:
    """Validate a bookTicker body and build a Quote.

    Prices are re-checked here (positive, bid < ask) so a successful call with
    unusable content surfaces as InvalidQuoteError, as it would from the
    calculator.
    """
    if not isinstance(body, dict):
        raise UpstreamError("Malformed response from Binance: expected an object")
    try:
        payload = BookTickerPayload.model_validate(body)
    except ValidationError as exc:
        raise InvalidQuoteError(f"Invalid ticker response: {exc}") from exc
    if not payload.symbol or not payload.bidPrice or not payload.askPrice:
        raise InvalidQuoteError("Invalid ticker response: missing required fields")
    bid = parse_price(payload.bidPrice, "bid price")
    ask = parse_price(payload.askPrice, "ask price")
    if bid >= ask:
        raise InvalidQuoteError(
            "Invalid ticker response: bid price must be less than ask price"
        )
    return Quote(
        symbol=payload.symbol,
        bid_price=payload.bidPrice,
        ask_price=payload.askPrice,
        bid_qty=payload.bidQty,
        ask_qty=payload.askQty,
        received_at=utcnow(),
    )

"""Prometheus collectors for the price pipeline, the worker and the HTTP layer.

All collectors live in the default registry and are exposed by GET /metrics.
"""
from datetime import datetime
from decimal import Decimal

from prometheus_client import Counter, Gauge, Histogram

from price_ticker.schemas import WorkerStatus

PRICE_UPDATES = Counter(
    "price_ticker_price_updates",
    "Fetch/compute/store cycles by outcome",
    ["status"],
)
CURRENT_PRICE = Gauge(
    "price_ticker_current_price",
    "Latest stored commission-adjusted price",
    ["symbol", "side"],
)
LAST_PRICE_UPDATE = Gauge(
    "price_ticker_last_price_update_timestamp_seconds",
    "Unix time of the last stored price",
)
WORKER_RUNNING = Gauge(
    "price_ticker_worker_running",
    "1 while the polling worker is running, 0 when stopped or halted",
)
WORKER_CONSECUTIVE_ERRORS = Gauge(
    "price_ticker_worker_consecutive_errors",
    "Consecutive failed cycles of the polling worker",
)
FEED_REQUESTS = Counter(
    "price_ticker_feed_requests",
    "Book ticker requests to Binance by outcome",
    ["status"],
)
FEED_REQUEST_DURATION = Histogram(
    "price_ticker_feed_request_duration_seconds",
    "Duration of book ticker requests to Binance",
    buckets=(0.1, 0.5, 1, 2, 5, 10),
)
HTTP_REQUESTS = Counter(
    "price_ticker_http_requests",
    "HTTP requests served",
    ["method", "route", "status_code"],
)
HTTP_REQUEST_DURATION = Histogram(
    "price_ticker_http_request_duration_seconds",
    "Duration of HTTP requests",
    ["method", "route"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5),
)


def record_price(
    symbol: str, bid: Decimal, ask: Decimal, mid: Decimal, timestamp: datetime
) -> None:
    """Publish a freshly stored price."""
    CURRENT_PRICE.labels(symbol=symbol, side="bid").set(float(bid))
    CURRENT_PRICE.labels(symbol=symbol, side="ask").set(float(ask))
    CURRENT_PRICE.labels(symbol=symbol, side="mid").set(float(mid))
    LAST_PRICE_UPDATE.set(timestamp.timestamp())


def record_worker_status(status: WorkerStatus) -> None:
    WORKER_RUNNING.set(1 if status.is_running else 0)
    WORKER_CONSECUTIVE_ERRORS.set(status.consecutive_errors)

"""Main module for the price ticker service."""
import logging
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from price_ticker import __version__, metrics
from price_ticker.config import Settings, configure_logging
from price_ticker.container import Container, init_container
from price_ticker.db import init_db
from price_ticker.routers import (health_router, metrics_router, price_router,
                                  status_router)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create tables and start the polling worker; stop and close on shutdown."""
    container: Container = fastapi_app.state.container
    settings = container.settings()
    configure_logging(settings.log_level)
    init_db(container.engine())

    fastapi_app.state.started_at = time.monotonic()
    worker = container.worker()
    worker.start()
    logger.info(
        "Price ticker started for %s (commission %s)", settings.symbol, settings.commission
    )

    yield

    worker.stop()
    await worker.wait()
    try:
        await container.market_client().close()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Error closing market data client: %s", exc)
    container.engine().dispose()
    logger.info("Price ticker shut down")


async def record_http_metrics(request: Request, call_next):
    """Count and time every request by method, route template and status."""
    started = time.perf_counter()
    response = await call_next(request)
    route = request.scope.get("route")
    path = route.path if route is not None else "unmatched"
    metrics.HTTP_REQUESTS.labels(
        method=request.method, route=path, status_code=str(response.status_code)
    ).inc()
    metrics.HTTP_REQUEST_DURATION.labels(method=request.method, route=path).observe(
        time.perf_counter() - started
    )
    return response


def create_app(container: Container | None = None) -> FastAPI:
    """Build the FastAPI app around a wired container."""
    fastapi_app = FastAPI(
        title="Price Ticker",
        description="Commission-adjusted best bid/ask prices for a single symbol",
        version=__version__,
        lifespan=lifespan,
    )
    fastapi_app.state.container = container or init_container()
    # Reset by the lifespan when the service actually starts.
    fastapi_app.state.started_at = time.monotonic()
    fastapi_app.middleware("http")(record_http_metrics)
    fastapi_app.include_router(price_router)
    fastapi_app.include_router(status_router)
    fastapi_app.include_router(health_router)
    fastapi_app.include_router(metrics_router)
    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Entry point of the `price-ticker` script."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run("price_ticker.main:app", host=settings.host, port=settings.port)

"""Health check: database and price feed connectivity."""
import asyncio

from dependency_injector.wiring import inject
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from price_ticker.container import PriceServiceDep, PriceStoreDep

router = APIRouter(tags=["health"])


@router.get("/health")
@inject
async def health(service: PriceServiceDep, store: PriceStoreDep) -> JSONResponse:
    """Return 200 when both the database and the feed answer, 503 otherwise."""
    database_ok, feed_ok = await asyncio.gather(
        asyncio.to_thread(store.ping),
        service.test_connectivity(),
    )
    healthy = database_ok and feed_ok
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "ok" if healthy else "degraded",
            "database": "up" if database_ok else "down",
            "feed": "up" if feed_ok else "down",
        },
    )

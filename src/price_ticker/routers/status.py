"""Service and worker status routes."""
import time

from dependency_injector.wiring import inject
from fastapi import APIRouter, Request

from price_ticker import __version__
from price_ticker.container import PriceServiceDep, SettingsDep, WorkerDep
from price_ticker.schemas import WorkerStatus
from price_ticker.utils import utcnow

router = APIRouter(prefix="/api/v1/status", tags=["status"])


@router.get("")
@inject
async def get_status(
    request: Request, worker: WorkerDep, service: PriceServiceDep, settings: SettingsDep
) -> dict:
    """Service info, worker status and the active configuration.

    Uptime counts from the app lifespan start.
    """
    return {
        "service": "price-ticker",
        "version": __version__,
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
        "timestamp": utcnow().isoformat(),
        "worker": worker.get_status().model_dump(mode="json"),
        "configuration": {
            "symbol": service.symbol,
            "update_interval_ms": settings.update_interval_ms,
            "commission": float(service.commission),
        },
    }


@router.post("/worker/restart", response_model=WorkerStatus)
@inject
async def restart_worker(worker: WorkerDep) -> WorkerStatus:
    """Restart the polling worker (e.g. after it halted on repeated errors)."""
    await worker.restart()
    return worker.get_status()

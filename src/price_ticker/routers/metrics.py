"""Prometheus scrape endpoint."""
from dependency_injector.wiring import inject
from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from price_ticker import metrics
from price_ticker.container import WorkerDep

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
@inject
async def get_metrics(worker: WorkerDep) -> Response:
    """Price, worker, feed and HTTP metrics in the Prometheus text format."""
    metrics.record_worker_status(worker.get_status())
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

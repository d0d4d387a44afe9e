"""API routers.

Includes routes for:
- /api/v1/price - latest price, history, refresh, commission, retention cleanup
- /api/v1/status - service info and polling worker control
- /health - database and feed connectivity
- /metrics - Prometheus metrics
"""
from price_ticker.routers.health import router as health_router
from price_ticker.routers.metrics import router as metrics_router
from price_ticker.routers.price import router as price_router
from price_ticker.routers.status import router as status_router

__all__ = [
    "health_router",
    "metrics_router",
    "price_router",
    "status_router",
]

"""Runtime settings and logging setup.

Settings are read from environment variables once at startup and validated
with pydantic; an invalid value stops the process with a ValidationError.
"""
import logging
import os
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from price_ticker.db.sessions import DEFAULT_DATABASE_URL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class Settings(BaseModel):
    """Validated service configuration."""

    database_url: str = DEFAULT_DATABASE_URL
    sql_echo: bool = False
    binance_base_url: str = "https://api.binance.com"
    symbol: str = Field(default="BTCUSDT", min_length=3, max_length=20)
    update_interval_ms: int = Field(default=10_000, ge=1_000)
    commission: Decimal = Field(default=Decimal("0.0001"), ge=0, le=1)
    max_retries: int = Field(default=3, ge=1)
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    retention_days: int = Field(default=30, ge=1)
    log_level: Literal["error", "warning", "info", "debug"] = "info"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        env = {
            "database_url": os.getenv("DATABASE_URL"),
            "sql_echo": os.getenv("SQL_ECHO", "0") == "1",
            "binance_base_url": os.getenv("BINANCE_BASE_URL"),
            "symbol": os.getenv("BINANCE_SYMBOL"),
            "update_interval_ms": os.getenv("UPDATE_INTERVAL"),
            "commission": os.getenv("SERVICE_COMMISSION"),
            "max_retries": os.getenv("WORKER_MAX_RETRIES"),
            "request_timeout_seconds": os.getenv("REQUEST_TIMEOUT"),
            "retention_days": os.getenv("RETENTION_DAYS"),
            "log_level": (os.getenv("LOG_LEVEL") or "").lower() or None,
            "host": os.getenv("HOST"),
            "port": os.getenv("PORT"),
        }
        return cls.model_validate({k: v for k, v in env.items() if v is not None})


def configure_logging(level: str = "info") -> None:
    """Install the root handler once and quiet chatty HTTP client loggers."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

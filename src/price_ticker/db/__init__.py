"""Database package: models, session management and the price store."""
from price_ticker.db.models import (PriceRecord, PriceRecordCreate,
                                    PriceRecordRead, validate_new_record)
from price_ticker.db.sessions import create_db_engine, get_session, init_db
from price_ticker.db.store import PriceStore

__all__ = [
    "PriceRecord",
    "PriceRecordCreate",
    "PriceRecordRead",
    "PriceStore",
    "create_db_engine",
    "get_session",
    "init_db",
    "validate_new_record",
]

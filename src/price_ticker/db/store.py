"""Price record persistence for one symbol at a time, ordered by time."""
import logging
from datetime import datetime

from sqlalchemy import delete, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from price_ticker.db.models import (PriceRecord, PriceRecordCreate,
                                    PriceRecordRead, validate_new_record)
from price_ticker.db.sessions import get_session
from price_ticker.utils import utcnow

logger = logging.getLogger(__name__)


class PriceStore:
    """Inserts and queries ``prices`` rows.

    Every operation runs in its own session and transaction, so a reader never
    sees a row that is only partly written. Methods are blocking; async
    callers run them in a worker thread.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def insert(self, record: PriceRecordCreate) -> PriceRecordRead:
        """Validate and persist a new record; assigns id, created_at and updated_at."""
        validate_new_record(record)
        now = utcnow()
        row = PriceRecord.model_validate(record, update={"created_at": now, "updated_at": now})
        with get_session(self._engine) as session:
            session.add(row)
            session.flush()
            session.refresh(row)
            snapshot = PriceRecordRead.model_validate(row)
        logger.debug("Inserted price record %s for %s", snapshot.id, snapshot.symbol)
        return snapshot

    def latest(self, symbol: str) -> PriceRecordRead | None:
        """Most recent record by timestamp (ties broken by id), or None."""
        statement = (
            select(PriceRecord)
            .where(PriceRecord.symbol == symbol)
            .order_by(PriceRecord.timestamp.desc(), PriceRecord.id.desc())
            .limit(1)
        )
        with get_session(self._engine) as session:
            row = session.exec(statement).first()
            return PriceRecordRead.model_validate(row) if row is not None else None

    def history(self, symbol: str, limit: int) -> list[PriceRecordRead]:
        """Newest-first records for symbol, at most ``limit`` of them."""
        statement = (
            select(PriceRecord)
            .where(PriceRecord.symbol == symbol)
            .order_by(PriceRecord.timestamp.desc(), PriceRecord.id.desc())
            .limit(limit)
        )
        with get_session(self._engine) as session:
            return [PriceRecordRead.model_validate(row) for row in session.exec(statement)]

    def delete_older_than(self, symbol: str, cutoff: datetime) -> int:
        """Bulk delete records with timestamp < cutoff. Returns the count removed."""
        statement = delete(PriceRecord).where(
            PriceRecord.symbol == symbol,
            PriceRecord.timestamp < cutoff,
        )
        with get_session(self._engine) as session:
            result = session.execute(statement)
            return result.rowcount or 0

    def ping(self) -> bool:
        """Connectivity check for the health route."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error("Database ping failed: %s", exc)
            return False
        return True

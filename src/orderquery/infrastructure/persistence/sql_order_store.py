"""SQLAlchemy-backed implementation of the OrderStore port.

One ``SqlOrderStore`` wraps one ``Session`` for the duration of a single
request; ``open_store`` guarantees the session is closed however the
request ends.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import structlog
from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from orderquery.domain.exceptions import StoreUnavailable, ValidationError
from orderquery.domain.repository.order_store import OrderStore, Row
from orderquery.infrastructure.persistence.schema import lines_for_orders

logger = structlog.get_logger(__name__)

# Small batches degrade toward one query per order; large ones run into
# the driver's bound-parameter limits.
DEFAULT_BATCH_SIZE = 100


class SqlOrderStore(OrderStore):

    def __init__(self, session: Session, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size <= 0:
            raise ValidationError("Batch size must be positive")
        self._session = session
        self._batch_size = batch_size
        self._round_trips = 0
        self._batch_loaders: dict[str, Callable[[Sequence[int]], Select]] = {
            "lines": lines_for_orders,
        }

    # --- OrderStore interface -------------------------------------------------

    @property
    def round_trips(self) -> int:
        return self._round_trips

    def fetch(self, statement: Any) -> list[Row]:
        self._round_trips += 1
        logger.debug("store.fetch", round_trip=self._round_trips)
        try:
            return list(self._session.execute(statement).mappings().all())
        except SQLAlchemyError as exc:
            logger.error("store.fetch_failed", round_trip=self._round_trips, error=str(exc))
            raise StoreUnavailable(f"Store rejected the query: {exc}") from exc

    def load_batch(
        self, association: str, parent_ids: Sequence[int]
    ) -> dict[int, list[Row]]:
        loader = self._batch_loaders.get(association)
        if loader is None:
            raise ValidationError(f"Unknown association '{association}'")

        grouped: dict[int, list[Row]] = {parent_id: [] for parent_id in parent_ids}
        ids = list(grouped)
        for start in range(0, len(ids), self._batch_size):
            chunk = ids[start:start + self._batch_size]
            for row in self.fetch(loader(chunk)):
                grouped[row["line_order_id"]].append(row)
        return grouped


@contextmanager
def open_store(
    session_factory: sessionmaker[Session],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> Iterator[SqlOrderStore]:
    """Yield a store bound to a fresh session inside one transaction.

    Failures to open, commit or close the transaction surface as
    ``StoreUnavailable`` just like failed queries.
    """
    try:
        with session_factory() as session, session.begin():
            yield SqlOrderStore(session, batch_size=batch_size)
    except SQLAlchemyError as exc:
        logger.error("store.transaction_failed", error=str(exc))
        raise StoreUnavailable(f"Store transaction failed: {exc}") from exc

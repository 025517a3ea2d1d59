"""Application service: List Orders use cases (queries).

Orchestrates one read: reject unsupported pagination, build the predicate,
open a request-scoped store, run the chosen fetch strategy and assemble
the rows into views.  The store is released on every exit path and
nothing is retried.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager

import structlog

from orderquery.application.assembler import ResultAssembler
from orderquery.application.dto import OrderView, SearchCriteria, SimpleOrderView
from orderquery.application.fetch_strategy import (
    CriteriaBuilder,
    FetchMode,
    FetchStrategy,
    SimpleOrderQuery,
)
from orderquery.application.pagination import ensure_paginable
from orderquery.domain.exceptions import ValidationError
from orderquery.domain.model.value_objects import Page
from orderquery.domain.repository.order_store import OrderStore

logger = structlog.get_logger(__name__)

StoreScope = Callable[[], AbstractContextManager[OrderStore]]


class OrderQueryService:

    def __init__(
        self,
        store_scope: StoreScope,
        criteria_builder: CriteriaBuilder,
        strategies: Mapping[FetchMode, FetchStrategy],
        assembler: ResultAssembler | None = None,
        simple_query: SimpleOrderQuery | None = None,
    ) -> None:
        self._store_scope = store_scope
        self._criteria_builder = criteria_builder
        self._strategies = dict(strategies)
        self._assembler = assembler or ResultAssembler()
        self._simple_query = simple_query

    def list_orders(
        self,
        criteria: SearchCriteria | None = None,
        mode: FetchMode | str = FetchMode.BATCH_FETCH,
        page: Page | None = None,
    ) -> list[OrderView]:
        """Return orders matching *criteria*, loaded with the *mode* strategy.

        *mode* may also be given by its value, e.g. ``"flat"``.  Raises
        PaginationUnsupported if *page* is given together with a
        row-duplicating mode, before the store is touched.
        """
        mode = _fetch_mode(mode)
        strategy = self._strategy_for(mode)
        ensure_paginable(mode, page)
        predicate = self._criteria_builder.build(criteria or SearchCriteria())

        with self._store_scope() as store:
            rows = strategy.execute(store, predicate, page)
            views = self._assembler.assemble(strategy.shape, rows)
            round_trips = store.round_trips

        logger.info(
            "orders.listed",
            strategy=mode.value,
            offset=page.offset if page else None,
            limit=page.limit if page else None,
            orders=len(views),
            round_trips=round_trips,
        )
        return views

    def list_simple_orders(
        self,
        criteria: SearchCriteria | None = None,
        page: Page | None = None,
    ) -> list[SimpleOrderView]:
        """Return matching orders with customer and delivery but no items."""
        if self._simple_query is None:
            raise ValidationError("No simple order query registered")
        predicate = self._criteria_builder.build(criteria or SearchCriteria())

        with self._store_scope() as store:
            views = self._simple_query.execute(store, predicate, page)
            round_trips = store.round_trips

        logger.info(
            "orders.listed_simple",
            offset=page.offset if page else None,
            limit=page.limit if page else None,
            orders=len(views),
            round_trips=round_trips,
        )
        return views

    def _strategy_for(self, mode: FetchMode) -> FetchStrategy:
        try:
            return self._strategies[mode]
        except KeyError:
            raise ValidationError(f"No fetch strategy registered for '{mode.value}'") from None


def _fetch_mode(mode: FetchMode | str) -> FetchMode:
    try:
        return FetchMode(mode)
    except ValueError:
        raise ValidationError(f"Unknown fetch strategy: {mode!r}") from None

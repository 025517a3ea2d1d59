"""SQLAlchemy implementation of the CriteriaBuilder port.

The predicate ranges over ``orders JOIN customers``.  Absent filters add no
clause at all, so an empty criteria object yields a statement without a
WHERE clause.

The result cap is applied through a derived table (``root_ids``) that
queries join against, never through ``IN (... LIMIT n)``, which MySQL
rejects.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, Subquery, and_, select

from orderquery.application.dto import SearchCriteria
from orderquery.application.fetch_strategy import CriteriaBuilder
from orderquery.domain.exceptions import ValidationError
from orderquery.infrastructure.persistence.schema import (
    ORDERS_WITH_CUSTOMER,
    customers,
    orders,
)

MAX_RESULTS = 1000

# The projection's item lookup binds one parameter per returned order, so
# the cap has to stay well below the drivers' bound-parameter limits
# (32766 on SQLite, 32767 on PostgreSQL).
MAX_RESULTS_CEILING = 10_000


@dataclass(frozen=True, eq=False)
class OrderPredicate:
    """Filter clauses plus the silent cap on returned orders."""

    clauses: tuple[ColumnElement[bool], ...] = ()
    max_results: int = MAX_RESULTS

    @property
    def matches_all(self) -> bool:
        return not self.clauses

    def apply(self, statement: Select) -> Select:
        if not self.clauses:
            return statement
        return statement.where(and_(*self.clauses))

    def root_ids(self) -> Subquery:
        """Derived table of the first ``max_results`` matching order ids.

        Row-duplicating queries join against it (on its ``order_id``
        column) so the cap counts orders instead of item rows.
        """
        statement = select(orders.c.id.label("order_id")).select_from(ORDERS_WITH_CUSTOMER)
        return (
            self.apply(statement)
            .order_by(orders.c.id)
            .limit(self.max_results)
            .subquery("capped_orders")
        )


class SqlCriteriaBuilder(CriteriaBuilder):

    def __init__(self, max_results: int = MAX_RESULTS) -> None:
        if not 1 <= max_results <= MAX_RESULTS_CEILING:
            raise ValidationError(
                f"Result cap must be between 1 and {MAX_RESULTS_CEILING}, got {max_results}"
            )
        self._max_results = max_results

    def build(self, criteria: SearchCriteria) -> OrderPredicate:
        clauses: list[ColumnElement[bool]] = []

        if criteria.status is not None:
            clauses.append(orders.c.status == criteria.status)

        if criteria.name_pattern is not None:
            clauses.append(customers.c.name.contains(criteria.name_pattern, autoescape=True))

        return OrderPredicate(clauses=tuple(clauses), max_results=self._max_results)

"""Ports for the query side: how predicates are built and how the order
aggregate's associations get populated.

Concrete implementations live in the infrastructure layer; the application
service only sees these abstractions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from orderquery.application.dto import SearchCriteria, SimpleOrderView
from orderquery.domain.model.value_objects import Page
from orderquery.domain.repository.order_store import OrderStore


class FetchMode(Enum):
    LAZY_PER_FIELD = "lazy"
    EAGER_JOIN_SINGULAR = "eager-singular"
    EAGER_JOIN_COLLECTION = "eager-collection"
    BATCH_FETCH = "batch"
    PROJECTION_DTO = "projection"
    FLAT_ROW_REGROUP = "flat"

    @property
    def duplicates_rows(self) -> bool:
        """True if the row stream holds one row per item rather than per order."""
        return self in (FetchMode.EAGER_JOIN_COLLECTION, FetchMode.FLAT_ROW_REGROUP)


class RowShape(Enum):
    """What a strategy hands to the assembler."""

    ENTITY = "entity"          # list[Order]
    PROJECTION = "projection"  # ProjectionRows
    FLAT = "flat"              # list[OrderFlatRow]


class CriteriaBuilder(ABC):

    @abstractmethod
    def build(self, criteria: SearchCriteria) -> Any:
        """Turn search criteria into a predicate the strategies understand."""


class FetchStrategy(ABC):
    """One way of loading orders together with their associations.

    Strategies differ in round trips and row duplication, never in the
    views that come out of the assembler.
    """

    mode: FetchMode
    shape: RowShape

    @property
    def duplicates_rows(self) -> bool:
        return self.mode.duplicates_rows

    @abstractmethod
    def execute(self, store: OrderStore, predicate: Any, page: Page | None) -> Any:
        """Run this strategy's queries and return rows of ``self.shape``."""


class SimpleOrderQuery(ABC):
    """Loads orders with customer and delivery only, never their items."""

    @abstractmethod
    def execute(
        self, store: OrderStore, predicate: Any, page: Page | None
    ) -> list[SimpleOrderView]:
        """Return one view per matching order, ordered by id."""

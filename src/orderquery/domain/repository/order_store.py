"""Abstract port to the relational store.

Defined in the domain layer so nothing above it depends on a particular
database binding.  A store instance is scoped to a single unit of work:
callers obtain one per request and never share it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

Row = Mapping[str, Any]


class OrderStore(ABC):

    @property
    @abstractmethod
    def round_trips(self) -> int:
        """Number of queries issued through this store so far."""

    @abstractmethod
    def fetch(self, statement: Any) -> list[Row]:
        """Execute one query and return its rows in store order.

        Raises StoreUnavailable if the store rejects the request.
        """

    @abstractmethod
    def load_batch(
        self, association: str, parent_ids: Sequence[int]
    ) -> dict[int, list[Row]]:
        """Load an association for many parents using grouped ``IN`` lookups.

        Returns child rows keyed by parent id; every requested parent has
        an entry, possibly empty.  Identifiers beyond one batch are split
        into several lookups.
        """

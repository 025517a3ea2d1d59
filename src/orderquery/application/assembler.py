"""Shapes strategy output into nested, immutable ``OrderView``s.

Three input shapes exist (see ``RowShape``):

- entity rows: fully hydrated ``Order`` records, one per order;
- projection rows: item-less root views plus items keyed by order id;
- flat rows: one row per item with every root field repeated, which is
  regrouped in a single linear pass.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

import structlog

from orderquery.application.dto import (
    OrderFlatRow,
    OrderItemView,
    OrderView,
    ProjectionRows,
)
from orderquery.application.fetch_strategy import RowShape
from orderquery.domain.exceptions import AssemblyInvariantViolation
from orderquery.domain.model.order import Order, OrderStatus
from orderquery.domain.model.value_objects import Address

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RootKey:
    """Identity of an order within a flat row stream.

    Includes the scalar root fields, not just the id, so that two
    dissimilar records sharing an id are never merged silently.
    """

    order_id: int
    customer_name: str
    order_date: datetime
    status: OrderStatus
    address: Address

    @staticmethod
    def of(row: OrderFlatRow) -> RootKey:
        return RootKey(
            order_id=row.order_id,
            customer_name=row.customer_name,
            order_date=row.order_date,
            status=row.status,
            address=row.address,
        )


class ResultAssembler:

    def assemble(self, shape: RowShape, rows: Any) -> list[OrderView]:
        if shape is RowShape.ENTITY:
            return self.from_entities(rows)
        if shape is RowShape.PROJECTION:
            return self.from_projection(rows)
        if shape is RowShape.FLAT:
            return self.regroup(rows)
        raise ValueError(f"Unsupported row shape: {shape!r}")

    # --- Entity rows ----------------------------------------------------------

    def from_entities(self, orders: Iterable[Order]) -> list[OrderView]:
        return [self._entity_to_view(order) for order in orders]

    @staticmethod
    def _entity_to_view(order: Order) -> OrderView:
        return OrderView(
            order_id=order.id,
            customer_name=order.customer.name,
            order_date=order.order_date,
            status=order.status,
            address=order.delivery.address,
            items=tuple(
                OrderItemView(
                    item_name=line.product.name,
                    unit_price=line.order_price,
                    quantity=line.count.value,
                )
                for line in order.lines
            ),
        )

    # --- Projection rows ------------------------------------------------------

    def from_projection(self, rows: ProjectionRows) -> list[OrderView]:
        return [
            replace(root, items=tuple(rows.items_by_order.get(root.order_id, ())))
            for root in rows.roots
        ]

    # --- Flat rows ------------------------------------------------------------

    def regroup(self, rows: Iterable[OrderFlatRow]) -> list[OrderView]:
        """Rebuild order -> items nesting from a flattened join.

        Orders come out in the order their id was first seen, items in
        arrival order.  A row without item fields (outer join on an order
        with no lines) registers the order with no items.
        """
        groups: dict[RootKey, list[OrderItemView]] = {}
        key_by_id: dict[int, RootKey] = {}

        for row in rows:
            key = RootKey.of(row)
            known = key_by_id.setdefault(row.order_id, key)
            if known != key:
                logger.error("assembly.root_mismatch", order_id=row.order_id)
                raise AssemblyInvariantViolation(
                    f"Rows for order #{row.order_id} disagree on root fields: "
                    f"{known} vs {key}"
                )

            items = groups.setdefault(key, [])
            if row.has_item:
                items.append(
                    OrderItemView(
                        item_name=row.item_name,  # type: ignore[arg-type]
                        unit_price=row.unit_price,  # type: ignore[arg-type]
                        quantity=row.quantity,  # type: ignore[arg-type]
                    )
                )

        return [
            OrderView(
                order_id=key.order_id,
                customer_name=key.customer_name,
                order_date=key.order_date,
                status=key.status,
                address=key.address,
                items=tuple(items),
            )
            for key, items in groups.items()
        ]

"""Data Transfer Objects: plain containers that cross layer boundaries.

Views are read projections: immutable, built once per request, and free of
any reference back to store records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from orderquery.domain.exceptions import InvalidCriteria, ValidationError
from orderquery.domain.model.order import OrderStatus
from orderquery.domain.model.value_objects import Address


@dataclass(frozen=True)
class SearchCriteria:
    """Input: optional filters, combined with AND when both are present."""

    status: OrderStatus | None = None
    customer_name: str | None = None

    def __post_init__(self) -> None:
        if self.status is not None and not isinstance(self.status, OrderStatus):
            try:
                status = OrderStatus(str(self.status).strip().upper())
            except ValueError as exc:
                raise InvalidCriteria(f"Unknown order status: {self.status!r}") from exc
            object.__setattr__(self, "status", status)
        if self.customer_name is not None and not isinstance(self.customer_name, str):
            raise InvalidCriteria(
                f"Customer name filter must be a string, "
                f"got {type(self.customer_name).__name__}"
            )

    @property
    def name_pattern(self) -> str | None:
        """The name filter, or None when it is absent or blank."""
        if self.customer_name is None or not self.customer_name.strip():
            return None
        return self.customer_name


@dataclass(frozen=True)
class OrderItemView:
    """Output: one line item inside an order view."""

    item_name: str
    unit_price: int
    quantity: int

    def __post_init__(self) -> None:
        if self.unit_price < 0:
            raise ValidationError(f"Unit price cannot be negative, got {self.unit_price}")
        if self.quantity <= 0:
            raise ValidationError("Quantity must be positive")

    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderView:
    """Output: an order with its customer, delivery address and items."""

    order_id: int
    customer_name: str
    order_date: datetime
    status: OrderStatus
    address: Address
    items: tuple[OrderItemView, ...] = ()

    @property
    def total_price(self) -> int:
        return sum(item.line_total for item in self.items)


@dataclass(frozen=True)
class OrderFlatRow:
    """One row of a root-plus-item join; item fields are None for an order
    without lines (outer join)."""

    order_id: int
    customer_name: str
    order_date: datetime
    status: OrderStatus
    address: Address
    item_name: str | None = None
    unit_price: int | None = None
    quantity: int | None = None

    @property
    def has_item(self) -> bool:
        return self.item_name is not None


@dataclass(frozen=True)
class ProjectionRows:
    """Two-level projection result: item-less root views plus items keyed
    by order id."""

    roots: list[OrderView]
    items_by_order: dict[int, list[OrderItemView]] = field(default_factory=dict)


@dataclass(frozen=True)
class SimpleOrderView:
    """Output: an order's root fields only, without items."""

    order_id: int
    customer_name: str
    order_date: datetime
    status: OrderStatus
    address: Address

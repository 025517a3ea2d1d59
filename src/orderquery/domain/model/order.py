"""Order aggregate as loaded from the store.

These records are hydrated completely by a fetch strategy before anyone
reads them.  There is no lazy loading: a field that was not fetched is
simply not there.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from orderquery.domain.model.customer import Customer
from orderquery.domain.model.product import Product
from orderquery.domain.model.value_objects import Address, Quantity


class OrderStatus(Enum):
    PLACED = "PLACED"
    CANCELED = "CANCELED"


class DeliveryStatus(Enum):
    READY = "READY"
    COMP = "COMP"


@dataclass
class Delivery:
    id: int
    address: Address
    status: DeliveryStatus = DeliveryStatus.READY


@dataclass
class OrderLine:
    """A product ordered at a fixed price.

    ``order_price`` is the unit price captured when the order was placed,
    independent of the product's current price.
    """

    id: int
    product: Product
    order_price: int
    count: Quantity


@dataclass
class Order:
    """Aggregate root: an order with its customer, delivery and lines."""

    id: int
    customer: Customer
    delivery: Delivery
    order_date: datetime
    status: OrderStatus
    lines: list[OrderLine] = field(default_factory=list)

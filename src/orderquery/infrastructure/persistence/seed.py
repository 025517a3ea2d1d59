"""Schema creation and sample data for local use and tests.

This is loading tooling, not a business write path: no validation beyond
what the schema itself enforces.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

import structlog
from sqlalchemy import Engine, insert
from sqlalchemy.orm import Session

from orderquery.domain.model.order import DeliveryStatus, OrderStatus
from orderquery.domain.model.value_objects import Address
from orderquery.infrastructure.persistence.schema import (
    customers,
    deliveries,
    metadata,
    order_lines,
    orders,
    products,
)

logger = structlog.get_logger(__name__)


def create_schema(engine: Engine) -> None:
    metadata.create_all(engine)


class OrderSeeder:

    def __init__(self, session: Session) -> None:
        self._session = session
        self._prices: dict[int, int] = {}
        self._addresses: dict[int, Address] = {}

    def add_customer(self, name: str, address: Address) -> int:
        customer_id = self._insert(
            customers,
            name=name,
            city=address.city,
            street=address.street,
            zipcode=address.zipcode,
        )
        self._addresses[customer_id] = address
        return customer_id

    def add_product(self, name: str, price: int, stock_quantity: int = 100) -> int:
        product_id = self._insert(
            products, name=name, price=price, stock_quantity=stock_quantity
        )
        self._prices[product_id] = price
        return product_id

    def place_order(
        self,
        customer_id: int,
        lines: Sequence[tuple[int, int]],
        *,
        status: OrderStatus = OrderStatus.PLACED,
        order_date: datetime | None = None,
        address: Address | None = None,
    ) -> int:
        """Insert an order shipping to the customer's address by default.

        *lines* holds ``(product_id, count)`` pairs; each line captures the
        product's price at the time of seeding.
        """
        address = address or self._addresses[customer_id]
        delivery_id = self._insert(
            deliveries,
            city=address.city,
            street=address.street,
            zipcode=address.zipcode,
            status=DeliveryStatus.READY,
        )
        order_id = self._insert(
            orders,
            customer_id=customer_id,
            delivery_id=delivery_id,
            order_date=order_date or datetime.now(),
            status=status,
        )
        for product_id, count in lines:
            self._insert(
                order_lines,
                order_id=order_id,
                product_id=product_id,
                order_price=self._prices[product_id],
                count=count,
            )
        return order_id

    def _insert(self, table, **values) -> int:
        result = self._session.execute(insert(table).values(**values))
        return result.inserted_primary_key[0]


def seed_sample_data(engine: Engine) -> None:
    """Two customers, four books, two orders."""
    create_schema(engine)
    with Session(engine) as session, session.begin():
        seeder = OrderSeeder(session)
        kim = seeder.add_customer("Kim", Address("Seoul", "Teheran-ro 1", "06236"))
        lee = seeder.add_customer("Lee", Address("Jinju", "Jinju-daero 2", "52725"))

        jpa1 = seeder.add_product("JPA1 BOOK", 10000)
        jpa2 = seeder.add_product("JPA2 BOOK", 20000)
        spring1 = seeder.add_product("SPRING1 BOOK", 20000, stock_quantity=200)
        spring2 = seeder.add_product("SPRING2 BOOK", 40000, stock_quantity=300)

        seeder.place_order(kim, [(jpa1, 1), (jpa2, 2)])
        seeder.place_order(lee, [(spring1, 3), (spring2, 4)])
    logger.info("sample_data.seeded", customers=2, products=4, orders=2)

"""Relational schema for the order aggregate (SQLAlchemy Core).

The column label groups below are shared by the fetch strategies and the
store's batch loaders so every query names its columns the same way.
"""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    MetaData,
    Select,
    String,
    Table,
    select,
)

from orderquery.domain.model.order import DeliveryStatus, OrderStatus

metadata = MetaData()

customers = Table(
    "customers",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("city", String(100), nullable=False),
    Column("street", String(200), nullable=False),
    Column("zipcode", String(20), nullable=False),
)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(200), nullable=False),
    Column("price", Integer, nullable=False),
    Column("stock_quantity", Integer, nullable=False, default=0),
)

deliveries = Table(
    "deliveries",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("city", String(100), nullable=False),
    Column("street", String(200), nullable=False),
    Column("zipcode", String(20), nullable=False),
    Column(
        "status",
        Enum(DeliveryStatus, native_enum=False, length=20),
        nullable=False,
        default=DeliveryStatus.READY,
    ),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("customer_id", ForeignKey("customers.id"), nullable=False),
    Column("delivery_id", ForeignKey("deliveries.id"), nullable=False),
    Column("order_date", DateTime, nullable=False),
    Column("status", Enum(OrderStatus, native_enum=False, length=20), nullable=False),
)

order_lines = Table(
    "order_lines",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("order_id", ForeignKey("orders.id"), nullable=False, index=True),
    Column("product_id", ForeignKey("products.id"), nullable=False),
    Column("order_price", Integer, nullable=False),
    Column("count", Integer, nullable=False),
)

# --- Column groups ------------------------------------------------------------

ORDER_COLUMNS = (
    orders.c.id.label("order_id"),
    orders.c.customer_id,
    orders.c.delivery_id,
    orders.c.order_date,
    orders.c.status,
)

CUSTOMER_COLUMNS = (
    customers.c.name.label("customer_name"),
    customers.c.city.label("customer_city"),
    customers.c.street.label("customer_street"),
    customers.c.zipcode.label("customer_zipcode"),
)

DELIVERY_COLUMNS = (
    deliveries.c.city.label("delivery_city"),
    deliveries.c.street.label("delivery_street"),
    deliveries.c.zipcode.label("delivery_zipcode"),
    deliveries.c.status.label("delivery_status"),
)

LINE_COLUMNS = (
    order_lines.c.id.label("line_id"),
    order_lines.c.order_id.label("line_order_id"),
    order_lines.c.order_price,
    order_lines.c.count,
)

PRODUCT_COLUMNS = (
    products.c.id.label("product_id"),
    products.c.name.label("product_name"),
    products.c.price.label("product_price"),
    products.c.stock_quantity,
)

ORDERS_WITH_CUSTOMER = orders.join(customers, orders.c.customer_id == customers.c.id)


def lines_for_orders(order_ids: Sequence[int]) -> Select:
    """Lines (with their product) of the given orders, in line order."""
    return (
        select(*LINE_COLUMNS, *PRODUCT_COLUMNS)
        .select_from(order_lines.join(products, order_lines.c.product_id == products.c.id))
        .where(order_lines.c.order_id.in_(list(order_ids)))
        .order_by(order_lines.c.id)
    )

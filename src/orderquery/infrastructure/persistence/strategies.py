"""SQLAlchemy fetch strategies for the order aggregate.

Each strategy decides up front how customer, delivery and lines are
populated.  Round trips per call (n = matching orders, i = their lines):

==================  =====================  ===============  ============
strategy            round trips            duplicated rows  paginable
==================  =====================  ===============  ============
LazyPerField        1 + 3n + i             no               yes
EagerJoinSingular   1 + n                  no               yes
EagerJoinCollection 1                      yes              no
BatchFetch          1 + ceil(n / batch)    no               yes
ProjectionDto       2 (1 if n == 0)        no               yes
FlatRowRegroup      1                      yes              no
==================  =====================  ===============  ============

Row-duplicating strategies use an outer join on lines so that orders
without lines still produce one row.

``SimpleOrderJoinQuery`` lists orders without their items; it is the
singular join on its own and takes a single round trip, paged or not.
"""

from __future__ import annotations

from sqlalchemy import Select, select

from orderquery.application.dto import (
    OrderFlatRow,
    OrderItemView,
    OrderView,
    ProjectionRows,
    SimpleOrderView,
)
from orderquery.application.fetch_strategy import (
    FetchMode,
    FetchStrategy,
    RowShape,
    SimpleOrderQuery,
)
from orderquery.application.pagination import paginate
from orderquery.domain.exceptions import AssemblyInvariantViolation
from orderquery.domain.model.customer import Customer
from orderquery.domain.model.order import Delivery, Order, OrderLine
from orderquery.domain.model.product import Product
from orderquery.domain.model.value_objects import Address, Page, Quantity
from orderquery.domain.repository.order_store import OrderStore, Row
from orderquery.infrastructure.persistence.criteria import OrderPredicate
from orderquery.infrastructure.persistence.schema import (
    CUSTOMER_COLUMNS,
    DELIVERY_COLUMNS,
    LINE_COLUMNS,
    ORDER_COLUMNS,
    ORDERS_WITH_CUSTOMER,
    PRODUCT_COLUMNS,
    customers,
    deliveries,
    lines_for_orders,
    order_lines,
    orders,
    products,
)

ORDERS_WITH_CUSTOMER_DELIVERY = ORDERS_WITH_CUSTOMER.join(
    deliveries, orders.c.delivery_id == deliveries.c.id
)


# --- Row hydration ------------------------------------------------------------

def _customer(row: Row) -> Customer:
    return Customer(
        id=row["customer_id"],
        name=row["customer_name"],
        address=Address(row["customer_city"], row["customer_street"], row["customer_zipcode"]),
    )


def _delivery(row: Row) -> Delivery:
    return Delivery(
        id=row["delivery_id"],
        address=Address(row["delivery_city"], row["delivery_street"], row["delivery_zipcode"]),
        status=row["delivery_status"],
    )


def _product(row: Row) -> Product:
    return Product(
        id=row["product_id"],
        name=row["product_name"],
        price=row["product_price"],
        stock_quantity=row["stock_quantity"],
    )


def _line(row: Row) -> OrderLine:
    return OrderLine(
        id=row["line_id"],
        product=_product(row),
        order_price=row["order_price"],
        count=Quantity(row["count"]),
    )


def _order(row: Row, lines: list[OrderLine] | None = None) -> Order:
    """Hydrate an order from a row carrying order, customer and delivery columns."""
    return Order(
        id=row["order_id"],
        customer=_customer(row),
        delivery=_delivery(row),
        order_date=row["order_date"],
        status=row["status"],
        lines=list(lines or []),
    )


def _address(row: Row) -> Address:
    return Address(row["delivery_city"], row["delivery_street"], row["delivery_zipcode"])


def _orders_with_singulars(predicate: OrderPredicate, page: Page | None) -> Select:
    """Orders joined with customer and delivery: one row per order."""
    statement = select(*ORDER_COLUMNS, *CUSTOMER_COLUMNS, *DELIVERY_COLUMNS).select_from(
        ORDERS_WITH_CUSTOMER_DELIVERY
    )
    statement = predicate.apply(statement).order_by(orders.c.id)
    return paginate(statement, page, predicate.max_results)


def _capped_orders_with_lines(predicate: OrderPredicate):
    """Capped matching orders outer-joined with their lines and products."""
    capped = predicate.root_ids()
    return (
        ORDERS_WITH_CUSTOMER_DELIVERY
        .join(capped, capped.c.order_id == orders.c.id)
        .outerjoin(order_lines, order_lines.c.order_id == orders.c.id)
        .outerjoin(products, order_lines.c.product_id == products.c.id)
    )


# --- Strategies ---------------------------------------------------------------

class LazyPerFieldStrategy(FetchStrategy):
    """Load orders, then each association with its own query.

    This is the N+1 baseline every other strategy must agree with.
    """

    mode = FetchMode.LAZY_PER_FIELD
    shape = RowShape.ENTITY

    def execute(
        self, store: OrderStore, predicate: OrderPredicate, page: Page | None
    ) -> list[Order]:
        roots_stmt = predicate.apply(
            select(*ORDER_COLUMNS).select_from(ORDERS_WITH_CUSTOMER)
        ).order_by(orders.c.id)
        roots = store.fetch(paginate(roots_stmt, page, predicate.max_results))

        result: list[Order] = []
        for root in roots:
            (customer_row,) = store.fetch(
                select(customers.c.id.label("customer_id"), *CUSTOMER_COLUMNS)
                .where(customers.c.id == root["customer_id"])
            )
            (delivery_row,) = store.fetch(
                select(deliveries.c.id.label("delivery_id"), *DELIVERY_COLUMNS)
                .where(deliveries.c.id == root["delivery_id"])
            )
            line_rows = store.fetch(
                select(*LINE_COLUMNS, order_lines.c.product_id)
                .where(order_lines.c.order_id == root["order_id"])
                .order_by(order_lines.c.id)
            )

            lines: list[OrderLine] = []
            for line_row in line_rows:
                (product_row,) = store.fetch(
                    select(*PRODUCT_COLUMNS).where(products.c.id == line_row["product_id"])
                )
                lines.append(_line({**line_row, **product_row}))

            result.append(_order({**root, **customer_row, **delivery_row}, lines))
        return result


class EagerJoinSingularStrategy(FetchStrategy):
    """Join customer and delivery into the root query; load lines per order."""

    mode = FetchMode.EAGER_JOIN_SINGULAR
    shape = RowShape.ENTITY

    def execute(
        self, store: OrderStore, predicate: OrderPredicate, page: Page | None
    ) -> list[Order]:
        roots = store.fetch(_orders_with_singulars(predicate, page))
        return [
            _order(row, [_line(line) for line in store.fetch(lines_for_orders([row["order_id"]]))])
            for row in roots
        ]


class EagerJoinCollectionStrategy(FetchStrategy):
    """Join everything in one query and collapse repeated orders by id."""

    mode = FetchMode.EAGER_JOIN_COLLECTION
    shape = RowShape.ENTITY

    def execute(
        self, store: OrderStore, predicate: OrderPredicate, page: Page | None
    ) -> list[Order]:
        statement = (
            select(
                *ORDER_COLUMNS,
                *CUSTOMER_COLUMNS,
                *DELIVERY_COLUMNS,
                *LINE_COLUMNS,
                *PRODUCT_COLUMNS,
            )
            .select_from(_capped_orders_with_lines(predicate))
            .order_by(orders.c.id, order_lines.c.id)
        )

        distinct: dict[int, Order] = {}
        for row in store.fetch(statement):
            order = distinct.get(row["order_id"])
            if order is None:
                order = distinct[row["order_id"]] = _order(row)
            else:
                _check_same_root(order, row)
            if row["line_id"] is not None:
                order.lines.append(_line(row))
        return list(distinct.values())


def _check_same_root(order: Order, row: Row) -> None:
    candidate = _order(row)
    if (
        candidate.customer != order.customer
        or candidate.delivery != order.delivery
        or candidate.order_date != order.order_date
        or candidate.status != order.status
    ):
        raise AssemblyInvariantViolation(
            f"Rows for order #{order.id} disagree on root fields"
        )


class BatchFetchStrategy(FetchStrategy):
    """Join singular associations; load lines with grouped ``IN`` lookups."""

    mode = FetchMode.BATCH_FETCH
    shape = RowShape.ENTITY

    def execute(
        self, store: OrderStore, predicate: OrderPredicate, page: Page | None
    ) -> list[Order]:
        roots = store.fetch(_orders_with_singulars(predicate, page))
        if not roots:
            return []
        lines_by_order = store.load_batch("lines", [row["order_id"] for row in roots])
        return [
            _order(row, [_line(line) for line in lines_by_order[row["order_id"]]])
            for row in roots
        ]


class ProjectionDtoStrategy(FetchStrategy):
    """Select only the view's scalar columns: one query per level."""

    mode = FetchMode.PROJECTION_DTO
    shape = RowShape.PROJECTION

    def execute(
        self, store: OrderStore, predicate: OrderPredicate, page: Page | None
    ) -> ProjectionRows:
        statement = select(
            orders.c.id.label("order_id"),
            customers.c.name.label("customer_name"),
            orders.c.order_date,
            orders.c.status,
            *DELIVERY_COLUMNS[:3],
        ).select_from(ORDERS_WITH_CUSTOMER_DELIVERY)
        statement = predicate.apply(statement).order_by(orders.c.id)

        roots = [
            OrderView(
                order_id=row["order_id"],
                customer_name=row["customer_name"],
                order_date=row["order_date"],
                status=row["status"],
                address=_address(row),
            )
            for row in store.fetch(paginate(statement, page, predicate.max_results))
        ]
        if not roots:
            return ProjectionRows(roots=[])

        items_by_order: dict[int, list[OrderItemView]] = {}
        item_rows = store.fetch(
            select(
                order_lines.c.order_id,
                products.c.name.label("item_name"),
                order_lines.c.order_price,
                order_lines.c.count,
            )
            .select_from(order_lines.join(products, order_lines.c.product_id == products.c.id))
            .where(order_lines.c.order_id.in_([root.order_id for root in roots]))
            .order_by(order_lines.c.id)
        )
        for row in item_rows:
            items_by_order.setdefault(row["order_id"], []).append(
                OrderItemView(
                    item_name=row["item_name"],
                    unit_price=row["order_price"],
                    quantity=row["count"],
                )
            )
        return ProjectionRows(roots=roots, items_by_order=items_by_order)


class FlatRowRegroupStrategy(FetchStrategy):
    """One flat query with root and item columns side by side."""

    mode = FetchMode.FLAT_ROW_REGROUP
    shape = RowShape.FLAT

    def execute(
        self, store: OrderStore, predicate: OrderPredicate, page: Page | None
    ) -> list[OrderFlatRow]:
        statement = (
            select(
                orders.c.id.label("order_id"),
                customers.c.name.label("customer_name"),
                orders.c.order_date,
                orders.c.status,
                *DELIVERY_COLUMNS[:3],
                products.c.name.label("item_name"),
                order_lines.c.order_price,
                order_lines.c.count,
            )
            .select_from(_capped_orders_with_lines(predicate))
            .order_by(orders.c.id, order_lines.c.id)
        )
        return [
            OrderFlatRow(
                order_id=row["order_id"],
                customer_name=row["customer_name"],
                order_date=row["order_date"],
                status=row["status"],
                address=_address(row),
                item_name=row["item_name"],
                unit_price=row["order_price"],
                quantity=row["count"],
            )
            for row in store.fetch(statement)
        ]


class SimpleOrderJoinQuery(SimpleOrderQuery):
    """Item-less listing: the singular join alone, always one round trip."""

    def execute(
        self, store: OrderStore, predicate: OrderPredicate, page: Page | None
    ) -> list[SimpleOrderView]:
        statement = select(
            orders.c.id.label("order_id"),
            customers.c.name.label("customer_name"),
            orders.c.order_date,
            orders.c.status,
            *DELIVERY_COLUMNS[:3],
        ).select_from(ORDERS_WITH_CUSTOMER_DELIVERY)
        statement = predicate.apply(statement).order_by(orders.c.id)
        return [
            SimpleOrderView(
                order_id=row["order_id"],
                customer_name=row["customer_name"],
                order_date=row["order_date"],
                status=row["status"],
                address=_address(row),
            )
            for row in store.fetch(paginate(statement, page, predicate.max_results))
        ]


def default_strategies() -> dict[FetchMode, FetchStrategy]:
    """Registry with one instance of every strategy, keyed by mode."""
    strategies: list[FetchStrategy] = [
        LazyPerFieldStrategy(),
        EagerJoinSingularStrategy(),
        EagerJoinCollectionStrategy(),
        BatchFetchStrategy(),
        ProjectionDtoStrategy(),
        FlatRowRegroupStrategy(),
    ]
    return {strategy.mode: strategy for strategy in strategies}

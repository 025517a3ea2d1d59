"""Unit tests for the result assembler, in particular flat-row regrouping."""

from datetime import datetime

import pytest

from orderquery.application.assembler import ResultAssembler
from orderquery.application.dto import (
    OrderFlatRow,
    OrderItemView,
    OrderView,
    ProjectionRows,
)
from orderquery.application.fetch_strategy import RowShape
from orderquery.domain.exceptions import AssemblyInvariantViolation
from orderquery.domain.model.customer import Customer
from orderquery.domain.model.order import Delivery, Order, OrderLine, OrderStatus
from orderquery.domain.model.product import Product
from orderquery.domain.model.value_objects import Address, Quantity

DATE = datetime(2024, 1, 1, 10, 0)
SEOUL = Address("Seoul", "Main 1", "00001")
BUSAN = Address("Busan", "Sea 2", "00002")


def _row(order_id, name, status, item, price, qty, address=SEOUL) -> OrderFlatRow:
    return OrderFlatRow(
        order_id=order_id,
        customer_name=name,
        order_date=DATE,
        status=status,
        address=address,
        item_name=item,
        unit_price=price,
        quantity=qty,
    )


class TestRegroup:

    def test_scenario_kim_and_lee(self):
        rows = [
            _row(1, "Kim", OrderStatus.PLACED, "book", 1000, 2),
            _row(1, "Kim", OrderStatus.PLACED, "pen", 500, 1),
            _row(2, "Lee", OrderStatus.PLACED, "book", 1000, 1),
        ]
        views = ResultAssembler().regroup(rows)

        assert [v.order_id for v in views] == [1, 2]
        assert views[0].customer_name == "Kim"
        assert views[0].items == (
            OrderItemView("book", 1000, 2),
            OrderItemView("pen", 500, 1),
        )
        assert views[1].customer_name == "Lee"
        assert views[1].items == (OrderItemView("book", 1000, 1),)

    def test_roots_keep_first_seen_order_and_items_keep_arrival_order(self):
        rows = [
            _row(5, "Kim", OrderStatus.PLACED, "a", 1, 1),
            _row(5, "Kim", OrderStatus.PLACED, "b", 1, 1),
            _row(3, "Lee", OrderStatus.PLACED, "c", 1, 1),
            _row(3, "Lee", OrderStatus.PLACED, "d", 1, 1),
            _row(5, "Kim", OrderStatus.PLACED, "e", 1, 1),
        ]
        views = ResultAssembler().regroup(rows)

        assert [v.order_id for v in views] == [5, 3]
        assert [i.item_name for i in views[0].items] == ["a", "b", "e"]
        assert [i.item_name for i in views[1].items] == ["c", "d"]

    def test_duplicated_root_rows_collapse_to_one_view(self):
        rows = [_row(1, "Kim", OrderStatus.PLACED, f"item{n}", 100, 1) for n in range(3)]
        views = ResultAssembler().regroup(rows)
        assert len(views) == 1
        assert len(views[0].items) == 3

    def test_identical_lines_are_kept_as_distinct_entries(self):
        rows = [
            _row(1, "Kim", OrderStatus.PLACED, "book", 1000, 1),
            _row(1, "Kim", OrderStatus.PLACED, "book", 1000, 1),
        ]
        (view,) = ResultAssembler().regroup(rows)
        assert len(view.items) == 2

    def test_row_without_item_yields_empty_order(self):
        rows = [_row(7, "Kim", OrderStatus.PLACED, None, None, None)]
        (view,) = ResultAssembler().regroup(rows)
        assert view.order_id == 7
        assert view.items == ()

    def test_empty_input(self):
        assert ResultAssembler().regroup([]) == []

    @pytest.mark.parametrize(
        "conflicting",
        [
            _row(1, "Lee", OrderStatus.PLACED, "pen", 500, 1),
            _row(1, "Kim", OrderStatus.CANCELED, "pen", 500, 1),
            _row(1, "Kim", OrderStatus.PLACED, "pen", 500, 1, address=BUSAN),
        ],
    )
    def test_conflicting_root_fields_fail_loudly(self, conflicting):
        rows = [_row(1, "Kim", OrderStatus.PLACED, "book", 1000, 2), conflicting]
        with pytest.raises(AssemblyInvariantViolation, match="order #1"):
            ResultAssembler().regroup(rows)

    def test_accepts_a_one_shot_iterator(self):
        rows = iter([_row(1, "Kim", OrderStatus.PLACED, "book", 1000, 2)])
        assert len(ResultAssembler().regroup(rows)) == 1


class TestFromEntities:

    def test_maps_delivery_address_and_order_price(self):
        product = Product(id=1, name="book", price=1200, stock_quantity=10)
        order = Order(
            id=1,
            customer=Customer(id=1, name="Kim", address=SEOUL),
            delivery=Delivery(id=1, address=BUSAN),
            order_date=DATE,
            status=OrderStatus.PLACED,
            lines=[OrderLine(id=1, product=product, order_price=1000, count=Quantity(2))],
        )
        (view,) = ResultAssembler().from_entities([order])

        assert view.address == BUSAN
        assert view.items == (OrderItemView("book", 1000, 2),)


class TestFromProjection:

    def test_attaches_items_by_order_id(self):
        roots = [
            OrderView(1, "Kim", DATE, OrderStatus.PLACED, SEOUL),
            OrderView(2, "Lee", DATE, OrderStatus.PLACED, BUSAN),
        ]
        rows = ProjectionRows(roots=roots, items_by_order={1: [OrderItemView("book", 1000, 2)]})

        views = ResultAssembler().assemble(RowShape.PROJECTION, rows)

        assert views[0].items == (OrderItemView("book", 1000, 2),)
        assert views[1].items == ()
        assert roots[0].items == ()  # originals untouched

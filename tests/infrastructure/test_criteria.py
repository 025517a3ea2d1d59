"""Tests for the SQL criteria builder."""

import pytest
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from orderquery.application.dto import SearchCriteria
from orderquery.domain.exceptions import ValidationError
from orderquery.domain.model.order import OrderStatus
from orderquery.infrastructure.persistence.criteria import (
    MAX_RESULTS_CEILING,
    SqlCriteriaBuilder,
)
from orderquery.infrastructure.persistence.schema import ORDERS_WITH_CUSTOMER, orders
from tests.sample_store import seeded_engine


def _sql(criteria: SearchCriteria) -> str:
    predicate = SqlCriteriaBuilder().build(criteria)
    statement = predicate.apply(select(orders.c.id).select_from(ORDERS_WITH_CUSTOMER))
    return str(statement.compile()).upper()


def _matching_ids(criteria: SearchCriteria, max_results: int = 1000) -> list[int]:
    engine, _ = seeded_engine()
    predicate = SqlCriteriaBuilder(max_results=max_results).build(criteria)
    with sessionmaker(engine)() as session:
        capped = predicate.root_ids()
        return list(session.execute(select(capped.c.order_id)).scalars())


class TestPredicateShape:

    def test_empty_criteria_has_no_where_clause(self):
        assert "WHERE" not in _sql(SearchCriteria())
        assert SqlCriteriaBuilder().build(SearchCriteria()).matches_all

    def test_blank_name_adds_no_clause(self):
        assert "WHERE" not in _sql(SearchCriteria(customer_name="  "))

    def test_status_only(self):
        sql = _sql(SearchCriteria(status=OrderStatus.PLACED))
        assert "ORDERS.STATUS =" in sql
        assert " AND " not in sql
        assert "LIKE" not in sql

    def test_name_only(self):
        sql = _sql(SearchCriteria(customer_name="Kim"))
        assert "CUSTOMERS.NAME LIKE" in sql
        assert "ORDERS.STATUS" not in sql

    def test_both_fields_are_conjunctive(self):
        sql = _sql(SearchCriteria(status=OrderStatus.PLACED, customer_name="Kim"))
        assert "ORDERS.STATUS =" in sql
        assert " AND " in sql
        assert "LIKE" in sql


class TestPredicateResults:

    def test_empty_criteria_matches_all(self):
        assert len(_matching_ids(SearchCriteria())) == 4

    def test_status_filter(self):
        assert len(_matching_ids(SearchCriteria(status=OrderStatus.CANCELED))) == 1

    def test_name_substring_filter(self):
        assert len(_matching_ids(SearchCriteria(customer_name="Ki"))) == 2
        assert len(_matching_ids(SearchCriteria(customer_name="ee"))) == 1

    def test_both_filters(self):
        assert len(_matching_ids(SearchCriteria(status="CANCELED", customer_name="Ki"))) == 0
        assert len(_matching_ids(SearchCriteria(status="PLACED", customer_name="Ki"))) == 2

    def test_like_wildcards_in_input_are_literal(self):
        assert _matching_ids(SearchCriteria(customer_name="%")) == []
        assert _matching_ids(SearchCriteria(customer_name="_")) == []

    def test_result_cap_is_applied_silently(self):
        assert len(_matching_ids(SearchCriteria(), max_results=3)) == 3

    def test_capped_ids_are_the_lowest(self):
        assert sorted(_matching_ids(SearchCriteria(), max_results=2)) == sorted(
            _matching_ids(SearchCriteria())
        )[:2]


class TestResultCap:

    def test_cap_is_a_derived_table_not_an_in_list(self):
        capped = SqlCriteriaBuilder(max_results=5).build(SearchCriteria()).root_ids()
        sql = str(select(orders.c.id).join(capped, capped.c.order_id == orders.c.id).compile()).upper()
        assert "JOIN (SELECT" in sql
        assert " IN (" not in sql
        assert "LIMIT" in sql

    @pytest.mark.parametrize("max_results", [0, -1, MAX_RESULTS_CEILING + 1])
    def test_out_of_range_cap_rejected(self, max_results):
        with pytest.raises(ValidationError, match="Result cap"):
            SqlCriteriaBuilder(max_results=max_results)

    def test_ceiling_itself_is_allowed(self):
        predicate = SqlCriteriaBuilder(max_results=MAX_RESULTS_CEILING).build(SearchCriteria())
        assert predicate.max_results == MAX_RESULTS_CEILING

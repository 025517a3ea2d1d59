"""Tests for configuration and wiring."""

import pydantic
import pytest

from orderquery.application.dto import SearchCriteria
from orderquery.application.fetch_strategy import FetchMode
from orderquery.infrastructure import bootstrap
from orderquery.infrastructure.persistence.criteria import MAX_RESULTS_CEILING
from orderquery.infrastructure.settings import LogFormat, Settings
from tests.sample_store import seeded_engine


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in (
            "ORDERQUERY_DATABASE_URL",
            "ORDERQUERY_BATCH_SIZE",
            "ORDERQUERY_MAX_RESULTS",
            "ORDERQUERY_LOG_FORMAT",
        ):
            monkeypatch.delenv(name, raising=False)
        config = Settings(_env_file=None)
        assert config.batch_size == 100
        assert config.max_results == 1000
        assert config.log_format == LogFormat.CONSOLE
        assert config.database_url.endswith("orders.db")

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("ORDERQUERY_BATCH_SIZE", "7")
        monkeypatch.setenv("ORDERQUERY_LOG_FORMAT", "json")
        config = Settings(_env_file=None)
        assert config.batch_size == 7
        assert config.log_format == LogFormat.JSON

    def test_batch_size_must_be_positive(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None, batch_size=0)

    def test_result_cap_has_a_ceiling(self):
        assert Settings(_env_file=None, max_results=MAX_RESULTS_CEILING).max_results == MAX_RESULTS_CEILING
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None, max_results=MAX_RESULTS_CEILING + 1)


class TestBootstrap:

    def test_service_uses_configured_cap(self):
        engine, _ = seeded_engine()
        config = Settings(_env_file=None, max_results=1)
        service = bootstrap.order_query_service(engine, config)
        views = service.list_orders(SearchCriteria(), FetchMode.PROJECTION_DTO)
        assert len(views) == 1

    def test_service_lists_simple_orders(self):
        engine, ids = seeded_engine()
        service = bootstrap.order_query_service(engine, Settings(_env_file=None))
        views = service.list_simple_orders(SearchCriteria(customer_name="Lee"))
        assert [v.order_id for v in views] == [ids.lee_order]

"""Composition root: wires concrete implementations to the ports.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache, partial
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker

from orderquery.application.order_query_service import OrderQueryService
from orderquery.infrastructure.persistence.criteria import SqlCriteriaBuilder
from orderquery.infrastructure.persistence.sql_order_store import open_store
from orderquery.infrastructure.persistence.strategies import (
    SimpleOrderJoinQuery,
    default_strategies,
)
from orderquery.infrastructure.settings import Settings


@lru_cache
def settings() -> Settings:
    return Settings()


def engine(config: Settings | None = None) -> Engine:
    config = config or settings()
    if config.database_url.startswith("sqlite:///"):
        Path(config.database_url.removeprefix("sqlite:///")).parent.mkdir(
            parents=True, exist_ok=True
        )
    return create_engine(config.database_url, echo=config.echo_sql)


def order_query_service(
    db_engine: Engine | None = None, config: Settings | None = None
) -> OrderQueryService:
    config = config or settings()
    session_factory = sessionmaker(db_engine or engine(config))
    return OrderQueryService(
        store_scope=partial(open_store, session_factory, config.batch_size),
        criteria_builder=SqlCriteriaBuilder(max_results=config.max_results),
        strategies=default_strategies(),
        simple_query=SimpleOrderJoinQuery(),
    )

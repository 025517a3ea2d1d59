"""Offset/limit handling for one-row-per-order row streams.

Paging a stream that still repeats the order for every item would cut
through items instead of orders, so row-duplicating modes refuse it.
"""

from __future__ import annotations

from typing import TypeVar

import structlog

from orderquery.application.fetch_strategy import FetchMode
from orderquery.domain.exceptions import PaginationUnsupported
from orderquery.domain.model.value_objects import Page

logger = structlog.get_logger(__name__)

S = TypeVar("S")


def ensure_paginable(mode: FetchMode, page: Page | None) -> None:
    """Fail fast if *page* is combined with a row-duplicating mode."""
    if page is None or not mode.duplicates_rows:
        return
    logger.warning(
        "pagination.rejected", strategy=mode.value, offset=page.offset, limit=page.limit
    )
    raise PaginationUnsupported(
        f"pagination unsupported with row-duplicating collection fetch "
        f"(strategy '{mode.value}')"
    )


def paginate(statement: S, page: Page | None, max_results: int) -> S:
    """Apply OFFSET/LIMIT to a select statement.

    Without a page only the result cap is applied.  The limit never
    exceeds *max_results*.
    """
    if page is None:
        return statement.limit(max_results)  # type: ignore[attr-defined]
    return statement.offset(page.offset).limit(  # type: ignore[attr-defined]
        min(page.limit, max_results)
    )

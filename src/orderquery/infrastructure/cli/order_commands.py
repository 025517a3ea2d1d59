"""CLI commands for reading orders."""

from __future__ import annotations

import click

from orderquery.application.dto import OrderView, SearchCriteria, SimpleOrderView
from orderquery.application.fetch_strategy import FetchMode
from orderquery.domain.exceptions import DomainException
from orderquery.domain.model.order import OrderStatus
from orderquery.domain.model.value_objects import Page
from orderquery.infrastructure.bootstrap import order_query_service


def _display_order(view: OrderView) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{view.order_id}  (status={view.status.value})")
    click.echo(f"Customer: {view.customer_name}")
    click.echo(f"Ordered:  {view.order_date:%Y-%m-%d %H:%M}")
    click.echo(f"Ship to:  {view.address}")
    click.echo()
    click.echo(f"  {'Item':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for item in view.items:
        click.echo(
            f"  {item.item_name:<20} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Order Total':<27} {view.total_price:>20}")


def _page(offset: int | None, limit: int | None) -> Page | None:
    if offset is None and limit is None:
        return None
    return Page.of(offset or 0, limit if limit is not None else 100)


@click.command("list")
@click.option(
    "--strategy",
    type=click.Choice([mode.value for mode in FetchMode]),
    default=FetchMode.BATCH_FETCH.value,
    show_default=True,
    help="How associations are fetched.",
)
@click.option(
    "--status",
    type=click.Choice([status.value for status in OrderStatus], case_sensitive=False),
    default=None,
    help="Only orders in this status.",
)
@click.option("--name", default=None, help="Customer name substring.")
@click.option("--offset", type=int, default=None, help="Orders to skip.")
@click.option("--limit", type=int, default=None, help="Maximum orders to show.")
def order_list(
    strategy: str,
    status: str | None,
    name: str | None,
    offset: int | None,
    limit: int | None,
) -> None:
    """List orders with their items."""
    service = order_query_service()

    try:
        views = service.list_orders(
            SearchCriteria(status=status, customer_name=name),
            mode=FetchMode(strategy),
            page=_page(offset, limit),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not views:
        click.echo("No orders found.")
        return

    for i, view in enumerate(views):
        if i:
            click.echo()
        _display_order(view)


@click.command("simple")
@click.option(
    "--status",
    type=click.Choice([status.value for status in OrderStatus], case_sensitive=False),
    default=None,
    help="Only orders in this status.",
)
@click.option("--name", default=None, help="Customer name substring.")
@click.option("--offset", type=int, default=None, help="Orders to skip.")
@click.option("--limit", type=int, default=None, help="Maximum orders to show.")
def order_simple(
    status: str | None,
    name: str | None,
    offset: int | None,
    limit: int | None,
) -> None:
    """List orders without their items, one line each."""
    service = order_query_service()

    try:
        views: list[SimpleOrderView] = service.list_simple_orders(
            SearchCriteria(status=status, customer_name=name),
            page=_page(offset, limit),
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not views:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Customer':<12} {'Ordered':<17} {'Status':<9} Ship to")
    click.echo("-" * 70)
    for view in views:
        click.echo(
            f"{view.order_id:<6} {view.customer_name:<12} "
            f"{view.order_date:%Y-%m-%d %H:%M} {view.status.value:<9} {view.address}"
        )

import click

from orderquery.infrastructure.bootstrap import settings
from orderquery.infrastructure.cli.db_commands import db_init, db_seed
from orderquery.infrastructure.cli.order_commands import order_list, order_simple
from orderquery.infrastructure.logging import setup_logging


@click.group()
def cli() -> None:
    """orderquery: order read models without N+1 queries"""
    config = settings()
    setup_logging(config.log_level, config.log_format)


@cli.group()
def order() -> None:
    """Read orders."""


@cli.group()
def db() -> None:
    """Manage the local database."""


# Register subcommands
order.add_command(order_list)
order.add_command(order_simple)
db.add_command(db_init)
db.add_command(db_seed)

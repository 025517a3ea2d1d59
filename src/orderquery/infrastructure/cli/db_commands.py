"""CLI commands for the local database."""

from __future__ import annotations

import click

from orderquery.infrastructure.bootstrap import engine
from orderquery.infrastructure.persistence.seed import create_schema, seed_sample_data


@click.command("init")
def db_init() -> None:
    """Create the tables if they do not exist."""
    create_schema(engine())
    click.echo("Schema created.")


@click.command("seed")
def db_seed() -> None:
    """Create the tables and load sample orders."""
    seed_sample_data(engine())
    click.echo("Sample data loaded.")

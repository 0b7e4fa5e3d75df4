"""Shared CLI plumbing: config, logging and a database-backed service."""

from contextlib import contextmanager
from typing import Generator

import typer
from rich.console import Console

from ..config import Config, configure_logging
from ..db import PostgresStore, close_connection_pool, get_connection, validate_connection
from ..pipeline import ProblemBankService

console = Console()


@contextmanager
def open_service() -> Generator[ProblemBankService, None, None]:
    """Yield a service bound to a pooled Postgres connection."""
    try:
        config = Config()
        settings = config.config
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    configure_logging(settings)
    db_config = config.get_db_config()

    if not validate_connection(db_config):
        console.print("[red]❌ Database connection failed![/red]")
        console.print("Please check your database configuration and ensure Postgres is running.")
        close_connection_pool()
        raise typer.Exit(1)

    try:
        with get_connection(db_config) as conn:
            yield ProblemBankService(PostgresStore(conn), settings)
    finally:
        close_connection_pool()

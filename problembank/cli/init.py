"""Init command implementation."""

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, save_config
from ..db import close_connection_pool, init_database, validate_connection
from ..errors import PersistenceError

console = Console()


def init_command(
    config_dir: Path = typer.Option(
        Path.home() / ".config" / "problembank",
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("problembank", "--db-name", help="Database name"),
    db_user: str = typer.Option("problembank_user", "--db-user", help="Database user"),
    threshold: float = typer.Option(
        0.3,
        "--threshold",
        help="Default similarity threshold (0.0-1.0)",
        min=0.0,
        max=1.0,
    ),
) -> None:
    """Initialize Problem Bank configuration and database schema."""
    console.print(Panel.fit("🏦 Problem Bank - Initialization", style="bold blue"))

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"

    config = ConfigModel(
        postgres={
            "host": db_host,
            "port": db_port,
            "database": db_name,
            "user": db_user,
            "password_env": "PROBLEMBANK_DB_PASSWORD",
        },
        similarity={"threshold": threshold},
    )

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    if not validate_connection(db_config):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export PROBLEMBANK_DB_PASSWORD=your_password[/bold]"
        )
        close_connection_pool()
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        init_database(db_config)
        console.print("✅ Database schema initialized")
    except PersistenceError as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)
    finally:
        close_connection_pool()

    console.print(
        Panel(
            f"[green]✅ Problem Bank initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export PROBLEMBANK_DB_PASSWORD=your_password[/bold]\n"
            f"2. Extract a cycle: [bold]problembank extract CYCLE_ID[/bold]\n"
            f"3. Relate problems: [bold]problembank similarities compute --recompute-all[/bold]",
            style="green",
        )
    )

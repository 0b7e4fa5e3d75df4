"""Cluster management commands."""

from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..errors import ProblemBankError
from .common import open_service

console = Console()
clusters_app = typer.Typer(help="Manage problem clusters")


@clusters_app.command("list")
def clusters_list(
    theme: Optional[str] = typer.Option(None, "--theme", help="Only clusters with this primary theme"),
    include_problems: bool = typer.Option(
        False,
        "--include-problems",
        help="Show top members of each cluster",
    ),
) -> None:
    """List active clusters, largest first."""
    with open_service() as service:
        listings = service.list_clusters(theme=theme, include_problems=include_problems)

    if not listings:
        console.print("[yellow]No clusters found.[/yellow]")
        return

    table = Table(title="Problem Clusters")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Theme", style="magenta")
    table.add_column("Problems", style="green")
    table.add_column("Avg Severity", style="yellow")

    for listing in listings:
        cluster = listing.cluster
        severity = f"{cluster.avg_severity:.1f}" if cluster.avg_severity is not None else "-"
        table.add_row(
            cluster.id,
            cluster.name,
            cluster.primary_theme or "-",
            str(cluster.problem_count),
            severity,
        )

    console.print(table)

    if not include_problems:
        return

    for listing in listings:
        members = Table(title=listing.cluster.name)
        members.add_column("", style="bold")
        members.add_column("Title", style="cyan")
        members.add_column("Status", style="magenta")
        members.add_column("Score", style="green")
        members.add_column("Institution", style="blue")
        for problem in listing.problems or []:
            members.add_row(
                "★" if problem.is_centroid else "",
                problem.title,
                problem.validation_status,
                f"{problem.membership_score:.2f}",
                problem.institution_short or "-",
            )
        console.print(members)
        if listing.institutions_list:
            console.print(f"[dim]Institutions: {', '.join(listing.institutions_list)}[/dim]")


@clusters_app.command("create")
def clusters_create(
    problem_ids: List[str] = typer.Argument(..., help="Member problems; the first is the centroid"),
    name: str = typer.Option(..., "--name", "-n", help="Cluster name"),
    description: Optional[str] = typer.Option(None, "--description", "-d", help="Cluster description"),
    theme: Optional[str] = typer.Option(None, "--theme", help="Primary theme"),
) -> None:
    """Create a cluster from hand-picked problems."""
    with open_service() as service:
        try:
            cluster_id = service.create_cluster(
                name,
                description=description,
                primary_theme=theme,
                problem_ids=problem_ids,
            )
        except ProblemBankError as e:
            console.print(f"[red]❌ Failed to create cluster: {e}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]✅ Created cluster '{name}' ({cluster_id}) with {len(set(problem_ids))} problems[/green]")


@clusters_app.command("archive")
def clusters_archive(
    cluster_id: str = typer.Argument(..., help="Cluster to archive"),
) -> None:
    """Archive a cluster. Archived clusters are never rebuilt."""
    with open_service() as service:
        try:
            cluster = service.archive_cluster(cluster_id)
        except ProblemBankError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(1)

    console.print(f"[green]✅ Archived cluster '{cluster.name}'[/green]")

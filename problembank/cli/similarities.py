"""Similarity commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..errors import ProblemBankError
from .common import open_service

console = Console()
similarities_app = typer.Typer(help="Compute and inspect problem similarities")


@similarities_app.command("compute")
def similarities_compute(
    problem_id: Optional[str] = typer.Option(
        None,
        "--problem-id",
        "-p",
        help="Only score pairs involving this problem",
    ),
    threshold: Optional[float] = typer.Option(
        None,
        "--threshold",
        "-t",
        help="Minimum score to store (0.0-1.0). Default: from config",
        min=0.0,
        max=1.0,
    ),
    recompute_all: bool = typer.Option(
        False,
        "--recompute-all",
        help="Also rebuild theme clusters",
    ),
) -> None:
    """Compute similarity edges between open problems."""
    with open_service() as service:
        try:
            result = service.compute_similarities(
                problem_id=problem_id,
                threshold=threshold,
                recompute_all=recompute_all,
            )
        except ProblemBankError as e:
            console.print(f"[red]❌ Similarity computation failed: {e}[/red]")
            raise typer.Exit(1)

    table = Table(title="Similarity Run")
    table.add_column("Stage", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Duration", style="yellow")
    table.add_column("Details", style="dim")

    for name, stage in result.stages.items():
        if stage["skipped"]:
            status = "[dim]-[/dim]"
        else:
            status = "[green]✓[/green]" if stage["success"] else "[red]✗[/red]"
        duration = f"{stage['duration']:.2f}s" if stage["duration"] > 0 else "-"
        details = ", ".join(f"{k}: {v}" for k, v in stage["stats"].items())
        table.add_row(name.title(), status, duration, details)

    console.print(table)
    console.print(
        f"Problems: {result.problem_count}  "
        f"Similarities: {result.similarities_computed}  "
        f"Clusters updated: {result.clusters_updated}  "
        f"Threshold: {result.threshold:.2f}"
    )


@similarities_app.command("stats")
def similarities_stats() -> None:
    """Show similarity and cluster statistics."""
    with open_service() as service:
        stats = service.similarity_stats()

    last = stats.last_computed.isoformat() if stats.last_computed else "never"
    console.print(
        Panel(
            f"Open problems: {stats.total_problems}\n"
            f"Similarities: {stats.total_similarities}\n"
            f"Average score: {stats.avg_similarity_score:.3f}\n"
            f"Active clusters: {stats.total_clusters}\n"
            f"Last computed: {last}",
            title="Problem Bank Statistics",
            style="blue",
        )
    )

    if stats.clusters:
        table = Table(title="Clusters")
        table.add_column("Name", style="cyan")
        table.add_column("Theme", style="magenta")
        table.add_column("Problems", style="green")
        for cluster in stats.clusters:
            table.add_row(cluster.name, cluster.primary_theme or "-", str(cluster.problem_count))
        console.print(table)


@similarities_app.command("show")
def similarities_show(
    problem_id: str = typer.Argument(..., help="Problem to find relatives for"),
    limit: int = typer.Option(5, "--limit", "-l", help="Maximum results", min=1),
) -> None:
    """Show problems similar to the given one."""
    with open_service() as service:
        try:
            similar = service.similar_problems(problem_id, limit=limit)
        except ProblemBankError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(1)

    if not similar:
        console.print("[yellow]No similar problems found.[/yellow]")
        return

    table = Table(title=f"Similar to {problem_id}")
    table.add_column("Score", style="green")
    table.add_column("Title", style="cyan")
    table.add_column("Theme", style="magenta")
    table.add_column("Method", style="dim")

    for item in similar:
        table.add_row(f"{item.similarity_score:.2f}", item.title, item.theme or "-", item.method)

    console.print(table)

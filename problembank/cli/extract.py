"""Extract command implementation."""

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from ..errors import DuplicateExtractionError, NotFoundError, ProblemBankError
from .common import open_service

console = Console()


def extract_command(
    cycle_id: str = typer.Argument(..., help="Completed cycle to extract"),
    source_event: Optional[str] = typer.Option(
        None,
        "--source-event",
        "-e",
        help="Event the cycle was run under",
    ),
) -> None:
    """Extract a completed cycle into the problem bank."""
    with open_service() as service:
        try:
            result = service.extract(cycle_id, source_event=source_event)
        except DuplicateExtractionError as e:
            console.print(f"[yellow]⚠️  Already extracted as problem {e.problem_id}[/yellow]")
            raise typer.Exit(1)
        except NotFoundError as e:
            console.print(f"[red]❌ {e}[/red]")
            raise typer.Exit(1)
        except ProblemBankError as e:
            console.print(f"[red]❌ Extraction failed: {e}[/red]")
            raise typer.Exit(1)

        problem = service.get_problem(result.problem_id)

    evidence_line = f"Evidence: {result.evidence_written} saved"
    if result.evidence_failed:
        evidence_line += f", [yellow]{result.evidence_failed} failed[/yellow]"

    console.print(
        Panel(
            f"[green]✅ Problem extracted[/green]\n\n"
            f"ID: {result.problem_id}\n"
            f"Title: {result.title}\n"
            f"Theme: {problem.theme or '-'}\n"
            f"Validation: {problem.validation_status}\n"
            f"{evidence_line}",
            style="green",
        )
    )

"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .clusters import clusters_app
from .extract import extract_command
from .init import init_command
from .similarities import similarities_app

app = typer.Typer(
    name="problembank",
    help="Problem Bank - extract, relate and cluster validated problems",
    no_args_is_help=True,
)

# Register commands
app.command("init")(init_command)
app.command("extract")(extract_command)
app.add_typer(similarities_app, name="similarities", help="Compute and inspect problem similarities")
app.add_typer(clusters_app, name="clusters", help="Manage problem clusters")


if __name__ == "__main__":
    app()

"""Main CLI application for arena snapshot maintenance."""

import logging

import typer
from rich.logging import RichHandler

from arena.cli.commands import snapshots
from arena.cli.display import display_error, display_success
from arena.config import get_settings
from arena.database.connection import init_db

# Create main app
app = typer.Typer(
    name="arena",
    help="Maintenance tools for arena session snapshots",
    add_completion=True,
)

# Add sub-commands
app.add_typer(snapshots.app, name="snapshots")


@app.command("init-db")
def init_database() -> None:
    """Create the snapshot and progression tables."""
    try:
        init_db()
    except Exception as e:
        display_error(f"Failed to initialize database: {e}")
        raise typer.Exit(1)

    display_success("Database initialized")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Arena - inspect and repair persisted player snapshots.

    Use 'arena snapshots list' to see players who still need a restore.
    """
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
    )


if __name__ == "__main__":
    app()

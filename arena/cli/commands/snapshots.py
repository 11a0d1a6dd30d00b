"""Snapshot maintenance commands."""

import typer
from rich.console import Console

from arena.cli.display import (
    display_error,
    display_info,
    display_snapshot,
    display_snapshot_list,
    display_success,
)
from arena.database.connection import SessionLocal
from arena.exceptions import StorageError
from arena.managers.snapshot_store import SnapshotStore

app = typer.Typer(help="Inspect and clean up persisted snapshots")
console = Console()


def _store() -> SnapshotStore:
    return SnapshotStore(SessionLocal)


@app.command("list")
def list_snapshots() -> None:
    """List players whose snapshot is still persisted (sessions needing restore)."""
    try:
        entries = _store().list_entries()
    except StorageError as e:
        display_error(str(e))
        raise typer.Exit(1)

    display_snapshot_list(entries)


@app.command()
def show(
    player_id: int = typer.Argument(..., help="Player ID"),
) -> None:
    """Show the stored snapshot of one player."""
    snapshot = _store().load(player_id)
    if snapshot is None:
        display_error(f"No usable snapshot for player {player_id}")
        raise typer.Exit(1)

    display_snapshot(snapshot)


@app.command()
def discard(
    player_id: int = typer.Argument(..., help="Player ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a player's snapshot without restoring them."""
    store = _store()
    if not store.exists(player_id):
        display_error(f"No snapshot for player {player_id}")
        raise typer.Exit(1)

    if not force:
        confirm = typer.confirm(
            f"Discard snapshot of player {player_id}? Their pre-arena state will be lost"
        )
        if not confirm:
            display_info("Cancelled")
            return

    if not store.delete(player_id):
        display_error(f"Failed to discard snapshot of player {player_id}")
        raise typer.Exit(1)

    display_success(f"Discarded snapshot of player {player_id}")


@app.command()
def purge(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete every persisted snapshot."""
    if not force:
        confirm = typer.confirm("Discard ALL snapshots? Players will not be restored")
        if not confirm:
            display_info("Cancelled")
            return

    try:
        count = _store().delete_all()
    except StorageError as e:
        display_error(str(e))
        raise typer.Exit(1)

    display_success(f"Discarded snapshots of {count} players")

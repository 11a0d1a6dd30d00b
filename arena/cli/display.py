"""Rich display helpers for CLI output."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from arena.managers.snapshot_store import SnapshotEntry
from arena.schemas.snapshot import SessionSnapshot


# Shared console instance
console = Console()


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def display_success(message: str) -> None:
    """Display success message.

    Args:
        message: Success message.
    """
    console.print(f"[bold green]{message}[/bold green]")


def display_info(message: str) -> None:
    console.print(f"[dim]{message}[/dim]")


def display_snapshot_list(entries: list[SnapshotEntry]) -> None:
    """Display persisted snapshots, one row per player.

    Args:
        entries: Snapshot summaries from the store.
    """
    if not entries:
        console.print("[dim]No sessions need restore.[/dim]")
        return

    table = Table(title="Sessions Needing Restore")
    table.add_column("Player", style="cyan")
    table.add_column("Character", style="white")
    table.add_column("Captured (UTC)", style="yellow")
    table.add_column("Schema", justify="right")

    for entry in entries:
        captured = entry.captured_at.strftime("%Y-%m-%d %H:%M:%S") if entry.captured_at else "-"
        table.add_row(
            str(entry.player_id),
            entry.character_name or "-",
            captured,
            str(entry.schema_version),
        )

    console.print(table)


def display_snapshot(snapshot: SessionSnapshot) -> None:
    """Display the full contents of one snapshot."""
    position = snapshot.position
    lines = [
        f"[bold]Character:[/bold] {snapshot.character_name or '-'}",
        f"[bold]Captured:[/bold] {snapshot.captured_at_utc.isoformat()}",
        f"[bold]Position:[/bold] ({position.x:g}, {position.y:g}, {position.z:g})",
        f"[bold]Health:[/bold] {snapshot.health:g}",
        f"[bold]Blood:[/bold] {snapshot.blood_type} @ {snapshot.blood_quality:g}%",
        f"[bold]Abilities:[/bold] {', '.join(map(str, sorted(snapshot.ability_ids))) or '-'}",
        f"[bold]Bosses unlocked:[/bold] {len(snapshot.unlocked_boss_ids)}",
    ]
    if snapshot.missing_components:
        lines.append(
            f"[yellow]Not captured:[/yellow] {', '.join(sorted(snapshot.missing_components))}"
        )
    console.print(Panel("\n".join(lines), title=f"Player {snapshot.player_id}", style="cyan"))

    if snapshot.inventory:
        table = Table(title="Inventory", box=box.ROUNDED)
        table.add_column("Slot", style="blue", justify="right")
        table.add_column("Item", style="white")
        table.add_column("Amount", justify="right")
        for slot, entry in sorted(snapshot.inventory.items()):
            table.add_row(str(slot), str(entry.item_id), str(entry.amount))
        console.print(table)

    if snapshot.equipment:
        table = Table(title="Equipment", box=box.ROUNDED)
        table.add_column("Slot", style="blue", justify="right")
        table.add_column("Item", style="white")
        table.add_column("Quality", justify="right")
        for entry in snapshot.equipment:
            table.add_row(str(entry.slot_id), str(entry.item_id), str(entry.quality))
        console.print(table)

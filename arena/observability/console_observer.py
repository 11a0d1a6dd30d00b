"""Rich console observer for arena session events."""

from rich.console import Console

from arena.observability.events import (
    ProgressionSuppressedEvent,
    RestoreBlockedEvent,
    SessionEnteredEvent,
    SessionExitedEvent,
    SessionRecoveredEvent,
    StepFailedEvent,
)


class RichConsoleObserver:
    """Pretty console output using Rich.

    Renders session lifecycle events with colors and timing information.
    """

    def __init__(self, console: Console | None = None, indent: str = "  ") -> None:
        """Initialize the console observer.

        Args:
            console: Rich Console instance. Creates new one if not provided.
            indent: Indentation string for nested output.
        """
        self.console = console or Console()
        self.indent = indent

    def on_session_entered(self, event: SessionEnteredEvent) -> None:
        """Render arena entry."""
        status = "[green]entered[/]" if not event.failed_steps else "[yellow]entered (partial)[/]"
        self.console.print(
            f"[cyan]Player {event.player_id}[/] {status} ({event.duration_ms:.0f}ms)"
        )
        for step in event.failed_steps:
            self.console.print(f"{self.indent}! {step}", style="dim yellow")

    def on_session_exited(self, event: SessionExitedEvent) -> None:
        """Render restoration."""
        status = "[green]restored[/]" if not event.failed_steps else "[yellow]restored (partial)[/]"
        extras = []
        if event.displaced_items:
            extras.append(f"{event.displaced_items} moved to inventory")
        if event.lost_items:
            extras.append(f"[red]{event.lost_items} lost[/]")
        extras_str = f" - {', '.join(extras)}" if extras else ""
        self.console.print(
            f"[cyan]Player {event.player_id}[/] {status} ({event.duration_ms:.0f}ms){extras_str}"
        )
        for step in event.failed_steps:
            self.console.print(f"{self.indent}! {step}", style="dim yellow")

    def on_step_failed(self, event: StepFailedEvent) -> None:
        """Render a failed step."""
        self.console.print(
            f"{self.indent}[yellow]{event.flow}/{event.step}[/] failed for "
            f"player {event.player_id}: {event.error}"
        )

    def on_restore_blocked(self, event: RestoreBlockedEvent) -> None:
        """Render a blocked restore."""
        self.console.print(
            f"[bold red]Player {event.player_id} cannot be restored:[/bold red] {event.reason}"
        )

    def on_session_recovered(self, event: SessionRecoveredEvent) -> None:
        """Render a leftover snapshot found at startup."""
        captured = event.captured_at.isoformat() if event.captured_at else "unknown"
        action = "adopted as active" if event.adopted else "needs manual restore"
        self.console.print(
            f"[magenta]Player {event.player_id}[/] snapshot from {captured}: {action}"
        )

    def on_progression_suppressed(self, event: ProgressionSuppressedEvent) -> None:
        """Render an ignored progression effect."""
        self.console.print(
            f"{self.indent}[dim]{event.effect} ignored for player {event.player_id} (in arena)[/]"
        )

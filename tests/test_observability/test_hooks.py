"""Tests for observability hooks and the console observer."""

from datetime import datetime, timezone
from io import StringIO

from rich.console import Console

from arena.observability import (
    CompositeHook,
    NullHook,
    ObservabilityHook,
    ProgressionSuppressedEvent,
    RestoreBlockedEvent,
    RichConsoleObserver,
    SessionEnteredEvent,
    SessionExitedEvent,
    SessionRecoveredEvent,
    StepFailedEvent,
)
from fakes import RecordingHook


def make_observer() -> tuple[RichConsoleObserver, StringIO]:
    output = StringIO()
    console = Console(file=output, force_terminal=False, width=120)
    return RichConsoleObserver(console=console), output


class TestHooks:
    """Tests for hook implementations."""

    def test_implementations_satisfy_protocol(self):
        observer, _ = make_observer()

        assert isinstance(NullHook(), ObservabilityHook)
        assert isinstance(CompositeHook([]), ObservabilityHook)
        assert isinstance(observer, ObservabilityHook)

    def test_null_hook_accepts_events(self):
        hook = NullHook()

        hook.on_session_entered(SessionEnteredEvent(player_id=1, duration_ms=1.0))
        hook.on_restore_blocked(RestoreBlockedEvent(player_id=1, reason="none"))

    def test_composite_dispatches_to_all(self):
        """Every wrapped hook should receive every event."""
        first, second = RecordingHook(), RecordingHook()
        composite = CompositeHook([first, second])
        event = StepFailedEvent(player_id=1, flow="exit", step="teleport", error="boom")

        composite.on_step_failed(event)
        composite.on_progression_suppressed(ProgressionSuppressedEvent(player_id=1, effect="kill"))

        assert first.events[0] is event
        assert len(second.events) == 2


class TestRichConsoleObserver:
    """Tests for console rendering."""

    def test_renders_entry(self):
        observer, output = make_observer()

        observer.on_session_entered(
            SessionEnteredEvent(player_id=42, duration_ms=12.0, failed_steps=["loadout"])
        )

        text = output.getvalue()
        assert "Player 42" in text
        assert "partial" in text
        assert "loadout" in text

    def test_renders_exit_with_lost_items(self):
        observer, output = make_observer()

        observer.on_session_exited(
            SessionExitedEvent(player_id=42, duration_ms=5.0, displaced_items=1, lost_items=2)
        )

        text = output.getvalue()
        assert "restored" in text
        assert "1 moved to inventory" in text
        assert "2 lost" in text

    def test_renders_blocked_and_recovered(self):
        observer, output = make_observer()

        observer.on_restore_blocked(RestoreBlockedEvent(player_id=42, reason="no snapshot found"))
        observer.on_session_recovered(
            SessionRecoveredEvent(
                player_id=7,
                captured_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
                adopted=True,
            )
        )

        text = output.getvalue()
        assert "cannot be restored" in text
        assert "adopted as active" in text

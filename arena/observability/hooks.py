"""Observability hook protocol and implementations.

The ObservabilityHook protocol defines the interface for receiving events
from the session coordinator. Implementations can render to console, write
to files, or aggregate metrics.
"""

from typing import Protocol, runtime_checkable

from arena.observability.events import (
    ProgressionSuppressedEvent,
    RestoreBlockedEvent,
    SessionEnteredEvent,
    SessionExitedEvent,
    SessionRecoveredEvent,
    StepFailedEvent,
)


@runtime_checkable
class ObservabilityHook(Protocol):
    """Protocol for observability hooks.

    Implement this protocol to receive events from the session coordinator.
    """

    def on_session_entered(self, event: SessionEnteredEvent) -> None:
        """Called when a player has entered the arena."""
        ...

    def on_session_exited(self, event: SessionExitedEvent) -> None:
        """Called when a player has been restored."""
        ...

    def on_step_failed(self, event: StepFailedEvent) -> None:
        """Called for each failed mutation or restore step."""
        ...

    def on_restore_blocked(self, event: RestoreBlockedEvent) -> None:
        """Called when a restore cannot proceed."""
        ...

    def on_session_recovered(self, event: SessionRecoveredEvent) -> None:
        """Called for each leftover snapshot found at startup."""
        ...

    def on_progression_suppressed(self, event: ProgressionSuppressedEvent) -> None:
        """Called when a progression effect is ignored for an arena player."""
        ...


class NullHook:
    """No-op hook for when observability is disabled.

    This is the default hook - it does nothing but satisfies the protocol.
    Using this avoids null checks throughout the code.
    """

    def on_session_entered(self, event: SessionEnteredEvent) -> None:
        pass

    def on_session_exited(self, event: SessionExitedEvent) -> None:
        pass

    def on_step_failed(self, event: StepFailedEvent) -> None:
        pass

    def on_restore_blocked(self, event: RestoreBlockedEvent) -> None:
        pass

    def on_session_recovered(self, event: SessionRecoveredEvent) -> None:
        pass

    def on_progression_suppressed(self, event: ProgressionSuppressedEvent) -> None:
        pass


class CompositeHook:
    """Combines multiple hooks into one.

    Events are dispatched to all hooks in order.
    """

    def __init__(self, hooks: list[ObservabilityHook]) -> None:
        """Initialize with a list of hooks.

        Args:
            hooks: List of hooks to dispatch events to.
        """
        self.hooks = hooks

    def on_session_entered(self, event: SessionEnteredEvent) -> None:
        for hook in self.hooks:
            hook.on_session_entered(event)

    def on_session_exited(self, event: SessionExitedEvent) -> None:
        for hook in self.hooks:
            hook.on_session_exited(event)

    def on_step_failed(self, event: StepFailedEvent) -> None:
        for hook in self.hooks:
            hook.on_step_failed(event)

    def on_restore_blocked(self, event: RestoreBlockedEvent) -> None:
        for hook in self.hooks:
            hook.on_restore_blocked(event)

    def on_session_recovered(self, event: SessionRecoveredEvent) -> None:
        for hook in self.hooks:
            hook.on_session_recovered(event)

    def on_progression_suppressed(self, event: ProgressionSuppressedEvent) -> None:
        for hook in self.hooks:
            hook.on_progression_suppressed(event)

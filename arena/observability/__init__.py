"""Observability module for arena session monitoring.

Provides hooks and observers for visibility into enter and exit flows,
failed steps, blocked restores and startup recovery.
"""

from arena.observability.events import (
    ProgressionSuppressedEvent,
    RestoreBlockedEvent,
    SessionEnteredEvent,
    SessionExitedEvent,
    SessionRecoveredEvent,
    StepFailedEvent,
)
from arena.observability.hooks import (
    CompositeHook,
    NullHook,
    ObservabilityHook,
)
from arena.observability.console_observer import RichConsoleObserver

__all__ = [
    # Events
    "ProgressionSuppressedEvent",
    "RestoreBlockedEvent",
    "SessionEnteredEvent",
    "SessionExitedEvent",
    "SessionRecoveredEvent",
    "StepFailedEvent",
    # Hooks
    "ObservabilityHook",
    "NullHook",
    "CompositeHook",
    # Observers
    "RichConsoleObserver",
]

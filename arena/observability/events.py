"""Event dataclasses for observability hooks.

These events are emitted by the session coordinator at key points of the
enter and exit flows.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionEnteredEvent:
    """Emitted when a player's snapshot is persisted and arena mutations ran."""

    player_id: int
    duration_ms: float
    failed_steps: list[str] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_now)


@dataclass
class SessionExitedEvent:
    """Emitted when a player has been restored and the snapshot deleted."""

    player_id: int
    duration_ms: float
    failed_steps: list[str] = field(default_factory=list)
    displaced_items: int = 0  # Equipment pushed into inventory
    lost_items: int = 0  # Items that fit nowhere
    timestamp: datetime = field(default_factory=_now)


@dataclass
class StepFailedEvent:
    """Emitted when one arena mutation or restore step fails."""

    player_id: int
    flow: str  # "enter" or "exit"
    step: str
    error: str
    timestamp: datetime = field(default_factory=_now)


@dataclass
class RestoreBlockedEvent:
    """Emitted when an active player cannot be restored."""

    player_id: int
    reason: str
    timestamp: datetime = field(default_factory=_now)


@dataclass
class SessionRecoveredEvent:
    """Emitted when a leftover snapshot is found at startup."""

    player_id: int
    captured_at: datetime | None
    adopted: bool
    timestamp: datetime = field(default_factory=_now)


@dataclass
class ProgressionSuppressedEvent:
    """Emitted when a permanent progression effect is ignored in the arena."""

    player_id: int
    effect: str
    timestamp: datetime = field(default_factory=_now)

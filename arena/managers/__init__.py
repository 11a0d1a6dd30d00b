"""Managers for arena session state."""

from arena.managers.base import BaseManager
from arena.managers.capture import CaptureRoutine
from arena.managers.progression_guard import ProgressionGuard, ProgressionLedger
from arena.managers.restoration import RestorationEngine, RestoreReport
from arena.managers.session_coordinator import (
    PendingRestore,
    SessionCoordinator,
    SessionOutcome,
)
from arena.managers.session_registry import SessionRecord, SessionRegistry
from arena.managers.snapshot_store import SnapshotEntry, SnapshotStore

__all__ = [
    "BaseManager",
    "CaptureRoutine",
    "PendingRestore",
    "ProgressionGuard",
    "ProgressionLedger",
    "RestorationEngine",
    "RestoreReport",
    "SessionCoordinator",
    "SessionOutcome",
    "SessionRecord",
    "SessionRegistry",
    "SnapshotEntry",
    "SnapshotStore",
]

"""Database enumerations."""

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle state of a player's arena session."""

    IDLE = "idle"  # Not in the arena
    ENTERING = "entering"  # Capturing and persisting the snapshot
    ACTIVE = "active"  # Playing with the arena profile
    EXITING = "exiting"  # Restoring the snapshot


class SnapshotCategory(str, Enum):
    """Namespace a persisted snapshot document belongs to."""

    PLAYER = "player"  # Position, vitals, inventory, equipment
    PROGRESSION = "progression"  # Ability and boss unlocks

"""Database models package."""

from arena.database.models.base import Base, TimestampMixin
from arena.database.models.enums import SessionState, SnapshotCategory
from arena.database.models.progression import DefeatedBoss
from arena.database.models.snapshots import ArenaSnapshot

__all__ = [
    "Base",
    "TimestampMixin",
    "SessionState",
    "SnapshotCategory",
    "DefeatedBoss",
    "ArenaSnapshot",
]

"""Arena snapshot models for crash-safe restoration."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Enum, Index, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column

from arena.database.models.base import Base, TimestampMixin
from arena.database.models.enums import SnapshotCategory


class ArenaSnapshot(Base, TimestampMixin):
    """One persisted snapshot document for a player.

    Each player in the arena owns one row per category. Both rows are
    written in the same transaction so a crash never leaves a half-written
    snapshot behind.

    Attributes:
        id: Primary key.
        player_id: Stable platform id of the player.
        category: Document namespace (player or progression).
        schema_version: Version of the document format.
        captured_at: When the live state was captured.
        document: The serialized camelCase document.
    """

    __tablename__ = "arena_snapshots"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        index=True,
    )
    category: Mapped[SnapshotCategory] = mapped_column(
        Enum(SnapshotCategory, native_enum=False, length=20),
        nullable=False,
    )
    schema_version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    captured_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    document: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        comment="Snapshot document as camelCase JSON",
    )

    __table_args__ = (
        Index("ix_arena_snapshots_player_category", "player_id", "category", unique=True),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<ArenaSnapshot player={self.player_id} category={self.category.value}>"

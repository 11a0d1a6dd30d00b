"""Persistent progression models."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column

from arena.database.models.base import Base, _utcnow


class DefeatedBoss(Base):
    """A boss a player has permanently defeated outside the arena.

    Attributes:
        id: Primary key.
        player_id: Stable platform id of the player.
        boss_id: Boss/VBlood identifier.
        defeated_at: When the defeat was recorded.
    """

    __tablename__ = "defeated_bosses"

    id: Mapped[int] = mapped_column(primary_key=True)
    player_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    boss_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    defeated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_defeated_bosses_player_boss", "player_id", "boss_id", unique=True),
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<DefeatedBoss player={self.player_id} boss={self.boss_id}>"

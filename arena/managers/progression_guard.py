"""Suppression of permanent progression while a player is in the arena."""

import logging
from typing import Callable, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from arena.database.models import DefeatedBoss
from arena.exceptions import StorageError
from arena.managers.base import BaseManager
from arena.managers.session_registry import SessionRegistry
from arena.observability.events import ProgressionSuppressedEvent
from arena.observability.hooks import NullHook, ObservabilityHook

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProgressionLedger(BaseManager):
    """Persistent record of bosses each player has defeated."""

    def mark_boss_defeated(self, player_id: int, boss_id: int) -> bool:
        """Record a boss defeat.

        Returns:
            True if newly recorded, False if already known.

        Raises:
            StorageError: If the defeat could not be written.
        """
        try:
            with self._transaction() as db:
                existing = db.execute(
                    select(DefeatedBoss).where(
                        DefeatedBoss.player_id == player_id,
                        DefeatedBoss.boss_id == boss_id,
                    )
                ).scalar_one_or_none()
                if existing is not None:
                    return False
                db.add(DefeatedBoss(player_id=player_id, boss_id=boss_id))
        except SQLAlchemyError as e:
            raise StorageError(
                f"Failed to record boss {boss_id} for player {player_id}: {e}",
                player_id=player_id,
                operation="mark_boss_defeated",
            ) from e

        logger.info(f"Player {player_id} defeated boss {boss_id}")
        return True

    def defeated_bosses(self, player_id: int) -> set[int]:
        """Get every boss a player has permanently defeated."""
        with self._transaction() as db:
            return set(
                db.execute(
                    select(DefeatedBoss.boss_id).where(DefeatedBoss.player_id == player_id)
                ).scalars()
            )


class ProgressionGuard:
    """Gate for permanent progression side effects.

    Any state other than IDLE counts as in the arena, so an effect raised
    while an enter or exit is in flight is suppressed too. Only the registry
    mutex is taken, never the per-player flow lock, so the simulation tick is
    never blocked behind a running enter or exit.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        ledger: ProgressionLedger | None = None,
        hook: ObservabilityHook | None = None,
    ) -> None:
        self.registry = registry
        self.ledger = ledger or ProgressionLedger()
        self.hook = hook or NullHook()

    def should_suppress(self, player_id: int) -> bool:
        return self.registry.in_session(player_id)

    def commit(self, player_id: int, effect: str, apply: Callable[[], T]) -> T | None:
        """Apply a progression effect unless the player is in the arena.

        Args:
            player_id: Player the effect belongs to.
            effect: Short description used in logs.
            apply: Performs the effect.

        Returns:
            Whatever ``apply`` returns, or None if suppressed.
        """
        if self.should_suppress(player_id):
            logger.info(f"{effect} for player {player_id} ignored: in arena")
            self.hook.on_progression_suppressed(
                ProgressionSuppressedEvent(player_id=player_id, effect=effect)
            )
            return None
        return apply()

    def record_boss_defeat(self, player_id: int, boss_id: int) -> bool:
        """Persist a boss defeat unless the player is in the arena.

        Returns:
            True if the defeat was newly recorded.
        """
        result = self.commit(
            player_id,
            f"boss {boss_id} defeat",
            lambda: self.ledger.mark_boss_defeated(player_id, boss_id),
        )
        return bool(result)

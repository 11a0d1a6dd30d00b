"""Durable storage of player snapshots.

Each player in the arena owns one document per category (player and
progression). Saves replace both documents inside one transaction, so after
a crash the store holds either the previous snapshot or the new one.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError

from arena.database.models import ArenaSnapshot, SnapshotCategory
from arena.exceptions import StorageError
from arena.managers.base import BaseManager
from arena.schemas.snapshot import SCHEMA_VERSION, SessionSnapshot

logger = logging.getLogger(__name__)


@dataclass
class SnapshotEntry:
    """Summary of a persisted snapshot, for operators."""

    player_id: int
    captured_at: datetime
    schema_version: int
    character_name: str = ""


class SnapshotStore(BaseManager):
    """Key-value persistence of session snapshots keyed by player id.

    Safe for concurrent use across distinct players: every call runs in its
    own database session.
    """

    def save(self, player_id: int, snapshot: SessionSnapshot) -> None:
        """Persist a snapshot, replacing any previous one for the player.

        Args:
            player_id: Player the snapshot belongs to.
            snapshot: The captured state.

        Raises:
            StorageError: If the snapshot could not be written.
            ValueError: If the snapshot belongs to a different player.
        """
        if snapshot.player_id != player_id:
            raise ValueError(
                f"Snapshot for player {snapshot.player_id} cannot be saved under {player_id}"
            )

        documents = snapshot.to_documents()
        try:
            with self._transaction() as db:
                existing = {
                    row.category: row
                    for row in db.execute(
                        select(ArenaSnapshot).where(ArenaSnapshot.player_id == player_id)
                    ).scalars()
                }
                for name, document in documents.items():
                    category = SnapshotCategory(name)
                    row = existing.get(category)
                    if row is None:
                        row = ArenaSnapshot(player_id=player_id, category=category)
                        db.add(row)
                    row.schema_version = snapshot.schema_version
                    row.captured_at = snapshot.captured_at_utc
                    row.document = document
        except SQLAlchemyError as e:
            logger.error(f"Failed to save snapshot for player {player_id}: {e}")
            raise StorageError(
                f"Failed to save snapshot for player {player_id}: {e}",
                player_id=player_id,
                operation="save",
            ) from e

        logger.info(f"Saved snapshot for player {player_id}")

    def load(self, player_id: int) -> SessionSnapshot | None:
        """Load a player's snapshot.

        Read errors, incomplete snapshots and unreadable documents are logged
        and reported as missing.

        Returns:
            The snapshot, or None if there is no usable snapshot.
        """
        try:
            with self._transaction() as db:
                documents = {
                    row.category: dict(row.document)
                    for row in db.execute(
                        select(ArenaSnapshot).where(ArenaSnapshot.player_id == player_id)
                    ).scalars()
                }
        except SQLAlchemyError as e:
            logger.error(f"Failed to load snapshot for player {player_id}: {e}")
            return None

        if not documents:
            logger.debug(f"No snapshot stored for player {player_id}")
            return None

        player_document = documents.get(SnapshotCategory.PLAYER)
        progression_document = documents.get(SnapshotCategory.PROGRESSION)
        if player_document is None or progression_document is None:
            found = sorted(category.value for category in documents)
            logger.error(f"Snapshot for player {player_id} is incomplete: only {found} stored")
            return None

        version = player_document.get("schemaVersion")
        if not isinstance(version, int) or version > SCHEMA_VERSION:
            logger.error(
                f"Snapshot for player {player_id} has unsupported schema version "
                f"{version!r} (supported up to {SCHEMA_VERSION})"
            )
            return None

        try:
            snapshot = SessionSnapshot.from_documents(player_document, progression_document)
        except ValueError as e:
            logger.error(f"Snapshot for player {player_id} is unreadable: {e}")
            return None

        if snapshot.player_id != player_id:
            logger.error(
                f"Snapshot stored under player {player_id} belongs to {snapshot.player_id}"
            )
            return None

        return snapshot

    def delete(self, player_id: int) -> bool:
        """Delete a player's snapshot.

        Returns:
            True if a snapshot was deleted, False if none existed or the
            delete failed.
        """
        try:
            with self._transaction() as db:
                result = db.execute(
                    delete(ArenaSnapshot).where(ArenaSnapshot.player_id == player_id)
                )
                deleted = result.rowcount or 0
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete snapshot for player {player_id}: {e}")
            return False

        if deleted:
            logger.info(f"Deleted snapshot for player {player_id}")
        return deleted > 0

    def exists(self, player_id: int) -> bool:
        """Check whether any snapshot document is stored for a player."""
        try:
            with self._transaction() as db:
                count = db.execute(
                    select(func.count(ArenaSnapshot.id)).where(
                        ArenaSnapshot.player_id == player_id
                    )
                ).scalar_one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to check snapshot for player {player_id}: {e}")
            return False
        return count > 0

    def list_player_ids(self) -> list[int]:
        """Get ids of every player with a persisted snapshot.

        Raises:
            StorageError: If the store could not be scanned.
        """
        try:
            with self._transaction() as db:
                return list(
                    db.execute(
                        select(ArenaSnapshot.player_id)
                        .distinct()
                        .order_by(ArenaSnapshot.player_id)
                    ).scalars()
                )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to scan snapshots: {e}", operation="scan") from e

    def list_entries(self) -> list[SnapshotEntry]:
        """Summarize every persisted snapshot, ordered by capture time.

        Raises:
            StorageError: If the store could not be scanned.
        """
        try:
            with self._transaction() as db:
                rows = db.execute(
                    select(ArenaSnapshot)
                    .where(ArenaSnapshot.category == SnapshotCategory.PLAYER)
                    .order_by(ArenaSnapshot.captured_at, ArenaSnapshot.player_id)
                ).scalars()
                return [
                    SnapshotEntry(
                        player_id=row.player_id,
                        captured_at=row.captured_at,
                        schema_version=row.schema_version,
                        character_name=str(row.document.get("characterName") or ""),
                    )
                    for row in rows
                ]
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to scan snapshots: {e}", operation="scan") from e

    def delete_all(self) -> int:
        """Delete every persisted snapshot.

        Returns:
            Number of players whose snapshots were removed.

        Raises:
            StorageError: If the delete failed.
        """
        try:
            with self._transaction() as db:
                players = db.execute(
                    select(func.count(func.distinct(ArenaSnapshot.player_id)))
                ).scalar_one()
                db.execute(delete(ArenaSnapshot))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to clear snapshots: {e}", operation="delete_all") from e

        logger.info(f"Cleared snapshots for {players} players")
        return players

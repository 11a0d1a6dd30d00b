"""Tests for SnapshotStore."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from arena.database.models import ArenaSnapshot, SnapshotCategory
from arena.exceptions import StorageError
from arena.managers.snapshot_store import SnapshotStore
from arena.schemas.snapshot import SCHEMA_VERSION, InventoryEntry, SessionSnapshot, Vector3


def make_snapshot(player_id: int = 42, **overrides) -> SessionSnapshot:
    data = dict(
        player_id=player_id,
        character_name="Vlad",
        position=Vector3(x=10.0, y=0.0, z=10.0),
        health=420.0,
        blood_type=-700632469,
        blood_quality=80.0,
        inventory={0: InventoryEntry(item_id=7, amount=1)},
        ability_ids={1001},
        unlocked_boss_ids={1},
    )
    data.update(overrides)
    return SessionSnapshot(**data)


class TestSaveAndLoad:
    """Tests for save/load."""

    def test_load_returns_saved_snapshot(self, store: SnapshotStore):
        """A saved snapshot should load back unchanged."""
        snapshot = make_snapshot()

        store.save(42, snapshot)

        assert store.load(42) == snapshot

    def test_save_writes_one_row_per_category(self, store: SnapshotStore, session_factory):
        """Both category documents should be stored for the player."""
        store.save(42, make_snapshot())

        with session_factory() as db:
            rows = db.execute(select(ArenaSnapshot).where(ArenaSnapshot.player_id == 42)).scalars().all()

        assert {row.category for row in rows} == {SnapshotCategory.PLAYER, SnapshotCategory.PROGRESSION}
        assert all(row.schema_version == SCHEMA_VERSION for row in rows)

    def test_save_replaces_previous_snapshot(self, store: SnapshotStore, session_factory):
        """Saving again should overwrite, not duplicate."""
        store.save(42, make_snapshot(health=100.0))
        store.save(42, make_snapshot(health=250.0))

        with session_factory() as db:
            count = len(db.execute(select(ArenaSnapshot)).scalars().all())

        assert count == 2
        assert store.load(42).health == 250.0

    def test_save_rejects_foreign_snapshot(self, store: SnapshotStore):
        """A snapshot cannot be stored under another player's id."""
        with pytest.raises(ValueError):
            store.save(43, make_snapshot(player_id=42))

    def test_save_failure_raises_storage_error(self, store: SnapshotStore):
        """Database errors on save should surface as StorageError."""
        with patch.object(
            store, "_transaction", side_effect=OperationalError("INSERT", {}, Exception("disk full"))
        ):
            with pytest.raises(StorageError) as exc_info:
                store.save(42, make_snapshot())

        assert exc_info.value.operation == "save"
        assert exc_info.value.player_id == 42

    def test_players_are_independent(self, store: SnapshotStore):
        """Snapshots of different players should not interfere."""
        store.save(42, make_snapshot(42))
        store.save(7, make_snapshot(7, character_name="Alucard"))

        store.delete(42)

        assert store.load(42) is None
        assert store.load(7).character_name == "Alucard"


class TestLoadFailures:
    """Tests for unusable stored documents."""

    def test_missing_snapshot(self, store: SnapshotStore):
        """Loading an unknown player returns None."""
        assert store.load(99) is None

    def test_incomplete_snapshot(self, store: SnapshotStore, session_factory):
        """A snapshot with only one category stored is treated as missing."""
        store.save(42, make_snapshot())
        with session_factory() as db:
            db.query(ArenaSnapshot).filter(
                ArenaSnapshot.category == SnapshotCategory.PROGRESSION
            ).delete()
            db.commit()

        assert store.load(42) is None

    def test_newer_schema_version(self, store: SnapshotStore, session_factory, caplog):
        """Documents from a newer release are logged and not loaded."""
        store.save(42, make_snapshot())
        with session_factory() as db:
            row = db.execute(
                select(ArenaSnapshot).where(ArenaSnapshot.category == SnapshotCategory.PLAYER)
            ).scalar_one()
            row.document = {**row.document, "schemaVersion": SCHEMA_VERSION + 1}
            db.commit()

        assert store.load(42) is None
        assert "unsupported schema version" in caplog.text

    def test_corrupt_document(self, store: SnapshotStore, session_factory, caplog):
        """A document that fails validation is logged and not loaded."""
        store.save(42, make_snapshot())
        with session_factory() as db:
            row = db.execute(
                select(ArenaSnapshot).where(ArenaSnapshot.category == SnapshotCategory.PLAYER)
            ).scalar_one()
            row.document = {**row.document, "bloodQuality": "very high"}
            db.commit()

        assert store.load(42) is None
        assert "unreadable" in caplog.text

    def test_database_error_reads_as_missing(self, store: SnapshotStore):
        """Read errors are reported as not found."""
        with patch.object(
            store, "_transaction", side_effect=OperationalError("SELECT", {}, Exception("locked"))
        ):
            assert store.load(42) is None
            assert store.exists(42) is False
            assert store.delete(42) is False


class TestDeleteAndExists:
    """Tests for delete/exists."""

    def test_exists_after_save(self, store: SnapshotStore):
        store.save(42, make_snapshot())

        assert store.exists(42)
        assert not store.exists(7)

    def test_delete_removes_both_documents(self, store: SnapshotStore):
        """Delete should remove the whole snapshot."""
        store.save(42, make_snapshot())

        assert store.delete(42) is True
        assert store.exists(42) is False

    def test_delete_missing_returns_false(self, store: SnapshotStore):
        assert store.delete(42) is False


class TestOperatorQueries:
    """Tests for listing and purging."""

    def test_list_player_ids(self, store: SnapshotStore):
        store.save(42, make_snapshot(42))
        store.save(7, make_snapshot(7))

        assert store.list_player_ids() == [7, 42]

    def test_list_entries_ordered_by_capture_time(self, store: SnapshotStore):
        """Entries should summarize each player, oldest first."""
        earlier = datetime(2026, 1, 1, tzinfo=timezone.utc)
        store.save(42, make_snapshot(42, captured_at_utc=earlier + timedelta(hours=1)))
        store.save(7, make_snapshot(7, character_name="Alucard", captured_at_utc=earlier))

        entries = store.list_entries()

        assert [entry.player_id for entry in entries] == [7, 42]
        assert entries[0].character_name == "Alucard"
        assert entries[1].schema_version == SCHEMA_VERSION

    def test_delete_all(self, store: SnapshotStore):
        """Purge should remove every snapshot and count players."""
        store.save(42, make_snapshot(42))
        store.save(7, make_snapshot(7))

        assert store.delete_all() == 2
        assert store.list_player_ids() == []

    def test_scan_failure_raises(self, store: SnapshotStore):
        """Listing is an operator action, so failures are raised."""
        with patch.object(
            store, "_transaction", side_effect=OperationalError("SELECT", {}, Exception("gone"))
        ):
            with pytest.raises(StorageError):
                store.list_entries()

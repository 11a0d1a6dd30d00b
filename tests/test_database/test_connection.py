"""Tests for database connection helpers and models."""

import pytest
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError

from arena.database.connection import create_db_engine, drop_db, get_db_session, init_db
from arena.database.models import ArenaSnapshot, DefeatedBoss, SnapshotCategory
from arena.schemas.snapshot import utcnow


class TestInitDb:
    """Tests for creating and dropping tables."""

    def test_init_and_drop(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'init.db'}")
        try:
            init_db(bind=engine)
            assert {"arena_snapshots", "defeated_bosses"} <= set(inspect(engine).get_table_names())

            drop_db(bind=engine)
            assert inspect(engine).get_table_names() == []
        finally:
            engine.dispose()


class TestGetDbSession:
    """Tests for the session context manager."""

    def test_commits_on_success(self, session_factory):
        with get_db_session(session_factory) as db:
            db.add(DefeatedBoss(player_id=42, boss_id=1))

        with get_db_session(session_factory) as db:
            assert db.execute(select(DefeatedBoss)).scalar_one().boss_id == 1

    def test_rolls_back_on_error(self, session_factory):
        with pytest.raises(RuntimeError):
            with get_db_session(session_factory) as db:
                db.add(DefeatedBoss(player_id=42, boss_id=1))
                db.flush()
                raise RuntimeError("abort")

        with get_db_session(session_factory) as db:
            assert db.execute(select(DefeatedBoss)).scalars().all() == []


class TestModels:
    """Tests for model constraints."""

    def test_one_document_per_category(self, session_factory):
        """A player cannot hold two documents of the same category."""
        with pytest.raises(IntegrityError):
            with get_db_session(session_factory) as db:
                for _ in range(2):
                    db.add(
                        ArenaSnapshot(
                            player_id=42,
                            category=SnapshotCategory.PLAYER,
                            schema_version=1,
                            captured_at=utcnow(),
                            document={},
                        )
                    )

    def test_timestamps_set(self, session_factory):
        with get_db_session(session_factory) as db:
            row = ArenaSnapshot(
                player_id=42,
                category=SnapshotCategory.PROGRESSION,
                schema_version=1,
                captured_at=utcnow(),
                document={"playerId": 42},
            )
            db.add(row)

        assert row.created_at is not None
        assert "progression" in repr(row)

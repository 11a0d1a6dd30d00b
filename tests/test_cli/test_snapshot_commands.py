"""Tests for snapshot CLI commands."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from arena.cli.main import app
from arena.managers.snapshot_store import SnapshotStore
from arena.schemas.snapshot import EquipmentEntry, InventoryEntry, SessionSnapshot, Vector3


runner = CliRunner()


@pytest.fixture
def cli_store(session_factory):
    """Point the CLI at the test database."""
    with patch("arena.cli.commands.snapshots.SessionLocal", session_factory):
        yield SnapshotStore(session_factory)


def save_snapshot(store: SnapshotStore, player_id: int = 42, name: str = "Vlad") -> None:
    store.save(
        player_id,
        SessionSnapshot(
            player_id=player_id,
            character_name=name,
            position=Vector3(x=10.0, y=0.0, z=10.0),
            health=420.0,
            blood_type=-700632469,
            blood_quality=80.0,
            inventory={0: InventoryEntry(item_id=7, amount=1)},
            equipment=[EquipmentEntry(slot_id=2, item_id=300)],
        ),
    )


class TestSnapshotsList:
    """Tests for 'arena snapshots list'."""

    def test_empty(self, cli_store):
        result = runner.invoke(app, ["snapshots", "list"])

        assert result.exit_code == 0
        assert "No sessions need restore" in result.output

    def test_lists_players(self, cli_store):
        save_snapshot(cli_store, 42, "Vlad")
        save_snapshot(cli_store, 7, "Alucard")

        result = runner.invoke(app, ["snapshots", "list"])

        assert result.exit_code == 0
        assert "42" in result.output
        assert "Alucard" in result.output


class TestSnapshotsShow:
    """Tests for 'arena snapshots show'."""

    def test_shows_snapshot(self, cli_store):
        save_snapshot(cli_store)

        result = runner.invoke(app, ["snapshots", "show", "42"])

        assert result.exit_code == 0
        assert "Vlad" in result.output
        assert "Inventory" in result.output
        assert "Equipment" in result.output

    def test_missing_snapshot(self, cli_store):
        result = runner.invoke(app, ["snapshots", "show", "42"])

        assert result.exit_code == 1
        assert "No usable snapshot" in result.output


class TestSnapshotsDiscard:
    """Tests for 'arena snapshots discard'."""

    def test_discard_with_force(self, cli_store):
        save_snapshot(cli_store)

        result = runner.invoke(app, ["snapshots", "discard", "42", "--force"])

        assert result.exit_code == 0
        assert "Discarded" in result.output
        assert not cli_store.exists(42)

    def test_discard_cancelled(self, cli_store):
        save_snapshot(cli_store)

        result = runner.invoke(app, ["snapshots", "discard", "42"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert cli_store.exists(42)

    def test_discard_missing(self, cli_store):
        result = runner.invoke(app, ["snapshots", "discard", "42", "--force"])

        assert result.exit_code == 1
        assert "No snapshot for player 42" in result.output


class TestSnapshotsPurge:
    """Tests for 'arena snapshots purge'."""

    def test_purge_with_force(self, cli_store):
        save_snapshot(cli_store, 42)
        save_snapshot(cli_store, 7)

        result = runner.invoke(app, ["snapshots", "purge", "--force"])

        assert result.exit_code == 0
        assert "2 players" in result.output
        assert cli_store.list_player_ids() == []

    def test_purge_confirmed(self, cli_store):
        save_snapshot(cli_store)

        result = runner.invoke(app, ["snapshots", "purge"], input="y\n")

        assert result.exit_code == 0
        assert not cli_store.exists(42)


class TestInitDb:
    """Tests for 'arena init-db'."""

    def test_init_db(self):
        with patch("arena.cli.main.init_db") as mock_init:
            result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 0
        assert "Database initialized" in result.output
        mock_init.assert_called_once()

    def test_init_db_failure(self):
        with patch("arena.cli.main.init_db", side_effect=RuntimeError("no access")):
            result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 1
        assert "no access" in result.output

"""Core test fixtures for arena session tests."""

import pytest
from sqlalchemy.orm import sessionmaker

from arena.database.connection import create_db_engine
from arena.database.models import Base
from arena.managers.session_coordinator import SessionCoordinator
from arena.managers.session_registry import SessionRegistry
from arena.managers.snapshot_store import SnapshotStore
from arena.schemas.snapshot import InventoryEntry, LoadoutItem, Vector3
from fakes import FakeHost, RecordingHook

WARRIOR = -700632469
ARENA_SPAWN = Vector3(x=-1000.0, y=0.0, z=-500.0)
ARENA_ITEM = 900
ALLOW_LIST = (1001, 1002, 1003)


@pytest.fixture
def db_path(tmp_path):
    """Path of a per-test SQLite database file."""
    return tmp_path / "arena.db"


@pytest.fixture
def engine(db_path):
    """Create a file-backed SQLite engine so restarts can be simulated."""
    engine = create_db_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def store(session_factory) -> SnapshotStore:
    return SnapshotStore(session_factory)


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def host() -> FakeHost:
    """Host with player 42 at (10, 0, 10) holding item 7 and Warrior blood at 80%."""
    host = FakeHost()
    host.add_player(
        42,
        position=Vector3(x=10.0, y=0.0, z=10.0),
        health=420.0,
        blood=(WARRIOR, 80.0),
        name="Vlad",
        inventory={0: InventoryEntry(item_id=7, amount=1)},
        abilities={1001, 5000},
        bosses={1},
    )
    host.add_player(7, name="Alucard")
    return host


@pytest.fixture
def hook() -> RecordingHook:
    return RecordingHook()


@pytest.fixture
def coordinator(registry, store, host, hook) -> SessionCoordinator:
    """Coordinator with a small arena profile and inline dispatch."""
    return SessionCoordinator(
        registry,
        store,
        host,
        spawn_position=ARENA_SPAWN,
        loadout=[LoadoutItem(item_id=ARENA_ITEM, amount=1)],
        ability_allow_list=ALLOW_LIST,
        arena_blood_type=WARRIOR,
        arena_blood_quality=100.0,
        name_tag="[arena] ",
        hook=hook,
    )

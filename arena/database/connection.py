"""Database connection and session management."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from arena.config import settings
from arena.database.models import Base


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine suitable for concurrent per-player access.

    SQLite connections are shared across worker threads, so the
    same-thread check is disabled for them.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


# Create engine
engine = create_db_engine(settings.database_url, echo=settings.debug)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def init_db(bind: Engine | None = None) -> None:
    """Create the arena tables.

    This is mainly for development/testing. In production, use Alembic migrations.
    """
    Base.metadata.create_all(bind=bind or engine)


def drop_db(bind: Engine | None = None) -> None:
    """Drop the arena tables.

    WARNING: This deletes every persisted snapshot! Only use in development/testing.
    """
    Base.metadata.drop_all(bind=bind or engine)


@contextmanager
def get_db_session(
    session_factory: sessionmaker | None = None,
) -> Generator[Session, None, None]:
    """Get a database session with automatic commit/rollback.

    Usage:
        with get_db_session() as db:
            rows = db.query(ArenaSnapshot).all()
    """
    session = (session_factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

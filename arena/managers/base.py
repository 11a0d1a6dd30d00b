"""Base manager class with common patterns."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy.orm import Session, sessionmaker

from arena.database.connection import SessionLocal


class BaseManager:
    """Base class for database-backed arena managers.

    Provides common patterns:
    - One short-lived database session per operation, so managers are safe
      to share between threads working on different players
    - Commit on success, rollback on error
    """

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        """Initialize manager with a session factory.

        Args:
            session_factory: SQLAlchemy sessionmaker; defaults to the
                application's configured SessionLocal.
        """
        self.session_factory = session_factory or SessionLocal

    @contextmanager
    def _transaction(self) -> Generator[Session, None, None]:
        """Open a session that commits on exit and rolls back on error."""
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

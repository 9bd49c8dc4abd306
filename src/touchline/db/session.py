"""
Database session management for Touchline.

Provides SQLAlchemy engine and session factory with connection pooling
configured from config.py.

Usage:
    from touchline.db import get_session

    with get_session() as session:
        players = session.query(Player).all()
        session.add(new_player)
        # Commits automatically on exit, rolls back on exception
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from touchline.config import settings


def get_engine():
    """
    Create SQLAlchemy engine with connection pooling.

    The engine is configured with:
    - Connection pool for efficient reuse
    - SQL echo only when LOG_LEVEL=DEBUG
    - Pre-ping to verify connections before use (handles stale connections)
    """
    return create_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.log_level == "DEBUG",
    )


_engine = None


def _get_engine():
    """Get or create the singleton engine instance."""
    global _engine
    if _engine is None:
        _engine = get_engine()
    return _engine


class _LazySessionFactory:
    """
    Session factory that binds to the engine on first use.

    Importing this module must not open a database connection, so the
    engine is only created when the first session is requested.
    """

    def __init__(self):
        self._factory = None

    def __call__(self) -> Session:
        if self._factory is None:
            self._factory = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=_get_engine(),
            )
        return self._factory()


SessionLocal = _LazySessionFactory()


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Commits on successful exit, rolls back on exception. Services commit
    after each write as well, so a failure part way through a run only
    rolls back the record being processed.

    Raises:
        Any exception from the database operation (after rollback)
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

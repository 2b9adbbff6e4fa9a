"""Database engine and session factory.

Provides database connectivity and session management for the document
service. The engine is created lazily from settings so importing this module
never opens a connection or loads a driver.
"""

from contextlib import contextmanager
from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings


def build_engine(database_url: str) -> Engine:
    """Create an engine with pooling suited to the backend."""
    # Pool settings only apply to PostgreSQL (not SQLite)
    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": False,  # Set to True for SQL query logging
    }

    if not database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    return create_engine(database_url, **engine_kwargs)


@lru_cache()
def get_engine() -> Engine:
    return build_engine(get_settings().DATABASE_URL)


@lru_cache()
def get_session_factory() -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=get_engine(),
    )


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with session_scope(get_session_factory()) as session:
            session.get(StudentDocument, document_id)

    Automatically commits on success, rolls back on any exception
    (including cancellation).
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
    finally:
        session.close()

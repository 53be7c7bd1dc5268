"""
Database connection and session management.

The storage handle is an explicit ``Database`` object: the application
opens it once at startup, keeps it on ``app.state`` and disposes of it at
shutdown. Requests receive sessions through the ``get_db`` dependency.
"""

import os
from contextlib import contextmanager
from typing import Generator, List

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool, StaticPool

from rentdesk.db import migrations


def _ensure_sqlite_dir(database_url: str):
    """Create the parent directory of a file-backed SQLite database."""
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return
    path = database_url[len(prefix):]
    if not path or path == ":memory:":
        return
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def build_engine(database_url: str) -> Engine:
    """Create an engine suited to the database URL."""
    if database_url.startswith("postgresql"):
        return create_engine(database_url, poolclass=NullPool)

    _ensure_sqlite_dir(database_url)
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # Single shared connection so every session sees the same memory db
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        connect_args={"check_same_thread": False},  # Needed for SQLite
    )


class Database:
    """Owns the engine and session factory for one database."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=engine
        )

    @classmethod
    def open(cls, database_url: str) -> "Database":
        return cls(build_engine(database_url))

    def upgrade(self) -> List[int]:
        """Bring the schema up to date. Returns applied versions."""
        return migrations.upgrade(self.engine)

    def session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager for sessions used outside of a request."""
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def close(self):
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency for getting database session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()

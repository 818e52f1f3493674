"""Database initialization and utilities."""

from __future__ import annotations

from sqlite3 import Connection as SQLite3Connection
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from labgroups.config import GroupingConfig

from .models import Base


DEFAULT_DB_URL = GroupingConfig.db_url


def resolve_db_url(db_url: Optional[str] = None, cfg: Optional[GroupingConfig] = None) -> str:
    """Pick the database URL: explicit URL, then the config's, then the default."""
    if db_url:
        return db_url
    if cfg is not None and cfg.db_url:
        return cfg.db_url
    return DEFAULT_DB_URL


def _enable_sqlite_fk(dbapi_connection, connection_record):
    # Group history relies on ON DELETE SET NULL when groups are regenerated
    if isinstance(dbapi_connection, SQLite3Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.close()


def create_db_engine(db_url: Optional[str] = None, echo: bool = False) -> Engine:
    """Create SQLAlchemy engine with foreign keys enforced on SQLite."""
    engine = create_engine(resolve_db_url(db_url), echo=echo)
    event.listen(engine, "connect", _enable_sqlite_fk)
    return engine


def init_database(db_url: Optional[str] = None) -> None:
    """Initialize database and create all tables."""
    engine = create_db_engine(db_url)
    Base.metadata.create_all(engine)
    print(f"[INFO] Database initialized: {resolve_db_url(db_url)}")


def get_session_factory(db_url: Optional[str] = None, cfg: Optional[GroupingConfig] = None):
    """Get a session factory for the database named by db_url or the config."""
    engine = create_db_engine(resolve_db_url(db_url, cfg))
    return sessionmaker(bind=engine)


def get_session(db_url: Optional[str] = None, cfg: Optional[GroupingConfig] = None) -> Session:
    """Get a new database session."""
    SessionFactory = get_session_factory(db_url, cfg)
    return SessionFactory()


def reset_database(db_url: Optional[str] = None) -> None:
    """Drop all tables and recreate (WARNING: deletes all data!)."""
    engine = create_db_engine(db_url)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print(f"[WARN] Database reset: {resolve_db_url(db_url)}")

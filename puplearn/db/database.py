from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from config import get_settings
from puplearn.db.models.base import Base

_engine: Engine | None = None
_SessionLocal: sessionmaker | None = None


def _on_sqlite_connect(dbapi_connection, connection_record) -> None:
    # Hand transaction control to SQLAlchemy; pysqlite would otherwise
    # defer BEGIN until the first write.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn) -> None:
    # Take the write lock up front so read-modify-write transactions serialize
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(url: str, echo: bool = False) -> Engine:
    """
    Create an engine, preparing SQLite files and foreign key enforcement.

    On SQLite every transaction starts with BEGIN IMMEDIATE, which stands in
    for the row locks (SELECT ... FOR UPDATE) the backend does not have.
    """
    if url.startswith("sqlite:///") and not url.startswith("sqlite:///:memory:"):
        Path(url.removeprefix("sqlite:///")).expanduser().parent.mkdir(parents=True, exist_ok=True)

    new_engine = create_engine(url, echo=echo, pool_pre_ping=True)
    if url.startswith("sqlite"):
        event.listen(new_engine, "connect", _on_sqlite_connect)
        event.listen(new_engine, "begin", _on_sqlite_begin)
    return new_engine


def get_engine() -> Engine:
    """Get or create the database engine (lazy initialization)."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_db_engine(settings.database_url, echo=settings.log_level == "DEBUG")
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            bind=get_engine(), autocommit=False, autoflush=False, expire_on_commit=False
        )
    return _SessionLocal


def init_db(engine: Engine | None = None) -> None:
    """Initialize database tables."""
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("Database tables initialized")


@contextmanager
def session_scope(factory: sessionmaker | None = None) -> Generator[Session, None, None]:
    """Provide a transactional scope around a series of operations."""
    session = (factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:  # Intentionally broad - rollback on any error before re-raising
        session.rollback()
        raise
    finally:
        session.close()

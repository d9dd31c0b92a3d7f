from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool, QueuePool

import os

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./database.db")


def _is_sqlite_memory(url: str) -> bool:
    return ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:")


def _configure_sqlite(engine, in_memory: bool):
    """SQLite ignores SELECT ... FOR UPDATE, so writers are serialized with BEGIN IMMEDIATE instead."""

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        # Stop pysqlite from issuing its own BEGIN; the "begin" hook below does it.
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA busy_timeout=5000")  # Wait up to 5s for locks
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA temp_store=MEMORY")
        cursor.close()

    @event.listens_for(engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: str):
    """Create an engine for `url` with locking behaviour suited to the backend."""
    if url.startswith("sqlite"):
        in_memory = _is_sqlite_memory(url)
        options = {
            "connect_args": {"check_same_thread": False},
            "pool_pre_ping": True,
        }
        if in_memory:
            # One shared connection, otherwise every checkout sees an empty database
            options["poolclass"] = StaticPool
        engine = create_engine(url, **options)
        _configure_sqlite(engine, in_memory)
        return engine

    # For production databases, use connection pooling and real row locks
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=10,  # Number of connections to maintain
        max_overflow=20,  # Additional connections beyond pool_size
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,  # Recycle connections after 1 hour
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Dependency for getting database session with proper cleanup."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

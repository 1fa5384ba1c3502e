"""
core/database.py -- SQLAlchemy engine factory and shared schema metadata.

Both repositories (auth/store.py, inventory/store.py) register their tables
on the single `metadata` object defined here and share one Engine, so users
and items live in the same database and one readiness ping covers both.

Uses SQLAlchemy Core (not ORM): the domain dataclasses in auth/models.py and
inventory/models.py remain the authoritative representation. Swapping SQLite
for PostgreSQL is a connection string change, not a rewrite.

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""

from __future__ import annotations

import logging

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("stockroom.database")

metadata = MetaData()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) allows readers to proceed without blocking
    during writes. Set per-connection because SQLite PRAGMAs are not
    inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an Engine for db_url with SQLite-specific connection setup.

    SQLite requires check_same_thread=False because FastAPI runs sync route
    handlers in a threadpool, so one pooled connection may be used from
    several worker threads over its lifetime.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def init_schema(engine: Engine) -> None:
    """Create every registered table and index that does not exist yet.

    Idempotent. The stores call this on construction; `main.py init-db`
    calls it explicitly.
    """
    metadata.create_all(engine)


def ping(engine: Engine) -> bool:
    """Return True if the database answers a trivial query.

    Used by GET /ready. Connectivity errors are logged and reported as False
    so the probe can answer 503 instead of 500.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database ping failed")
        return False
    return True

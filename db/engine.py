"""
db/engine.py -- Async SQLAlchemy engine wrapper.

Database is the only object that talks to the driver. Everything above it
(TableAccessor, the stores, the services) builds SQLAlchemy Core statements
and hands them over; it never sees a connection or a cursor.

Connection pooling is SQLAlchemy's. File-backed SQLite gets QueuePool-style
pooling from the aiosqlite dialect; in-memory SQLite gets a single shared
connection (StaticPool), which is what the tests rely on.

Layer rule: no imports from api/, auth/ or users/.
"""

from __future__ import annotations

import logging

from sqlalchemy import MetaData, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql import Executable

logger = logging.getLogger("userdir.db")

# Every Table in the project registers itself here; create_all() builds them.
metadata = MetaData()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def _is_sqlite_file(db_url: str) -> bool:
    return db_url.startswith("sqlite") and ":memory:" not in db_url and "mode=memory" not in db_url


class Database:
    """Async database handle.

    Usage:
        db = Database("sqlite+aiosqlite:///:memory:")
        await db.create_all()
        rows = await db.fetch_all(select(users_table))
        await db.close()
    """

    def __init__(self, db_url: str) -> None:
        self.url = db_url
        self.engine: AsyncEngine = create_async_engine(db_url)
        if _is_sqlite_file(db_url):
            event.listen(self.engine.sync_engine, "connect", _set_wal_mode)

    async def create_all(self) -> None:
        """Create every table registered on the shared metadata. Idempotent."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)

    async def fetch_all(self, statement: Executable) -> list[dict]:
        """Run a row-returning statement and return plain dicts."""
        async with self.engine.connect() as conn:
            result = await conn.execute(statement)
            return [dict(row) for row in result.mappings()]

    async def insert(self, statement: Executable) -> int:
        """Run an INSERT in its own transaction and return the new primary key."""
        async with self.engine.begin() as conn:
            result = await conn.execute(statement)
            return result.inserted_primary_key[0]

    async def execute(self, statement: Executable) -> int:
        """Run an UPDATE/DELETE (or DDL) in its own transaction. Returns rowcount."""
        async with self.engine.begin() as conn:
            result = await conn.execute(statement)
            return result.rowcount

    async def ping(self) -> bool:
        """Return True if a trivial query succeeds. Used by GET /health."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Database ping failed")
            return False
        return True

    async def close(self) -> None:
        await self.engine.dispose()

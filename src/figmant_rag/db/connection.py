"""Database connection management with sqlite-vec or pgvector."""

import logging
from pathlib import Path

import aiosqlite
import sqlite_vec

from figmant_rag.config import get_database_url
from figmant_rag.db.backend import Database
from figmant_rag.db.sqlite_backend import SQLiteBackend
from figmant_rag.errors import ConfigurationError

logger = logging.getLogger(__name__)


async def create_connection(url: str | None = None, *, embedding_dim: int = 1536) -> Database:
    """Create and initialize a database connection.

    Dispatches on FIGMANT_DATABASE_URL (or ``url``): ``postgresql://`` uses
    asyncpg, anything else is a SQLite path. Pass ":memory:" for an
    in-memory SQLite database (used by tests).
    """
    target = url or get_database_url()
    if not target:
        raise ConfigurationError("FIGMANT_DATABASE_URL is not set")
    if target.startswith(("postgresql://", "postgres://")):
        return await _create_postgres(target, embedding_dim=embedding_dim)
    return await _create_sqlite(target, embedding_dim=embedding_dim)


async def _create_sqlite(db_path: Path | str, *, embedding_dim: int = 1536) -> Database:
    """Create a SQLite backend with sqlite-vec."""
    db_path = str(db_path)

    if db_path != ":memory:":
        db_path = str(Path(db_path).expanduser())
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row

    await conn.execute("PRAGMA journal_mode=WAL")

    # Load sqlite-vec extension using its native load() API
    try:

        def _load_vec() -> None:
            conn._conn.enable_load_extension(True)
            sqlite_vec.load(conn._conn)
            conn._conn.enable_load_extension(False)

        await conn._execute(_load_vec)  # type: ignore[no-untyped-call]
        logger.debug("sqlite-vec extension loaded")
    except Exception:
        logger.warning("sqlite-vec extension not available: vector search disabled")

    db = SQLiteBackend(conn)
    await db.apply_schema(embedding_dim=embedding_dim)

    return db


async def _create_postgres(url: str, *, embedding_dim: int = 1536) -> Database:
    """Create a PostgreSQL backend with pgvector."""
    from figmant_rag.db.postgres_backend import PostgresBackend

    db = await PostgresBackend.create(url)
    await db.apply_schema(embedding_dim=embedding_dim)
    return db

"""PostgreSQL backend: asyncpg pool plus pgvector.

Queries arrive with SQLite ``?`` placeholders and are rewritten to asyncpg's
``$1, $2, ...`` before running.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import asyncpg

    from figmant_rag.db.backend import Cursor, Row

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\?")

_DDL = (
    "CREATE EXTENSION IF NOT EXISTS vector",
    "CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)",
    """CREATE TABLE IF NOT EXISTS knowledge_entries (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        source TEXT NOT NULL DEFAULT '',
        category TEXT NOT NULL,
        tags TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        has_embedding INTEGER NOT NULL DEFAULT 0
    )""",
    "CREATE INDEX IF NOT EXISTS idx_entries_category ON knowledge_entries(category)",
    "CREATE INDEX IF NOT EXISTS idx_entries_created ON knowledge_entries(created_at)",
)


def _translate_placeholders(sql: str) -> str:
    """Number each ``?`` placeholder in order of appearance."""
    numbers = iter(range(1, sql.count("?") + 1))
    return _PLACEHOLDER_RE.sub(lambda _m: f"${next(numbers)}", sql)


def _vector_literal(embedding: list[float]) -> str:
    """pgvector text input format: [0.1,0.2,...]."""
    return "[" + ",".join(str(v) for v in embedding) + "]"


class PostgresCursor:
    """Eagerly fetched asyncpg records behind the Cursor protocol.

    asyncpg.Record already supports lookup by name and position, so records
    are handed out as rows unchanged.
    """

    def __init__(self, records: list[asyncpg.Record]) -> None:
        """Wrap a fetched result list."""
        self._records = records
        self._position = 0

    async def fetchone(self) -> Row | None:
        """Next record, or None when exhausted."""
        if self._position >= len(self._records):
            return None
        self._position += 1
        return self._records[self._position - 1]

    async def fetchall(self) -> list[Row]:
        """Every record not yet returned."""
        remaining = list(self._records[self._position :])
        self._position = len(self._records)
        return remaining


class PostgresBackend:
    """Database protocol over an asyncpg pool.

    Statements auto-commit, so ``commit()`` does nothing.
    """

    def __init__(self, pool: asyncpg.Pool) -> None:
        """Wrap an existing pool."""
        self._pool = pool

    @classmethod
    async def create(cls, url: str) -> PostgresBackend:
        """Open a pool for a ``postgresql://`` URL."""
        import asyncpg as _asyncpg

        pool = await _asyncpg.create_pool(url, min_size=1, max_size=10)
        logger.info("PostgreSQL pool opened")
        return cls(pool)

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Run one statement; rows (if any) are fetched eagerly."""
        async with self._pool.acquire() as conn:
            records = await conn.fetch(_translate_placeholders(sql), *params)
        return PostgresCursor(records)

    async def executescript(self, sql: str) -> None:
        """Run a multi-statement script."""
        async with self._pool.acquire() as conn:
            await conn.execute(sql)

    async def commit(self) -> None:
        """Nothing to do with auto-commit."""

    async def close(self) -> None:
        """Close the pool."""
        await self._pool.close()

    async def vector_store(self, entry_id: str, embedding: list[float]) -> None:
        """Upsert an embedding row."""
        async with self._pool.acquire() as conn:
            await conn.execute(
                """INSERT INTO knowledge_vec (entry_id, embedding)
                   VALUES ($1, $2::vector)
                   ON CONFLICT (entry_id) DO UPDATE SET embedding = EXCLUDED.embedding""",
                entry_id,
                _vector_literal(embedding),
            )

    async def vector_search(
        self, embedding: list[float], *, threshold: float, limit: int
    ) -> list[tuple[str, float]]:
        """Cosine similarity via pgvector's ``<=>`` distance operator."""
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(
                """SELECT entry_id, 1 - (embedding <=> $1::vector) AS similarity
                   FROM knowledge_vec
                   WHERE 1 - (embedding <=> $1::vector) >= $2
                   ORDER BY embedding <=> $1::vector
                   LIMIT $3""",
                _vector_literal(embedding),
                threshold,
                limit,
            )
        return [(row["entry_id"], float(row["similarity"])) for row in rows]

    async def apply_schema(self, *, embedding_dim: int = 1536) -> None:
        """Create tables, indexes and the pgvector column if missing."""
        async with self._pool.acquire() as conn:
            for statement in _DDL:
                await conn.execute(statement)
            await conn.execute(
                f"""CREATE TABLE IF NOT EXISTS knowledge_vec (
                    entry_id TEXT PRIMARY KEY REFERENCES knowledge_entries(id),
                    embedding vector({embedding_dim})
                )"""
            )
            if await conn.fetchval("SELECT version FROM schema_version") is None:
                await conn.execute("INSERT INTO schema_version (version) VALUES ($1)", 1)

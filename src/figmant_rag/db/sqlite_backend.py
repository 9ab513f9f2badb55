"""SQLite backend: aiosqlite plus the sqlite-vec ``vec0`` table."""

from __future__ import annotations

import logging
import struct
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import aiosqlite

    from figmant_rag.db.backend import Cursor, Row

logger = logging.getLogger(__name__)


def _serialize_f32(vec: list[float]) -> bytes:
    """Pack floats as little-endian float32, the blob format vec0 expects."""
    return struct.pack(f"{len(vec)}f", *vec)


class SQLiteCursor:
    """aiosqlite cursor behind the Cursor protocol."""

    def __init__(self, cursor: aiosqlite.Cursor) -> None:
        """Wrap an aiosqlite cursor."""
        self._cursor = cursor

    async def fetchone(self) -> Row | None:
        """Next row, or None when exhausted."""
        return await self._cursor.fetchone()

    async def fetchall(self) -> list[Row]:
        """All remaining rows."""
        return list(await self._cursor.fetchall())


class SQLiteBackend:
    """Database protocol over a single aiosqlite connection.

    ``_conn`` stays reachable for setup-only work (extension loading, PRAGMA)
    done in ``db.connection``.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Wrap an open connection."""
        self._conn = conn

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Run one statement."""
        return SQLiteCursor(await self._conn.execute(sql, params))

    async def executescript(self, sql: str) -> None:
        """Run several statements."""
        await self._conn.executescript(sql)

    async def commit(self) -> None:
        """Commit pending writes."""
        await self._conn.commit()

    async def close(self) -> None:
        """Close the connection."""
        await self._conn.close()

    async def vector_store(self, entry_id: str, embedding: list[float]) -> None:
        """Replace the entry's vec0 row."""
        # vec0 has no upsert
        await self._conn.execute("DELETE FROM knowledge_vec WHERE entry_id = ?", (entry_id,))
        await self._conn.execute(
            "INSERT INTO knowledge_vec (entry_id, embedding) VALUES (?, ?)",
            (entry_id, _serialize_f32(embedding)),
        )

    async def vector_search(
        self, embedding: list[float], *, threshold: float, limit: int
    ) -> list[tuple[str, float]]:
        """KNN over cosine distance, then drop rows under ``threshold``.

        vec0 cannot filter on distance inside the KNN query. Rows come back
        nearest first, so filtering the ``limit`` nearest is the same as
        taking the first ``limit`` matches above the threshold.
        """
        cursor = await self._conn.execute(
            """SELECT entry_id, distance
            FROM knowledge_vec
            WHERE embedding MATCH ?
            ORDER BY distance
            LIMIT ?""",
            (_serialize_f32(embedding), limit),
        )
        scored = [(entry_id, 1.0 - distance) for entry_id, distance in await cursor.fetchall()]
        return [(entry_id, sim) for entry_id, sim in scored if sim >= threshold]

    async def apply_schema(self, *, embedding_dim: int = 1536) -> None:
        """Create the entry tables, then the vec0 table if sqlite-vec is loaded."""
        from figmant_rag.db.schema import apply_schema, apply_vec_schema

        await apply_schema(self)
        try:
            await apply_vec_schema(self, dim=embedding_dim)
        except Exception:
            logger.warning("vec0 table not created; vector search disabled", exc_info=True)

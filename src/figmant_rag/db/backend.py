"""Storage protocols shared by the SQLite and PostgreSQL backends.

Queries are written once in SQLite syntax with ``?`` placeholders; each
backend adapts them. Vector storage and similarity search are backend
methods because the two engines expose them differently (vec0 vs pgvector).
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Row(Protocol):
    """A result row addressable by column name."""

    def __getitem__(self, key: str | int) -> Any:
        """Column value by name or position."""
        ...


@runtime_checkable
class Cursor(Protocol):
    """Result of Database.execute()."""

    async def fetchone(self) -> Row | None:
        """Next row, or None when exhausted."""
        ...

    async def fetchall(self) -> list[Row]:
        """All remaining rows."""
        ...


@runtime_checkable
class Database(Protocol):
    """Async knowledge store connection."""

    async def execute(self, sql: str, params: tuple[Any, ...] | list[Any] = ()) -> Cursor:
        """Run one statement."""
        ...

    async def executescript(self, sql: str) -> None:
        """Run several DDL statements."""
        ...

    async def commit(self) -> None:
        """Commit pending writes."""
        ...

    async def close(self) -> None:
        """Release the connection or pool."""
        ...

    async def vector_store(self, entry_id: str, embedding: list[float]) -> None:
        """Insert or replace the embedding for an entry."""
        ...

    async def vector_search(
        self, embedding: list[float], *, threshold: float, limit: int
    ) -> list[tuple[str, float]]:
        """(entry_id, cosine similarity) pairs with similarity >= threshold, best first."""
        ...

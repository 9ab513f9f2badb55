"""Query helpers for common database operations."""

import json
from datetime import UTC, datetime
from typing import Any

from figmant_rag.db.backend import Database, Row
from figmant_rag.models.entry import KnowledgeEntry

_LIKE_ESCAPE = "\\"


def row_to_entry(row: Row, similarity: float | None = None) -> KnowledgeEntry:
    """Convert a database row to a KnowledgeEntry."""
    return KnowledgeEntry(
        id=row["id"],
        title=row["title"],
        content=row["content"],
        source=row["source"] or "",
        category=row["category"],
        tags=_parse_tags(row["tags"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        has_embedding=bool(row["has_embedding"]),
        similarity=similarity,
    )


async def insert_entry(db: Database, entry: KnowledgeEntry) -> None:
    """Insert a new knowledge entry."""
    await db.execute(
        """INSERT INTO knowledge_entries
        (id, title, content, source, category, tags, created_at, has_embedding)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            entry.id,
            entry.title,
            entry.content,
            entry.source,
            entry.category,
            json.dumps(entry.tags, ensure_ascii=False),
            entry.created_at.isoformat() if entry.created_at else _now_iso(),
            int(entry.has_embedding),
        ),
    )
    await db.commit()


async def get_entry(db: Database, entry_id: str) -> KnowledgeEntry | None:
    """Get a single entry by ID."""
    cursor = await db.execute("SELECT * FROM knowledge_entries WHERE id = ?", (entry_id,))
    row = await cursor.fetchone()
    return row_to_entry(row) if row else None


async def get_entries(db: Database, entry_ids: list[str]) -> dict[str, KnowledgeEntry]:
    """Fetch several entries at once, keyed by ID. Missing IDs are absent."""
    if not entry_ids:
        return {}
    placeholders = ",".join("?" for _ in entry_ids)
    cursor = await db.execute(
        "SELECT * FROM knowledge_entries WHERE id IN (" + placeholders + ")",  # noqa: S608
        list(entry_ids),
    )
    rows = await cursor.fetchall()
    return {row["id"]: row_to_entry(row) for row in rows}


async def count_entries(db: Database) -> int:
    """Total number of knowledge entries."""
    cursor = await db.execute("SELECT COUNT(*) AS total FROM knowledge_entries")
    row = await cursor.fetchone()
    if row is None:
        raise RuntimeError("COUNT query returned no rows")
    return int(row["total"])


async def keyword_search(db: Database, term: str, limit: int = 5) -> list[KnowledgeEntry]:
    """Case-insensitive substring match on title or content, or exact tag membership.

    Tags are stored as a JSON array, so membership is a match on the quoted tag.
    """
    needle = term.strip().lower()
    if not needle:
        return []
    substring = f"%{_escape_like(needle)}%"
    quoted_tag = f"%{_escape_like(json.dumps(needle, ensure_ascii=False))}%"
    cursor = await db.execute(
        """SELECT * FROM knowledge_entries
        WHERE LOWER(title) LIKE ? ESCAPE '\\'
           OR LOWER(content) LIKE ? ESCAPE '\\'
           OR LOWER(tags) LIKE ? ESCAPE '\\'
        ORDER BY created_at DESC, id
        LIMIT ?""",
        (substring, substring, quoted_tag, limit),
    )
    return [row_to_entry(row) for row in await cursor.fetchall()]


async def entries_by_category(db: Database, category: str, limit: int = 3) -> list[KnowledgeEntry]:
    """Newest entries in one category."""
    cursor = await db.execute(
        "SELECT * FROM knowledge_entries WHERE category = ? ORDER BY created_at DESC, id LIMIT ?",
        (category, limit),
    )
    return [row_to_entry(row) for row in await cursor.fetchall()]


async def recent_entries(db: Database, limit: int = 10) -> list[KnowledgeEntry]:
    """The most recently created entries, regardless of category."""
    cursor = await db.execute(
        "SELECT * FROM knowledge_entries ORDER BY created_at DESC, id LIMIT ?",
        (limit,),
    )
    return [row_to_entry(row) for row in await cursor.fetchall()]


async def entries_without_embeddings(db: Database, limit: int | None = None) -> list[KnowledgeEntry]:
    """Entries still missing an embedding, oldest first."""
    sql = "SELECT * FROM knowledge_entries WHERE has_embedding = 0 ORDER BY created_at, id"
    params: list[Any] = []
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)
    cursor = await db.execute(sql, params)
    return [row_to_entry(row) for row in await cursor.fetchall()]


async def mark_embedding(db: Database, entry_id: str, has_embedding: bool = True) -> None:
    """Flag an entry as having (or not having) a stored embedding."""
    await db.execute(
        "UPDATE knowledge_entries SET has_embedding = ? WHERE id = ?",
        (int(has_embedding), entry_id),
    )
    await db.commit()


async def get_db_stats(db: Database) -> dict[str, Any]:
    """Return database statistics: entry counts by category and embedding coverage."""
    stats: dict[str, Any] = {}

    cursor = await db.execute(
        "SELECT COUNT(*) AS total, SUM(has_embedding) AS with_emb FROM knowledge_entries"
    )
    row = await cursor.fetchone()
    if row is None:
        raise RuntimeError("COUNT query returned no rows")
    total = int(row["total"])
    with_emb = int(row["with_emb"] or 0)
    stats["total_entries"] = total
    stats["with_embeddings"] = with_emb
    stats["without_embeddings"] = total - with_emb

    cursor = await db.execute(
        "SELECT category, COUNT(*) AS cnt FROM knowledge_entries"
        " GROUP BY category ORDER BY category"
    )
    stats["by_category"] = {row["category"]: row["cnt"] for row in await cursor.fetchall()}

    return stats


def _parse_tags(raw: str | None) -> list[str]:
    """Parse tags from storage format (a JSON array)."""
    if not raw or not raw.strip():
        return []
    parsed = json.loads(raw)
    return [str(tag) for tag in parsed] if isinstance(parsed, list) else []


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return (
        value.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()

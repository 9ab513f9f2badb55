"""Read and bookkeeping operations for knowledge entries."""

import logging
import uuid
from datetime import UTC, datetime

from figmant_rag.db.backend import Database
from figmant_rag.db.queries import (
    count_entries,
    entries_without_embeddings,
    get_entry,
    insert_entry,
    mark_embedding,
)
from figmant_rag.models.entry import KnowledgeEntry

logger = logging.getLogger(__name__)


class KnowledgeStore:
    """Access to the knowledge_entries table.

    Entries are immutable once created; the only write after creation is
    the embedding bookkeeping flag.
    """

    def __init__(self, db: Database):
        """Initialize with a database connection."""
        self.db = db

    async def create_entry(
        self,
        title: str,
        content: str,
        category: str,
        source: str = "",
        tags: list[str] | None = None,
        entry_id: str | None = None,
        created_at: datetime | None = None,
    ) -> KnowledgeEntry:
        """Create a new knowledge entry."""
        entry = KnowledgeEntry(
            id=entry_id or str(uuid.uuid4()),
            title=title,
            content=content,
            source=source,
            category=category,
            tags=tags or [],
            created_at=created_at or datetime.now(UTC),
        )
        await insert_entry(self.db, entry)
        logger.info("Created entry %s: %s", entry.id, title)
        return entry

    async def get_entry(self, entry_id: str) -> KnowledgeEntry | None:
        """Get a single entry by ID."""
        return await get_entry(self.db, entry_id)

    async def count_entries(self) -> int:
        """Total number of entries in the store."""
        return await count_entries(self.db)

    async def mark_embedding(self, entry_id: str, has_embedding: bool = True) -> None:
        """Mark an entry as having (or not having) an embedding."""
        await mark_embedding(self.db, entry_id, has_embedding)

    async def get_entries_without_embeddings(
        self, limit: int | None = None
    ) -> list[KnowledgeEntry]:
        """Entries that still need an embedding, oldest first."""
        return await entries_without_embeddings(self.db, limit)

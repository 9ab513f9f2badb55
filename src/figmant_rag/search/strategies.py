"""Retrieval strategies: vector, keyword and category lookups for one term.

Each strategy is an async callable ``(term) -> list[KnowledgeEntry]`` with a
``name``. ``run_chain`` tries them in order and stops at the first one that
returns anything.
"""

import logging
from typing import Protocol

from figmant_rag.config import RetrievalSettings
from figmant_rag.db.backend import Database
from figmant_rag.db.queries import entries_by_category, get_entries, keyword_search
from figmant_rag.models.entry import KnowledgeEntry
from figmant_rag.search.embeddings import Embedder
from figmant_rag.taxonomy import category_for

logger = logging.getLogger(__name__)


class Strategy(Protocol):
    """One way of finding entries for a search term."""

    name: str

    async def __call__(self, term: str) -> list[KnowledgeEntry]:
        """Return matching entries with ``similarity`` set, or an empty list."""
        ...


class VectorStrategy:
    """Embedding similarity with progressive threshold relaxation."""

    name = "vector"

    def __init__(self, db: Database, embedder: Embedder, settings: RetrievalSettings):
        """Initialize with a database, an embedder and retrieval settings."""
        self.db = db
        self.embedder = embedder
        self.settings = settings

    async def __call__(self, term: str) -> list[KnowledgeEntry]:
        """Search at each threshold, strictest first; stop at the first hit."""
        embedding = await self.embedder.embed(term)
        for threshold in self.settings.vector_thresholds:
            hits = await self.db.vector_search(
                embedding, threshold=threshold, limit=self.settings.vector_limit
            )
            if not hits:
                continue
            logger.debug("Vector hits for %r at threshold %.2f: %d", term, threshold, len(hits))
            entries = await get_entries(self.db, [entry_id for entry_id, _ in hits])
            return [
                entries[entry_id].scored(similarity)
                for entry_id, similarity in hits
                if entry_id in entries
            ]
        return []


class KeywordStrategy:
    """Substring match on title/content or exact tag match."""

    name = "keyword"

    def __init__(self, db: Database, settings: RetrievalSettings):
        """Initialize with a database and retrieval settings."""
        self.db = db
        self.settings = settings

    async def __call__(self, term: str) -> list[KnowledgeEntry]:
        """Return keyword matches at a constant moderate similarity."""
        rows = await keyword_search(self.db, term, limit=self.settings.keyword_limit)
        return [entry.scored(self.settings.keyword_similarity) for entry in rows]


class CategoryStrategy:
    """Static keyword → category lookup."""

    name = "category"

    def __init__(self, db: Database, settings: RetrievalSettings):
        """Initialize with a database and retrieval settings."""
        self.db = db
        self.settings = settings

    async def __call__(self, term: str) -> list[KnowledgeEntry]:
        """Return entries from the term's mapped category, if it has one."""
        category = category_for(term)
        if category is None:
            return []
        rows = await entries_by_category(self.db, category, limit=self.settings.category_limit)
        return [entry.scored(self.settings.category_similarity) for entry in rows]


async def run_chain(
    strategies: list[Strategy], term: str
) -> tuple[str | None, list[KnowledgeEntry]]:
    """Try each strategy in order; return the first non-empty result and its name.

    A strategy that raises is logged and counts as empty.
    """
    for strategy in strategies:
        try:
            results = await strategy(term)
        except Exception:
            logger.warning("%s strategy failed for term %r", strategy.name, term, exc_info=True)
            continue
        if results:
            return strategy.name, results
    return None, []

"""Multi-strategy retrieval across all search terms with a global fallback."""

import logging
from dataclasses import dataclass, field

from figmant_rag.config import RetrievalSettings
from figmant_rag.db.backend import Database
from figmant_rag.db.queries import recent_entries
from figmant_rag.models.entry import KnowledgeEntry
from figmant_rag.search.embeddings import Embedder
from figmant_rag.search.strategies import (
    CategoryStrategy,
    KeywordStrategy,
    Strategy,
    VectorStrategy,
    run_chain,
)

logger = logging.getLogger(__name__)


@dataclass
class TermResult:
    """Entries found for one term and the strategy that found them."""

    term: str
    strategy: str | None
    entries: list[KnowledgeEntry] = field(default_factory=list)


@dataclass
class RetrievalResult:
    """Outcome of retrieving every term of a request."""

    entries: list[KnowledgeEntry]
    terms_used: list[str]
    fallback_used: bool = False


class MultiStrategyRetriever:
    """Runs the strategy chain per term, then folds the results.

    Terms are processed sequentially. Each term contributes its own list and
    the lists are concatenated at the end; nothing is shared between steps.
    """

    def __init__(
        self,
        db: Database,
        embedder: Embedder | None,
        settings: RetrievalSettings | None = None,
    ):
        """Initialize with a database, an optional embedder and settings."""
        self.db = db
        self.settings = settings or RetrievalSettings()
        self.strategies: list[Strategy] = []
        if embedder is not None:
            self.strategies.append(VectorStrategy(db, embedder, self.settings))
        self.strategies.append(KeywordStrategy(db, self.settings))
        self.strategies.append(CategoryStrategy(db, self.settings))

    async def retrieve(self, term: str) -> TermResult:
        """Run the strategy chain for a single term."""
        strategy, entries = await run_chain(self.strategies, term)
        if strategy is None:
            logger.info("No results for term %r", term)
        else:
            logger.info("Term %r: %d result(s) via %s", term, len(entries), strategy)
        return TermResult(term=term, strategy=strategy, entries=entries)

    async def retrieve_all(self, terms: list[str]) -> RetrievalResult:
        """Retrieve every term, adding recent entries when too little was found."""
        results = [await self.retrieve(term) for term in terms]

        entries = [entry for result in results for entry in result.entries]
        terms_used = [result.term for result in results if result.entries]

        distinct = {entry.id for entry in entries}
        if len(distinct) >= self.settings.fallback_min_entries:
            return RetrievalResult(entries=entries, terms_used=terms_used)

        logger.info(
            "Only %d distinct entries found across %d terms: adding recent entries",
            len(distinct),
            len(terms),
        )
        fallback = await self._global_fallback()
        return RetrievalResult(
            entries=entries + fallback, terms_used=terms_used, fallback_used=True
        )

    async def _global_fallback(self) -> list[KnowledgeEntry]:
        """The most recent entries at a low, clearly-marked similarity."""
        try:
            rows = await recent_entries(self.db, limit=self.settings.fallback_limit)
        except Exception:
            logger.warning("Global fallback query failed", exc_info=True)
            return []
        return [entry.scored(self.settings.fallback_similarity) for entry in rows]

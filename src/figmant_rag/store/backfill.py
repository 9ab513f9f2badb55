"""Embedding backfill for entries that were stored without a vector."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from figmant_rag.search.embeddings import EmbeddingClient
from figmant_rag.store.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)

TEST_MODE_LIMIT = 5
DEFAULT_BATCH_SIZE = 10
ENTRY_DELAY_SECONDS = 0.1
BATCH_DELAY_SECONDS = 2.0
REPORTED_RESULTS = 10


class EntryBackfillResult(BaseModel):
    """Outcome for a single entry."""

    id: str
    title: str
    success: bool
    error: str | None = None
    tokens_used: int = 0


class BackfillReport(BaseModel):
    """Summary of a backfill run."""

    total_entries: int = 0
    processed: int = 0
    failed: int = 0
    total_tokens_used: int = 0
    test_mode: bool = False
    results: list[EntryBackfillResult] = Field(default_factory=list)


class EmbeddingBackfill:
    """Embeds entries missing a vector, in batches, recording per-entry failures."""

    def __init__(
        self,
        store: KnowledgeStore,
        embedder: EmbeddingClient,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize with a store, an embedding client and a sleep hook."""
        self.store = store
        self.embedder = embedder
        self._sleep = sleep

    async def run(
        self, *, test_mode: bool = False, batch_size: int = DEFAULT_BATCH_SIZE
    ) -> BackfillReport:
        """Embed every entry without an embedding (at most 5 in test mode)."""
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")

        limit = TEST_MODE_LIMIT if test_mode else None
        pending = await self.store.get_entries_without_embeddings(limit=limit)
        report = BackfillReport(total_entries=len(pending), test_mode=test_mode)
        if not pending:
            logger.info("No entries missing embeddings")
            return report

        batches = [pending[i : i + batch_size] for i in range(0, len(pending), batch_size)]
        logger.info("Backfilling %d entries in %d batch(es)", len(pending), len(batches))

        results: list[EntryBackfillResult] = []
        for batch_index, batch in enumerate(batches):
            for entry in batch:
                try:
                    vector, tokens = await self.embedder.embed_with_usage(entry.embedding_text)
                    await self.embedder.store_embedding(entry.id, vector)
                    await self.store.mark_embedding(entry.id, True)
                except Exception as exc:
                    logger.warning("Backfill failed for %s", entry.id, exc_info=True)
                    results.append(
                        EntryBackfillResult(
                            id=entry.id, title=entry.title, success=False, error=str(exc)
                        )
                    )
                    continue
                results.append(
                    EntryBackfillResult(
                        id=entry.id, title=entry.title, success=True, tokens_used=tokens
                    )
                )
                await self._sleep(ENTRY_DELAY_SECONDS)

            if batch_index < len(batches) - 1:
                await self._sleep(BATCH_DELAY_SECONDS)

        report.processed = sum(1 for r in results if r.success)
        report.failed = len(results) - report.processed
        report.total_tokens_used = sum(r.tokens_used for r in results)
        report.results = results[:REPORTED_RESULTS]
        logger.info(
            "Backfill complete: %d processed, %d failed, %d tokens",
            report.processed,
            report.failed,
            report.total_tokens_used,
        )
        return report

"""kb_maintain MCP tool: knowledge store maintenance operations."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from figmant_rag.db.backend import Database
from figmant_rag.db.queries import get_db_stats
from figmant_rag.search.embeddings import EmbeddingClient
from figmant_rag.store.backfill import BackfillReport, EmbeddingBackfill
from figmant_rag.store.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)

_ACTIONS = {"stats", "backfill_embeddings"}


def register_kb_maintain(mcp: FastMCP) -> None:
    """Register the kb_maintain tool with the MCP server."""

    @mcp.tool()
    async def kb_maintain(
        action: Annotated[
            str,
            Field(description="Maintenance action: stats, backfill_embeddings"),
        ],
        test_mode: Annotated[
            bool,
            Field(description="For backfill_embeddings: process at most 5 entries"),
        ] = False,
        batch_size: Annotated[
            int,
            Field(description="For backfill_embeddings: entries per batch", ge=1, le=100),
        ] = 10,
        ctx: Context | None = None,
    ) -> str:
        """Administrative maintenance operations for the knowledge store.

        Requires FIGMANT_MANAGER=TRUE environment variable.

        Actions:
        - stats: Entry counts by category and embedding coverage
        - backfill_embeddings: Embed entries that have no vector yet
        """
        if ctx is None:
            raise RuntimeError("Context not injected")

        if action not in _ACTIONS:
            return f"Unknown action '{action}'. Use: {', '.join(sorted(_ACTIONS))}"

        lifespan = ctx.lifespan_context
        db: Database = lifespan["db"]
        store: KnowledgeStore = lifespan["store"]
        embedder: EmbeddingClient = lifespan["embedder"]

        if action == "stats":
            return await action_stats(db)
        return await action_backfill(store, embedder, test_mode=test_mode, batch_size=batch_size)


async def action_stats(db: Database) -> str:
    """Knowledge store overview with counts."""
    stats = await get_db_stats(db)
    lines = [
        f"Entries: {stats['total_entries']}",
        f"Embeddings: {stats['with_embeddings']} with, {stats['without_embeddings']} without",
    ]
    if stats["by_category"]:
        lines.append("By category:")
        lines.extend(f"  {category}: {count}" for category, count in stats["by_category"].items())
    return "\n".join(lines)


async def action_backfill(
    store: KnowledgeStore,
    embedder: EmbeddingClient,
    *,
    test_mode: bool = False,
    batch_size: int = 10,
) -> str:
    """Embed entries without a vector and summarize the run."""
    report = await EmbeddingBackfill(store, embedder).run(
        test_mode=test_mode, batch_size=batch_size
    )
    return format_backfill_report(report)


def format_backfill_report(report: BackfillReport) -> str:
    """Counts line plus one line per reported failure."""
    if report.total_entries == 0:
        return "No entries missing embeddings."
    mode = " (test mode)" if report.test_mode else ""
    lines = [
        f"Backfilled {report.processed}/{report.total_entries} entries{mode}, "
        f"{report.failed} failed, {report.total_tokens_used} tokens used."
    ]
    lines.extend(
        f"  FAILED [{r.id}] {r.title}: {r.error}" for r in report.results if not r.success
    )
    return "\n".join(lines)

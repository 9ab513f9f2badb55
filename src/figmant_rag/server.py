"""FastMCP server with lifespan management, tool and route registration."""

import asyncio
import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from figmant_rag.config import get_embedding_dim, get_log_level, is_manager_mode, validate_config
from figmant_rag.context.builder import RAGContextBuilder
from figmant_rag.db.backend import Database
from figmant_rag.db.connection import create_connection
from figmant_rag.errors import FigmantError, StoreUnavailableError
from figmant_rag.search.embeddings import EmbeddingClient
from figmant_rag.store.knowledge_store import KnowledgeStore
from figmant_rag.tools.build_rag_context import register_build_rag_context
from figmant_rag.tools.kb_maintain import register_kb_maintain

logger = logging.getLogger(__name__)


class Runtime:
    """Shared database, embedder and builder for MCP tools and HTTP routes.

    ``start()`` is idempotent and re-opens resources after ``close()``, so
    the HTTP route can rely on it even when no MCP session is active.
    """

    def __init__(self) -> None:
        """Create an unstarted runtime."""
        self.db: Database | None = None
        self.store: KnowledgeStore | None = None
        self.embedder: EmbeddingClient | None = None
        self.builder: RAGContextBuilder | None = None
        self._lock = asyncio.Lock()

    async def start(self) -> RAGContextBuilder:
        """Validate configuration and open resources if not already open."""
        async with self._lock:
            if self.builder is None:
                validate_config()
                try:
                    db = await create_connection(embedding_dim=get_embedding_dim())
                except FigmantError:
                    raise
                except Exception as exc:
                    raise StoreUnavailableError(f"Knowledge store unavailable: {exc}") from exc
                self.db = db
                self.store = KnowledgeStore(db)
                self.embedder = EmbeddingClient(db)
                self.builder = RAGContextBuilder(db, self.embedder)
                logger.info("RAG runtime started")
            return self.builder

    def as_context(self) -> dict[str, Any]:
        """Lifespan context handed to MCP tools."""
        return {
            "db": self.db,
            "store": self.store,
            "embedder": self.embedder,
            "builder": self.builder,
        }

    async def close(self) -> None:
        """Release the HTTP client and database connection."""
        async with self._lock:
            if self.embedder is not None:
                await self.embedder.close()
            if self.db is not None:
                await self.db.close()
                logger.info("Database connection closed")
            self.db = None
            self.store = None
            self.embedder = None
            self.builder = None


def configure_logging() -> None:
    """Log to stderr (stdout may be the MCP stdio transport)."""
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )


_INSTRUCTIONS = """\
This server retrieves UX research for design reviews of UI screenshots.

- build_rag_context: Given the user's analysis request (and optional image \
annotations), returns ranked research entries, one citation per entry, the \
inferred industry and a research-enhanced prompt for the analysis model. \
The same operation is available as HTTP POST /build-rag-context.

Pass the returned enhancedPrompt to the analysis model unchanged; show \
researchCitations next to the generated feedback.
"""


def create_server(runtime: Runtime | None = None) -> FastMCP:
    """Create and configure the MCP server with all tools and routes."""
    runtime = runtime or Runtime()

    @asynccontextmanager
    async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        """Open the runtime for the server's lifetime."""
        configure_logging()
        await runtime.start()
        try:
            yield runtime.as_context()
        finally:
            await runtime.close()

    mcp = FastMCP(
        "figmant-rag",
        instructions=_INSTRUCTIONS,
        lifespan=lifespan,
    )

    register_build_rag_context(mcp, runtime)

    if is_manager_mode():
        register_kb_maintain(mcp)

    return mcp

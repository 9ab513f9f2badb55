"""End-to-end RAG context building and HTTP-style request handling."""

import logging
from typing import Any

from pydantic import ValidationError

from figmant_rag.config import RetrievalSettings, get_retrieval_settings, validate_config
from figmant_rag.context.envelope import build_context, error_envelope
from figmant_rag.db.backend import Database
from figmant_rag.errors import FigmantError, StoreUnavailableError
from figmant_rag.models.context import RAGContext, RAGRequest
from figmant_rag.prompt.composer import compose
from figmant_rag.search.embeddings import Embedder, EmbeddingMemo
from figmant_rag.search.ranking import rank
from figmant_rag.search.retriever import MultiStrategyRetriever
from figmant_rag.search.terms import extract_search_terms
from figmant_rag.store.knowledge_store import KnowledgeStore

logger = logging.getLogger(__name__)


class RAGContextBuilder:
    """Builds a RAGContext for one request.

    Terms → multi-strategy retrieval → rank → compose → envelope. Every
    request gets a fresh embedding memo; no state outlives a call.
    """

    def __init__(
        self,
        db: Database,
        embedder: Embedder | None,
        settings: RetrievalSettings | None = None,
        *,
        check_config: bool = True,
    ):
        """Initialize with a database, an embedder and optional settings."""
        self.db = db
        self.store = KnowledgeStore(db)
        self.embedder = embedder
        self.settings = settings or get_retrieval_settings()
        self.check_config = check_config

    async def build(self, request: RAGRequest) -> RAGContext:
        """Build the context, raising FigmantError on unrecoverable failures."""
        if self.check_config:
            validate_config()

        total = await self._count_entries()
        if total == 0:
            logger.warning("Knowledge store is empty: returning context without research")
            return build_context([], compose(request.user_prompt, []), [], request.user_prompt)

        terms = extract_search_terms(request.user_prompt, request.image_annotations)
        logger.info("Searching %d term(s) for analysis %s", len(terms), request.analysis_id)

        embedder = EmbeddingMemo(self.embedder) if self.embedder is not None else None
        retriever = MultiStrategyRetriever(self.db, embedder, self.settings)
        retrieval = await retriever.retrieve_all(terms)

        ranked = rank(retrieval.entries, limit=self.settings.max_results)
        enhanced_prompt = compose(request.user_prompt, ranked)
        context = build_context(
            ranked, enhanced_prompt, retrieval.terms_used, request.user_prompt
        )

        logger.info(
            "RAG context built: %d entries, %d terms used, industry=%s, fallback=%s",
            context.total_entries_found,
            len(context.search_terms_used),
            context.industry_context,
            retrieval.fallback_used,
        )
        return context

    async def _count_entries(self) -> int:
        try:
            return await self.store.count_entries()
        except Exception as exc:
            raise StoreUnavailableError(f"Knowledge store unavailable: {exc}") from exc


async def handle_build_request(
    builder: RAGContextBuilder | None, payload: Any
) -> tuple[int, dict[str, Any]]:
    """Turn a decoded JSON body into (status code, response body).

    Never raises: failures become the error envelope (400 for a malformed
    body, 500 otherwise).
    """
    try:
        request = RAGRequest.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Rejected malformed request: %s", exc.error_count())
        return 400, error_envelope(f"Invalid request body: {exc.errors()[0]['msg']}")

    if builder is None:
        return 500, error_envelope("RAG context builder is not initialized")

    try:
        context = await builder.build(request)
    except FigmantError as exc:
        logger.error("RAG context build failed: %s", exc)
        return 500, error_envelope(str(exc))
    except Exception as exc:
        logger.exception("Unexpected error building RAG context")
        return 500, error_envelope(str(exc) or exc.__class__.__name__)

    return 200, context.to_payload()

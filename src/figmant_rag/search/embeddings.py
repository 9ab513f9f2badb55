"""OpenAI-compatible embedding client with bounded retries."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol, runtime_checkable

import httpx

from figmant_rag.config import (
    get_embedding_model,
    get_embedding_timeout,
    get_embedding_url,
    get_openai_api_key,
)
from figmant_rag.db.backend import Database
from figmant_rag.errors import ConfigurationError, EmbeddingProviderError

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


@runtime_checkable
class Embedder(Protocol):
    """Anything that turns text into a fixed-length vector."""

    async def embed(self, text: str) -> list[float]:
        """Return the embedding for ``text`` or raise."""
        ...


class EmbeddingClient:
    """Generates embeddings over HTTP and stores them via the database backend."""

    def __init__(
        self,
        db: Database | None = None,
        http_client: httpx.AsyncClient | None = None,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize with an optional database, HTTP client and sleep hook."""
        self.db = db
        self._http = http_client
        self._max_attempts = max_attempts
        self._sleep = sleep

    async def embed(self, text: str) -> list[float]:
        """Generate an embedding vector for the given text."""
        vector, _tokens = await self.embed_with_usage(text)
        return vector

    async def embed_with_usage(self, text: str) -> tuple[list[float], int]:
        """Return the embedding and the tokens the provider billed for it.

        Retries with exponential backoff (2, 4, ... seconds) and re-raises
        the last EmbeddingProviderError once attempts are exhausted.
        """
        api_key = get_openai_api_key()
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set")

        for attempt in range(1, self._max_attempts + 1):
            try:
                return await self._request(text, api_key)
            except EmbeddingProviderError as exc:
                if attempt >= self._max_attempts:
                    logger.warning("Embedding failed after %d attempts: %s", attempt, exc)
                    raise
                delay = 2**attempt
                logger.warning(
                    "Embedding attempt %d/%d failed (%s), retrying in %ds",
                    attempt,
                    self._max_attempts,
                    exc,
                    delay,
                )
                await self._sleep(delay)

        raise EmbeddingProviderError("max_attempts must be at least 1")

    async def _request(self, text: str, api_key: str) -> tuple[list[float], int]:
        client = self._get_client()
        try:
            resp = await client.post(
                f"{get_embedding_url()}/embeddings",
                json={"model": get_embedding_model(), "input": text},
                headers={"Authorization": f"Bearer {api_key}"},
                timeout=get_embedding_timeout(),
            )
        except httpx.HTTPError as exc:
            raise EmbeddingProviderError(f"Embedding request failed: {exc}") from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            raise EmbeddingProviderError(
                f"Embedding API error: {resp.status_code} {resp.reason_phrase}"
            )

        try:
            # OpenAI /v1/embeddings returns {"data": [{"embedding": [...]}], "usage": {...}}
            payload = resp.json()
            vector = payload["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise EmbeddingProviderError("Malformed embedding response") from exc
        if not isinstance(vector, list) or not vector:
            raise EmbeddingProviderError("Malformed embedding response: empty vector")
        return [float(v) for v in vector], _total_tokens(payload)

    async def store_embedding(self, entry_id: str, embedding: list[float]) -> None:
        """Persist an embedding for an entry."""
        if self.db is None:
            raise RuntimeError("EmbeddingClient has no database")
        await self.db.vector_store(entry_id, embedding)
        await self.db.commit()

    def _get_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient()
        return self._http

    async def close(self) -> None:
        """Close the HTTP client if open."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None


def normalize_term(text: str) -> str:
    """Lower-case and collapse whitespace; the memo key for a search term."""
    return " ".join(text.lower().split())


class EmbeddingMemo:
    """Request-scoped embedding cache keyed by normalized term text.

    Only successful embeddings are cached, so a failed term is retried if
    it shows up again later in the same request.
    """

    def __init__(self, embedder: Embedder):
        """Wrap an embedder."""
        self._embedder = embedder
        self._cache: dict[str, list[float]] = {}

    async def embed(self, text: str) -> list[float]:
        """Return a cached vector or delegate to the wrapped embedder."""
        key = normalize_term(text)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        vector = await self._embedder.embed(text)
        self._cache[key] = vector
        return vector

    def __len__(self) -> int:
        return len(self._cache)


def _total_tokens(payload: dict) -> int:
    """``usage.total_tokens`` from an embeddings response, 0 when absent."""
    usage = payload.get("usage")
    if not isinstance(usage, dict):
        return 0
    tokens = usage.get("total_tokens")
    return tokens if isinstance(tokens, int) else 0

"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio

from figmant_rag.db.connection import create_connection
from figmant_rag.errors import EmbeddingProviderError
from figmant_rag.store.knowledge_store import KnowledgeStore

# Small vectors keep cosine similarities easy to reason about
TEST_DIM = 4


@pytest_asyncio.fixture
async def db():
    """In-memory database with full schema and sqlite-vec."""
    conn = await create_connection(":memory:", embedding_dim=TEST_DIM)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store(db):
    """Knowledge store backed by in-memory DB."""
    return KnowledgeStore(db)


@pytest.fixture
def configured_env(monkeypatch):
    """Required configuration present."""
    monkeypatch.setenv("FIGMANT_DATABASE_URL", ":memory:")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


class FakeEmbedder:
    """Deterministic fake embedder for testing.

    Returns the vector registered for a text (case-insensitive), otherwise
    ``default``. Texts in ``failing`` raise EmbeddingProviderError, and so
    does every unregistered text when ``default`` is None.
    """

    def __init__(self, vectors=None, default=(0.0, 0.0, 0.0, 1.0), failing=()):
        self.vectors = {k.lower(): list(v) for k, v in (vectors or {}).items()}
        self.default = list(default) if default is not None else None
        self.failing = {t.lower() for t in failing}
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        key = text.lower()
        if key in self.failing:
            raise EmbeddingProviderError(f"Embedding API error: 500 for {text!r}")
        if key in self.vectors:
            return self.vectors[key]
        if self.default is None:
            raise EmbeddingProviderError("Embedding API error: 500")
        return self.default


@pytest.fixture
def embedder_factory():
    """Build a FakeEmbedder with custom vectors."""
    return FakeEmbedder


@pytest.fixture
def fake_embedder():
    """Fake embedder whose vectors match nothing in an empty vector table."""
    return FakeEmbedder()


@pytest.fixture
def make_entry(store):
    """Insert an entry (optionally with an embedding) and return it.

    ``age_days`` pushes created_at back from a fixed date so recency
    ordering is deterministic.
    """

    async def _make(
        entry_id: str,
        title: str,
        content: str = "Research content.",
        category: str = "ux-research",
        source: str = "Nielsen Norman Group",
        tags: list[str] | None = None,
        age_days: int = 0,
        vector: list[float] | None = None,
    ):
        entry = await store.create_entry(
            title=title,
            content=content,
            category=category,
            source=source,
            tags=tags,
            entry_id=entry_id,
            created_at=datetime(2025, 1, 1, tzinfo=UTC) - timedelta(days=age_days),
        )
        if vector is not None:
            await store.db.vector_store(entry_id, vector)
            await store.db.commit()
            await store.mark_embedding(entry_id, True)
        return entry

    return _make

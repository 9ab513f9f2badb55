"""Knowledge entry models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

COMPETITOR_CATEGORY = "competitor-insights"


class KnowledgeEntry(BaseModel):
    """A single retrievable unit of UX research text.

    ``similarity`` is computed per query and never persisted.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    content: str
    source: str = ""
    category: str
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    has_embedding: bool = Field(default=False, exclude=True)
    similarity: float | None = Field(default=None, ge=0.0, le=1.0)

    @property
    def embedding_text(self) -> str:
        """Text used for generating stored embeddings."""
        return f"{self.title}\n\n{self.content}"

    @property
    def is_competitor_insight(self) -> bool:
        """True for entries that belong in the competitor-insights partition."""
        return self.category == COMPETITOR_CATEGORY

    def scored(self, similarity: float) -> "KnowledgeEntry":
        """Return a copy carrying the given query-time similarity."""
        return self.model_copy(update={"similarity": max(0.0, min(1.0, similarity))})

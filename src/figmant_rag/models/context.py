"""Request and response models for the RAG context endpoint."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from figmant_rag.models.entry import KnowledgeEntry


def _now() -> datetime:
    return datetime.now(UTC)


class RAGRequest(BaseModel):
    """Inbound body of ``POST /build-rag-context``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    user_prompt: str = Field(default="", alias="userPrompt")
    image_urls: list[str] = Field(default_factory=list, alias="imageUrls")
    image_annotations: list[Any] = Field(default_factory=list, alias="imageAnnotations")
    analysis_id: str | None = Field(default=None, alias="analysisId")


class RetrievedKnowledge(BaseModel):
    """Ranked entries split by category."""

    model_config = ConfigDict(populate_by_name=True)

    relevant_patterns: list[KnowledgeEntry] = Field(
        default_factory=list, alias="relevantPatterns"
    )
    competitor_insights: list[KnowledgeEntry] = Field(
        default_factory=list, alias="competitorInsights"
    )

    @property
    def all_entries(self) -> list[KnowledgeEntry]:
        """Both partitions, in the order they were ranked."""
        return [*self.relevant_patterns, *self.competitor_insights]


class RAGContext(BaseModel):
    """Structured result of a context build, serialized with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    retrieved_knowledge: RetrievedKnowledge = Field(
        default_factory=RetrievedKnowledge, alias="retrievedKnowledge"
    )
    enhanced_prompt: str = Field(default="", alias="enhancedPrompt")
    research_citations: list[str] = Field(default_factory=list, alias="researchCitations")
    industry_context: str = Field(default="general", alias="industryContext")
    build_timestamp: datetime = Field(default_factory=_now, alias="buildTimestamp")
    search_terms_used: list[str] = Field(default_factory=list, alias="searchTermsUsed")
    total_entries_found: int = Field(default=0, ge=0, alias="totalEntriesFound")

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)

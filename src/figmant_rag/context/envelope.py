"""Assembly of the RAG context response and the uniform error envelope."""

from datetime import UTC, datetime
from typing import Any

from figmant_rag.models.context import RAGContext, RetrievedKnowledge
from figmant_rag.models.entry import KnowledgeEntry
from figmant_rag.prompt.formatters import format_citation
from figmant_rag.search.ranking import partition
from figmant_rag.taxonomy import DEFAULT_INDUSTRY, infer_industry

ERROR_DETAILS = "Failed to build enhanced RAG context"


def build_context(
    entries: list[KnowledgeEntry],
    enhanced_prompt: str,
    search_terms_used: list[str],
    user_prompt: str = "",
) -> RAGContext:
    """Package ranked entries, citations and the composed prompt. No I/O."""
    relevant, competitor = partition(entries)
    return RAGContext(
        retrieved_knowledge=RetrievedKnowledge(
            relevant_patterns=relevant,
            competitor_insights=competitor,
        ),
        enhanced_prompt=enhanced_prompt,
        research_citations=[format_citation(entry) for entry in entries],
        industry_context=infer_industry(user_prompt),
        search_terms_used=list(search_terms_used),
        total_entries_found=len(entries),
    )


def error_envelope(message: str) -> dict[str, Any]:
    """A fully-shaped, empty failure payload. Arrays are always present."""
    return {
        "error": message,
        "details": ERROR_DETAILS,
        "retrievedKnowledge": {"relevantPatterns": [], "competitorInsights": []},
        "enhancedPrompt": "",
        "researchCitations": [],
        "industryContext": DEFAULT_INDUSTRY,
        "buildTimestamp": datetime.now(UTC).isoformat(),
        "searchTermsUsed": [],
        "totalEntriesFound": 0,
    }

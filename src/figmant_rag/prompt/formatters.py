"""Compact text formatters for knowledge excerpts and citations."""

from figmant_rag.models.entry import KnowledgeEntry

EXCERPT_CHARS = 250
DEFAULT_SOURCE = "UX Research Database"


def format_relevance(similarity: float | None) -> str:
    """Format: 42.0%."""
    return f"{(similarity or 0.0) * 100:.1f}%"


def truncate_content(content: str, limit: int = EXCERPT_CHARS) -> str:
    """Cut content to ``limit`` characters, marking the cut with '...'."""
    text = content.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def format_entry_excerpt(index: int, entry: KnowledgeEntry) -> str:
    """Numbered title + relevance, excerpt, source."""
    lines = [
        f'{index}. "{entry.title}" ({format_relevance(entry.similarity)} relevant)',
        f"   Research: {truncate_content(entry.content)}",
        f"   Source: {entry.source or DEFAULT_SOURCE}",
    ]
    return "\n".join(lines)


def format_citation(entry: KnowledgeEntry) -> str:
    """Format: Title - Source (42.0% match)."""
    return f"{entry.title} - {entry.source} ({format_relevance(entry.similarity)} match)"

"""Deduplication, ranking and partitioning of retrieved entries."""

from functools import cmp_to_key

from figmant_rag.models.entry import KnowledgeEntry

DEFAULT_LIMIT = 20

# Similarities closer than this are ties; content lengths must differ by more than this
_SIMILARITY_TOLERANCE = 0.01
_LENGTH_TOLERANCE = 100


def dedupe(entries: list[KnowledgeEntry]) -> list[KnowledgeEntry]:
    """Keep one copy per id: the one with the highest similarity.

    On equal similarity the first copy seen wins. Output follows first-seen order.
    """
    best: dict[str, KnowledgeEntry] = {}
    for entry in entries:
        current = best.get(entry.id)
        if current is None or _similarity(entry) > _similarity(current):
            best[entry.id] = entry
    return list(best.values())


def rank(entries: list[KnowledgeEntry], limit: int = DEFAULT_LIMIT) -> list[KnowledgeEntry]:
    """Dedupe, sort and truncate.

    Order: similarity descending (differences under 0.01 are ties), then
    content length descending (only when lengths differ by more than 100
    characters), then title, then id.
    """
    return sorted(dedupe(entries), key=cmp_to_key(compare_entries))[:limit]


def compare_entries(a: KnowledgeEntry, b: KnowledgeEntry) -> int:
    """Negative when ``a`` ranks before ``b``."""
    sim_a, sim_b = _similarity(a), _similarity(b)
    if abs(sim_a - sim_b) >= _SIMILARITY_TOLERANCE:
        return -1 if sim_a > sim_b else 1

    len_a, len_b = len(a.content), len(b.content)
    if abs(len_a - len_b) > _LENGTH_TOLERANCE:
        return -1 if len_a > len_b else 1

    if a.title != b.title:
        return -1 if a.title < b.title else 1
    if a.id != b.id:
        return -1 if a.id < b.id else 1
    return 0


def partition(
    entries: list[KnowledgeEntry],
) -> tuple[list[KnowledgeEntry], list[KnowledgeEntry]]:
    """Split into (relevant patterns, competitor insights), preserving order."""
    relevant = [entry for entry in entries if not entry.is_competitor_insight]
    competitor = [entry for entry in entries if entry.is_competitor_insight]
    return relevant, competitor


def _similarity(entry: KnowledgeEntry) -> float:
    return entry.similarity or 0.0

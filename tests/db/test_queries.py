"""Tests for database query helpers."""

import pytest

from figmant_rag.db.queries import (
    _escape_like,
    _parse_tags,
    count_entries,
    entries_by_category,
    entries_without_embeddings,
    get_db_stats,
    get_entries,
    get_entry,
    keyword_search,
    recent_entries,
)


@pytest.mark.asyncio
async def test_get_entry_round_trips_fields(db, make_entry):
    """Stored fields come back unchanged, tags included."""
    await make_entry(
        "e1",
        "Button size on touch screens",
        content="Touch targets should be at least 44px.",
        category="mobile-ux",
        source="Apple HIG",
        tags=["touch", "Buttons"],
    )
    entry = await get_entry(db, "e1")
    assert entry is not None
    assert entry.title == "Button size on touch screens"
    assert entry.category == "mobile-ux"
    assert entry.source == "Apple HIG"
    assert entry.tags == ["touch", "Buttons"]
    assert entry.created_at is not None
    assert entry.similarity is None


@pytest.mark.asyncio
async def test_get_entry_missing(db):
    assert await get_entry(db, "nope") is None


@pytest.mark.asyncio
async def test_get_entries_skips_missing_ids(db, make_entry):
    await make_entry("e1", "One")
    await make_entry("e2", "Two")
    found = await get_entries(db, ["e1", "missing", "e2"])
    assert set(found) == {"e1", "e2"}
    assert await get_entries(db, []) == {}


@pytest.mark.asyncio
async def test_count_entries(db, make_entry):
    assert await count_entries(db) == 0
    await make_entry("e1", "One")
    await make_entry("e2", "Two")
    assert await count_entries(db) == 2


@pytest.mark.asyncio
async def test_keyword_search_title_and_content_case_insensitive(db, make_entry):
    await make_entry("e1", "Checkout Button Placement", content="Put it above the fold.")
    await make_entry("e2", "Form labels", content="Labels near the CHECKOUT fields help.")
    await make_entry("e3", "Color palettes", content="Nothing relevant here.")

    results = await keyword_search(db, "checkout")
    assert {e.id for e in results} == {"e1", "e2"}


@pytest.mark.asyncio
async def test_keyword_search_matches_whole_tag(db, make_entry):
    """Tag membership is exact, not a substring of a longer tag."""
    await make_entry("e1", "Alpha", content="x", tags=["cta"])
    await make_entry("e2", "Beta", content="y", tags=["ctas-overview"])

    results = await keyword_search(db, "CTA")
    assert [e.id for e in results] == ["e1"]


@pytest.mark.asyncio
async def test_keyword_search_escapes_wildcards(db, make_entry):
    await make_entry("e1", "100% width buttons", content="Full-width CTAs on mobile.")
    await make_entry("e2", "Half width", content="Other content.")

    assert [e.id for e in await keyword_search(db, "100%")] == ["e1"]
    assert await keyword_search(db, "_") == []


@pytest.mark.asyncio
async def test_keyword_search_blank_term(db, make_entry):
    await make_entry("e1", "Anything")
    assert await keyword_search(db, "   ") == []


@pytest.mark.asyncio
async def test_keyword_search_respects_limit_newest_first(db, make_entry):
    for i in range(4):
        await make_entry(f"e{i}", f"Navigation study {i}", age_days=i)
    results = await keyword_search(db, "navigation", limit=2)
    assert [e.id for e in results] == ["e0", "e1"]


@pytest.mark.asyncio
async def test_entries_by_category(db, make_entry):
    await make_entry("a", "A", category="accessibility", age_days=3)
    await make_entry("b", "B", category="accessibility", age_days=1)
    await make_entry("c", "C", category="visual-design")

    results = await entries_by_category(db, "accessibility")
    assert [e.id for e in results] == ["b", "a"]
    assert await entries_by_category(db, "unknown") == []


@pytest.mark.asyncio
async def test_recent_entries_order_and_limit(db, make_entry):
    await make_entry("old", "Old", age_days=10)
    await make_entry("new", "New", age_days=0)
    await make_entry("mid", "Mid", age_days=5)

    results = await recent_entries(db, limit=2)
    assert [e.id for e in results] == ["new", "mid"]


@pytest.mark.asyncio
async def test_entries_without_embeddings_oldest_first(db, make_entry):
    await make_entry("new", "New", age_days=0)
    await make_entry("old", "Old", age_days=10)
    await make_entry("done", "Done", age_days=20, vector=[1.0, 0.0, 0.0, 0.0])

    pending = await entries_without_embeddings(db)
    assert [e.id for e in pending] == ["old", "new"]
    assert [e.id for e in await entries_without_embeddings(db, limit=1)] == ["old"]


@pytest.mark.asyncio
async def test_get_db_stats(db, make_entry):
    await make_entry("a", "A", category="accessibility", vector=[1.0, 0.0, 0.0, 0.0])
    await make_entry("b", "B", category="accessibility")
    await make_entry("c", "C", category="navigation")

    stats = await get_db_stats(db)
    assert stats["total_entries"] == 3
    assert stats["with_embeddings"] == 1
    assert stats["without_embeddings"] == 2
    assert stats["by_category"] == {"accessibility": 2, "navigation": 1}


@pytest.mark.asyncio
async def test_get_db_stats_empty(db):
    stats = await get_db_stats(db)
    assert stats["total_entries"] == 0
    assert stats["with_embeddings"] == 0
    assert stats["by_category"] == {}


def test_parse_tags():
    assert _parse_tags('["a", "b"]') == ["a", "b"]
    assert _parse_tags("") == []
    assert _parse_tags(None) == []
    assert _parse_tags('{"not": "a list"}') == []


def test_escape_like():
    assert _escape_like("50%_off") == "50\\%\\_off"
    assert _escape_like("a\\b") == "a\\\\b"

"""Tests for multi-term retrieval and the global fallback."""

import pytest

from figmant_rag.config import RetrievalSettings
from figmant_rag.search.retriever import MultiStrategyRetriever

QUERY = [1.0, 0.0, 0.0, 0.0]
STRONG = [0.6, 0.8, 0.0, 0.0]


@pytest.mark.asyncio
async def test_retrieve_reports_strategy(db, make_entry):
    await make_entry("e1", "Pricing tables", content="Highlight the recommended plan.")
    retriever = MultiStrategyRetriever(db, None)

    result = await retriever.retrieve("pricing tables")
    assert result.strategy == "keyword"
    assert [e.id for e in result.entries] == ["e1"]


@pytest.mark.asyncio
async def test_vector_strategy_only_with_embedder(db):
    without = MultiStrategyRetriever(db, None)
    assert [s.name for s in without.strategies] == ["keyword", "category"]


@pytest.mark.asyncio
async def test_enough_results_skip_fallback(db, make_entry):
    for i in range(5):
        await make_entry(f"nav{i}", f"Navigation study {i}", age_days=i)
    await make_entry("other", "Unrelated", content="Nothing.", age_days=30)

    result = await MultiStrategyRetriever(db, None).retrieve_all(["navigation", "zzz"])
    assert not result.fallback_used
    assert {e.id for e in result.entries} == {f"nav{i}" for i in range(5)}
    assert result.terms_used == ["navigation"]


@pytest.mark.asyncio
async def test_fallback_when_few_distinct_entries(db, make_entry):
    """Nothing matches any term, so the most recent entries are used."""
    for i in range(12):
        await make_entry(f"e{i:02d}", f"Entry {i}", content="Opaque.", category="misc", age_days=i)

    result = await MultiStrategyRetriever(db, None).retrieve_all(["zzz", "qqq"])

    assert result.fallback_used
    assert result.terms_used == []
    assert [e.id for e in result.entries] == [f"e{i:02d}" for i in range(10)]
    assert all(e.similarity == 0.05 for e in result.entries)


@pytest.mark.asyncio
async def test_fallback_merges_with_found_entries(db, make_entry):
    await make_entry("hit", "Search filters", content="Facets help.", age_days=50)
    await make_entry("recent", "Recent", content="Opaque.", category="misc")

    result = await MultiStrategyRetriever(db, None).retrieve_all(["search filters"])

    assert result.fallback_used
    assert result.terms_used == ["search filters"]
    ids = [e.id for e in result.entries]
    assert ids[0] == "hit"
    assert set(ids) == {"hit", "recent"}


@pytest.mark.asyncio
async def test_duplicates_counted_once_for_fallback(db, make_entry):
    """The same entry found by many terms is one distinct entry."""
    await make_entry("only", "Form usability", content="Labels above inputs.")

    result = await MultiStrategyRetriever(db, None).retrieve_all(
        ["form usability", "labels above", "inputs"]
    )
    assert result.fallback_used


@pytest.mark.asyncio
async def test_vector_results_used_across_terms(db, make_entry, embedder_factory):
    await make_entry("v1", "Vector match", vector=STRONG)
    embedder = embedder_factory({"cta contrast": QUERY})
    settings = RetrievalSettings(fallback_min_entries=1)

    result = await MultiStrategyRetriever(db, embedder, settings).retrieve_all(
        ["cta contrast", "zzz"]
    )

    assert not result.fallback_used
    assert result.terms_used == ["cta contrast"]
    assert [e.id for e in result.entries] == ["v1"]
    assert result.entries[0].similarity == pytest.approx(0.6, abs=1e-3)

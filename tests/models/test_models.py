"""Tests for entry and request models."""

import pytest
from pydantic import ValidationError

from figmant_rag.models.context import RAGRequest
from figmant_rag.models.entry import KnowledgeEntry


def _entry(**overrides):
    data = {"id": "e1", "title": "Title", "content": "Body", "category": "ux-research"}
    data.update(overrides)
    return KnowledgeEntry(**data)


def test_embedding_text():
    assert _entry().embedding_text == "Title\n\nBody"


def test_scored_returns_clamped_copy():
    entry = _entry()
    scored = entry.scored(1.2)
    assert scored.similarity == 1.0
    assert entry.similarity is None
    assert _entry().scored(-0.5).similarity == 0.0


def test_similarity_bounds_validated():
    with pytest.raises(ValidationError):
        _entry(similarity=1.5)


def test_competitor_flag():
    assert _entry(category="competitor-insights").is_competitor_insight
    assert not _entry().is_competitor_insight


def test_request_accepts_wire_names_and_defaults():
    request = RAGRequest.model_validate(
        {"userPrompt": "Review", "imageAnnotations": [{"label": "x"}], "unknown": True}
    )
    assert request.user_prompt == "Review"
    assert request.image_urls == []
    assert request.image_annotations == [{"label": "x"}]
    assert request.analysis_id is None


def test_request_all_fields_optional():
    assert RAGRequest.model_validate({}).user_prompt == ""

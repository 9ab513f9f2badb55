"""Tests for enhanced prompt composition."""

from figmant_rag.models.entry import KnowledgeEntry
from figmant_rag.prompt.composer import compose


def _entry(entry_id, title, category, similarity=0.3, content="Finding."):
    return KnowledgeEntry(
        id=entry_id,
        title=title,
        content=content,
        source="NN/g",
        category=category,
        similarity=similarity,
    )


def test_no_entries_uses_general_principles():
    prompt = compose("Review my landing page", [])
    assert prompt.startswith("RESEARCH-BACKED UX ANALYSIS")
    assert "No specific research context was found" in prompt
    assert "PRIMARY REQUEST:\nReview my landing page" in prompt
    assert "ANALYSIS REQUIREMENTS:" not in prompt
    assert "HARD CONSTRAINTS:" in prompt


def test_empty_user_prompt_omits_request_section():
    prompt = compose("   ", [])
    assert "PRIMARY REQUEST" not in prompt
    assert "OUTPUT FORMAT (MANDATORY):" in prompt


def test_research_grouped_by_category_with_running_index():
    entries = [
        _entry("a", "Button size", "interactive-elements"),
        _entry("b", "Contrast", "accessibility"),
        _entry("c", "CTA copy", "interactive-elements"),
    ]
    prompt = compose("Review the buttons", entries)

    assert "You have access to 3 relevant UX research insights." in prompt
    interactive = prompt.index("[INTERACTIVE-ELEMENTS]")
    accessibility = prompt.index("[ACCESSIBILITY]")
    assert interactive < accessibility
    assert prompt.index('1. "Button size"') < prompt.index('2. "CTA copy"') < accessibility
    assert '3. "Contrast"' in prompt
    assert "ANALYSIS REQUIREMENTS:" in prompt
    assert "No specific research context" not in prompt


def test_long_content_is_excerpted():
    entry = _entry("a", "Long", "ux-research", content="z" * 1000)
    prompt = compose("", [entry])
    assert "z" * 250 + "..." in prompt
    assert "z" * 251 not in prompt


def test_section_order():
    prompt = compose("Check forms", [_entry("a", "Labels", "form-design")])
    positions = [
        prompt.index(marker)
        for marker in (
            "RESEARCH-BACKED UX ANALYSIS",
            "OUTPUT FORMAT (MANDATORY):",
            "PRIMARY REQUEST:",
            "RESEARCH CONTEXT:",
            "ANALYSIS REQUIREMENTS:",
            "HARD CONSTRAINTS:",
        )
    ]
    assert positions == sorted(positions)


def test_compose_is_deterministic():
    entries = [_entry("a", "Labels", "form-design")]
    assert compose("Check forms", entries) == compose("Check forms", entries)

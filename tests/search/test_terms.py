"""Tests for search-term extraction."""

from figmant_rag.search.terms import extract_phrases, extract_search_terms
from figmant_rag.taxonomy import CORE_TERMS


def test_empty_prompt_yields_core_terms():
    assert extract_search_terms("") == list(CORE_TERMS)
    assert extract_search_terms(None) == list(CORE_TERMS)


def test_core_terms_come_first():
    terms = extract_search_terms("Review the checkout button accessibility")
    assert terms[: len(CORE_TERMS)] == list(CORE_TERMS)


def test_keyword_topics_added():
    terms = extract_search_terms("Review the checkout button accessibility")
    for expected in ("button design UX", "checkout optimization", "WCAG guidelines"):
        assert expected in terms


def test_raw_prompt_included_only_when_moderate_length():
    moderate = "Review the checkout button accessibility"
    assert moderate in extract_search_terms(moderate)

    short = "buttons"
    assert short not in extract_search_terms(short)

    long_prompt = "Please review " + "the navigation menu and footer layout " * 4
    assert len(long_prompt) >= 100
    assert long_prompt.strip() not in extract_search_terms(long_prompt)


def test_terms_are_case_insensitively_unique():
    terms = extract_search_terms("Accessibility standards for the signup form")
    lowered = [t.lower() for t in terms]
    assert len(lowered) == len(set(lowered))
    # The phrase duplicates a core term; the core term's position wins
    assert lowered.index("accessibility standards") < len(CORE_TERMS)


def test_annotation_topics_added():
    annotations = [
        {"feedback": "The pricing table is cramped", "category": "visual"},
        "mobile menu hidden",
        42,
    ]
    terms = extract_search_terms("", annotations)
    assert "pricing page design" in terms
    assert "mobile UX patterns" in terms
    assert "navigation UX" not in terms


def test_extract_phrases_require_ux_word_and_skip_stop_words():
    phrases = extract_phrases("improve checkout flow for the mobile users")
    assert "checkout flow" in phrases
    assert "improve checkout flow" in phrases
    assert "mobile users" in phrases
    assert not any("the" in p.split() for p in phrases)
    assert not any("for" in p.split() for p in phrases)


def test_extract_phrases_capped():
    prompt = "button color form spacing layout typography menu search page design"
    assert len(extract_phrases(prompt)) == 6
    assert len(extract_phrases(prompt, max_phrases=2)) == 2


def test_extraction_is_deterministic():
    prompt = "Dashboard navigation and search filters for our SaaS product"
    assert extract_search_terms(prompt) == extract_search_terms(prompt)

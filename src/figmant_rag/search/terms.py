"""Search-term extraction from a user prompt and image annotations."""

import re
from collections.abc import Iterable
from typing import Any

from figmant_rag.taxonomy import CORE_TERMS, STOP_WORDS, UX_VOCABULARY, topics_for

_WORD_RE = re.compile(r"[a-z0-9][a-z0-9'-]*")
_ANNOTATION_TEXT_FIELDS = ("title", "label", "category", "feedback", "description", "text")

MAX_PHRASES = 6
_RAW_PROMPT_MIN = 10
_RAW_PROMPT_MAX = 100


def extract_search_terms(
    user_prompt: str | None,
    image_annotations: Iterable[Any] = (),
) -> list[str]:
    """Build the ordered, de-duplicated list of terms to search for.

    Order: core UX terms, keyword-triggered topics, annotation topics, the
    raw prompt (when 10 < length < 100), then n-gram phrases.
    """
    prompt = (user_prompt or "").strip()

    terms: list[str] = list(CORE_TERMS)
    terms.extend(topics_for(prompt))
    terms.extend(_annotation_terms(image_annotations))
    if _RAW_PROMPT_MIN < len(prompt) < _RAW_PROMPT_MAX:
        terms.append(prompt)
    terms.extend(extract_phrases(prompt))

    return _dedupe(terms)


def extract_phrases(prompt: str, max_phrases: int = MAX_PHRASES) -> list[str]:
    """Two- and three-word phrases that mention a UX vocabulary word.

    Phrases never span a stop word.
    """
    words = _WORD_RE.findall(prompt.lower())
    phrases: list[str] = []
    for size in (2, 3):
        for start in range(len(words) - size + 1):
            window = words[start : start + size]
            if any(word in STOP_WORDS for word in window):
                continue
            if not any(word in UX_VOCABULARY for word in window):
                continue
            phrases.append(" ".join(window))
    return _dedupe(phrases)[:max_phrases]


def _annotation_terms(annotations: Iterable[Any]) -> list[str]:
    """Topic terms triggered by text inside image annotations."""
    terms: list[str] = []
    for annotation in annotations or ():
        terms.extend(topics_for(_annotation_text(annotation)))
    return terms


def _annotation_text(annotation: Any) -> str:
    if isinstance(annotation, str):
        return annotation
    if isinstance(annotation, dict):
        parts = [
            value
            for key in _ANNOTATION_TEXT_FIELDS
            if isinstance(value := annotation.get(key), str)
        ]
        return " ".join(parts)
    return ""


def _dedupe(terms: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates and blanks, keeping first occurrence."""
    seen: set[str] = set()
    unique: list[str] = []
    for term in terms:
        cleaned = term.strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        unique.append(cleaned)
    return unique

"""Research-enhanced prompt composition for the downstream analysis model.

``compose`` is pure: the same prompt and entries always produce the same text.
"""

from figmant_rag.models.entry import KnowledgeEntry
from figmant_rag.prompt.formatters import format_entry_excerpt

_FRAMING = """\
RESEARCH-BACKED UX ANALYSIS

You are a senior UX analyst reviewing UI design screenshots. Produce specific, \
evidence-based feedback annotations anchored to exact locations in the design. \
Ground every recommendation in established UX research."""

_OUTPUT_SCHEMA = """\
OUTPUT FORMAT (MANDATORY):
Respond with a single JSON array and nothing else. Each element must match:
{
  "x": <number, 0-100, horizontal position as percent of image width>,
  "y": <number, 0-100, vertical position as percent of image height>,
  "category": "ux" | "visual" | "accessibility" | "conversion" | "brand",
  "severity": "critical" | "suggested" | "enhancement",
  "feedback": "<specific observation and recommendation, at least 60 characters>",
  "implementationEffort": "low" | "medium" | "high",
  "businessImpact": "low" | "medium" | "high",
  "imageIndex": <number, zero-based index of the image the annotation refers to>
}

GOOD example:
{"x": 72, "y": 18, "category": "conversion", "severity": "critical", \
"feedback": "The primary 'Start trial' button blends into the header; research on \
visual hierarchy shows high-contrast CTAs lift click-through. Use the brand accent \
color and increase size to 48px height.", "implementationEffort": "low", \
"businessImpact": "high", "imageIndex": 0}

BAD example (never do this):
{"x": 50, "y": 50, "category": "ux", "severity": "suggested", \
"feedback": "Improve the design.", "implementationEffort": "low", \
"businessImpact": "low", "imageIndex": 0}"""

_INTEGRATION = """\
ANALYSIS REQUIREMENTS:
- Reference specific research findings above in your recommendations
- Cite the source by name when a finding backs a recommendation \
(e.g. "According to Baymard Institute research...")
- Prioritize recommendations that are backed by the research context
- Connect each recommendation to an established UX principle"""

_NO_RESEARCH = """\
RESEARCH CONTEXT:
No specific research context was found. Base the analysis on established UX \
principles: usability heuristics, accessibility guidelines, visual design \
principles and conversion optimization techniques."""

_CONSTRAINTS = """\
HARD CONSTRAINTS:
1. Never use placeholder or generic feedback text such as "Improve the design"
2. Every "feedback" value must be at least 60 characters long
3. Every annotation must include numeric "x" and "y" coordinates
4. Output valid JSON only: no markdown fences, no prose before or after the array"""


def compose(user_prompt: str, entries: list[KnowledgeEntry]) -> str:
    """Render framing, schema, request, grouped research, instructions and constraints."""
    sections = [_FRAMING, _OUTPUT_SCHEMA]

    request = (user_prompt or "").strip()
    if request:
        sections.append(f"PRIMARY REQUEST:\n{request}")

    if entries:
        sections.append(_research_section(entries))
        sections.append(_INTEGRATION)
    else:
        sections.append(_NO_RESEARCH)

    sections.append(_CONSTRAINTS)
    return "\n\n".join(sections)


def _research_section(entries: list[KnowledgeEntry]) -> str:
    """Entries grouped by category, groups in first-appearance order."""
    groups: dict[str, list[KnowledgeEntry]] = {}
    for entry in entries:
        groups.setdefault(entry.category, []).append(entry)

    lines = [
        "RESEARCH CONTEXT:",
        f"You have access to {len(entries)} relevant UX research insights.",
    ]
    index = 1
    for category, members in groups.items():
        lines.append("")
        lines.append(f"[{category.upper()}]")
        for entry in members:
            lines.append(format_entry_excerpt(index, entry))
            index += 1
    return "\n".join(lines)

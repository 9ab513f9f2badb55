"""Static keyword tables used for term expansion, category lookup and industry inference.

Loaded once at import. Lookups go through the small functions at the bottom
so callers never iterate the tables directly.
"""

# Always searched, even for an empty prompt
CORE_TERMS: tuple[str, ...] = (
    "UX design principles",
    "usability best practices",
    "user interface guidelines",
    "conversion optimization",
    "accessibility standards",
)

# Prompt keyword -> extra topic terms to search for
KEYWORD_TOPICS: dict[str, tuple[str, ...]] = {
    "button": ("button design UX", "call to action buttons", "button accessibility"),
    "form": ("form design conversion", "form usability", "form validation patterns"),
    "checkout": ("checkout optimization", "ecommerce checkout flow", "cart abandonment"),
    "mobile": ("mobile UX patterns", "responsive design", "mobile usability"),
    "navigation": ("navigation UX", "menu design patterns", "navigation accessibility"),
    "landing": ("landing page conversion", "landing page optimization", "page layout design"),
    "dashboard": ("dashboard UX design", "data visualization", "admin interface design"),
    "search": ("search UX patterns", "search functionality", "filters and sorting"),
    "signup": ("signup flow optimization", "registration forms", "onboarding UX"),
    "onboarding": ("onboarding UX", "first-run experience", "progressive disclosure"),
    "pricing": ("pricing page design", "plan comparison tables", "pricing psychology"),
    "color": ("color theory UX", "color accessibility", "brand color usage"),
    "contrast": ("color contrast ratios", "text legibility"),
    "typography": ("typography UX", "font readability", "text hierarchy"),
    "spacing": ("layout spacing", "white space design", "visual hierarchy"),
    "accessibility": ("WCAG guidelines", "screen reader support", "keyboard navigation"),
    "trust": ("trust signals", "social proof patterns"),
    "competitor": ("competitor analysis", "industry benchmark patterns"),
}

# Term keyword -> knowledge category; first match in table order wins
CATEGORY_KEYWORDS: dict[str, str] = {
    "button": "interactive-elements",
    "cta": "interactive-elements",
    "call to action": "interactive-elements",
    "link": "interactive-elements",
    "form": "form-design",
    "input": "form-design",
    "validation": "form-design",
    "checkout": "ecommerce-patterns",
    "cart": "ecommerce-patterns",
    "conversion": "conversion-optimization",
    "landing": "conversion-optimization",
    "pricing": "conversion-optimization",
    "accessibility": "accessibility",
    "wcag": "accessibility",
    "contrast": "accessibility",
    "screen reader": "accessibility",
    "mobile": "mobile-ux",
    "responsive": "mobile-ux",
    "navigation": "navigation",
    "menu": "navigation",
    "color": "visual-design",
    "typography": "visual-design",
    "font": "visual-design",
    "spacing": "visual-design",
    "layout": "visual-design",
    "hierarchy": "visual-design",
    "dashboard": "data-visualization",
    "chart": "data-visualization",
    "search": "search-patterns",
    "filter": "search-patterns",
    "signup": "onboarding",
    "onboarding": "onboarding",
    "registration": "onboarding",
    "trust": "trust-signals",
    "competitor": "competitor-insights",
    "benchmark": "competitor-insights",
    "usability": "ux-research",
    "ux": "ux-research",
}

# Ordered: the first industry whose keywords appear in the prompt wins
INDUSTRY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("ecommerce", ("ecommerce", "e-commerce", "shop", "cart", "checkout", "product page")),
    ("saas", ("saas", "software", "subscription", "dashboard", "b2b")),
    ("fintech", ("fintech", "finance", "banking", "payment", "wallet", "invest")),
    ("healthcare", ("healthcare", "medical", "patient", "clinic", "health")),
    ("education", ("education", "course", "learning", "student")),
    ("travel", ("travel", "booking", "hotel", "flight")),
)

DEFAULT_INDUSTRY = "general"

# Words that make an n-gram worth searching for on its own
UX_VOCABULARY: frozenset[str] = frozenset(
    {
        "accessibility",
        "button",
        "buttons",
        "cart",
        "checkout",
        "color",
        "contrast",
        "conversion",
        "cta",
        "dashboard",
        "design",
        "flow",
        "form",
        "forms",
        "hierarchy",
        "landing",
        "layout",
        "menu",
        "mobile",
        "navigation",
        "onboarding",
        "page",
        "pricing",
        "readability",
        "search",
        "signup",
        "spacing",
        "typography",
        "usability",
    }
)

STOP_WORDS: frozenset[str] = frozenset(
    {
        "a",
        "an",
        "and",
        "are",
        "as",
        "at",
        "be",
        "by",
        "for",
        "from",
        "how",
        "i",
        "in",
        "is",
        "it",
        "me",
        "my",
        "of",
        "on",
        "or",
        "our",
        "please",
        "the",
        "this",
        "to",
        "we",
        "what",
        "with",
        "you",
        "your",
    }
)


def topics_for(text: str) -> list[str]:
    """Topic terms triggered by keywords appearing in ``text``."""
    lowered = text.lower()
    topics: list[str] = []
    for keyword, related in KEYWORD_TOPICS.items():
        if keyword in lowered:
            topics.extend(related)
    return topics


def category_for(term: str) -> str | None:
    """Map a search term to a knowledge category, or None if nothing matches."""
    lowered = term.lower()
    for keyword, category in CATEGORY_KEYWORDS.items():
        if keyword in lowered:
            return category
    return None


def infer_industry(prompt: str | None) -> str:
    """Return the first industry whose keywords appear in the prompt."""
    if not prompt:
        return DEFAULT_INDUSTRY
    lowered = prompt.lower()
    for industry, keywords in INDUSTRY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return industry
    return DEFAULT_INDUSTRY

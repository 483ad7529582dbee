"""
Keyword tables and classification helpers for release records.

Each table is a module-level tuple with one pure function over it, so every
rule can be tested on its own:

- normalize_company: organization string -> canonical company name
- categorize_release: free text -> model or tool
- is_coding_related / is_coding_tool: coding flags
- is_allowed_catalog_company / is_relevant_domain: catalog filters
- is_major_lab / is_release_announcement: official blog release detection
- format_parameters / parse_release_date: catalog field normalization
"""

from datetime import date, datetime

from release_timeline.ingestion.schemas import ReleaseCategory

# Organizations tracked from the catalog (substring match on the lower-cased
# organization field, which may list several organizations)
ALLOWED_CATALOG_COMPANIES = (
    "openai",
    "anthropic",
    "meta",
    "google",
    "google deepmind",
    "deepmind",
    "mistral",
    "mistral ai",
    "anysphere",
    "xai",
    "x.ai",
    "cohere",
    "ai21",
    "ai21 labs",
    "zhipu",
    "zhipu ai",
    "alibaba",
    "baidu",
    "tencent",
)

RELEVANT_DOMAINS = ("language", "multimodal", "code")

# Ordered: the first matching substring wins
COMPANY_ALIASES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("openai",), "OpenAI"),
    (("anthropic",), "Anthropic"),
    (("google", "deepmind"), "Google"),
    (("meta",), "Meta"),
    (("mistral",), "Mistral AI"),
    (("xai", "x.ai"), "xAI"),
    (("cohere",), "Cohere"),
    (("ai21",), "AI21 Labs"),
    (("anysphere",), "Anysphere"),
    (("zhipu",), "Zhipu AI"),
    (("alibaba",), "Alibaba"),
    (("baidu",), "Baidu"),
    (("tencent",), "Tencent"),
)

CODING_KEYWORDS = (
    "code",
    "coding",
    "programming",
    "software",
    "codex",
    "copilot",
    "coder",
    "swe-",
    "agentic coding",
)

MODEL_KEYWORDS = (
    "model",
    "llm",
    "gpt",
    "claude",
    "gemini",
    "llama",
    "language model",
)

TOOL_KEYWORDS = (
    "api",
    "sdk",
    "tool",
    "playground",
    "assistant",
    "agent",
    "editor",
    "code",
)

# Products that are always tools regardless of keyword scores
CODING_TOOL_KEYWORDS = (
    "claude code",
    "codex",
    "copilot",
    "code interpreter",
    "coding assistant",
)

RELEASE_KEYWORDS = (
    "introducing",
    "announcing",
    "launch",
    "release",
    "new model",
    "available now",
    "general availability",
)

MAJOR_LABS = (
    "openai",
    "anthropic",
    "meta",
    "google",
    "mistral",
    "anysphere",
)

_EMPTY_PARAMETERS = ("", "nan")

_DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%d %B %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%Y-%m",
    "%Y",
)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def _count_hits(text: str, keywords: tuple[str, ...]) -> int:
    lowered = text.lower()
    return sum(1 for keyword in keywords if keyword in lowered)


def normalize_company(organization: str) -> str:
    """
    Map an organization string to its canonical company name.

    Returns the input unchanged when no alias matches.
    """
    lowered = organization.lower()
    for needles, canonical in COMPANY_ALIASES:
        if any(needle in lowered for needle in needles):
            return canonical
    return organization


def categorize_release(text: str) -> ReleaseCategory:
    """
    Classify a release as model or tool by keyword scoring.

    Counts model keywords and tool keywords present in `text`; the release
    is a tool only when tool keywords outnumber model keywords.
    """
    model_score = _count_hits(text, MODEL_KEYWORDS)
    tool_score = _count_hits(text, TOOL_KEYWORDS)
    return ReleaseCategory.MODEL if model_score >= tool_score else ReleaseCategory.TOOL


def is_coding_related(text: str) -> bool:
    return _contains_any(text, CODING_KEYWORDS)


def is_coding_tool(text: str) -> bool:
    return _contains_any(text, CODING_TOOL_KEYWORDS)


def is_allowed_catalog_company(organization: str) -> bool:
    return _contains_any(organization, ALLOWED_CATALOG_COMPANIES)


def is_relevant_domain(domain: str) -> bool:
    return _contains_any(domain, RELEVANT_DOMAINS)


def is_major_lab(company: str) -> bool:
    return _contains_any(company, MAJOR_LABS)


def is_release_announcement(text: str) -> bool:
    return _contains_any(text, RELEASE_KEYWORDS)


def format_parameters(value: str | None) -> str | None:
    """
    Render a raw parameter count compactly.

    Examples:
        "175000000000" -> "175.0B"
        "1.5e12" -> "1.5T"
        "7e6" -> "7.0M"
        "500000" -> "500000" (below a million, unchanged)
        "unknown" -> "unknown" (not numeric, unchanged)
        "" / "nan" -> None
    """
    if value is None:
        return None

    raw = value.strip()
    if raw.lower() in _EMPTY_PARAMETERS:
        return None

    try:
        number = float(raw)
    except ValueError:
        return raw

    if number != number:  # NaN spelled some other way
        return None
    if number >= 1e12:
        return f"{number / 1e12:.1f}T"
    if number >= 1e9:
        return f"{number / 1e9:.1f}B"
    if number >= 1e6:
        return f"{number / 1e6:.1f}M"
    return raw


def parse_release_date(value: str | None) -> date | None:
    """
    Parse a publication date from the catalog.

    Accepts ISO dates and timestamps plus a few common spellings.

    Returns:
        The date, or None when missing or unparseable
    """
    if not value:
        return None

    raw = value.strip()
    if not raw:
        return None

    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue

    return None

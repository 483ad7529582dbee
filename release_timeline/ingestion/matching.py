"""
Release mention matching.

Decides whether a piece of text (a blog post, a Reddit post, a tweet) talks
about a known release. Matching is plain substring containment over a few
spelling variants of the release name, so "GPT-4 Turbo" matches
"gpt4 turbo", "gpt 4 turbo" and "gpt-4-turbo". It is not tokenized: a short
name such as "o1" also matches inside unrelated words.
"""

# Sources with these company labels are not tied to one lab, so their posts
# may mention any company's releases.
COMPANY_AGNOSTIC_LABELS = frozenset({"independent", "various"})


def name_variants(name: str) -> list[str]:
    """
    Lower-cased spelling variants of a release name.

    Args:
        name: Release name, e.g. "GPT-4 Turbo"

    Returns:
        Unique variants in a stable order: the name itself, hyphens removed,
        hyphens as spaces, spaces as hyphens
    """
    lowered = name.lower().strip()
    if not lowered:
        return []

    candidates = [
        lowered,
        lowered.replace("-", ""),
        lowered.replace("-", " "),
        lowered.replace(" ", "-"),
    ]

    variants: list[str] = []
    for candidate in candidates:
        if candidate and candidate not in variants:
            variants.append(candidate)
    return variants


def is_company_agnostic(source_company: str | None) -> bool:
    """Whether a source may attach mentions to any company's releases."""
    if source_company is None:
        return True
    return source_company.strip().lower() in COMPANY_AGNOSTIC_LABELS


def matches(
    text: str,
    name: str,
    company: str,
    source_company: str | None = None,
) -> bool:
    """
    Check whether `text` mentions the release `name` by `company`.

    For a company-scoped source (e.g. the OpenAI blog) the release company
    must equal the source company, case-insensitively, before the name is
    considered. Independent and unlabelled sources have no such gate.

    Args:
        text: Text to search
        name: Release name
        company: Release company
        source_company: Company label of the source the text came from

    Returns:
        True if any name variant occurs in the text
    """
    if not is_company_agnostic(source_company):
        if source_company.strip().lower() != company.strip().lower():
            return False

    haystack = text.lower()
    return any(variant in haystack for variant in name_variants(name))

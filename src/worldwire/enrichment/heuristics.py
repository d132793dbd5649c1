"""Deterministic fallbacks used when the generative service is unavailable."""

from __future__ import annotations

import re

from worldwire.data import ArticleGroup, EnrichmentResult, EventRecord
from worldwire.text import truncate

DEFAULT_CATEGORY = "World"
DEFAULT_REGION = "Global"

# Ordered: the first matching pattern wins.
CATEGORY_KEYWORDS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("War", re.compile(r"\b(war|battle|conflict|invasion|military|army|treaty|combat)\b", re.I)),
    (
        "Politics",
        re.compile(
            r"\b(election|president|prime minister|government|political|vote|democracy)\b", re.I
        ),
    ),
    (
        "Science",
        re.compile(
            r"\b(discover\w*|invention|science|research|nobel|experiment|theory|physicist)\b", re.I
        ),
    ),
    ("Technology", re.compile(r"\b(computer|internet|technology|software|digital|innovation)\b", re.I)),
    ("Environment", re.compile(r"\b(environment|climate|pollution|conservation|ecology)\b", re.I)),
    ("Economy", re.compile(r"\b(economy|market|trade|finance|stock|recession|gdp)\b", re.I)),
    ("Culture", re.compile(r"\b(art|music|literature|culture|film|book|painting|theater)\b", re.I)),
    ("Medicine", re.compile(r"\b(medicine|disease|vaccine|doctor|hospital|health|pandemic)\b", re.I)),
    ("Space", re.compile(r"\b(space|nasa|astronaut|satellite|rocket|moon|mars|orbit)\b", re.I)),
    ("Human Rights", re.compile(r"\b(human rights|civil rights|freedom|equality|justice)\b", re.I)),
)

CATEGORIES: tuple[str, ...] = tuple(name for name, _ in CATEGORY_KEYWORDS) + (DEFAULT_CATEGORY,)

REGION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    (
        "North America",
        re.compile(
            r"\b(United States|USA|America|Canada|Mexico|North America|Washington|New York|California)\b",
            re.I,
        ),
    ),
    (
        "Europe",
        re.compile(
            r"\b(Europe|Britain|France|Germany|Italy|Spain|UK|England|Russia|London|Paris|Berlin|Rome)\b",
            re.I,
        ),
    ),
    (
        "Asia",
        re.compile(
            r"\b(Asia|China|Japan|India|Korea|Vietnam|Thailand|Indonesia|Beijing|Tokyo|Delhi)\b",
            re.I,
        ),
    ),
    (
        "Middle East",
        re.compile(
            r"\b(Middle East|Iran|Iraq|Israel|Saudi Arabia|Turkey|Egypt|Jerusalem|Baghdad|Tehran)\b",
            re.I,
        ),
    ),
    ("Africa", re.compile(r"\b(Africa|South Africa|Nigeria|Kenya|Ethiopia|Morocco|Cairo|Lagos)\b", re.I)),
    (
        "South America",
        re.compile(
            r"\b(South America|Brazil|Argentina|Chile|Peru|Colombia|Buenos Aires|Rio de Janeiro)\b",
            re.I,
        ),
    ),
    ("Oceania", re.compile(r"\b(Australia|New Zealand|Pacific|Oceania|Sydney|Auckland)\b", re.I)),
)

REGIONS: tuple[str, ...] = tuple(name for name, _ in REGION_PATTERNS) + (DEFAULT_REGION,)


def categorize(text: str) -> str:
    """Map text to a category with the ordered keyword table."""
    for category, pattern in CATEGORY_KEYWORDS:
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY


def extract_region(text: str) -> str:
    """Find the first region mentioned in the text."""
    for region, pattern in REGION_PATTERNS:
        if pattern.search(text):
            return region
    return DEFAULT_REGION


def normalize_category(raw: object, fallback_text: str = "") -> str:
    """Coerce a model-supplied category onto the known set."""
    value = str(raw or "").strip()
    for category in CATEGORIES:
        if value.lower() == category.lower():
            return category
    return categorize(fallback_text) if fallback_text else DEFAULT_CATEGORY


def normalize_region(raw: object) -> str:
    value = str(raw or "").strip()
    for region in REGIONS:
        if value.lower() == region.lower():
            return region
    return DEFAULT_REGION


def heuristic_enrichment(
    subject: ArticleGroup | EventRecord,
    *,
    narrative_limit: int = 1000,
    summary_limit: int = 300,
) -> EnrichmentResult:
    """Build an EnrichmentResult from the raw text alone.

    The narrative is the reports' own text, truncated; the region is always
    "Global" and the category comes from the keyword table.
    """
    if isinstance(subject, ArticleGroup):
        title = subject.lead.title
        bodies: list[str] = []
        for article in subject.articles:
            if article.body_text and article.body_text not in bodies:
                bodies.append(article.body_text)
        raw_text = "\n\n".join(bodies) or title
        key_points = tuple(dict.fromkeys(a.title for a in subject.articles))[:3]
    else:
        title = subject.title
        raw_text = subject.long_description or subject.description or title
        key_points = tuple(subject.key_points[:3]) or (title,)

    narrative = truncate(raw_text, narrative_limit)
    return EnrichmentResult(
        narrative=narrative,
        short_summary=truncate(narrative.replace("\n\n", " "), summary_limit),
        region=DEFAULT_REGION,
        category=categorize(f"{title} {raw_text}"),
        key_points=key_points,
        generated=False,
    )

"""Greedy title-similarity grouping of articles into events."""

from __future__ import annotations

import logging
import re

from worldwire.data import Article, ArticleGroup

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.5

_PUNCT_RE = re.compile(r"[^\w\s]")


def significant_tokens(title: str) -> frozenset[str]:
    """Lowercase, strip punctuation and keep tokens longer than 3 characters."""
    cleaned = _PUNCT_RE.sub("", title.lower())
    return frozenset(token for token in cleaned.split() if len(token) > 3)


def overlap_ratio(a: frozenset[str], b: frozenset[str]) -> float:
    """Token-set overlap ``|A ∩ B| / max(|A|, |B|)``; 0.0 if either is empty."""
    if not a or not b:
        return 0.0
    return len(a & b) / max(len(a), len(b))


def group_articles(
    articles: list[Article],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
) -> list[ArticleGroup]:
    """Cluster articles that appear to describe the same event.

    Single pass, order dependent: each article is compared with the first
    article of every existing group and joins the first group whose overlap
    is strictly above ``threshold``. Titles with no significant tokens always
    start their own group.

    Args:
        articles: Collected articles, in collection order.
        threshold: Minimum overlap ratio (exclusive) for joining a group.

    Returns:
        Groups in order of creation.
    """
    buckets: list[tuple[frozenset[str], list[Article]]] = []

    for article in articles:
        tokens = significant_tokens(article.title)
        target: list[Article] | None = None
        if tokens:
            for lead_tokens, members in buckets:
                if overlap_ratio(tokens, lead_tokens) > threshold:
                    target = members
                    break
        if target is None:
            buckets.append((tokens, [article]))
        else:
            target.append(article)

    groups = [ArticleGroup(articles=tuple(members)) for _, members in buckets]
    logger.info("Grouped %d articles into %d events", len(articles), len(groups))
    return groups

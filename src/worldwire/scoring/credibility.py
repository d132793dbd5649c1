"""Heuristic credibility scoring for article groups."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime

from worldwire.data import Article, ArticleGroup, CredibilityAssessment, EventRecord
from worldwire.data.models import registrable_domain, source_key_for

logger = logging.getLogger(__name__)

# Bonus per reputable source, keyed by domain or lowercased source name.
# Wire services and standards/science bodies carry the largest bonus.
DEFAULT_REPUTATION: dict[str, int] = {
    "reuters.com": 15,
    "reuters": 15,
    "apnews.com": 15,
    "associated press": 15,
    "afp.com": 15,
    "afp": 15,
    "nasa.gov": 15,
    "who.int": 15,
    "nature.com": 15,
    "science.org": 15,
    "thelancet.com": 15,
    "bbc.com": 10,
    "bbc.co.uk": 10,
    "bbc news": 10,
    "theguardian.com": 10,
    "nytimes.com": 10,
    "washingtonpost.com": 10,
    "aljazeera.com": 10,
    "bloomberg.com": 10,
    "npr.org": 10,
    "wikipedia.org": 5,
    "wikipedia": 5,
}


@dataclass(frozen=True)
class ScoringWeights:
    """Weights of the credibility heuristic.

    The values are tunable, but every bonus must stay non-negative and
    ``stale_factor`` must stay within (0, 1] for the score to remain monotonic
    in the number of independent sources.
    """

    baseline: int = 50
    reputation_cap: int = 30
    diversity_bonus_two: int = 15
    diversity_bonus_three: int = 25
    agreement_weight: int = 10
    recency_bonus: int = 5
    freshness_days: int = 7
    stale_after_days: int = 365
    stale_factor: float = 0.9
    single_source_penalty: int = 10


@dataclass(frozen=True)
class StageThresholds:
    """Accept/verify/flag thresholds for one pipeline stage."""

    accept: int = 60
    verify: int = 85
    flag: int = 40

    def __post_init__(self) -> None:
        if not 0 <= self.flag <= 100 or not 0 <= self.accept <= 100 or not 0 <= self.verify <= 100:
            raise ValueError("Thresholds must be within [0, 100]")
        if self.verify < self.flag:
            raise ValueError("verify threshold must not be below flag threshold")


INGESTION_THRESHOLDS = StageThresholds(accept=60, verify=85, flag=40)
VERIFICATION_THRESHOLDS = StageThresholds(accept=0, verify=75, flag=40)


def _reputation_key(name: str) -> str:
    """Domains collapse to their registrable domain; outlet names only lowercase."""
    key = name.strip().lower()
    if "." in key and " " not in key:
        return registrable_domain(key) or key
    return key


def clamp(value: float, low: int, high: int) -> int:
    return int(max(low, min(high, round(value))))


def agreement_ratio(group: ArticleGroup) -> float:
    """Share of the additional reports that come from a different outlet."""
    if len(group.articles) < 2:
        return 0.0
    return (group.independent_source_count - 1) / (len(group.articles) - 1)


def group_from_record(record: EventRecord) -> ArticleGroup:
    """Rebuild a group from a stored record, one article per source URL."""
    try:
        published = date.fromisoformat(record.date)
    except ValueError:
        published = record.created_at.date()
    urls = record.sources or [""]
    articles = tuple(
        Article(
            title=record.title,
            body_text=record.long_description,
            published_date=published,
            source_name=source_key_for(url, "unknown") if url else "unknown",
            source_url=url,
            origin_year=record.origin_year,
        )
        for url in urls
    )
    return ArticleGroup(articles=articles)


class CredibilityScorer:
    """Compute a 0-100 credibility score from sources, agreement and recency.

    Args:
        weights: Heuristic weights.
        reputation: Bonus per reputable domain or source name.
    """

    def __init__(
        self,
        weights: ScoringWeights | None = None,
        reputation: dict[str, int] | None = None,
    ) -> None:
        self._weights = weights or ScoringWeights()
        table = DEFAULT_REPUTATION if reputation is None else reputation
        self._reputation: dict[str, int] = {}
        for name, bonus in table.items():
            key = _reputation_key(name)
            self._reputation[key] = max(self._reputation.get(key, bonus), bonus)

    def reputation_bonus(self, group: ArticleGroup) -> int:
        """Sum of bonuses of distinct reputable outlets, capped."""
        bonuses: dict[str, int] = {}
        for article in group.articles:
            key = article.source_key
            bonus = max(
                self._reputation.get(key, 0),
                self._reputation.get(article.source_name.strip().lower(), 0),
            )
            if bonus:
                bonuses[key] = max(bonuses.get(key, 0), bonus)
        return min(sum(bonuses.values()), self._weights.reputation_cap)

    def assess(
        self,
        group: ArticleGroup,
        thresholds: StageThresholds = INGESTION_THRESHOLDS,
        *,
        as_of: date | None = None,
        prior_score: int | None = None,
    ) -> CredibilityAssessment:
        """Score a group against a stage's thresholds.

        Args:
            group: The grouped reports.
            thresholds: Stage-specific accept/verify/flag thresholds.
            as_of: Reference date for recency (defaults to today, UTC).
            prior_score: Replaces the baseline, e.g. with a verification verdict.

        Returns:
            The credibility assessment.
        """
        w = self._weights
        today = as_of or datetime.now(tz=UTC).date()
        independent = group.independent_source_count
        ratio = agreement_ratio(group)
        recency_days = max(0, (today - group.latest_published).days)

        score: float = w.baseline if prior_score is None else prior_score
        score += self.reputation_bonus(group)
        if independent >= 3:
            score += w.diversity_bonus_three
        elif independent >= 2:
            score += w.diversity_bonus_two
        score += w.agreement_weight * ratio
        if group.source_count == 1:
            score -= w.single_source_penalty
        # Historical reports are old by nature; recency says nothing about them
        if group.origin_year is None:
            if recency_days <= w.freshness_days:
                score += w.recency_bonus
            elif recency_days > w.stale_after_days:
                score *= w.stale_factor

        final = clamp(score, 0, 100)
        logger.debug(
            "Scored %r: %d (sources=%d, independent=%d, agreement=%.2f, recency=%dd)",
            group.lead.title[:60],
            final,
            group.source_count,
            independent,
            ratio,
            recency_days,
        )
        return CredibilityAssessment(
            score=final,
            source_count=group.source_count,
            agreement_ratio=round(ratio, 2),
            recency_days=recency_days,
            verified=final >= thresholds.verify,
            flagged=final < thresholds.flag,
            accepted=final >= thresholds.accept,
        )

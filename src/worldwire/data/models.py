"""Core data models for worldwire."""

import calendar
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from typing import Any
from urllib.parse import urlparse

import tldextract


class Alignment(StrEnum):
    """Coarse political alignment of a narrative."""

    LEFT = "Left"
    RIGHT = "Right"
    NEUTRAL = "Neutral"
    STATE = "State"


class RunState(StrEnum):
    """Stages of a single pipeline run."""

    COLLECTING = "collecting"
    GROUPING = "grouping"
    SCORING = "scoring"
    ENRICHING = "enriching"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


class MaintenanceMode(StrEnum):
    """What a maintenance pass does to existing records."""

    RESCORE = "rescore"
    REENRICH = "reenrich"
    BIAS = "bias"


# ============================================================
# Queries and units of work
# ============================================================


@dataclass(frozen=True)
class DateQuery:
    """An "on this day" query for historical providers."""

    month: int
    day: int


@dataclass(frozen=True)
class TopicQuery:
    """A free-text topic query. An empty topic asks for top headlines."""

    text: str = ""


Query = DateQuery | TopicQuery


def _validate_month_day(month: int, day: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    # Leap year so that Feb 29 is accepted
    if not 1 <= day <= calendar.monthrange(2024, month)[1]:
        raise ValueError(f"Invalid day {day} for month {month}")


@dataclass(frozen=True)
class DateUnit:
    """Collect and process everything reported for one calendar date."""

    month: int
    day: int

    def __post_init__(self) -> None:
        _validate_month_day(self.month, self.day)

    @property
    def query(self) -> DateQuery:
        return DateQuery(month=self.month, day=self.day)

    @property
    def label(self) -> str:
        return f"date:{self.month:02d}-{self.day:02d}"


@dataclass(frozen=True)
class TopicSweepUnit:
    """Collect and process a list of topics, one after another."""

    topics: tuple[str, ...] = ("",)

    def __post_init__(self) -> None:
        if not self.topics:
            raise ValueError("A topic sweep needs at least one topic")

    @property
    def label(self) -> str:
        return "topics:" + ",".join(t or "<headlines>" for t in self.topics)


@dataclass(frozen=True)
class MaintenanceUnit:
    """Re-score, re-enrich or bias-analyse existing records without collecting."""

    mode: MaintenanceMode = MaintenanceMode.RESCORE
    limit: int = 50

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError("Maintenance limit must be positive")

    @property
    def label(self) -> str:
        return f"maintenance:{self.mode}"


UnitOfWork = DateUnit | TopicSweepUnit | MaintenanceUnit


# ============================================================
# Articles and groups
# ============================================================


_DOMAINS = tldextract.TLDExtract(suffix_list_urls=())


def registrable_domain(hostname: str) -> str:
    """Reduce a hostname to the domain an outlet registered.

    ``en.wikipedia.org`` and ``wikipedia.org`` both become ``wikipedia.org``;
    ``feeds.bbci.co.uk`` becomes ``bbci.co.uk``.
    """
    ext = _DOMAINS(hostname.strip().lower().rstrip("."))
    return ".".join(part for part in [ext.domain, ext.suffix] if part)


def source_key_for(source_url: str, source_name: str) -> str:
    """Key used to decide whether two reports come from independent outlets.

    Subdomains of one registrable domain count as the same outlet.
    """
    hostname = urlparse(source_url).hostname if source_url else None
    if hostname:
        return registrable_domain(hostname) or hostname
    return source_name.strip().lower()


@dataclass(frozen=True)
class Article:
    """A single normalized report from one provider about a possible event."""

    title: str
    body_text: str
    published_date: date
    source_name: str
    source_url: str = ""
    image_url: str | None = None
    origin_year: int | None = None
    provider: str = ""

    @property
    def source_key(self) -> str:
        return source_key_for(self.source_url, self.source_name)


def make_article(
    *,
    title: str | None,
    body_text: str | None,
    published_date: date,
    source_name: str,
    source_url: str = "",
    image_url: str | None = None,
    origin_year: int | None = None,
    provider: str = "",
) -> Article | None:
    """Build an Article, or return None when the title is empty."""
    clean_title = (title or "").strip()
    if not clean_title:
        return None
    return Article(
        title=clean_title,
        body_text=(body_text or "").strip(),
        published_date=published_date,
        source_name=source_name.strip() or "Unknown",
        source_url=source_url or "",
        image_url=image_url or None,
        origin_year=origin_year,
        provider=provider,
    )


@dataclass(frozen=True)
class ArticleGroup:
    """A cluster of articles believed to describe the same event."""

    articles: tuple[Article, ...]

    def __post_init__(self) -> None:
        if not self.articles:
            raise ValueError("An ArticleGroup needs at least one article")

    @property
    def lead(self) -> Article:
        return self.articles[0]

    @property
    def source_names(self) -> list[str]:
        seen: dict[str, None] = {}
        for article in self.articles:
            seen.setdefault(article.source_name, None)
        return list(seen)

    @property
    def source_count(self) -> int:
        return len(self.source_names)

    @property
    def independent_source_count(self) -> int:
        return len({a.source_key for a in self.articles})

    @property
    def source_urls(self) -> list[str]:
        seen: dict[str, None] = {}
        for article in self.articles:
            if article.source_url:
                seen.setdefault(article.source_url, None)
        return list(seen)

    @property
    def earliest_published(self) -> date:
        return min(a.published_date for a in self.articles)

    @property
    def latest_published(self) -> date:
        return max(a.published_date for a in self.articles)

    @property
    def origin_year(self) -> int | None:
        return self.lead.origin_year


# ============================================================
# Assessments
# ============================================================


@dataclass(frozen=True)
class CredibilityAssessment:
    """Credibility of one group, recomputed on every run."""

    score: int
    source_count: int
    agreement_ratio: float
    recency_days: int
    verified: bool
    flagged: bool
    accepted: bool = True


@dataclass(frozen=True)
class BiasAssessment:
    """Bias and tone judgement for a narrative."""

    bias_score: int = 0
    tone_score: int = 50
    alignment: Alignment = Alignment.NEUTRAL
    justification: str = "Analysis unavailable"
    generated: bool = False


@dataclass(frozen=True)
class EnrichmentResult:
    """Narrative and classification for an event.

    ``generated`` is False when the heuristic fallback produced it.
    """

    narrative: str
    short_summary: str
    region: str = "Global"
    category: str = "World"
    key_points: tuple[str, ...] = ()
    bias_score: int = 0
    tone_score: int = 50
    alignment: Alignment = Alignment.NEUTRAL
    bias_summary: str = ""
    generated: bool = False

    def with_bias(self, bias: BiasAssessment) -> "EnrichmentResult":
        return EnrichmentResult(
            narrative=self.narrative,
            short_summary=self.short_summary,
            region=self.region,
            category=self.category,
            key_points=self.key_points,
            bias_score=bias.bias_score,
            tone_score=bias.tone_score,
            alignment=bias.alignment,
            bias_summary=bias.justification,
            generated=self.generated,
        )


@dataclass(frozen=True)
class VerificationVerdict:
    """Corroboration verdict returned by the generative service."""

    credibility_score: int
    verified: bool
    summary: str = ""
    corroborated_sources: tuple[str, ...] = ()
    concerns: tuple[str, ...] = ()


# ============================================================
# Persisted records
# ============================================================


def _to_iso(value: datetime) -> str:
    return value.astimezone(UTC).isoformat()


def _from_iso(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.fromtimestamp(0, tz=UTC)


@dataclass(frozen=True)
class Revision:
    """Snapshot of an EventRecord taken right before it was changed."""

    updated_at: datetime
    narrative_snapshot: str
    credibility_score_snapshot: int
    sources_snapshot: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "updatedAt": _to_iso(self.updated_at),
            "narrativeSnapshot": self.narrative_snapshot,
            "credibilityScoreSnapshot": self.credibility_score_snapshot,
            "sourcesSnapshot": list(self.sources_snapshot),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Revision":
        return cls(
            updated_at=_from_iso(raw.get("updatedAt")),
            narrative_snapshot=str(raw.get("narrativeSnapshot", "")),
            credibility_score_snapshot=int(raw.get("credibilityScoreSnapshot", 0)),
            sources_snapshot=tuple(str(s) for s in raw.get("sourcesSnapshot", [])),
        )


@dataclass
class EventRecord:
    """The canonical, persisted representation of an event."""

    id: str
    title: str
    description: str
    long_description: str
    date: str
    created_at: datetime
    updated_at: datetime
    location: str = "Global"
    region: str = "Global"
    category: str = "World"
    sources: list[str] = field(default_factory=list)
    credibility_score: int = 0
    verified: bool = False
    flagged: bool = False
    revisions: list[Revision] = field(default_factory=list)
    added_by: str = "worldwire"
    image_url: str = ""
    key_points: list[str] = field(default_factory=list)
    source_count: int = 0
    agreement_ratio: float = 0.0
    origin_year: int | None = None
    enriched: bool = False
    bias_score: int = 0
    tone_score: int = 50
    alignment: Alignment = Alignment.NEUTRAL
    bias_summary: str = ""
    verification_summary: str = ""

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible document stored under ``id``."""
        return {
            "title": self.title,
            "description": self.description,
            "longDescription": self.long_description,
            "date": self.date,
            "location": self.location,
            "region": self.region,
            "category": self.category,
            "sources": list(self.sources),
            "credibilityScore": self.credibility_score,
            "verified": self.verified,
            "flagged": self.flagged,
            "revisions": [r.to_dict() for r in self.revisions],
            "createdAt": _to_iso(self.created_at),
            "updatedAt": _to_iso(self.updated_at),
            "addedBy": self.added_by,
            "imageUrl": self.image_url,
            "keyPoints": list(self.key_points),
            "sourceCount": self.source_count,
            "agreementRatio": self.agreement_ratio,
            "originYear": self.origin_year,
            "enriched": self.enriched,
            "biasScore": self.bias_score,
            "toneScore": self.tone_score,
            "alignment": str(self.alignment),
            "biasSummary": self.bias_summary,
            "verificationSummary": self.verification_summary,
        }

    @classmethod
    def from_document(cls, doc_id: str, doc: dict[str, Any]) -> "EventRecord":
        """Rebuild a record from a stored document.

        Missing fields take their defaults so older documents still load.
        """
        try:
            alignment = Alignment(str(doc.get("alignment", "Neutral")))
        except ValueError:
            alignment = Alignment.NEUTRAL
        origin_year = doc.get("originYear")
        return cls(
            id=doc_id,
            title=str(doc.get("title", "")),
            description=str(doc.get("description", "")),
            long_description=str(doc.get("longDescription", "")),
            date=str(doc.get("date", "")),
            created_at=_from_iso(doc.get("createdAt")),
            updated_at=_from_iso(doc.get("updatedAt")),
            location=str(doc.get("location", "Global")),
            region=str(doc.get("region", "Global")),
            category=str(doc.get("category", "World")),
            sources=[str(s) for s in doc.get("sources", [])],
            credibility_score=int(doc.get("credibilityScore", 0)),
            verified=bool(doc.get("verified", False)),
            flagged=bool(doc.get("flagged", False)),
            revisions=[Revision.from_dict(r) for r in doc.get("revisions", [])],
            added_by=str(doc.get("addedBy", "")),
            image_url=str(doc.get("imageUrl") or ""),
            key_points=[str(p) for p in doc.get("keyPoints", [])],
            source_count=int(doc.get("sourceCount", 0)),
            agreement_ratio=float(doc.get("agreementRatio", 0.0)),
            origin_year=int(origin_year) if origin_year is not None else None,
            enriched=bool(doc.get("enriched", False)),
            bias_score=int(doc.get("biasScore", 0)),
            tone_score=int(doc.get("toneScore", 50)),
            alignment=alignment,
            bias_summary=str(doc.get("biasSummary", "")),
            verification_summary=str(doc.get("verificationSummary", "")),
        )


# ============================================================
# Usage and run accounting
# ============================================================


@dataclass(frozen=True)
class APICallUsage:
    """Usage from a single generative-service call."""

    model: str
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass
class Usage:
    """Accumulated external usage across pipeline components."""

    api_calls: list[APICallUsage] = field(default_factory=list)
    provider_requests: int = 0

    @property
    def input_tokens(self) -> int:
        return sum(c.input_tokens for c in self.api_calls)

    @property
    def output_tokens(self) -> int:
        return sum(c.output_tokens for c in self.api_calls)

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            api_calls=self.api_calls + other.api_calls,
            provider_requests=self.provider_requests + other.provider_requests,
        )

    def __iadd__(self, other: "Usage") -> "Usage":
        self.api_calls.extend(other.api_calls)
        self.provider_requests += other.provider_requests
        return self


@dataclass
class RunSummary:
    """Counts reported by one pipeline invocation."""

    unit: str
    state: RunState = RunState.COLLECTING
    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    rejected: int = 0
    errors: int = 0
    articles_collected: int = 0
    groups_formed: int = 0
    duration_seconds: float = 0.0
    timed_out: bool = False
    error: str | None = None
    usage: Usage = field(default_factory=Usage)

    @property
    def succeeded(self) -> bool:
        return self.state == RunState.DONE

    def merge(self, other: "RunSummary") -> None:
        """Fold the counts of another summary into this one."""
        self.processed += other.processed
        self.created += other.created
        self.updated += other.updated
        self.skipped += other.skipped
        self.rejected += other.rejected
        self.errors += other.errors
        self.articles_collected += other.articles_collected
        self.groups_formed += other.groups_formed
        self.timed_out = self.timed_out or other.timed_out
        self.usage += other.usage
        if other.state == RunState.FAILED:
            self.state = RunState.FAILED
            self.error = other.error

    def as_dict(self) -> dict[str, Any]:
        return {
            "unit": self.unit,
            "state": str(self.state),
            "processed": self.processed,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "rejected": self.rejected,
            "errors": self.errors,
            "articlesCollected": self.articles_collected,
            "groupsFormed": self.groups_formed,
            "durationSeconds": round(self.duration_seconds, 2),
            "timedOut": self.timed_out,
            "error": self.error,
            "inputTokens": self.usage.input_tokens,
            "outputTokens": self.usage.output_tokens,
            "providerRequests": self.usage.provider_requests,
        }

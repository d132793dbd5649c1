"""Idempotent, revision-tracked persistence of event records."""

import asyncio
import logging
import re
import time
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from typing import Any

from worldwire.data import (
    ArticleGroup,
    CredibilityAssessment,
    EnrichmentResult,
    EventRecord,
    Revision,
)
from worldwire.store.base import (
    DocumentStore,
    StoreError,
    StoreUnavailableError,
    WriteOp,
    with_timeout,
)
from worldwire.text import truncate

logger = logging.getLogger(__name__)

_NON_SLUG_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-{2,}")


def slugify(title: str, max_length: int = 150) -> str:
    """Lowercase, drop everything but letters, digits, spaces and hyphens,
    turn whitespace into hyphens and truncate.
    """
    slug = _NON_SLUG_RE.sub("", title.lower())
    slug = _WHITESPACE_RE.sub("-", slug.strip())
    slug = _HYPHENS_RE.sub("-", slug)
    return slug[:max_length].strip("-") or "event"


def event_id(title: str, event_date: str, *, max_length: int = 150) -> str:
    """Deterministic document id of an event: ``<slug>-<YYYY-MM-DD>``."""
    return f"{slugify(title, max_length)}-{event_date}"


@dataclass
class WriteStats:
    """Outcome counts of one ``StoreWriter.write`` call."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def written(self) -> int:
        return self.created + self.updated


def _material_fields(record: EventRecord) -> tuple[Any, ...]:
    return (
        record.long_description,
        record.credibility_score,
        tuple(sorted(record.sources)),
        record.verified,
        record.flagged,
        record.bias_score,
        record.tone_score,
        record.alignment,
    )


class StoreWriter:
    """Create or revise event records in a document store.

    Args:
        store: Target document store.
        batch_size: Preferred number of writes per atomic batch.
        added_by: Provenance tag stored on created records.
        min_revision_age: Records updated more recently than this are fresh.
        slug_max_length: Maximum length of the slug part of an id.
        timeout_seconds: Limit for each store read and batch commit.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        batch_size: int = 100,
        added_by: str = "worldwire",
        min_revision_age: timedelta = timedelta(hours=12),
        slug_max_length: int = 150,
        timeout_seconds: float = 10.0,
    ) -> None:
        self._store = store
        self._batch_size = max(1, min(batch_size, store.max_batch_size))
        self._added_by = added_by
        self._min_revision_age = min_revision_age
        self._slug_max_length = slug_max_length
        self._timeout_seconds = timeout_seconds

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def event_id(self, title: str, event_date: str) -> str:
        return event_id(title, event_date, max_length=self._slug_max_length)

    def group_id(self, group: ArticleGroup) -> str:
        return self.event_id(group.lead.title, group.earliest_published.isoformat())

    def is_fresh(self, document: dict[str, Any], now: datetime | None = None) -> bool:
        """Whether a stored document was updated within the minimum revision age."""
        now = now or datetime.now(tz=UTC)
        updated_at = EventRecord.from_document("", document).updated_at
        return now - updated_at < self._min_revision_age

    def build_record(
        self,
        group: ArticleGroup,
        assessment: CredibilityAssessment,
        enrichment: EnrichmentResult | None = None,
        *,
        now: datetime | None = None,
        verification_summary: str = "",
    ) -> EventRecord:
        """Assemble a fresh record for a scored, optionally enriched group."""
        now = now or datetime.now(tz=UTC)
        lead = group.lead
        body = lead.body_text or lead.title
        image_url = next((a.image_url for a in group.articles if a.image_url), None)

        record = EventRecord(
            id=self.group_id(group),
            title=lead.title,
            description=truncate(body, 300),
            long_description=body,
            date=group.earliest_published.isoformat(),
            created_at=now,
            updated_at=now,
            sources=group.source_urls or group.source_names,
            credibility_score=assessment.score,
            verified=assessment.verified,
            flagged=assessment.flagged,
            added_by=self._added_by,
            image_url=image_url or "",
            source_count=assessment.source_count,
            agreement_ratio=assessment.agreement_ratio,
            origin_year=group.origin_year,
            verification_summary=verification_summary,
        )
        if enrichment is not None:
            record = apply_enrichment(record, enrichment)
        return record

    async def write(
        self,
        candidates: list[EventRecord],
        *,
        now: datetime | None = None,
        deadline: float | None = None,
    ) -> WriteStats:
        """Create, revise or skip each candidate, committing in batches.

        Args:
            candidates: Records to persist, keyed by their ``id``.
            now: Timestamp used for created/updated times.
            deadline: ``time.monotonic()`` value after which no new batch starts.

        Returns:
            Counts of created, updated, skipped and failed writes.

        Raises:
            StoreUnavailableError: If the store stops answering mid-write.
        """
        now = now or datetime.now(tz=UTC)
        stats = WriteStats()
        pending: list[tuple[WriteOp, bool]] = []
        seen: set[str] = set()

        for candidate in candidates:
            if candidate.id in seen:
                stats.skipped += 1
                continue
            seen.add(candidate.id)

            try:
                existing = await with_timeout(
                    self._store.get(candidate.id), self._timeout_seconds, f"read of {candidate.id}"
                )
            except StoreUnavailableError:
                raise
            except StoreError as e:
                logger.warning("Failed to read %s: %s", candidate.id, e)
                stats.errors += 1
                continue

            if existing is None:
                record = replace(candidate, revisions=[], created_at=now, updated_at=now)
                pending.append((WriteOp(doc_id=record.id, document=record.to_document()), True))
                continue

            revised = self._revise(EventRecord.from_document(candidate.id, existing), candidate, now)
            if revised is None:
                stats.skipped += 1
                continue
            pending.append((WriteOp(doc_id=revised.id, document=revised.to_document()), False))

        for start in range(0, len(pending), self._batch_size):
            batch = pending[start : start + self._batch_size]
            if deadline is not None and time.monotonic() >= deadline:
                logger.warning("Deadline reached; skipping batch of %d writes", len(batch))
                stats.skipped += len(batch)
                continue
            try:
                await asyncio.shield(
                    asyncio.wait_for(
                        self._store.batch_commit([op for op, _ in batch]), self._timeout_seconds
                    )
                )
            except StoreUnavailableError:
                raise
            except (StoreError, TimeoutError) as e:
                logger.warning("Batch of %d writes failed: %s", len(batch), e)
                stats.errors += len(batch)
                continue
            created = sum(1 for _, is_new in batch if is_new)
            stats.created += created
            stats.updated += len(batch) - created

        logger.info(
            "Write finished: %d created, %d updated, %d skipped, %d errors",
            stats.created,
            stats.updated,
            stats.skipped,
            stats.errors,
        )
        return stats

    def _revise(
        self,
        existing: EventRecord,
        candidate: EventRecord,
        now: datetime,
    ) -> EventRecord | None:
        """Merge a candidate into an existing record, or None when unchanged."""
        # A heuristic narrative never replaces a generated one
        if existing.enriched and not candidate.enriched:
            candidate = replace(
                candidate,
                description=existing.description,
                long_description=existing.long_description,
                region=existing.region,
                location=existing.location,
                category=existing.category,
                key_points=list(existing.key_points),
                enriched=True,
            )

        if _material_fields(existing) == _material_fields(candidate):
            return None

        updated_at = now
        if existing.revisions and existing.revisions[-1].updated_at > now:
            updated_at = existing.revisions[-1].updated_at
        snapshot = Revision(
            updated_at=updated_at,
            narrative_snapshot=existing.long_description,
            credibility_score_snapshot=existing.credibility_score,
            sources_snapshot=tuple(existing.sources),
        )
        return replace(
            candidate,
            id=existing.id,
            created_at=existing.created_at,
            added_by=existing.added_by,
            image_url=candidate.image_url or existing.image_url,
            revisions=[*existing.revisions, snapshot],
            updated_at=updated_at,
        )


def apply_enrichment(record: EventRecord, enrichment: EnrichmentResult) -> EventRecord:
    """Copy narrative, classification and bias fields onto a record."""
    return replace(
        record,
        description=enrichment.short_summary or record.description,
        long_description=enrichment.narrative or record.long_description,
        location=enrichment.region,
        region=enrichment.region,
        category=enrichment.category,
        key_points=list(enrichment.key_points),
        enriched=enrichment.generated,
        bias_score=enrichment.bias_score,
        tone_score=enrichment.tone_score,
        alignment=enrichment.alignment,
        bias_summary=enrichment.bias_summary,
    )

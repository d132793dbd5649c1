"""Pipeline orchestrator: collect, group, score, enrich and write."""

import asyncio
import logging
import time
from collections.abc import Awaitable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TypeVar

from worldwire.collector import collect
from worldwire.data import (
    ArticleGroup,
    CredibilityAssessment,
    DateUnit,
    EventRecord,
    MaintenanceMode,
    MaintenanceUnit,
    Query,
    RunState,
    RunSummary,
    TopicQuery,
    TopicSweepUnit,
    UnitOfWork,
    Usage,
)
from worldwire.enrichment import Enricher
from worldwire.grouping import group_articles, overlap_ratio, significant_tokens
from worldwire.providers import ProviderAdapter
from worldwire.run_logger import RunLogger
from worldwire.scoring import (
    INGESTION_THRESHOLDS,
    VERIFICATION_THRESHOLDS,
    CredibilityScorer,
    StageThresholds,
    group_from_record,
)
from worldwire.store import (
    DocumentStore,
    StoreUnavailableError,
    StoreWriter,
    apply_enrichment,
    with_timeout,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigurationError(Exception):
    """The pipeline is not configured to process the requested unit."""


@dataclass(frozen=True)
class PipelineSettings:
    """Pacing, limits and stage toggles of the orchestrator."""

    ai_call_delay_seconds: float = 1.0
    unit_delay_seconds: float = 0.5
    run_timeout_seconds: float = 300.0
    store_timeout_seconds: float = 10.0
    max_groups_per_unit: int = 50
    grouping_threshold: float = 0.5
    enrich: bool = True
    analyze_bias: bool = True
    verify: bool = False
    corroborate: bool = True
    ingestion: StageThresholds = INGESTION_THRESHOLDS
    verification: StageThresholds = VERIFICATION_THRESHOLDS


class Orchestrator:
    """Drive units of work through the pipeline stages.

    Flow for a collecting unit:
    1. Ping the store; an unreachable store fails the run, here or at any later stage
    2. Fetch from every capable adapter in parallel
    3. Group reports that describe the same event
    4. Score each group and reject those below the accept threshold
    5. Skip groups whose record was revised recently, enrich the rest
    6. Create or revise records through the store writer

    Maintenance units skip steps 2-4 and work on stored records instead.

    Args:
        adapters: Provider adapters used for collection.
        scorer: Credibility scorer.
        enricher: Enricher (may have no generator configured).
        writer: Store writer.
        store: Document store, shared with the writer.
        settings: Pacing, limits and stage toggles.
        run_logger: Optional RunLogger for per-stage records.
    """

    def __init__(
        self,
        adapters: list[ProviderAdapter],
        scorer: CredibilityScorer,
        enricher: Enricher,
        writer: StoreWriter,
        store: DocumentStore,
        *,
        settings: PipelineSettings | None = None,
        run_logger: RunLogger | None = None,
    ) -> None:
        self._adapters = adapters
        self._scorer = scorer
        self._enricher = enricher
        self._writer = writer
        self._store = store
        self._settings = settings or PipelineSettings()
        self._run_logger = run_logger
        self._last_ai_call: float | None = None

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    async def run_pipeline(self, unit: UnitOfWork) -> RunSummary:
        """Process one unit of work.

        Args:
            unit: A date, a topic sweep or a maintenance pass.

        Returns:
            Summary of the run. The state is ``done`` or ``failed``; per-group
            failures only show up in ``errors``.
        """
        summary = RunSummary(unit=unit.label)
        started = time.monotonic()
        deadline = started + self._settings.run_timeout_seconds
        self._last_ai_call = None
        if self._run_logger:
            self._run_logger.start_run(unit.label, unit)

        try:
            await with_timeout(self._store.ping(), self._settings.store_timeout_seconds, "ping")
            if isinstance(unit, MaintenanceUnit):
                await self._run_maintenance(unit, summary, deadline)
            else:
                if not self._adapters:
                    raise ConfigurationError("No provider adapters configured")
                queries: list[Query] = (
                    [unit.query]
                    if isinstance(unit, DateUnit)
                    else [TopicQuery(text=topic) for topic in unit.topics]
                )
                for i, query in enumerate(queries):
                    if i and isinstance(unit, TopicSweepUnit):
                        await self._sleep(self._settings.unit_delay_seconds)
                    if time.monotonic() >= deadline:
                        logger.warning("Run deadline reached before %s", query)
                        summary.timed_out = True
                        break
                    await self._run_query(query, summary, deadline)
            summary.state = RunState.DONE
        except (StoreUnavailableError, ConfigurationError) as e:
            logger.error("Run %s failed: %s", unit.label, e)
            summary.state = RunState.FAILED
            summary.error = str(e)

        summary.duration_seconds = time.monotonic() - started
        logger.info(
            "Run %s %s: %d processed, %d created, %d updated, %d skipped, %d rejected, %d errors",
            unit.label,
            summary.state,
            summary.processed,
            summary.created,
            summary.updated,
            summary.skipped,
            summary.rejected,
            summary.errors,
        )
        if self._run_logger:
            self._run_logger.finish_run(summary)
        return summary

    async def run_sweep(self, units: list[UnitOfWork]) -> RunSummary:
        """Run several units one after another and merge their summaries."""
        total = RunSummary(unit="sweep:" + ";".join(u.label for u in units))
        started = time.monotonic()
        for i, unit in enumerate(units):
            if i:
                await self._sleep(self._settings.unit_delay_seconds)
            total.merge(await self.run_pipeline(unit))
        if total.state != RunState.FAILED:
            total.state = RunState.DONE
        total.duration_seconds = time.monotonic() - started
        return total

    # ------------------------------------------------------------
    # Collecting units
    # ------------------------------------------------------------

    async def _run_query(self, query: Query, summary: RunSummary, deadline: float) -> None:
        settings = self._settings

        summary.state = RunState.COLLECTING
        requests_before = self._provider_requests()
        t0 = time.monotonic()
        articles = await collect(query, self._adapters)
        summary.articles_collected += len(articles)
        collect_usage = Usage(provider_requests=self._provider_requests() - requests_before)
        summary.usage += collect_usage
        self._log_stage(
            "collection",
            "collector",
            query,
            {"article_count": len(articles)},
            collect_usage,
            t0,
        )

        summary.state = RunState.GROUPING
        t0 = time.monotonic()
        groups = group_articles(articles, threshold=settings.grouping_threshold)
        summary.groups_formed += len(groups)
        # Best-corroborated groups first, so the cap drops the weakest
        groups.sort(key=lambda g: g.independent_source_count, reverse=True)
        if len(groups) > settings.max_groups_per_unit:
            summary.skipped += len(groups) - settings.max_groups_per_unit
            groups = groups[: settings.max_groups_per_unit]
        self._log_stage(
            "grouping",
            "group_articles",
            {"article_count": len(articles)},
            [g.lead.title for g in groups],
            None,
            t0,
        )

        summary.state = RunState.SCORING
        t0 = time.monotonic()
        now = datetime.now(tz=UTC)
        accepted: list[tuple[ArticleGroup, CredibilityAssessment]] = []
        for group in groups:
            summary.processed += 1
            assessment = self._scorer.assess(group, settings.ingestion, as_of=now.date())
            if not assessment.accepted:
                logger.info("Rejected %r (score %d)", group.lead.title[:80], assessment.score)
                summary.rejected += 1
                continue
            accepted.append((group, assessment))
        self._log_stage(
            "scoring",
            type(self._scorer).__name__,
            {"group_count": len(groups)},
            [{"title": g.lead.title, "score": a.score} for g, a in accepted],
            None,
            t0,
        )

        summary.state = RunState.ENRICHING
        t0 = time.monotonic()
        enrich_usage = Usage()
        candidates: list[EventRecord] = []
        for i, (group, assessment) in enumerate(accepted):
            if time.monotonic() >= deadline:
                logger.warning("Run deadline reached; skipping %d groups", len(accepted) - i)
                summary.timed_out = True
                summary.skipped += len(accepted) - i
                break
            try:
                candidate = await self._process_group(group, assessment, groups, now, enrich_usage)
            except StoreUnavailableError:
                raise
            except Exception as e:
                logger.warning("Failed to process %r: %s", group.lead.title[:80], e)
                summary.errors += 1
                continue
            if candidate is None:
                summary.skipped += 1
                continue
            candidates.append(candidate)
        summary.usage += enrich_usage
        self._log_stage(
            "enrichment",
            type(self._enricher).__name__,
            {"group_count": len(accepted)},
            [c.id for c in candidates],
            enrich_usage,
            t0,
        )

        await self._write(candidates, summary, now, deadline)

    async def _process_group(
        self,
        group: ArticleGroup,
        assessment: CredibilityAssessment,
        siblings: list[ArticleGroup],
        now: datetime,
        usage: Usage,
    ) -> EventRecord | None:
        """Build the record for one group, or None when its record is fresh."""
        settings = self._settings
        doc_id = self._writer.group_id(group)
        existing = await with_timeout(
            self._store.get(doc_id), settings.store_timeout_seconds, f"read of {doc_id}"
        )
        if existing is not None and self._writer.is_fresh(existing, now):
            logger.info("Skipping %r: revised recently", group.lead.title[:80])
            return None

        corroboration = self._corroboration(group, siblings) if settings.corroborate else None

        verification_summary = ""
        if settings.verify and self._enricher.available:
            verdict, verify_usage = await self._paced(
                self._enricher.verify(group, corroboration or "")
            )
            usage += verify_usage
            if verdict is not None:
                assessment = self._scorer.assess(
                    group,
                    settings.verification,
                    as_of=now.date(),
                    prior_score=verdict.credibility_score,
                )
                verification_summary = verdict.summary

        enrichment = None
        if settings.enrich:
            enrichment, enrich_usage = await self._paced(
                self._enricher.enrich(group, corroboration)
            )
            usage += enrich_usage
            if settings.analyze_bias and enrichment.generated:
                bias, bias_usage = await self._paced(
                    self._enricher.analyze_bias(enrichment.narrative, group.source_names)
                )
                usage += bias_usage
                enrichment = enrichment.with_bias(bias)

        return self._writer.build_record(
            group,
            assessment,
            enrichment,
            now=now,
            verification_summary=verification_summary,
        )

    def _corroboration(self, group: ArticleGroup, siblings: list[ArticleGroup]) -> str | None:
        """Headlines of the other reports in the group and of related groups."""
        lines = [f"- {a.source_name}: {a.title}" for a in group.articles[1:]]
        tokens = significant_tokens(group.lead.title)
        related = [
            other
            for other in siblings
            if other is not group
            and overlap_ratio(tokens, significant_tokens(other.lead.title)) > 0
        ]
        lines.extend(f"- {o.lead.source_name}: {o.lead.title}" for o in related[:5])
        return "\n".join(lines) or None

    # ------------------------------------------------------------
    # Maintenance units
    # ------------------------------------------------------------

    async def _run_maintenance(
        self,
        unit: MaintenanceUnit,
        summary: RunSummary,
        deadline: float,
    ) -> None:
        now = datetime.now(tz=UTC)
        summary.state = RunState.SCORING
        documents = await with_timeout(
            self._store.list_documents(unit.limit),
            self._settings.store_timeout_seconds,
            "listing",
        )
        stale = [(i, d) for i, d in documents if not self._writer.is_fresh(d, now)]
        summary.skipped += len(documents) - len(stale)

        summary.state = RunState.ENRICHING
        t0 = time.monotonic()
        usage = Usage()
        candidates: list[EventRecord] = []
        for i, (doc_id, document) in enumerate(stale):
            if time.monotonic() >= deadline:
                logger.warning("Run deadline reached; skipping %d records", len(stale) - i)
                summary.timed_out = True
                summary.skipped += len(stale) - i
                break
            summary.processed += 1
            try:
                record = EventRecord.from_document(doc_id, document)
                candidate = await self._maintain(record, unit.mode, now, usage)
            except StoreUnavailableError:
                raise
            except Exception as e:
                logger.warning("Failed to %s %s: %s", unit.mode, doc_id, e)
                summary.errors += 1
                continue
            if candidate is None:
                summary.skipped += 1
                continue
            candidates.append(candidate)
        summary.usage += usage
        self._log_stage(
            f"maintenance_{unit.mode}",
            type(self._enricher).__name__,
            {"record_count": len(stale)},
            [c.id for c in candidates],
            usage,
            t0,
        )

        await self._write(candidates, summary, now, deadline)

    async def _maintain(
        self,
        record: EventRecord,
        mode: MaintenanceMode,
        now: datetime,
        usage: Usage,
    ) -> EventRecord | None:
        settings = self._settings

        if mode == MaintenanceMode.RESCORE:
            prior_score = None
            verification_summary = record.verification_summary
            if settings.verify and self._enricher.available:
                verdict, verify_usage = await self._paced(
                    self._enricher.verify(record, "\n".join(record.sources))
                )
                usage += verify_usage
                if verdict is not None:
                    prior_score = verdict.credibility_score
                    verification_summary = verdict.summary
            group = group_from_record(record)
            assessment = self._scorer.assess(
                group,
                settings.verification,
                as_of=now.date(),
                prior_score=prior_score,
            )
            return replace(
                record,
                credibility_score=assessment.score,
                verified=assessment.verified,
                flagged=assessment.flagged,
                source_count=assessment.source_count,
                agreement_ratio=assessment.agreement_ratio,
                verification_summary=verification_summary,
            )

        if mode == MaintenanceMode.REENRICH:
            enrichment, enrich_usage = await self._paced(self._enricher.enrich(record))
            usage += enrich_usage
            if settings.analyze_bias and enrichment.generated:
                bias, bias_usage = await self._paced(
                    self._enricher.analyze_bias(enrichment.narrative, record.sources)
                )
                usage += bias_usage
                enrichment = enrichment.with_bias(bias)
            return apply_enrichment(record, enrichment)

        bias, bias_usage = await self._paced(
            self._enricher.analyze_bias(
                record.long_description or record.description, record.sources
            )
        )
        usage += bias_usage
        if not bias.generated:
            return None
        return replace(
            record,
            bias_score=bias.bias_score,
            tone_score=bias.tone_score,
            alignment=bias.alignment,
            bias_summary=bias.justification,
        )

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    async def _write(
        self,
        candidates: list[EventRecord],
        summary: RunSummary,
        now: datetime,
        deadline: float,
    ) -> None:
        summary.state = RunState.WRITING
        t0 = time.monotonic()
        stats = await self._writer.write(candidates, now=now, deadline=deadline)
        summary.created += stats.created
        summary.updated += stats.updated
        summary.skipped += stats.skipped
        summary.errors += stats.errors
        if candidates and time.monotonic() >= deadline:
            summary.timed_out = True
        self._log_stage(
            "write",
            type(self._writer).__name__,
            {"candidate_count": len(candidates)},
            stats,
            None,
            t0,
        )

    async def _paced(self, call: Awaitable[T]) -> T:
        """Await a generative call at least ``ai_call_delay_seconds`` after the previous one ended."""
        if not self._enricher.available:
            return await call
        if self._last_ai_call is not None:
            wait = self._settings.ai_call_delay_seconds - (time.monotonic() - self._last_ai_call)
            await self._sleep(wait)
        try:
            return await call
        finally:
            self._last_ai_call = time.monotonic()

    async def _sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    def _provider_requests(self) -> int:
        return sum(getattr(adapter, "requests_made", 0) for adapter in self._adapters)

    def _log_stage(
        self,
        stage: str,
        component: str,
        input_data: object,
        output_data: object,
        usage: Usage | None,
        started: float,
    ) -> None:
        if self._run_logger:
            self._run_logger.log_stage(
                stage=stage,
                component=component,
                input_data=input_data,
                output_data=output_data,
                usage=usage,
                duration_seconds=time.monotonic() - started,
            )

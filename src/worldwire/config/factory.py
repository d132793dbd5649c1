"""Factory functions to create components from configuration."""

from datetime import timedelta
from pathlib import Path

from worldwire.config.models import (
    ClaudeGeneratorConfig,
    GDELTProviderConfig,
    GeneratorConfig,
    JsonStoreConfig,
    MemoryStoreConfig,
    MuffinLabsProviderConfig,
    NewsAPIProviderConfig,
    NoGeneratorConfig,
    PipelineConfig,
    ProviderConfig,
    RSSProviderConfig,
    ScoringConfig,
    StoreConfig,
    WikipediaProviderConfig,
    WorldwireConfig,
)
from worldwire.enrichment import ClaudeTextGenerator, Enricher
from worldwire.pipeline import Orchestrator, PipelineSettings
from worldwire.providers import (
    GDELTProvider,
    MuffinLabsHistoryProvider,
    NewsAPIProvider,
    ProviderAdapter,
    RSSFeedProvider,
    WikipediaOnThisDayProvider,
)
from worldwire.run_logger import RunLogger
from worldwire.scoring import DEFAULT_REPUTATION, CredibilityScorer, ScoringWeights, StageThresholds
from worldwire.store import DocumentStore, InMemoryDocumentStore, JsonFileDocumentStore, StoreWriter


def create_provider(config: ProviderConfig) -> ProviderAdapter:
    """Create a provider adapter from config.

    Uses explicit type matching rather than getattr.
    """
    if isinstance(config, WikipediaProviderConfig):
        return WikipediaOnThisDayProvider(
            timeout_seconds=config.timeout_seconds,
            max_items=config.max_items,
        )
    if isinstance(config, MuffinLabsProviderConfig):
        return MuffinLabsHistoryProvider(
            timeout_seconds=config.timeout_seconds,
            max_items=config.max_items,
        )
    if isinstance(config, NewsAPIProviderConfig):
        return NewsAPIProvider(
            language=config.language,
            timeout_seconds=config.timeout_seconds,
            max_items=config.max_items,
        )
    if isinstance(config, GDELTProviderConfig):
        return GDELTProvider(
            timeout_seconds=config.timeout_seconds,
            max_items=config.max_items,
        )
    if isinstance(config, RSSProviderConfig):
        return RSSFeedProvider(
            name=config.name,
            url=config.url,
            timeout_seconds=config.timeout_seconds,
            max_items=config.max_items,
        )
    msg = f"Unknown provider config type: {type(config)}"
    raise ValueError(msg)


def create_enricher(config: GeneratorConfig) -> Enricher:
    """Create an enricher, with or without a generative service."""
    if isinstance(config, ClaudeGeneratorConfig):
        generator = ClaudeTextGenerator(
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            timeout_seconds=config.timeout_seconds,
        )
        return Enricher(
            generator,
            max_attempts=config.max_attempts,
            backoff_seconds=config.backoff_seconds,
            call_timeout_seconds=config.timeout_seconds,
        )
    if isinstance(config, NoGeneratorConfig):
        return Enricher(None)
    msg = f"Unknown generator config type: {type(config)}"
    raise ValueError(msg)


def create_scorer(config: ScoringConfig) -> CredibilityScorer:
    weights = ScoringWeights(
        baseline=config.baseline,
        reputation_cap=config.reputation_cap,
        diversity_bonus_two=config.diversity_bonus_two,
        diversity_bonus_three=config.diversity_bonus_three,
        agreement_weight=config.agreement_weight,
        recency_bonus=config.recency_bonus,
        freshness_days=config.freshness_days,
        stale_after_days=config.stale_after_days,
        stale_factor=config.stale_factor,
        single_source_penalty=config.single_source_penalty,
    )
    return CredibilityScorer(weights, {**DEFAULT_REPUTATION, **config.reputation})


def create_store(config: StoreConfig) -> DocumentStore:
    """Create a document store from config."""
    if isinstance(config, MemoryStoreConfig):
        return InMemoryDocumentStore(max_batch_size=config.max_batch_size)
    if isinstance(config, JsonStoreConfig):
        return JsonFileDocumentStore(Path(config.path), max_batch_size=config.max_batch_size)
    msg = f"Unknown store config type: {type(config)}"
    raise ValueError(msg)


def create_settings(pipeline: PipelineConfig, scoring: ScoringConfig) -> PipelineSettings:
    return PipelineSettings(
        ai_call_delay_seconds=pipeline.ai_call_delay_seconds,
        unit_delay_seconds=pipeline.unit_delay_seconds,
        run_timeout_seconds=pipeline.run_timeout_seconds,
        store_timeout_seconds=pipeline.store_timeout_seconds,
        max_groups_per_unit=pipeline.max_groups_per_unit,
        grouping_threshold=pipeline.grouping_threshold,
        enrich=pipeline.enrich,
        analyze_bias=pipeline.analyze_bias,
        verify=pipeline.verify,
        corroborate=pipeline.corroborate,
        ingestion=StageThresholds(**scoring.ingestion.model_dump()),
        verification=StageThresholds(**scoring.verification.model_dump()),
    )


def create_from_config(
    config: WorldwireConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[Orchestrator, RunLogger | None]:
    """Create a complete orchestrator from root config.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (orchestrator, run_logger).
        run_logger is None if logging is disabled.

    Raises:
        ValueError: If a component cannot be built, e.g. a missing API key.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    store = create_store(config.store)
    writer = StoreWriter(
        store,
        batch_size=config.writer.batch_size,
        added_by=config.writer.added_by,
        min_revision_age=timedelta(hours=config.writer.min_revision_age_hours),
        slug_max_length=config.writer.slug_max_length,
        timeout_seconds=config.pipeline.store_timeout_seconds,
    )
    orchestrator = Orchestrator(
        adapters=[create_provider(p) for p in config.providers],
        scorer=create_scorer(config.scoring),
        enricher=create_enricher(config.generator),
        writer=writer,
        store=store,
        settings=create_settings(config.pipeline, config.scoring),
        run_logger=run_logger,
    )
    return (orchestrator, run_logger)

"""worldwire: collect, corroborate and persist world events from open sources."""

from worldwire.collector import collect
from worldwire.config import WorldwireConfig, create_from_config, load_config
from worldwire.data import (
    Alignment,
    APICallUsage,
    Article,
    ArticleGroup,
    BiasAssessment,
    CredibilityAssessment,
    DateQuery,
    DateUnit,
    EnrichmentResult,
    EventRecord,
    MaintenanceMode,
    MaintenanceUnit,
    Revision,
    RunState,
    RunSummary,
    TopicQuery,
    TopicSweepUnit,
    Usage,
    VerificationVerdict,
)
from worldwire.enrichment import ClaudeTextGenerator, Enricher, TextGenerator
from worldwire.grouping import group_articles, overlap_ratio, significant_tokens
from worldwire.pipeline import ConfigurationError, Orchestrator, PipelineSettings
from worldwire.providers import (
    GDELTProvider,
    MuffinLabsHistoryProvider,
    NewsAPIProvider,
    ProviderAdapter,
    RSSFeedProvider,
    WikipediaOnThisDayProvider,
)
from worldwire.run_logger import RunLogger
from worldwire.scoring import CredibilityScorer, ScoringWeights, StageThresholds
from worldwire.store import (
    BatchCommitError,
    DocumentStore,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    StoreError,
    StoreUnavailableError,
    StoreWriter,
)

__all__ = [
    # Models
    "APICallUsage",
    "Alignment",
    "Article",
    "ArticleGroup",
    "BiasAssessment",
    "CredibilityAssessment",
    "DateQuery",
    "DateUnit",
    "EnrichmentResult",
    "EventRecord",
    "MaintenanceMode",
    "MaintenanceUnit",
    "Revision",
    "RunState",
    "RunSummary",
    "TopicQuery",
    "TopicSweepUnit",
    "Usage",
    "VerificationVerdict",
    # Functions
    "collect",
    "group_articles",
    "overlap_ratio",
    "significant_tokens",
    # Protocols
    "DocumentStore",
    "ProviderAdapter",
    "TextGenerator",
    # Providers
    "GDELTProvider",
    "MuffinLabsHistoryProvider",
    "NewsAPIProvider",
    "RSSFeedProvider",
    "WikipediaOnThisDayProvider",
    # Scoring and enrichment
    "ClaudeTextGenerator",
    "CredibilityScorer",
    "Enricher",
    "ScoringWeights",
    "StageThresholds",
    # Storage
    "BatchCommitError",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    "StoreError",
    "StoreUnavailableError",
    "StoreWriter",
    # Pipeline
    "ConfigurationError",
    "Orchestrator",
    "PipelineSettings",
    # Logging
    "RunLogger",
    # Config
    "WorldwireConfig",
    "create_from_config",
    "load_config",
]

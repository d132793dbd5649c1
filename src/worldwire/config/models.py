"""Pydantic configuration models for worldwire components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator

# ============================================================
# Provider Configs
# ============================================================


class WikipediaProviderConfig(BaseModel):
    """Configuration for WikipediaOnThisDayProvider."""

    type: Literal["wikipedia"] = "wikipedia"
    timeout_seconds: float = Field(default=10.0, ge=1, le=30)
    max_items: int = Field(default=50, ge=1)

    model_config = {"frozen": True}


class MuffinLabsProviderConfig(BaseModel):
    """Configuration for MuffinLabsHistoryProvider."""

    type: Literal["muffinlabs"] = "muffinlabs"
    timeout_seconds: float = Field(default=10.0, ge=1, le=30)
    max_items: int = Field(default=50, ge=1)

    model_config = {"frozen": True}


class NewsAPIProviderConfig(BaseModel):
    """Configuration for NewsAPIProvider. The key comes from NEWSAPI_API_KEY."""

    type: Literal["newsapi"] = "newsapi"
    language: str = "en"
    timeout_seconds: float = Field(default=10.0, ge=1, le=30)
    max_items: int = Field(default=50, ge=1)

    model_config = {"frozen": True}


class GDELTProviderConfig(BaseModel):
    """Configuration for GDELTProvider."""

    type: Literal["gdelt"] = "gdelt"
    timeout_seconds: float = Field(default=10.0, ge=1, le=30)
    max_items: int = Field(default=50, ge=1)

    model_config = {"frozen": True}


class RSSProviderConfig(BaseModel):
    """Configuration for RSSFeedProvider."""

    type: Literal["rss"] = "rss"
    name: str
    url: str
    timeout_seconds: float = Field(default=10.0, ge=1, le=30)
    max_items: int = Field(default=20, ge=1)

    model_config = {"frozen": True}


ProviderConfig = Annotated[
    WikipediaProviderConfig
    | MuffinLabsProviderConfig
    | NewsAPIProviderConfig
    | GDELTProviderConfig
    | RSSProviderConfig,
    Field(discriminator="type"),
]


# ============================================================
# Generator Configs
# ============================================================


class ClaudeGeneratorConfig(BaseModel):
    """Configuration for ClaudeTextGenerator."""

    type: Literal["claude"] = "claude"
    model: str = "claude-haiku-4-5-20251001"
    max_tokens: int = 2048
    temperature: float = Field(default=0.3, ge=0, le=1)
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_attempts: int = Field(default=3, ge=1)
    backoff_seconds: float = Field(default=1.0, ge=0)

    model_config = {"frozen": True}


class NoGeneratorConfig(BaseModel):
    """No generative service: heuristic enrichment only."""

    type: Literal["none"] = "none"

    model_config = {"frozen": True}


GeneratorConfig = Annotated[
    ClaudeGeneratorConfig | NoGeneratorConfig,
    Field(discriminator="type"),
]


# ============================================================
# Scoring Config
# ============================================================


class ThresholdsConfig(BaseModel):
    """Accept/verify/flag thresholds for one stage."""

    accept: int = Field(ge=0, le=100)
    verify: int = Field(ge=0, le=100)
    flag: int = Field(ge=0, le=100)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_order(self) -> "ThresholdsConfig":
        if self.verify < self.flag:
            raise ValueError("verify threshold must not be below flag threshold")
        return self


class ScoringConfig(BaseModel):
    """Weights, reputation overrides and thresholds of the credibility scorer."""

    baseline: int = 50
    reputation_cap: int = Field(default=30, ge=0)
    diversity_bonus_two: int = Field(default=15, ge=0)
    diversity_bonus_three: int = Field(default=25, ge=0)
    agreement_weight: int = Field(default=10, ge=0)
    recency_bonus: int = Field(default=5, ge=0)
    freshness_days: int = Field(default=7, ge=0)
    stale_after_days: int = Field(default=365, ge=0)
    stale_factor: float = Field(default=0.9, gt=0, le=1)
    single_source_penalty: int = Field(default=10, ge=0)
    reputation: dict[str, int] = Field(default_factory=dict)
    ingestion: ThresholdsConfig = Field(
        default_factory=lambda: ThresholdsConfig(accept=60, verify=85, flag=40)
    )
    verification: ThresholdsConfig = Field(
        default_factory=lambda: ThresholdsConfig(accept=0, verify=75, flag=40)
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_diversity_order(self) -> "ScoringConfig":
        if self.diversity_bonus_three < self.diversity_bonus_two:
            raise ValueError("diversity_bonus_three must not be below diversity_bonus_two")
        return self


# ============================================================
# Store Configs
# ============================================================


class MemoryStoreConfig(BaseModel):
    """In-memory store (dry runs)."""

    type: Literal["memory"] = "memory"
    max_batch_size: int = Field(default=500, ge=1)

    model_config = {"frozen": True}


class JsonStoreConfig(BaseModel):
    """Directory of JSON documents."""

    type: Literal["json"] = "json"
    path: str = "data/events"
    max_batch_size: int = Field(default=500, ge=1)

    model_config = {"frozen": True}


StoreConfig = Annotated[
    MemoryStoreConfig | JsonStoreConfig,
    Field(discriminator="type"),
]


class WriterConfig(BaseModel):
    """Configuration for StoreWriter."""

    batch_size: int = Field(default=100, ge=1)
    added_by: str = "worldwire"
    min_revision_age_hours: float = Field(default=12.0, ge=0)
    slug_max_length: int = Field(default=150, ge=20, le=200)

    model_config = {"frozen": True}


# ============================================================
# Pipeline Config
# ============================================================


class PipelineConfig(BaseModel):
    """Pacing, limits and stage toggles of the orchestrator."""

    ai_call_delay_seconds: float = Field(default=1.0, ge=0)
    unit_delay_seconds: float = Field(default=0.5, ge=0)
    run_timeout_seconds: float = Field(default=300.0, gt=0)
    store_timeout_seconds: float = Field(default=10.0, gt=0)
    max_groups_per_unit: int = Field(default=50, ge=1)
    grouping_threshold: float = Field(default=0.5, ge=0, le=1)
    enrich: bool = True
    analyze_bias: bool = True
    verify: bool = False
    corroborate: bool = True

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for intermediate pipeline logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class WorldwireConfig(BaseModel):
    """Root configuration for worldwire."""

    providers: list[ProviderConfig] = Field(default_factory=list)
    generator: ClaudeGeneratorConfig | NoGeneratorConfig = Field(
        default_factory=NoGeneratorConfig, discriminator="type"
    )
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    store: MemoryStoreConfig | JsonStoreConfig = Field(
        default_factory=MemoryStoreConfig, discriminator="type"
    )
    writer: WriterConfig = Field(default_factory=WriterConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}

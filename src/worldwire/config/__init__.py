"""Configuration module for worldwire."""

from worldwire.config.factory import create_from_config
from worldwire.config.loader import get_default_config_path, load_config
from worldwire.config.models import (
    ClaudeGeneratorConfig,
    GDELTProviderConfig,
    GeneratorConfig,
    JsonStoreConfig,
    LoggingConfig,
    MemoryStoreConfig,
    MuffinLabsProviderConfig,
    NewsAPIProviderConfig,
    NoGeneratorConfig,
    PipelineConfig,
    ProviderConfig,
    RSSProviderConfig,
    ScoringConfig,
    StoreConfig,
    ThresholdsConfig,
    WikipediaProviderConfig,
    WorldwireConfig,
    WriterConfig,
)

__all__ = [
    "ClaudeGeneratorConfig",
    "GDELTProviderConfig",
    "GeneratorConfig",
    "JsonStoreConfig",
    "LoggingConfig",
    "MemoryStoreConfig",
    "MuffinLabsProviderConfig",
    "NewsAPIProviderConfig",
    "NoGeneratorConfig",
    "PipelineConfig",
    "ProviderConfig",
    "RSSProviderConfig",
    "ScoringConfig",
    "StoreConfig",
    "ThresholdsConfig",
    "WikipediaProviderConfig",
    "WorldwireConfig",
    "WriterConfig",
    "create_from_config",
    "get_default_config_path",
    "load_config",
]

"""Pipeline orchestration."""

from worldwire.pipeline.orchestrator import ConfigurationError, Orchestrator, PipelineSettings

__all__ = ["ConfigurationError", "Orchestrator", "PipelineSettings"]

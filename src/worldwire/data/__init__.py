"""Data models for worldwire."""

from worldwire.data.models import (
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
    Query,
    Revision,
    RunState,
    RunSummary,
    TopicQuery,
    TopicSweepUnit,
    UnitOfWork,
    Usage,
    VerificationVerdict,
    make_article,
    registrable_domain,
    source_key_for,
)

__all__ = [
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
    "Query",
    "Revision",
    "RunState",
    "RunSummary",
    "TopicQuery",
    "TopicSweepUnit",
    "UnitOfWork",
    "Usage",
    "VerificationVerdict",
    "make_article",
    "registrable_domain",
    "source_key_for",
]

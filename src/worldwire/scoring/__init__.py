"""Credibility scoring."""

from worldwire.scoring.credibility import (
    DEFAULT_REPUTATION,
    INGESTION_THRESHOLDS,
    VERIFICATION_THRESHOLDS,
    CredibilityScorer,
    ScoringWeights,
    StageThresholds,
    agreement_ratio,
    clamp,
    group_from_record,
)

__all__ = [
    "CredibilityScorer",
    "DEFAULT_REPUTATION",
    "INGESTION_THRESHOLDS",
    "ScoringWeights",
    "StageThresholds",
    "VERIFICATION_THRESHOLDS",
    "agreement_ratio",
    "clamp",
    "group_from_record",
]

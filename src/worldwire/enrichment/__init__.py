"""Narrative enrichment, verification and bias analysis."""

from worldwire.enrichment.base import TextGenerator
from worldwire.enrichment.claude import ClaudeTextGenerator
from worldwire.enrichment.enricher import Enricher, parse_bias, parse_json_object, parse_verdict
from worldwire.enrichment.heuristics import (
    CATEGORIES,
    REGIONS,
    categorize,
    extract_region,
    heuristic_enrichment,
)

__all__ = [
    "CATEGORIES",
    "ClaudeTextGenerator",
    "Enricher",
    "REGIONS",
    "TextGenerator",
    "categorize",
    "extract_region",
    "heuristic_enrichment",
    "parse_bias",
    "parse_json_object",
    "parse_verdict",
]

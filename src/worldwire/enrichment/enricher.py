"""Narrative enrichment, corroboration verdicts and bias analysis."""

import asyncio
import json
import logging
import re
from collections.abc import Callable
from typing import Any, TypeVar

from worldwire.data import (
    Alignment,
    ArticleGroup,
    BiasAssessment,
    EnrichmentResult,
    EventRecord,
    Usage,
    VerificationVerdict,
)
from worldwire.enrichment.base import TextGenerator
from worldwire.enrichment.heuristics import (
    heuristic_enrichment,
    normalize_category,
    normalize_region,
)
from worldwire.enrichment.prompts import (
    BIAS_SYSTEM_PROMPT,
    ENRICH_SYSTEM_PROMPT,
    VERIFY_SYSTEM_PROMPT,
    build_bias_prompt,
    build_enrich_prompt,
    build_verify_prompt,
)
from worldwire.scoring import clamp
from worldwire.text import truncate

logger = logging.getLogger(__name__)

T = TypeVar("T")

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse a JSON object from a model response.

    Strips markdown fences, then falls back once to the outermost ``{...}``
    substring when the model wrapped the object in extra text.

    Raises:
        ValueError: If no JSON object can be extracted.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [line for line in cleaned.split("\n") if not line.strip().startswith("```")]
        cleaned = "\n".join(lines)

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_RE.search(cleaned)
        if not match:
            raise ValueError("No JSON object in response") from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ValueError(f"Unparseable JSON in response: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _as_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    try:
        return int(float(str(value).strip()))
    except ValueError:
        return default


def _as_strings(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(v).strip() for v in value if str(v).strip())


def parse_bias(raw: dict[str, Any]) -> BiasAssessment:
    """Clamp and coerce a raw bias judgement."""
    alignment_str = str(raw.get("alignment", "Neutral")).strip().capitalize()
    try:
        alignment = Alignment(alignment_str)
    except ValueError:
        alignment = Alignment.NEUTRAL
    return BiasAssessment(
        bias_score=clamp(_as_int(raw.get("biasScore"), 0), -100, 100),
        tone_score=clamp(_as_int(raw.get("toneScore"), 50), 0, 100),
        alignment=alignment,
        justification=str(raw.get("biasSummary") or "Analysis unavailable"),
        generated=True,
    )


def parse_verdict(raw: dict[str, Any]) -> VerificationVerdict:
    return VerificationVerdict(
        credibility_score=clamp(_as_int(raw.get("credibilityScore"), 70), 0, 100),
        verified=raw.get("verified") is True,
        summary=str(raw.get("verificationSummary") or ""),
        corroborated_sources=_as_strings(raw.get("corroboratedSources")),
        concerns=_as_strings(raw.get("concerns")),
    )


class Enricher:
    """Enrich events through a generative service, with heuristic fallbacks.

    Every call is retried up to ``max_attempts`` times with a linear backoff;
    each attempt has its own timeout. Unparseable responses count as failed
    attempts. When all attempts fail, or no generator is configured, the
    deterministic fallback is returned instead.

    Args:
        generator: Generative text service, or None to always fall back.
        max_attempts: Attempts per call before falling back.
        backoff_seconds: Delay multiplied by the attempt number between attempts.
        call_timeout_seconds: Timeout of a single attempt.
    """

    def __init__(
        self,
        generator: TextGenerator | None = None,
        *,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        call_timeout_seconds: float = 30.0,
    ) -> None:
        self._generator = generator
        self._max_attempts = max(1, max_attempts)
        self._backoff = backoff_seconds
        self._timeout = call_timeout_seconds

    @property
    def available(self) -> bool:
        """Whether a generative service is configured."""
        return self._generator is not None

    async def enrich(
        self,
        subject: ArticleGroup | EventRecord,
        corroboration: str | None = None,
    ) -> tuple[EnrichmentResult, Usage]:
        """Produce a narrative, summary, region, category and key points.

        Args:
            subject: A fresh group or an existing record.
            corroboration: Optional extra text from other reports.

        Returns:
            Tuple of (enrichment, usage). Never raises.
        """
        fallback_text = (
            subject.lead.title if isinstance(subject, ArticleGroup) else subject.title
        )

        def parse(text: str) -> EnrichmentResult:
            raw = parse_json_object(text)
            narrative = str(raw.get("narrative") or "").strip()
            if not narrative:
                raise ValueError("Response has no narrative")
            summary = str(raw.get("shortSummary") or "").strip()
            return EnrichmentResult(
                narrative=narrative,
                short_summary=truncate(summary or narrative, 300),
                region=normalize_region(raw.get("region")),
                category=normalize_category(raw.get("category"), f"{fallback_text} {narrative}"),
                key_points=_as_strings(raw.get("keyPoints"))[:5],
                generated=True,
            )

        result, usage = await self._call(
            "enrich",
            build_enrich_prompt(subject, corroboration),
            ENRICH_SYSTEM_PROMPT,
            parse,
        )
        if result is None:
            return (heuristic_enrichment(subject), usage)
        return (result, usage)

    async def verify(
        self,
        subject: ArticleGroup | EventRecord,
        corroboration: str,
    ) -> tuple[VerificationVerdict | None, Usage]:
        """Ask for a corroboration verdict.

        Returns:
            Tuple of (verdict or None when unavailable, usage).
        """
        return await self._call(
            "verify",
            build_verify_prompt(subject, corroboration),
            VERIFY_SYSTEM_PROMPT,
            lambda text: parse_verdict(parse_json_object(text)),
        )

    async def analyze_bias(
        self,
        narrative: str,
        sources: list[str],
    ) -> tuple[BiasAssessment, Usage]:
        """Judge bias, tone and alignment of a narrative.

        Returns:
            Tuple of (assessment, usage). The neutral default is returned
            when the service is unavailable.
        """
        result, usage = await self._call(
            "bias",
            build_bias_prompt(narrative, sources),
            BIAS_SYSTEM_PROMPT,
            lambda text: parse_bias(parse_json_object(text)),
        )
        return (result or BiasAssessment(), usage)

    async def _call(
        self,
        operation: str,
        prompt: str,
        system: str,
        parse: Callable[[str], T],
    ) -> tuple[T | None, Usage]:
        usage = Usage()
        if self._generator is None:
            return (None, usage)

        for attempt in range(1, self._max_attempts + 1):
            try:
                text, call_usage = await asyncio.wait_for(
                    self._generator.generate(prompt, system=system, json_output=True),
                    timeout=self._timeout,
                )
                usage += call_usage
                return (parse(text), usage)
            except Exception as e:
                logger.warning(
                    "%s attempt %d/%d failed: %s", operation, attempt, self._max_attempts, e
                )
            if attempt < self._max_attempts:
                await self._sleep(self._backoff * attempt)

        logger.warning("%s falling back after %d attempts", operation, self._max_attempts)
        return (None, usage)

    async def _sleep(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

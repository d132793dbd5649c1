"""Tests for the Enricher retry, parsing and fallback behavior."""

import asyncio
import json
from datetime import UTC, date, datetime

import pytest

from worldwire.data import (
    Alignment,
    APICallUsage,
    Article,
    ArticleGroup,
    EventRecord,
    Usage,
)
from worldwire.enrichment import Enricher, parse_bias, parse_json_object, parse_verdict


class ScriptedGenerator:
    """TextGenerator replaying scripted responses; exceptions are raised."""

    def __init__(self, responses: list[str | Exception], *, delay: float = 0.0) -> None:
        self._responses = list(responses)
        self._delay = delay
        self.prompts: list[tuple[str, str]] = []

    async def generate(
        self,
        prompt: str,
        *,
        system: str,
        json_output: bool = False,
    ) -> tuple[str, Usage]:
        self.prompts.append((prompt, system))
        if self._delay:
            await asyncio.sleep(self._delay)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        usage = Usage(api_calls=[APICallUsage(model="test", input_tokens=10, output_tokens=5)])
        return (response, usage)


@pytest.fixture
def group() -> ArticleGroup:
    return ArticleGroup(
        articles=(
            Article(
                title="Parliament approves new climate law",
                body_text="Lawmakers voted to cut emissions by half.",
                published_date=date(2024, 5, 1),
                source_name="Reuters",
                source_url="https://www.reuters.com/a",
            ),
            Article(
                title="Parliament approves climate law",
                body_text="The government hailed the vote.",
                published_date=date(2024, 5, 1),
                source_name="BBC",
                source_url="https://www.bbc.com/b",
            ),
        )
    )


ENRICH_JSON = json.dumps(
    {
        "narrative": "Parliament approved a climate law.\n\nIt halves emissions.",
        "shortSummary": "Parliament approved a landmark climate law.",
        "region": "europe",
        "category": "Environment",
        "keyPoints": ["Law approved", "Emissions halved", ""],
    }
)


class TestParseJsonObject:
    def test_plain_object(self) -> None:
        assert parse_json_object('{"a": 1}') == {"a": 1}

    def test_markdown_fences(self) -> None:
        assert parse_json_object('```json\n{"a": 1}\n```') == {"a": 1}

    def test_object_embedded_in_prose(self) -> None:
        assert parse_json_object('Here you go: {"a": {"b": 2}} Hope it helps.') == {"a": {"b": 2}}

    def test_no_object(self) -> None:
        with pytest.raises(ValueError):
            parse_json_object("I cannot help with that.")

    def test_array_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_json_object("[1, 2, 3]")


class TestParsers:
    def test_parse_bias_clamps(self) -> None:
        bias = parse_bias(
            {"biasScore": 250, "toneScore": -5, "alignment": "left", "biasSummary": "Slanted."}
        )
        assert bias.bias_score == 100
        assert bias.tone_score == 0
        assert bias.alignment == Alignment.LEFT
        assert bias.justification == "Slanted."
        assert bias.generated

    def test_parse_bias_unknown_alignment_and_bad_numbers(self) -> None:
        bias = parse_bias({"biasScore": "very", "toneScore": None, "alignment": "Green"})
        assert bias.bias_score == 0
        assert bias.tone_score == 50
        assert bias.alignment == Alignment.NEUTRAL

    def test_parse_bias_numeric_strings(self) -> None:
        assert parse_bias({"biasScore": "-42.7"}).bias_score == -42

    def test_parse_verdict(self) -> None:
        verdict = parse_verdict(
            {
                "credibilityScore": 88,
                "verified": True,
                "verificationSummary": "Confirmed by two wires.",
                "corroboratedSources": ["Reuters", "AP"],
                "concerns": [],
            }
        )
        assert verdict.credibility_score == 88
        assert verdict.verified
        assert verdict.corroborated_sources == ("Reuters", "AP")
        assert verdict.concerns == ()

    def test_parse_verdict_requires_literal_true(self) -> None:
        assert not parse_verdict({"credibilityScore": 80, "verified": "yes"}).verified


class TestEnrich:
    async def test_generated_enrichment(self, group: ArticleGroup) -> None:
        generator = ScriptedGenerator([ENRICH_JSON])
        enricher = Enricher(generator, backoff_seconds=0)

        result, usage = await enricher.enrich(group, "- AP: Climate law passes")

        assert result.generated
        assert result.narrative.startswith("Parliament approved")
        assert result.region == "Europe"
        assert result.category == "Environment"
        assert result.key_points == ("Law approved", "Emissions halved")
        assert usage.input_tokens == 10
        prompt, system = generator.prompts[0]
        assert "Parliament approves new climate law" in prompt
        assert "AP: Climate law passes" in prompt
        assert "historian" in system

    async def test_unknown_category_falls_back_to_keywords(self, group: ArticleGroup) -> None:
        raw = json.dumps({"narrative": "Lawmakers held a vote in parliament.", "category": "Misc"})
        enricher = Enricher(ScriptedGenerator([raw]), backoff_seconds=0)

        result, _ = await enricher.enrich(group)

        assert result.category == "Politics"
        assert result.region == "Global"

    async def test_retries_then_succeeds(self, group: ArticleGroup) -> None:
        generator = ScriptedGenerator([RuntimeError("overloaded"), "not json", ENRICH_JSON])
        enricher = Enricher(generator, max_attempts=3, backoff_seconds=0)

        result, usage = await enricher.enrich(group)

        assert result.generated
        assert len(generator.prompts) == 3
        # The unparseable response still cost tokens
        assert len(usage.api_calls) == 2

    async def test_falls_back_after_max_attempts(self, group: ArticleGroup) -> None:
        generator = ScriptedGenerator([RuntimeError("down")] * 3)
        enricher = Enricher(generator, max_attempts=3, backoff_seconds=0)

        result, usage = await enricher.enrich(group)

        assert not result.generated
        assert result.region == "Global"
        assert result.category == "Politics"
        assert result.key_points == (
            "Parliament approves new climate law",
            "Parliament approves climate law",
        )
        assert "Lawmakers voted" in result.narrative
        assert usage.api_calls == []
        assert len(generator.prompts) == 3

    async def test_call_timeout_counts_as_failure(self, group: ArticleGroup) -> None:
        generator = ScriptedGenerator([ENRICH_JSON, ENRICH_JSON], delay=0.5)
        enricher = Enricher(
            generator, max_attempts=2, backoff_seconds=0, call_timeout_seconds=0.01
        )

        result, _ = await enricher.enrich(group)

        assert not result.generated
        assert len(generator.prompts) == 2

    async def test_backoff_is_linear(
        self, group: ArticleGroup, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        delays: list[float] = []

        async def fake_sleep(self, seconds: float) -> None:
            delays.append(seconds)

        monkeypatch.setattr(Enricher, "_sleep", fake_sleep)
        enricher = Enricher(
            ScriptedGenerator([RuntimeError("x")] * 3), max_attempts=3, backoff_seconds=2.0
        )

        await enricher.enrich(group)

        assert delays == [2.0, 4.0]

    async def test_no_generator_uses_heuristics(self, group: ArticleGroup) -> None:
        enricher = Enricher(None)

        result, usage = await enricher.enrich(group)

        assert not enricher.available
        assert not result.generated
        assert usage.api_calls == []

    async def test_enrich_existing_record(self) -> None:
        ts = datetime(2024, 5, 2, tzinfo=UTC)
        record = EventRecord(
            id="x-2024-05-01",
            title="Rocket reaches orbit",
            description="A rocket reached orbit.",
            long_description="A rocket launched from the coast reached orbit.",
            date="2024-05-01",
            created_at=ts,
            updated_at=ts,
            key_points=["Launch succeeded"],
        )

        result, _ = await Enricher(None).enrich(record)

        assert result.narrative == "A rocket launched from the coast reached orbit."
        assert result.category == "Space"
        assert result.key_points == ("Launch succeeded",)


class TestVerifyAndBias:
    async def test_verify_returns_verdict(self, group: ArticleGroup) -> None:
        raw = json.dumps({"credibilityScore": 82, "verified": True, "verificationSummary": "ok"})
        generator = ScriptedGenerator([raw])

        verdict, usage = await Enricher(generator, backoff_seconds=0).verify(group, "- AP: law")

        assert verdict is not None
        assert verdict.credibility_score == 82
        assert "- AP: law" in generator.prompts[0][0]
        assert usage.output_tokens == 5

    async def test_verify_unavailable(self, group: ArticleGroup) -> None:
        verdict, _ = await Enricher(None).verify(group, "")
        assert verdict is None

    async def test_verify_gives_up(self, group: ArticleGroup) -> None:
        enricher = Enricher(ScriptedGenerator(["nope", "nope"]), max_attempts=2, backoff_seconds=0)
        verdict, _ = await enricher.verify(group, "")
        assert verdict is None

    async def test_analyze_bias(self) -> None:
        raw = '{"biasScore": 10, "toneScore": 70, "alignment": "Neutral", "biasSummary": "Fair."}'
        bias, _ = await Enricher(ScriptedGenerator([raw]), backoff_seconds=0).analyze_bias(
            "Narrative", ["Reuters"]
        )
        assert bias.bias_score == 10
        assert bias.tone_score == 70
        assert bias.generated

    async def test_analyze_bias_default_when_unavailable(self) -> None:
        bias, _ = await Enricher(None).analyze_bias("Narrative", [])
        assert bias.bias_score == 0
        assert bias.tone_score == 50
        assert bias.alignment == Alignment.NEUTRAL
        assert bias.justification == "Analysis unavailable"
        assert not bias.generated

"""Tests for data models."""

from datetime import UTC, date, datetime

import pytest

from worldwire.data import (
    Alignment,
    APICallUsage,
    Article,
    ArticleGroup,
    BiasAssessment,
    DateUnit,
    EnrichmentResult,
    EventRecord,
    MaintenanceMode,
    MaintenanceUnit,
    Revision,
    RunState,
    RunSummary,
    TopicSweepUnit,
    Usage,
    make_article,
    source_key_for,
)


def _article(title: str, source: str, url: str = "", day: int = 1) -> Article:
    return Article(
        title=title,
        body_text=f"{title} body",
        published_date=date(2024, 5, day),
        source_name=source,
        source_url=url,
    )


class TestUnits:
    def test_date_unit_label_and_query(self) -> None:
        unit = DateUnit(month=5, day=1)
        assert unit.label == "date:05-01"
        assert unit.query.month == 5
        assert unit.query.day == 1

    def test_date_unit_accepts_feb_29(self) -> None:
        assert DateUnit(month=2, day=29).label == "date:02-29"

    @pytest.mark.parametrize(("month", "day"), [(0, 1), (13, 1), (4, 31), (2, 30), (1, 0)])
    def test_date_unit_rejects_invalid_dates(self, month: int, day: int) -> None:
        with pytest.raises(ValueError):
            DateUnit(month=month, day=day)

    def test_topic_sweep_requires_topics(self) -> None:
        with pytest.raises(ValueError, match="at least one topic"):
            TopicSweepUnit(topics=())

    def test_topic_sweep_label_marks_headlines(self) -> None:
        assert TopicSweepUnit(topics=("", "floods")).label == "topics:<headlines>,floods"

    def test_maintenance_unit_rejects_non_positive_limit(self) -> None:
        with pytest.raises(ValueError):
            MaintenanceUnit(mode=MaintenanceMode.BIAS, limit=0)


class TestArticles:
    def test_source_key_prefers_url_host(self) -> None:
        assert source_key_for("https://www.reuters.com/world/x", "Reuters") == "reuters.com"

    def test_source_key_collapses_subdomains(self) -> None:
        assert source_key_for("https://en.wikipedia.org/wiki/X", "Wikipedia") == "wikipedia.org"
        assert source_key_for("https://feeds.bbci.co.uk/news/rss.xml", "BBC") == "bbci.co.uk"

    def test_source_key_falls_back_to_name(self) -> None:
        assert source_key_for("", "  BBC News ") == "bbc news"

    def test_make_article_discards_blank_title(self) -> None:
        assert (
            make_article(title="   ", body_text="x", published_date=date(2024, 1, 1), source_name="A")
            is None
        )

    def test_make_article_strips_fields(self) -> None:
        article = make_article(
            title="  Flood hits city ",
            body_text=None,
            published_date=date(2024, 1, 1),
            source_name="",
            image_url="",
        )
        assert article is not None
        assert article.title == "Flood hits city"
        assert article.body_text == ""
        assert article.source_name == "Unknown"
        assert article.image_url is None


class TestArticleGroup:
    def test_empty_group_rejected(self) -> None:
        with pytest.raises(ValueError):
            ArticleGroup(articles=())

    def test_source_counts(self) -> None:
        group = ArticleGroup(
            articles=(
                _article("A", "Reuters", "https://reuters.com/a"),
                _article("A", "Reuters", "https://reuters.com/b"),
                _article("A", "BBC", "https://bbc.com/a", day=3),
            )
        )
        assert group.source_count == 2
        assert group.independent_source_count == 2
        assert group.source_names == ["Reuters", "BBC"]
        assert group.source_urls == [
            "https://reuters.com/a",
            "https://reuters.com/b",
            "https://bbc.com/a",
        ]
        assert group.earliest_published == date(2024, 5, 1)
        assert group.latest_published == date(2024, 5, 3)
        assert group.lead.source_name == "Reuters"


class TestEnrichment:
    def test_with_bias_copies_bias_fields(self) -> None:
        result = EnrichmentResult(narrative="n", short_summary="s", generated=True)
        bias = BiasAssessment(
            bias_score=-30,
            tone_score=20,
            alignment=Alignment.STATE,
            justification="one-sided",
            generated=True,
        )
        combined = result.with_bias(bias)
        assert combined.bias_score == -30
        assert combined.tone_score == 20
        assert combined.alignment == Alignment.STATE
        assert combined.bias_summary == "one-sided"
        assert combined.generated is True
        assert combined.narrative == "n"


class TestEventRecord:
    @pytest.fixture
    def record(self) -> EventRecord:
        ts = datetime(2024, 5, 2, 12, 0, tzinfo=UTC)
        return EventRecord(
            id="flood-hits-city-2024-05-01",
            title="Flood hits city",
            description="Short",
            long_description="Long narrative",
            date="2024-05-01",
            created_at=ts,
            updated_at=ts,
            sources=["https://reuters.com/a"],
            credibility_score=68,
            revisions=[
                Revision(
                    updated_at=ts,
                    narrative_snapshot="Old",
                    credibility_score_snapshot=60,
                    sources_snapshot=("https://bbc.com/a",),
                )
            ],
            alignment=Alignment.LEFT,
        )

    def test_to_document_uses_camel_case(self, record: EventRecord) -> None:
        doc = record.to_document()
        assert doc["longDescription"] == "Long narrative"
        assert doc["credibilityScore"] == 68
        assert doc["createdAt"] == "2024-05-02T12:00:00+00:00"
        assert doc["alignment"] == "Left"
        assert doc["revisions"][0]["narrativeSnapshot"] == "Old"
        assert doc["revisions"][0]["sourcesSnapshot"] == ["https://bbc.com/a"]
        assert "id" not in doc

    def test_from_document_restores_record(self, record: EventRecord) -> None:
        restored = EventRecord.from_document(record.id, record.to_document())
        assert restored == record

    def test_from_document_fills_defaults(self) -> None:
        restored = EventRecord.from_document("x-2024-01-01", {"title": "X", "alignment": "Sideways"})
        assert restored.region == "Global"
        assert restored.tone_score == 50
        assert restored.alignment == Alignment.NEUTRAL
        assert restored.revisions == []
        assert restored.origin_year is None


class TestUsageAndSummary:
    def test_usage_addition(self) -> None:
        a = Usage(api_calls=[APICallUsage(model="m", input_tokens=10, output_tokens=5)])
        b = Usage(
            api_calls=[APICallUsage(model="m", input_tokens=1, output_tokens=2)],
            provider_requests=3,
        )
        total = a + b
        assert total.input_tokens == 11
        assert total.output_tokens == 7
        assert total.provider_requests == 3
        assert len(a.api_calls) == 1

    def test_usage_in_place_addition(self) -> None:
        usage = Usage()
        usage += Usage(provider_requests=2)
        usage += Usage(provider_requests=1)
        assert usage.provider_requests == 3

    def test_summary_merge(self) -> None:
        total = RunSummary(unit="sweep")
        total.merge(RunSummary(unit="a", state=RunState.DONE, created=2, skipped=1))
        total.merge(
            RunSummary(unit="b", state=RunState.FAILED, errors=1, error="store down", timed_out=True)
        )
        assert total.created == 2
        assert total.skipped == 1
        assert total.errors == 1
        assert total.timed_out is True
        assert total.state == RunState.FAILED
        assert total.error == "store down"
        assert not total.succeeded

    def test_summary_as_dict(self) -> None:
        summary = RunSummary(unit="date:05-01", state=RunState.DONE, created=1)
        data = summary.as_dict()
        assert data["state"] == "done"
        assert data["created"] == 1
        assert data["inputTokens"] == 0

"""Tests for heuristic enrichment and text helpers."""

from datetime import date

import pytest

from worldwire.data import Article, ArticleGroup
from worldwire.enrichment.heuristics import (
    categorize,
    extract_region,
    heuristic_enrichment,
    normalize_category,
    normalize_region,
)
from worldwire.text import strip_html, truncate


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Army launches invasion across the border", "War"),
        ("President wins re-election", "Politics"),
        ("Scientists discovered a new particle", "Science"),
        ("Internet outage hits millions", "Technology"),
        ("Climate summit ends", "Environment"),
        ("Stock market tumbles", "Economy"),
        ("Film festival opens", "Culture"),
        ("Vaccine rollout begins", "Medicine"),
        ("Astronaut returns from orbit", "Space"),
        ("Civil rights march held", "Human Rights"),
        ("Local bakery celebrates anniversary", "World"),
    ],
)
def test_categorize(text: str, expected: str) -> None:
    assert categorize(text) == expected


def test_categorize_first_match_wins() -> None:
    # Mentions both war and the economy; War comes first in the table
    assert categorize("War hurts the economy") == "War"


def test_extract_region() -> None:
    assert extract_region("Protests in Paris turn violent") == "Europe"
    assert extract_region("Floods in Lagos") == "Africa"
    assert extract_region("Nothing specific") == "Global"


def test_normalize_category() -> None:
    assert normalize_category("science") == "Science"
    assert normalize_category("Gossip", "Election day") == "Politics"
    assert normalize_category(None) == "World"


def test_normalize_region() -> None:
    assert normalize_region("middle east") == "Middle East"
    assert normalize_region("Atlantis") == "Global"


def test_heuristic_enrichment_for_group() -> None:
    long_body = "word " * 400
    group = ArticleGroup(
        articles=(
            Article(
                title="Rocket launch succeeds",
                body_text=long_body,
                published_date=date(2024, 5, 1),
                source_name="A",
            ),
            Article(
                title="Rocket launch succeeds",
                body_text=long_body,
                published_date=date(2024, 5, 1),
                source_name="B",
            ),
            Article(
                title="Launch of rocket a success",
                body_text="Short note.",
                published_date=date(2024, 5, 1),
                source_name="C",
            ),
        )
    )

    result = heuristic_enrichment(group)

    assert not result.generated
    assert result.region == "Global"
    assert result.category == "Space"
    assert len(result.narrative) <= 1000
    assert len(result.short_summary) <= 300
    assert result.key_points == ("Rocket launch succeeds", "Launch of rocket a success")


def test_heuristic_enrichment_uses_title_without_body() -> None:
    group = ArticleGroup(
        articles=(
            Article(
                title="Treaty signed",
                body_text="",
                published_date=date(2024, 5, 1),
                source_name="A",
            ),
        )
    )

    result = heuristic_enrichment(group)

    assert result.narrative == "Treaty signed"
    assert result.category == "War"


def test_strip_html() -> None:
    assert strip_html("<p>Tom &amp; Jerry</p>\n\n<b>again</b>") == "Tom & Jerry again"
    assert strip_html(None) == ""


def test_truncate_prefers_word_boundary() -> None:
    assert truncate("short", 10) == "short"
    assert truncate("the quick brown fox jumps", 15) == "the quick..."
    assert len(truncate("x" * 50, 20)) == 20

"""Tests for title-similarity grouping."""

from datetime import date

from worldwire.data import Article
from worldwire.grouping import group_articles, overlap_ratio, significant_tokens


def _article(title: str, source: str = "Example") -> Article:
    return Article(
        title=title,
        body_text="",
        published_date=date(2024, 5, 1),
        source_name=source,
    )


def test_significant_tokens_drops_short_words_and_punctuation() -> None:
    assert significant_tokens("The U.N. votes on Gaza's ceasefire, again!") == frozenset(
        {"votes", "gazas", "ceasefire", "again"}
    )


def test_overlap_ratio_uses_larger_set() -> None:
    a = frozenset({"flood", "river", "city"})
    b = frozenset({"flood", "river", "city", "rain"})
    assert overlap_ratio(a, b) == 0.75


def test_overlap_ratio_empty_set() -> None:
    assert overlap_ratio(frozenset(), frozenset({"flood"})) == 0.0


def test_similar_titles_are_grouped() -> None:
    articles = [
        _article("Massive earthquake strikes central Japan", "Reuters"),
        _article("Massive earthquake strikes central Japan coast", "BBC"),
        _article("Parliament passes new budget", "AP"),
    ]

    groups = group_articles(articles)

    assert len(groups) == 2
    assert [a.source_name for a in groups[0].articles] == ["Reuters", "BBC"]
    assert groups[1].lead.title == "Parliament passes new budget"


def test_reworded_headlines_are_grouped() -> None:
    groups = group_articles(
        [
            _article("NASA Launches New Mars Rover", "A"),
            _article("NASA's New Rover Launches to Mars", "B"),
        ]
    )

    assert len(groups) == 1
    assert groups[0].source_count == 2


def test_overlap_equal_to_threshold_does_not_join() -> None:
    # {"flood", "river"} vs {"flood", "storm"}: overlap 1/2 == threshold
    articles = [_article("flood river"), _article("flood storm")]

    assert len(group_articles(articles, threshold=0.5)) == 2


def test_overlap_just_above_threshold_joins() -> None:
    # 2 of 3 tokens shared: 0.667 > 0.5
    articles = [_article("flood river city"), _article("flood river town")]

    assert len(group_articles(articles, threshold=0.5)) == 1


def test_titles_without_significant_tokens_stay_alone() -> None:
    articles = [_article("A b c"), _article("A b c"), _article("Big flood")]

    groups = group_articles(articles)

    assert len(groups) == 3


def test_compares_against_group_lead_only() -> None:
    # The third article matches the second but not the lead of its group
    articles = [
        _article("alpha beta gamma delta"),
        _article("alpha beta gamma epsilon"),
        _article("gamma epsilon zeta theta"),
    ]

    groups = group_articles(articles)

    assert len(groups) == 2
    assert len(groups[0].articles) == 2


def test_first_matching_group_wins() -> None:
    # The two leads overlap at exactly 0.5, the third title matches both at 4/6
    articles = [
        _article("alpha bravo charlie delta"),
        _article("charlie delta echoes foxtrot"),
        _article("alpha bravo charlie delta echoes foxtrot"),
    ]

    groups = group_articles(articles)

    assert len(groups) == 2
    assert len(groups[0].articles) == 2
    assert len(groups[1].articles) == 1


def test_empty_input() -> None:
    assert group_articles([]) == []

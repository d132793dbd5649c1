"""Tests for the concurrent collector."""

import asyncio
from datetime import date

from worldwire.collector import collect
from worldwire.data import Article, DateQuery, Query, TopicQuery


def _article(title: str, provider: str) -> Article:
    return Article(
        title=title,
        body_text="",
        published_date=date(2024, 5, 1),
        source_name=provider,
        provider=provider,
    )


class StaticAdapter:
    """Adapter returning fixed articles for topic queries."""

    def __init__(self, name: str, titles: list[str], *, delay: float = 0.0) -> None:
        self.name = name
        self._titles = titles
        self._delay = delay
        self.calls = 0

    def supports(self, query: Query) -> bool:
        return isinstance(query, TopicQuery)

    async def fetch(self, query: Query) -> list[Article]:
        self.calls += 1
        await asyncio.sleep(self._delay)
        return [_article(t, self.name) for t in self._titles]


class RaisingAdapter(StaticAdapter):
    async def fetch(self, query: Query) -> list[Article]:
        self.calls += 1
        raise RuntimeError("adapter bug")


async def test_collect_concatenates_in_adapter_order() -> None:
    slow = StaticAdapter("slow", ["slow one", "slow two"], delay=0.02)
    fast = StaticAdapter("fast", ["fast one"])

    articles = await collect(TopicQuery(text="x"), [slow, fast])

    assert [a.title for a in articles] == ["slow one", "slow two", "fast one"]


async def test_collect_runs_adapters_concurrently() -> None:
    adapters = [StaticAdapter(f"a{i}", ["t"], delay=0.05) for i in range(5)]

    loop = asyncio.get_running_loop()
    started = loop.time()
    await collect(TopicQuery(text="x"), adapters)
    elapsed = loop.time() - started

    assert elapsed < 0.2


async def test_collect_ignores_raising_adapter() -> None:
    good = StaticAdapter("good", ["kept"])
    bad = RaisingAdapter("bad", [])

    articles = await collect(TopicQuery(text="x"), [bad, good])

    assert [a.title for a in articles] == ["kept"]
    assert bad.calls == 1


async def test_collect_skips_unsupported_adapters() -> None:
    adapter = StaticAdapter("topics", ["t"])

    articles = await collect(DateQuery(month=5, day=1), [adapter])

    assert articles == []
    assert adapter.calls == 0


async def test_collect_with_no_adapters() -> None:
    assert await collect(TopicQuery(text=""), []) == []

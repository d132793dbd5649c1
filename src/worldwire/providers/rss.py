"""RSS feed provider (BBC World, Reuters and any other feed)."""

import logging
from datetime import UTC, date, datetime

import feedparser
import httpx

from worldwire.data import Article, TopicQuery, make_article
from worldwire.grouping import significant_tokens
from worldwire.providers.base import HttpProvider
from worldwire.text import strip_html

logger = logging.getLogger(__name__)


def _entry_date(entry: feedparser.FeedParserDict, fallback: date) -> date:
    parsed = entry.get("published_parsed") or entry.get("updated_parsed")
    if not parsed:
        return fallback
    try:
        return date(parsed.tm_year, parsed.tm_mon, parsed.tm_mday)
    except (AttributeError, ValueError):
        return fallback


class RSSFeedProvider(HttpProvider):
    """Articles from a single RSS/Atom feed.

    The feed is fetched with httpx (so the timeout applies) and parsed with
    feedparser. A non-empty topic keeps only entries that share at least one
    significant token with it.

    Args:
        name: Provider name, also used as the source name.
        url: Feed URL.
        timeout_seconds: Request timeout.
        max_items: Maximum number of entries to return.
    """

    query_types = (TopicQuery,)

    def __init__(
        self,
        *,
        name: str,
        url: str,
        timeout_seconds: float = 10.0,
        max_items: int = 20,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, max_items=max_items)
        self.name = name
        self._url = url

    async def _fetch(self, client: httpx.AsyncClient, query: TopicQuery) -> list[Article]:
        response = await client.get(self._url)
        response.raise_for_status()
        feed = feedparser.parse(response.text)
        if feed.get("bozo") and not feed.get("entries"):
            raise ValueError(f"Malformed feed: {feed.get('bozo_exception')}")

        topic_tokens = significant_tokens(query.text)
        today = datetime.now(tz=UTC).date()
        articles: list[Article] = []
        for entry in feed.get("entries", []):
            title = strip_html(entry.get("title"))
            summary = strip_html(entry.get("summary") or entry.get("description"))
            if topic_tokens and not topic_tokens & significant_tokens(f"{title} {summary}"):
                continue
            link = entry.get("link") or ""
            if not link:
                continue
            article = make_article(
                title=title,
                body_text=summary,
                published_date=_entry_date(entry, today),
                source_name=self.name,
                source_url=link,
                provider=self.name,
            )
            if article is not None:
                articles.append(article)
        logger.debug("Feed %s: %d entries kept", self.name, len(articles))
        return articles

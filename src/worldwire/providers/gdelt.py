"""GDELT DOC 2.0 provider."""

from datetime import UTC, date, datetime

import httpx

from worldwire.data import Article, TopicQuery, make_article
from worldwire.providers.base import HttpProvider
from worldwire.text import strip_html

GDELT_DOC_URL = "https://api.gdeltproject.org/api/v2/doc/doc"
DEFAULT_GDELT_QUERY = "world OR politics OR science OR technology"


def _parse_seendate(value: object, fallback: date) -> date:
    """Parse GDELT's compact ``YYYYMMDDTHHMMSSZ`` timestamps."""
    if not isinstance(value, str):
        return fallback
    try:
        return datetime.strptime(value[:8], "%Y%m%d").date()
    except ValueError:
        return fallback


class GDELTProvider(HttpProvider):
    """Recent articles matching a topic from the GDELT article list API.

    GDELT only returns titles, so the title doubles as the body text.
    """

    name = "gdelt"
    query_types = (TopicQuery,)

    async def _fetch(self, client: httpx.AsyncClient, query: TopicQuery) -> list[Article]:
        params = {
            "query": query.text or DEFAULT_GDELT_QUERY,
            "mode": "artlist",
            "maxrecords": min(self._max_items, 250),
            "format": "json",
            "sort": "datedesc",
        }
        data = await self._get_json(client, GDELT_DOC_URL, params=params)

        today = datetime.now(tz=UTC).date()
        articles: list[Article] = []
        for item in data.get("articles", []):
            title = strip_html(item.get("title"))
            article = make_article(
                title=title,
                body_text=title,
                published_date=_parse_seendate(item.get("seendate"), today),
                source_name=item.get("domain") or "GDELT",
                source_url=item.get("url") or "",
                image_url=item.get("socialimage"),
                provider=self.name,
            )
            if article is not None:
                articles.append(article)
        return articles

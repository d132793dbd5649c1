"""Wikipedia "On this day" provider."""

from datetime import date

import httpx

from worldwire.data import Article, DateQuery, make_article
from worldwire.providers.base import HttpProvider
from worldwire.text import strip_html

WIKIPEDIA_ONTHISDAY_URL = "https://en.wikipedia.org/api/rest_v1/feed/onthisday/events/{month:02d}/{day:02d}"


class WikipediaOnThisDayProvider(HttpProvider):
    """Historical events for a calendar date from the Wikipedia REST feed.

    Each event becomes an Article dated at its historical date, with
    ``origin_year`` set. Events before year 1 cannot be dated and are dropped.
    """

    name = "wikipedia"
    query_types = (DateQuery,)

    async def _fetch(self, client: httpx.AsyncClient, query: DateQuery) -> list[Article]:
        url = WIKIPEDIA_ONTHISDAY_URL.format(month=query.month, day=query.day)
        data = await self._get_json(client, url)

        articles: list[Article] = []
        for item in data.get("events", []):
            year = item.get("year")
            if not isinstance(year, int) or year < 1:
                continue
            try:
                published = date(year, query.month, query.day)
            except ValueError:
                # Feb 29 in a non-leap year
                continue
            pages = item.get("pages") or [{}]
            page = pages[0] if isinstance(pages[0], dict) else {}
            text = strip_html(item.get("text"))
            article = make_article(
                title=text,
                body_text=strip_html(page.get("extract")) or text,
                published_date=published,
                source_name="Wikipedia",
                source_url=(page.get("content_urls") or {}).get("desktop", {}).get("page", "")
                or "https://en.wikipedia.org",
                image_url=(page.get("thumbnail") or {}).get("source"),
                origin_year=year,
                provider=self.name,
            )
            if article is not None:
                articles.append(article)
        return articles

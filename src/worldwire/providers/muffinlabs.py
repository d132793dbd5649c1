"""MuffinLabs "Today in History" provider."""

from datetime import date

import httpx

from worldwire.data import Article, DateQuery, make_article
from worldwire.providers.base import HttpProvider
from worldwire.text import strip_html

MUFFINLABS_URL = "https://history.muffinlabs.com/date/{month}/{day}"


class MuffinLabsHistoryProvider(HttpProvider):
    """Historical events for a calendar date from history.muffinlabs.com."""

    name = "muffinlabs"
    query_types = (DateQuery,)

    async def _fetch(self, client: httpx.AsyncClient, query: DateQuery) -> list[Article]:
        data = await self._get_json(
            client, MUFFINLABS_URL.format(month=query.month, day=query.day)
        )

        articles: list[Article] = []
        for item in (data.get("data") or {}).get("Events", []):
            try:
                year = int(str(item.get("year", "")).strip())
                published = date(year, query.month, query.day)
            except ValueError:
                # BC years ("44 BC") and Feb 29 outside leap years
                continue
            links = item.get("links") or []
            url = links[0].get("link", "") if links and isinstance(links[0], dict) else ""
            text = strip_html(item.get("text"))
            article = make_article(
                title=text,
                body_text=strip_html(item.get("html")) or text,
                published_date=published,
                source_name="MuffinLabs",
                source_url=url,
                origin_year=year,
                provider=self.name,
            )
            if article is not None:
                articles.append(article)
        return articles

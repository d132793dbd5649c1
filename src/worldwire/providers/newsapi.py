"""NewsAPI provider for current headlines and topic searches."""

import os
from datetime import UTC, datetime

import httpx

from worldwire.data import Article, TopicQuery, make_article
from worldwire.providers.base import HttpProvider, parse_published
from worldwire.text import strip_html

NEWSAPI_EVERYTHING_URL = "https://newsapi.org/v2/everything"
NEWSAPI_HEADLINES_URL = "https://newsapi.org/v2/top-headlines"


class NewsAPIProvider(HttpProvider):
    """Search NewsAPI for a topic, or list top headlines for an empty topic.

    Args:
        api_key: NewsAPI key (defaults to NEWSAPI_API_KEY env var).
        language: Language code for results (default: "en").
        timeout_seconds: Request timeout.
        max_items: Page size and cap on returned articles (max 100).
    """

    name = "newsapi"
    query_types = (TopicQuery,)

    def __init__(
        self,
        *,
        api_key: str | None = None,
        language: str = "en",
        timeout_seconds: float = 10.0,
        max_items: int = 50,
    ) -> None:
        super().__init__(timeout_seconds=timeout_seconds, max_items=max_items)
        self._api_key = api_key or os.environ.get("NEWSAPI_API_KEY")
        if not self._api_key:
            raise ValueError("NewsAPI key required. Pass api_key or set NEWSAPI_API_KEY env var.")
        self._language = language

    async def _fetch(self, client: httpx.AsyncClient, query: TopicQuery) -> list[Article]:
        params: dict[str, str | int] = {
            "language": self._language,
            "pageSize": min(self._max_items, 100),  # NewsAPI max is 100
            "apiKey": self._api_key,  # type: ignore[dict-item]
        }
        if query.text:
            params["q"] = query.text
            params["sortBy"] = "publishedAt"
            url = NEWSAPI_EVERYTHING_URL
        else:
            url = NEWSAPI_HEADLINES_URL
        data = await self._get_json(client, url, params=params)
        if data.get("status") == "error":
            raise ValueError(f"NewsAPI error: {data.get('message', 'unknown')}")

        today = datetime.now(tz=UTC).date()
        articles: list[Article] = []
        for item in data.get("articles", []):
            body = item.get("description") or (item.get("content") or "")[:200]
            article = make_article(
                title=strip_html(item.get("title")),
                body_text=strip_html(body),
                published_date=parse_published(item.get("publishedAt"), today),
                source_name=(item.get("source") or {}).get("name") or "NewsAPI",
                source_url=item.get("url") or "",
                image_url=item.get("urlToImage"),
                provider=self.name,
            )
            if article is not None:
                articles.append(article)
        return articles

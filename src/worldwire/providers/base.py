"""Provider adapter protocol and the shared HTTP adapter base."""

import logging
from datetime import date, datetime
from typing import Any, Protocol

import httpx

from worldwire.data import Article, Query

logger = logging.getLogger(__name__)

USER_AGENT = "worldwire/0.1 (+https://github.com/worldwire/worldwire)"


class ProviderAdapter(Protocol):
    """Interface for an external content source.

    ``fetch`` must never raise: transport errors, non-2xx responses and
    malformed payloads all yield an empty list.
    """

    name: str

    def supports(self, query: Query) -> bool:
        """Whether this provider can answer the given kind of query."""
        ...

    async def fetch(self, query: Query) -> list[Article]:
        """Fetch and normalize articles for a query.

        Args:
            query: A DateQuery or a TopicQuery.

        Returns:
            Normalized articles, possibly empty.
        """
        ...


class HttpProvider:
    """Base for adapters that make HTTP requests with httpx.

    Subclasses implement ``_fetch`` and may raise freely; ``fetch`` turns any
    failure into an empty result.

    Args:
        timeout_seconds: Request timeout applied to every call.
        max_items: Maximum number of articles to return per fetch.
    """

    name = "http"
    query_types: tuple[type, ...] = ()

    def __init__(self, *, timeout_seconds: float = 10.0, max_items: int = 50) -> None:
        self._timeout = timeout_seconds
        self._max_items = max_items
        self.requests_made = 0

    def supports(self, query: Query) -> bool:
        return isinstance(query, self.query_types)

    async def fetch(self, query: Query) -> list[Article]:
        if not self.supports(query):
            logger.debug("%s does not support %s", self.name, type(query).__name__)
            return []
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            ) as client:
                articles = await self._fetch(client, query)
        except Exception as e:
            logger.warning("Provider %s failed: %s", self.name, e)
            return []
        self.requests_made += 1
        logger.info("Provider %s returned %d articles", self.name, len(articles))
        return articles[: self._max_items]

    async def _fetch(self, client: httpx.AsyncClient, query: Any) -> list[Article]:
        """Fetch one query of a type listed in ``query_types``."""
        raise NotImplementedError

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()


def parse_published(value: Any, fallback: date) -> date:
    """Parse an ISO-8601 timestamp or date string, falling back on failure."""
    if not isinstance(value, str) or not value.strip():
        return fallback
    try:
        return datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return fallback

"""Concurrent fan-out over provider adapters."""

import asyncio
import logging

from worldwire.data import Article, Query
from worldwire.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


async def collect(query: Query, adapters: list[ProviderAdapter]) -> list[Article]:
    """Fetch a query from every capable adapter in parallel.

    Adapters already fail soft, but anything that still raises is logged and
    treated as an empty result. No retries happen here.

    Args:
        query: Date or topic query.
        adapters: Configured provider adapters.

    Returns:
        Concatenated articles, in adapter order.
    """
    capable = [adapter for adapter in adapters if adapter.supports(query)]
    if not capable:
        logger.info("No adapter supports %s", query)
        return []

    results = await asyncio.gather(
        *(adapter.fetch(query) for adapter in capable),
        return_exceptions=True,
    )

    articles: list[Article] = []
    for adapter, result in zip(capable, results, strict=True):
        if isinstance(result, BaseException):
            logger.warning("Adapter %s raised during collection: %s", adapter.name, result)
            continue
        articles.extend(result)

    logger.info("Collected %d articles from %d adapters", len(articles), len(capable))
    return articles

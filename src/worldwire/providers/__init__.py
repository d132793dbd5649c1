"""Provider adapters: one per external content source."""

from worldwire.providers.base import HttpProvider, ProviderAdapter
from worldwire.providers.gdelt import GDELTProvider
from worldwire.providers.muffinlabs import MuffinLabsHistoryProvider
from worldwire.providers.newsapi import NewsAPIProvider
from worldwire.providers.rss import RSSFeedProvider
from worldwire.providers.wikipedia import WikipediaOnThisDayProvider

__all__ = [
    "GDELTProvider",
    "HttpProvider",
    "MuffinLabsHistoryProvider",
    "NewsAPIProvider",
    "ProviderAdapter",
    "RSSFeedProvider",
    "WikipediaOnThisDayProvider",
]

"""
Web crawler core components.
"""

from .models import (
    CrawlOptions, QueueEntry, PageMetadata, CrawledPage, CrawlError, CrawlStats,
    CrawlResult, InvalidURLError, ContentExtractionError
)
from .url_normalizer import normalize_url, should_crawl
from .fetcher import WebFetcher, FetchResult
from .parser import ContentParser, ParsedPage
from .frontier import CrawlSession
from .scheduler import SiteCrawler, crawl_url

__all__ = [
    'CrawlOptions', 'QueueEntry', 'PageMetadata', 'CrawledPage', 'CrawlError',
    'CrawlStats', 'CrawlResult', 'InvalidURLError', 'ContentExtractionError',
    'normalize_url', 'should_crawl',
    'WebFetcher', 'FetchResult',
    'ContentParser', 'ParsedPage',
    'CrawlSession',
    'SiteCrawler', 'crawl_url'
]

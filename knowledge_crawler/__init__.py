"""
Knowledge Crawler

Same-site website crawler and content extractor feeding a knowledge-ingestion pipeline.
"""

__version__ = "1.0.0"
__description__ = "Breadth-first website crawler that returns clean page text and metadata"

from .crawler import SiteCrawler, crawl_url, CrawlOptions, CrawlResult

__all__ = ['SiteCrawler', 'crawl_url', 'CrawlOptions', 'CrawlResult']

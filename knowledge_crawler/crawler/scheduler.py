"""
Crawl controller: breadth-first traversal from a seed URL with depth, page and
domain limits, politeness delay and per-URL failure isolation.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Set

from .fetcher import WebFetcher, FetchResult
from .frontier import CrawlSession
from .models import (
    ContentExtractionError, CrawlOptions, CrawledPage, CrawlResult, InvalidURLError,
    QueueEntry,
)
from .parser import ContentParser
from .url_normalizer import normalize_url, should_crawl
from ..utils.config import Config
from ..utils.logger import CrawlerLogAdapter, get_crawler_logger
from ..utils.monitoring import CrawlMetrics


ABORTED_MESSAGE = "Crawl aborted"


class SiteCrawler:
    """
    Crawls a single site breadth-first and returns cleaned page text.

    The crawler only holds read-only configuration. All traversal state lives
    in a CrawlSession created inside each ``crawl`` call, so one instance can
    run several independent crawls concurrently.

    Fetches within a crawl are strictly sequential; concurrent requests would
    defeat the rate limiter.
    """

    def __init__(self, options: Optional[CrawlOptions] = None,
                 parser: Optional[ContentParser] = None,
                 metrics: Optional[CrawlMetrics] = None):
        self.options = options or CrawlOptions()
        self.parser = parser or ContentParser()
        self.metrics = metrics
        self.logger = logging.getLogger(__name__)

        # Cancellation handles of in-progress crawls, used by abort()
        self._cancel_events: Set[asyncio.Event] = set()

    @classmethod
    def from_config(cls, config: Config, parser: Optional[ContentParser] = None) -> 'SiteCrawler':
        """
        Build a crawler from a loaded configuration.

        When ``monitoring.metrics_enabled`` is set, a CrawlMetrics instance is
        attached and its registry is served on ``monitoring.prometheus_port``.
        """
        metrics = None
        if config.monitoring.metrics_enabled:
            metrics = CrawlMetrics()
            metrics.start_server(config.monitoring.prometheus_port)

        return cls(options=config.crawler, parser=parser, metrics=metrics)

    def abort(self):
        """
        Stop every crawl currently running on this instance.

        The in-flight fetch is cancelled and recorded as an error, and each
        crawl returns its partial result at the top of its next iteration.
        """
        if self._cancel_events:
            self.logger.info(f"Aborting {len(self._cancel_events)} running crawl(s)")
        for event in list(self._cancel_events):
            event.set()

    async def crawl(self, seed_url: str,
                    cancel_event: Optional[asyncio.Event] = None) -> CrawlResult:
        """
        Crawl a site starting from ``seed_url``.

        Args:
            seed_url: Absolute http(s) URL to start from
            cancel_event: Optional event; setting it stops the crawl promptly

        Returns:
            CrawlResult with pages in breadth-first order, per-URL errors and stats

        Raises:
            InvalidURLError: If the seed URL does not normalize, before any request
        """
        normalized_seed = normalize_url(seed_url)
        if not normalized_seed:
            raise InvalidURLError("Invalid URL provided")

        cancel_event = cancel_event or asyncio.Event()
        session = CrawlSession(seed_url=normalized_seed)
        session.push(normalized_seed, 0)

        log = get_crawler_logger(__name__, crawl_id=uuid.uuid4().hex[:12], seed_url=normalized_seed)
        log.info(
            f"Starting crawl of {normalized_seed}: max_depth={self.options.max_depth}, "
            f"max_pages={self.options.max_pages}, rate_limit={self.options.rate_limit_ms}ms"
        )
        if self.options.respect_robots_txt:
            log.warning("respect_robots_txt is set, but robots.txt is not consulted by this crawler")

        self._cancel_events.add(cancel_event)
        try:
            async with self._create_fetcher() as fetcher:
                await self._run(session, fetcher, cancel_event, log)
                fetcher_stats = fetcher.get_stats()
        finally:
            self._cancel_events.discard(cancel_event)

        result = session.build_result()
        self._log_final_stats(log, result, session, fetcher_stats)
        return result

    def _create_fetcher(self) -> WebFetcher:
        return WebFetcher(
            user_agent=self.options.user_agent,
            timeout_ms=self.options.timeout_ms,
            max_content_bytes=self.options.max_content_bytes
        )

    async def _run(self, session: CrawlSession, fetcher: WebFetcher,
                   cancel_event: asyncio.Event, log: CrawlerLogAdapter):
        """Drain the frontier until it is empty, the page cap is hit or the crawl is cancelled."""
        while session.has_pending() and len(session.pages) < self.options.max_pages:
            if cancel_event.is_set():
                log.info(f"Crawl cancelled with {len(session.queue)} entries left in frontier")
                break

            entry = session.pop()

            if session.is_visited(entry.url):
                continue

            if entry.depth > self.options.max_depth:
                log.debug(f"Skipping URL beyond max depth: {entry.url}")
                continue

            # A failed URL keeps its visited slot and is never retried
            session.mark_visited(entry.url)

            if self._should_throttle(session):
                await self._polite_sleep(cancel_event)
                if cancel_event.is_set():
                    log.info(f"Crawl cancelled before fetching {entry.url}")
                    break

            try:
                await self._process_entry(entry, session, fetcher, cancel_event, log)
            except Exception as e:
                log.log_url_event(logging.ERROR, entry.url, f"Error processing {entry.url}: {e}",
                                  exc_info=True)
                session.add_error(entry.url, str(e) or type(e).__name__)
                self._record_error('unexpected')

            if self.metrics:
                self.metrics.update_queue_size(len(session.queue))

    def _should_throttle(self, session: CrawlSession) -> bool:
        if not self.options.rate_limit_ms:
            return False
        return len(session.pages) > 0

    async def _polite_sleep(self, cancel_event: asyncio.Event):
        """Wait out the rate limit, returning early if the crawl is cancelled."""
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.options.rate_limit_ms / 1000)
        except asyncio.TimeoutError:
            pass

    async def _process_entry(self, entry: QueueEntry, session: CrawlSession, fetcher: WebFetcher,
                             cancel_event: asyncio.Event, log: CrawlerLogAdapter):
        """Fetch, extract and expand a single frontier entry."""
        session.attempts += 1
        fetch_result = await self._fetch(fetcher, entry.url, cancel_event)

        if self.metrics:
            content_bytes = len(fetch_result.content.encode('utf-8')) if fetch_result.content else 0
            self.metrics.record_fetch(fetch_result.fetch_time, content_bytes)

        if not fetch_result.ok:
            self._record_failure(session, log, entry.url, fetch_result.error,
                                 fetch_result.error_type or 'unexpected')
            return

        base_url = fetch_result.final_url or entry.url
        try:
            parsed = self.parser.parse(base_url, fetch_result.content)
        except ContentExtractionError as e:
            self._record_failure(session, log, entry.url, str(e), 'extraction')
            return

        session.add_page(CrawledPage(
            url=entry.url,
            title=parsed.title,
            content=parsed.content,
            metadata=parsed.metadata,
            depth=entry.depth,
            timestamp=datetime.now(timezone.utc).isoformat()
        ))
        if self.metrics:
            self.metrics.record_page()

        if entry.depth >= self.options.max_depth:
            log.debug(f"Crawled {entry.url} at depth {entry.depth} (max depth, links not followed)")
            return

        queued = 0
        for link in parsed.links:
            if session.is_visited(link):
                continue
            if should_crawl(link, session.seed_url, self.options.same_domain_only):
                session.push(link, entry.depth + 1)
                queued += 1

        log.debug(f"Crawled {entry.url} at depth {entry.depth}: queued {queued} of {len(parsed.links)} links")

    async def _fetch(self, fetcher: WebFetcher, url: str,
                     cancel_event: asyncio.Event) -> FetchResult:
        """Run one fetch, cancelling it if the crawl is cancelled first."""
        fetch_task = asyncio.ensure_future(fetcher.fetch(url))
        cancel_task = asyncio.ensure_future(cancel_event.wait())

        try:
            await asyncio.wait({fetch_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            fetch_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if fetch_task.done():
            return fetch_task.result()

        fetch_task.cancel()
        try:
            await fetch_task
        except asyncio.CancelledError:
            pass

        return FetchResult(url=url, status_code=0, error=ABORTED_MESSAGE, error_type='aborted')

    def _record_failure(self, session: CrawlSession, log: CrawlerLogAdapter,
                        url: str, error: str, error_type: str):
        session.add_error(url, error)
        self._record_error(error_type)
        log.log_url_event(logging.WARNING, url, f"Error crawling {url}: {error}",
                          extra={'error_type': error_type})

    def _record_error(self, error_type: str):
        if self.metrics:
            self.metrics.record_error(error_type)

    def _log_final_stats(self, log: CrawlerLogAdapter, result: CrawlResult,
                         session: CrawlSession, fetcher_stats: dict):
        stats = result.stats
        log.info(
            f"Crawl completed: visited={stats.total_pages}, pages={stats.successful_pages}, "
            f"errors={stats.failed_pages}, skipped={stats.skipped_pages}, "
            f"remaining={len(session.queue)}, duration={stats.crawl_duration_ms}ms"
        )
        log.debug(f"Frontier stats: {session.get_stats()}")
        log.debug(f"Fetcher stats: {fetcher_stats}")


async def crawl_url(url: str, **options) -> CrawlResult:
    """
    Crawl a URL with default options, overridden by keyword arguments.

    Example:
        result = await crawl_url("https://example.com", max_depth=1, max_pages=20)
    """
    crawler = SiteCrawler(CrawlOptions.from_dict(options))
    return await crawler.crawl(url)

"""
Prometheus metrics for crawl sessions.
"""

import logging
from typing import Any, Dict, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest
from prometheus_client import start_http_server


class CrawlMetrics:
    """
    Counters and histograms describing crawl activity.

    Each instance owns its own registry, so several crawlers (or tests) can
    record metrics side by side without clashing on metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.logger = logging.getLogger(__name__)
        self.registry = registry or CollectorRegistry()

        self.pages_crawled = Counter(
            'crawler_pages_crawled',
            'Total number of pages accepted into crawl results',
            registry=self.registry
        )
        self.errors = Counter(
            'crawler_errors',
            'Total number of per-URL crawl errors',
            ['error_type'],
            registry=self.registry
        )
        self.bytes_downloaded = Counter(
            'crawler_bytes_downloaded',
            'Total bytes of HTML downloaded',
            registry=self.registry
        )
        self.fetch_duration = Histogram(
            'crawler_fetch_duration_seconds',
            'Time spent fetching a single page',
            registry=self.registry
        )
        self.queue_size = Gauge(
            'crawler_queue_size',
            'Number of entries waiting in the frontier',
            registry=self.registry
        )

    def record_fetch(self, duration_seconds: float, content_bytes: int = 0):
        self.fetch_duration.observe(duration_seconds)
        if content_bytes:
            self.bytes_downloaded.inc(content_bytes)

    def record_page(self):
        self.pages_crawled.inc()

    def record_error(self, error_type: str):
        self.errors.labels(error_type=error_type).inc()

    def update_queue_size(self, size: int):
        self.queue_size.set(size)

    def get_summary(self) -> Dict[str, Any]:
        """Get current values of the main metrics."""
        def sample(name: str, labels: Optional[Dict[str, str]] = None) -> float:
            return self.registry.get_sample_value(name, labels) or 0.0

        error_types = ('http', 'not_html', 'too_large', 'timeout', 'client',
                       'unexpected', 'extraction', 'aborted')

        return {
            'pages_crawled': sample('crawler_pages_crawled_total'),
            'bytes_downloaded': sample('crawler_bytes_downloaded_total'),
            'fetches': sample('crawler_fetch_duration_seconds_count'),
            'queue_size': sample('crawler_queue_size'),
            'errors': {
                error_type: sample('crawler_errors_total', {'error_type': error_type})
                for error_type in error_types
            }
        }

    def export(self) -> bytes:
        """Render the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)

    def start_server(self, port: int = 8000):
        """Serve the registry over HTTP for scraping."""
        start_http_server(port, registry=self.registry)
        self.logger.info(f"Prometheus metrics server started on port {port}")

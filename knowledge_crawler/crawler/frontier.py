"""
Per-crawl frontier state: a FIFO queue of (url, depth) entries plus the visited set.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Set

from .models import CrawlError, CrawledPage, CrawlResult, CrawlStats, QueueEntry


@dataclass
class CrawlSession:
    """
    Mutable state owned by exactly one call to ``SiteCrawler.crawl``.

    Duplicate queue entries are allowed; deduplication happens when an entry
    is dequeued and checked against ``visited``.
    """
    seed_url: str
    queue: Deque[QueueEntry] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    pages: List[CrawledPage] = field(default_factory=list)
    errors: List[CrawlError] = field(default_factory=list)
    attempts: int = 0
    start_time: float = field(default_factory=time.monotonic)

    def push(self, url: str, depth: int):
        self.queue.append(QueueEntry(url=url, depth=depth))

    def pop(self) -> QueueEntry:
        return self.queue.popleft()

    def has_pending(self) -> bool:
        return len(self.queue) > 0

    def is_visited(self, url: str) -> bool:
        return url in self.visited

    def mark_visited(self, url: str):
        self.visited.add(url)

    def add_page(self, page: CrawledPage):
        self.pages.append(page)

    def add_error(self, url: str, error: str):
        self.errors.append(CrawlError(url=url, error=error))

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)

    def get_stats(self) -> Dict[str, int]:
        """Get frontier statistics."""
        return {
            'total_queued': len(self.queue),
            'total_visited': len(self.visited),
            'pages': len(self.pages),
            'errors': len(self.errors),
            'attempts': self.attempts
        }

    def build_result(self) -> CrawlResult:
        """Snapshot the session into a result the caller owns."""
        total = len(self.visited)
        successful = len(self.pages)
        failed = len(self.errors)

        return CrawlResult(
            pages=list(self.pages),
            errors=list(self.errors),
            stats=CrawlStats(
                total_pages=total,
                successful_pages=successful,
                failed_pages=failed,
                skipped_pages=total - successful - failed,
                crawl_duration_ms=self.elapsed_ms
            )
        )

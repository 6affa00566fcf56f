"""
Data model for crawl sessions: options, frontier entries, pages, errors and results.
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List, Optional


DEFAULT_USER_AGENT = "AgentHub Knowledge Crawler/1.0"
DEFAULT_MAX_CONTENT_BYTES = 10 * 1024 * 1024


class InvalidURLError(ValueError):
    """Raised when the seed URL cannot be normalized to an http(s) URL."""


class ContentExtractionError(Exception):
    """Raised when a page does not yield enough text to be stored."""


@dataclass(frozen=True)
class CrawlOptions:
    """
    Immutable configuration for a single crawl.

    ``respect_robots_txt`` is accepted for compatibility with callers that
    set it, but robots.txt is never fetched or consulted. The crawler logs a
    warning when it is enabled.
    """
    max_depth: int = 3
    max_pages: int = 100
    same_domain_only: bool = True
    respect_robots_txt: bool = True
    rate_limit_ms: int = 1000
    timeout_ms: int = 30000
    user_agent: str = DEFAULT_USER_AGENT
    max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError("max_depth must be non-negative")
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if self.rate_limit_ms < 0:
            raise ValueError("rate_limit_ms must be non-negative")
        if self.timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")
        if self.max_content_bytes <= 0:
            raise ValueError("max_content_bytes must be positive")
        if not self.user_agent or not self.user_agent.strip():
            raise ValueError("user_agent must not be empty")

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'CrawlOptions':
        """Create options from a mapping, rejecting unknown keys."""
        data = data or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown crawl options: {', '.join(unknown)}")
        return cls(**data)

    def replace(self, **overrides) -> 'CrawlOptions':
        """Return a copy with the given fields overridden."""
        return self.from_dict({**asdict(self), **overrides})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class QueueEntry:
    """A unit of frontier work."""
    url: str
    depth: int


@dataclass
class PageMetadata:
    """Metadata read from a page's <meta> tags. Every field is optional."""
    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    author: Optional[str] = None
    published_date: Optional[str] = None
    modified_date: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting absent fields."""
        return {key: value for key, value in asdict(self).items() if value is not None}


@dataclass
class CrawledPage:
    """A page accepted into the crawl result."""
    url: str
    title: str
    content: str
    metadata: PageMetadata
    depth: int
    timestamp: str

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'title': self.title,
            'content': self.content,
            'metadata': self.metadata.to_dict(),
            'depth': self.depth,
            'timestamp': self.timestamp
        }


@dataclass
class CrawlError:
    """A URL that failed to fetch or extract."""
    url: str
    error: str

    def to_dict(self) -> dict:
        return {'url': self.url, 'error': self.error}


@dataclass
class CrawlStats:
    """Aggregate counts for a finished crawl."""
    total_pages: int = 0
    successful_pages: int = 0
    failed_pages: int = 0
    skipped_pages: int = 0
    crawl_duration_ms: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CrawlResult:
    """Pages, errors and stats handed to the ingestion pipeline."""
    pages: List[CrawledPage] = field(default_factory=list)
    errors: List[CrawlError] = field(default_factory=list)
    stats: CrawlStats = field(default_factory=CrawlStats)

    def to_dict(self) -> dict:
        """Convert to a JSON-compatible dictionary."""
        return {
            'pages': [page.to_dict() for page in self.pages],
            'errors': [error.to_dict() for error in self.errors],
            'stats': self.stats.to_dict()
        }

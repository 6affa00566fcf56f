"""
Web page fetcher: one timed, header-configured GET per call with response validation.
"""

import asyncio
import aiohttp
import logging
import time
from typing import Optional, Dict
from dataclasses import dataclass
from aiohttp import ClientSession, ClientTimeout, ClientError

from .models import DEFAULT_MAX_CONTENT_BYTES, DEFAULT_USER_AGENT


ACCEPT_HEADER = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
ACCEPT_LANGUAGE_HEADER = "en-US,en;q=0.9"


class ResponseTooLargeError(Exception):
    """Raised while reading a body that exceeds the configured size cap."""

    def __init__(self, size: int):
        super().__init__(f"Content too large: {size} bytes")
        self.size = size


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status_code: int
    content: Optional[str] = None
    final_url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    fetch_time: float = 0.0
    content_type: Optional[str] = None
    encoding: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.content is not None


class WebFetcher:
    """
    Fetches HTML pages with a per-request timeout and content validation.

    Failures never raise; they come back as a FetchResult with ``error`` set
    to a message suitable for the crawl error list and ``error_type`` set to
    one of ``http``, ``not_html``, ``too_large``, ``timeout``, ``client`` or
    ``unexpected``.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout_ms: int = 30000,
                 max_content_bytes: int = DEFAULT_MAX_CONTENT_BYTES):
        self.user_agent = user_agent
        self.timeout_ms = timeout_ms
        self.max_content_bytes = max_content_bytes

        self.logger = logging.getLogger(__name__)
        self.session: Optional[ClientSession] = None
        self.headers = {
            'User-Agent': user_agent,
            'Accept': ACCEPT_HEADER,
            'Accept-Language': ACCEPT_LANGUAGE_HEADER
        }

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'non_html': 0,
            'bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.timeout_ms / 1000)

            self.session = aiohttp.ClientSession(
                timeout=timeout,
                connector=aiohttp.TCPConnector(
                    limit_per_host=1,
                    ttl_dns_cache=300,
                    use_dns_cache=True
                )
            )
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult holding the HTML body, or the error that prevented it
        """
        if self.session is None:
            await self.start()

        start_time = time.time()
        self.stats['total_requests'] += 1

        try:
            async with self.session.get(url, headers=self.headers) as response:
                headers = dict(response.headers)
                final_url = str(response.url)
                content_type = response.headers.get('Content-Type', '')

                if not 200 <= response.status < 300:
                    return self._failure(
                        url, f"HTTP {response.status}: {response.reason}", 'http',
                        start_time, status_code=response.status, headers=headers
                    )

                if 'text/html' not in content_type.lower():
                    self.stats['non_html'] += 1
                    self.logger.debug(f"Skipping non-HTML content: {url} ({content_type})")
                    return self._failure(
                        url, f"Not HTML content: {content_type}", 'not_html',
                        start_time, status_code=response.status, headers=headers
                    )

                content = await self._read_content_safely(response)
                self.stats['successful_requests'] += 1

                result = FetchResult(
                    url=url,
                    status_code=response.status,
                    content=content,
                    final_url=final_url,
                    headers=headers,
                    content_type=content_type,
                    encoding=response.charset,
                    fetch_time=time.time() - start_time
                )

                self.logger.debug(f"Fetched {url}: {response.status} ({len(content)} chars)")
                return result

        except ResponseTooLargeError as e:
            self.logger.warning(f"{e}: {url}")
            return self._failure(url, str(e), 'too_large', start_time)

        except asyncio.TimeoutError:
            self.logger.warning(f"Timeout fetching {url}")
            return self._failure(url, f"Request timeout after {self.timeout_ms}ms", 'timeout', start_time)

        except ClientError as e:
            self.logger.warning(f"Client error fetching {url}: {e}")
            return self._failure(url, f"Client error: {e}", 'client', start_time)

        except Exception as e:
            self.logger.error(f"Unexpected error fetching {url}: {e}")
            return self._failure(url, f"Unexpected error: {e}", 'unexpected', start_time)

    def _failure(self, url: str, error: str, error_type: str, start_time: float,
                 status_code: int = 0, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        self.stats['failed_requests'] += 1
        return FetchResult(
            url=url,
            status_code=status_code,
            headers=headers,
            error=error,
            error_type=error_type,
            fetch_time=time.time() - start_time
        )

    async def _read_content_safely(self, response: aiohttp.ClientResponse) -> str:
        """
        Read and decode a response body, enforcing the size cap.

        Raises:
            ResponseTooLargeError: If the declared or streamed size exceeds the cap
        """
        content_length = response.headers.get('Content-Length')
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_bytes:
            raise ResponseTooLargeError(int(content_length))

        content_bytes = bytearray()
        async for chunk in response.content.iter_chunked(8192):
            content_bytes.extend(chunk)
            if len(content_bytes) > self.max_content_bytes:
                raise ResponseTooLargeError(len(content_bytes))

        self.stats['bytes_downloaded'] += len(content_bytes)
        return self._decode(bytes(content_bytes), response.charset)

    def _decode(self, content_bytes: bytes, charset: Optional[str]) -> str:
        for encoding in (charset, 'utf-8', 'latin-1'):
            if not encoding:
                continue
            try:
                return content_bytes.decode(encoding)
            except (UnicodeDecodeError, LookupError):
                continue

        return content_bytes.decode('utf-8', errors='ignore')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()

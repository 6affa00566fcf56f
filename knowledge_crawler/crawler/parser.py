"""
HTML parser for extracting clean text, metadata, titles and links.
"""

import re
import logging
from typing import List, Optional, Union
from urllib.parse import urljoin
from dataclasses import dataclass, field
from bs4 import BeautifulSoup

from .models import ContentExtractionError, PageMetadata
from .url_normalizer import normalize_url


MIN_CONTENT_LENGTH = 100

HtmlSource = Union[str, BeautifulSoup]


@dataclass
class ParsedPage:
    """Everything extracted from a single HTML document."""
    url: str
    title: str
    content: str
    metadata: PageMetadata = field(default_factory=PageMetadata)
    links: List[str] = field(default_factory=list)


class ContentParser:
    """
    Parses HTML documents into clean text plus metadata and outgoing links.
    """

    # Never contribute to extracted text, wherever they appear
    REMOVED_ELEMENTS = ['script', 'style', 'nav', 'header', 'footer', 'iframe', 'noscript']

    # Priority order; the first element found wins
    MAIN_CONTENT_SELECTORS = [
        'main',
        'article',
        '[role="main"]',
        '.main-content',
        '#main-content',
        '.content',
        '#content',
        '.post-content',
        '.entry-content'
    ]

    def __init__(self, min_content_length: int = MIN_CONTENT_LENGTH):
        if min_content_length < MIN_CONTENT_LENGTH:
            raise ValueError(f"min_content_length must be at least {MIN_CONTENT_LENGTH}")

        self.min_content_length = min_content_length
        self.logger = logging.getLogger(__name__)

        self.whitespace_pattern = re.compile(r'\s+')

    def parse(self, url: str, html_content: str) -> ParsedPage:
        """
        Parse an HTML document and extract everything the crawler needs.

        Links are collected before boilerplate is stripped so that navigation
        menus still feed the frontier.

        Args:
            url: Base URL used to resolve relative links
            html_content: Raw HTML content

        Returns:
            ParsedPage with title, cleaned content, metadata and links

        Raises:
            ContentExtractionError: If the cleaned text is too short
        """
        soup = self._make_soup(html_content)

        title = self.extract_title(soup)
        metadata = self.extract_metadata(soup)
        links = self.extract_links(url, soup)
        content = self.extract_content(soup)

        self.logger.debug(f"Parsed {url}: {len(content)} chars, {len(links)} links")

        return ParsedPage(
            url=url,
            title=title,
            content=content,
            metadata=metadata,
            links=links
        )

    def extract_title(self, html: HtmlSource) -> str:
        """Return the <title> text, else the first <h1> text, else "Untitled"."""
        soup = self._make_soup(html)

        for tag_name in ('title', 'h1'):
            tag = soup.find(tag_name)
            if tag:
                text = self._clean_text(tag.get_text())
                if text:
                    return text

        return "Untitled"

    def extract_metadata(self, html: HtmlSource) -> PageMetadata:
        """Read description, keywords, author and article dates from <meta> tags."""
        soup = self._make_soup(html)

        keywords = None
        raw_keywords = self._meta_content(soup, name='keywords')
        if raw_keywords:
            keywords = [k.strip() for k in raw_keywords.split(',') if k.strip()] or None

        return PageMetadata(
            description=(self._meta_content(soup, name='description') or
                         self._meta_content(soup, prop='og:description')),
            keywords=keywords,
            author=(self._meta_content(soup, name='author') or
                    self._meta_content(soup, prop='article:author')),
            published_date=self._meta_content(soup, prop='article:published_time'),
            modified_date=self._meta_content(soup, prop='article:modified_time')
        )

    def extract_content(self, html: HtmlSource) -> str:
        """
        Extract the main text of a document.

        Boilerplate elements are removed first. If a BeautifulSoup object is
        passed in it is modified in place.

        Raises:
            ContentExtractionError: If fewer than ``min_content_length``
                characters remain after cleaning
        """
        soup = self._make_soup(html)

        for element in soup.select(', '.join(self.REMOVED_ELEMENTS)):
            # Nested matches are already gone with their ancestor
            if not element.decomposed:
                element.decompose()

        # Adjacent text nodes, inline or block, are joined with a space
        text = ''
        for selector in self.MAIN_CONTENT_SELECTORS:
            content_element = soup.select_one(selector)
            if content_element is not None:
                text = content_element.get_text(separator=' ')
                break

        if not text.strip():
            body = soup.find('body') or soup
            text = body.get_text(separator=' ')

        content = self._clean_text(text)

        if len(content) < self.min_content_length:
            raise ContentExtractionError("Insufficient content extracted")

        return content

    def extract_links(self, base_url: str, html: HtmlSource) -> List[str]:
        """
        Collect unique, normalized absolute URLs from all a[href] elements.

        Malformed or non-http(s) hrefs are dropped silently. Order follows
        first appearance in the document.
        """
        soup = self._make_soup(html)
        links = {}

        for anchor in soup.find_all('a', href=True):
            href = anchor['href'].strip()
            if not href:
                continue

            try:
                absolute_url = urljoin(base_url, href)
            except ValueError:
                continue

            normalized_url = normalize_url(absolute_url)
            if normalized_url:
                links[normalized_url] = None

        return list(links)

    def _make_soup(self, html: HtmlSource) -> BeautifulSoup:
        if isinstance(html, BeautifulSoup):
            return html
        return BeautifulSoup(html or '', 'lxml')

    def _meta_content(self, soup: BeautifulSoup, name: Optional[str] = None,
                      prop: Optional[str] = None) -> Optional[str]:
        attrs = {'name': name} if name else {'property': prop}
        tag = soup.find('meta', attrs=attrs)
        if tag:
            content = (tag.get('content') or '').strip()
            if content:
                return content
        return None

    def _clean_text(self, text: str) -> str:
        """Collapse whitespace runs, blank lines included, to single spaces and trim."""
        if not text:
            return ""

        return self.whitespace_pattern.sub(' ', text).strip()

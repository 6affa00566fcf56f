"""Unit tests for URL normalization and the should-crawl filter."""
import pytest

from knowledge_crawler.crawler.url_normalizer import get_hostname, normalize_url, should_crawl


SEED = "https://example.com/"


@pytest.mark.parametrize("raw, expected", [
    ("https://example.com", "https://example.com/"),
    ("https://example.com/", "https://example.com/"),
    ("https://Example.COM/Docs/", "https://example.com/Docs"),
    ("https://example.com/guide#install", "https://example.com/guide"),
    ("https://example.com/a/?q=1#top", "https://example.com/a?q=1"),
    ("http://example.com:80/a", "http://example.com/a"),
    ("https://example.com:443/a", "https://example.com/a"),
    ("https://example.com:8443/a/", "https://example.com:8443/a"),
    ("HTTPS://example.com/a", "https://example.com/a"),
    ("https://example.com/a//", "https://example.com/a"),
    ("http://[::1]:8080/x/", "http://[::1]:8080/x"),
    ("  https://example.com/padded  ", "https://example.com/padded"),
    ("https://a.com/x/../y", "https://a.com/y"),
    ("https://a.com/x/./y/", "https://a.com/x/y"),
    ("https://a.com/x/%2E%2E/y", "https://a.com/y"),
    ("https://a.com/../../y", "https://a.com/y"),
    ("https://a.com/x/..", "https://a.com/"),
    ("https://a.com/a b", "https://a.com/a%20b"),
    ("https://a.com/a%20b", "https://a.com/a%20b"),
    ("https://a.com/s?q=a b", "https://a.com/s?q=a%20b"),
    ("https://a.com/do\ncs", "https://a.com/docs"),
])
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    "not a url",
    "/relative/path",
    "ftp://example.com",
    "mailto:someone@example.com",
    "javascript:void(0)",
    "https://",
    "https://example.com:99999/",
    "https://example.com:port/",
    None,
])
def test_normalize_url_rejects(raw):
    assert normalize_url(raw) is None


@pytest.mark.parametrize("raw", [
    "https://example.com",
    "https://example.com/a/b/",
    "https://example.com/a//",
    "https://EXAMPLE.com:443/x?y=1#z",
    "http://user:pw@example.com:8080/p/",
    "https://example.com/search?q=a+b&page=2",
    "https://example.com/a/../b/./c/",
    "https://example.com/with space/<x>",
])
def test_normalize_url_is_idempotent(raw):
    once = normalize_url(raw)
    assert once is not None
    assert normalize_url(once) == once


def test_trailing_slash_variants_collide():
    assert normalize_url("https://a.com/") == normalize_url("https://a.com")


def test_dot_segment_variants_collide():
    assert normalize_url("https://a.com/x/../y") == normalize_url("https://a.com/y")


def test_get_hostname():
    assert get_hostname("https://Docs.Example.com/x") == "docs.example.com"
    assert get_hostname("not a url") is None


@pytest.mark.parametrize("url", [
    "https://example.com/docs",
    "https://example.com/blog/post-1",
    "https://example.com/search?q=python",
])
def test_should_crawl_accepts_same_site_content(url):
    assert should_crawl(url, SEED) is True


@pytest.mark.parametrize("url", [
    "https://other.com/docs",
    "https://blog.example.com/post",
    "http://example.org/",
])
def test_should_crawl_rejects_other_hosts(url):
    assert should_crawl(url, SEED) is False


def test_should_crawl_allows_other_hosts_when_not_restricted():
    assert should_crawl("https://other.com/docs", SEED, same_domain_only=False) is True


@pytest.mark.parametrize("url", [
    "https://example.com/report.pdf",
    "https://example.com/archive.tar",
    "https://example.com/bundle.GZ",
    "https://example.com/images/logo.PNG",
    "https://example.com/static/app.js",
    "https://example.com/static/site.css",
    "https://example.com/video.mp4",
    "https://example.com/wp-admin/options",
    "https://example.com/wp-content/uploads/file",
    "https://example.com/admin",
    "https://example.com/login",
    "https://example.com/signin",
    "https://example.com/signup",
    "https://example.com/register",
    "https://example.com/page#section",
    "https://example.com/javascript:alert(1)",
    "https://example.com/mailto:someone",
    "https://example.com/tel:5551234",
])
def test_should_crawl_rejects_skip_patterns(url):
    assert should_crawl(url, SEED) is False

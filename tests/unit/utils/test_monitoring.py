"""Unit tests for crawl metrics."""
import pytest

from knowledge_crawler.utils.monitoring import CrawlMetrics


@pytest.fixture
def metrics():
    return CrawlMetrics()


def test_summary_starts_at_zero(metrics):
    summary = metrics.get_summary()
    assert summary["pages_crawled"] == 0
    assert summary["fetches"] == 0
    assert set(summary["errors"]) >= {"http", "timeout", "client", "not_html", "too_large",
                                      "extraction", "aborted", "unexpected"}
    assert all(value == 0 for value in summary["errors"].values())


def test_records_activity(metrics):
    metrics.record_fetch(0.25, content_bytes=2048)
    metrics.record_fetch(0.5)
    metrics.record_page()
    metrics.record_error("timeout")
    metrics.record_error("timeout")
    metrics.update_queue_size(12)

    summary = metrics.get_summary()

    assert summary["fetches"] == 2
    assert summary["bytes_downloaded"] == 2048
    assert summary["pages_crawled"] == 1
    assert summary["errors"]["timeout"] == 2
    assert summary["queue_size"] == 12


def test_instances_do_not_share_registries():
    first, second = CrawlMetrics(), CrawlMetrics()
    first.record_page()
    assert second.get_summary()["pages_crawled"] == 0


def test_export_uses_prometheus_text_format(metrics):
    metrics.record_error("http")
    output = metrics.export().decode("utf-8")
    assert "crawler_pages_crawled_total" in output
    assert 'crawler_errors_total{error_type="http"} 1.0' in output

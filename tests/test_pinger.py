"""Tests for search engine sitemap pings."""

from unittest.mock import Mock, patch

import pytest
import requests

from seo_indexing_pipeline.config import PipelineConfig
from seo_indexing_pipeline.pinger import SearchEnginePinger


def _response(status_code):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    return response


@pytest.fixture
def pinger(config):
    p = SearchEnginePinger(config)
    yield p
    p.shutdown()


class TestPing:
    """Tests for the joined ping of all engines."""

    def test_both_engines_pinged(self, pinger):
        with patch("seo_indexing_pipeline.pinger.requests.get", return_value=_response(200)) as mock_get:
            results = pinger.ping()

        assert [r.engine for r in results] == ["google", "bing"]
        assert all(r.success for r in results)
        assert mock_get.call_count == 2
        _, kwargs = mock_get.call_args
        assert kwargs["params"] == {"sitemap": "https://zeva360.com/sitemap.xml"}
        assert kwargs["timeout"] == pinger.config.ping_timeout

    def test_endpoint_urls(self, pinger):
        with patch("seo_indexing_pipeline.pinger.requests.get", return_value=_response(200)) as mock_get:
            pinger.ping()

        called = sorted(call.args[0] for call in mock_get.call_args_list)
        assert called == ["https://www.bing.com/ping", "https://www.google.com/ping"]

    def test_custom_sitemap_url(self, pinger):
        with patch("seo_indexing_pipeline.pinger.requests.get", return_value=_response(200)) as mock_get:
            pinger.ping("https://zeva360.com/sitemap-jobs.xml")

        _, kwargs = mock_get.call_args
        assert kwargs["params"] == {"sitemap": "https://zeva360.com/sitemap-jobs.xml"}

    def test_connection_error_reported(self, pinger):
        """Test a network failure becomes a failed result, not an exception."""
        with patch(
            "seo_indexing_pipeline.pinger.requests.get",
            side_effect=requests.ConnectionError("unreachable"),
        ):
            results = pinger.ping()

        assert all(not r.success for r in results)
        assert results[0].error == "unreachable"

    def test_http_error_reported(self, pinger):
        with patch("seo_indexing_pipeline.pinger.requests.get", return_value=_response(500)):
            results = pinger.ping()

        assert results[0].success is False
        assert results[0].status_code == 500
        assert results[0].error == "HTTP 500"

    def test_delay_applied(self, tmp_path):
        """Test the configured propagation delay is slept before pinging."""
        pinger = SearchEnginePinger(PipelineConfig.for_testing(tmp_path, ping_delay_seconds=2.0))

        with patch("seo_indexing_pipeline.pinger.time.sleep") as mock_sleep, \
                patch("seo_indexing_pipeline.pinger.requests.get", return_value=_response(200)):
            pinger.ping()

        mock_sleep.assert_called_once_with(2.0)

    def test_no_delay_when_zero(self, pinger):
        with patch("seo_indexing_pipeline.pinger.time.sleep") as mock_sleep, \
                patch("seo_indexing_pipeline.pinger.requests.get", return_value=_response(200)):
            pinger.ping()

        mock_sleep.assert_not_called()


class TestPingInBackground:
    """Tests for the detached ping."""

    def test_returns_future(self, pinger):
        with patch("seo_indexing_pipeline.pinger.requests.get", return_value=_response(200)):
            future = pinger.ping_in_background()
            results = future.result(timeout=5)

        assert len(results) == 2
        assert all(r.success for r in results)

    def test_shutdown_is_idempotent(self, pinger):
        pinger.shutdown()
        pinger.shutdown()

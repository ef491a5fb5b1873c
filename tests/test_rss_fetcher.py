"""
Tests for feed fetching functionality.
"""
import pytest
import requests
import responses
from unittest.mock import patch

from rss2html.rss_fetcher import RSSFetcher


@pytest.fixture
def sample_rss_feed():
    """Minimal test feed."""
    return """<?xml version='1.0' encoding='UTF-8'?>
<rss version="2.0">
  <channel>
    <title>Planet Test</title>
    <item>
      <title>Test Story</title>
      <link>https://example.org/story/1</link>
      <guid>https://example.org/story/1</guid>
      <pubDate>Fri, 24 Oct 2025 12:00:00 +0000</pubDate>
    </item>
  </channel>
</rss>"""


@pytest.fixture(autouse=True)
def no_sleep():
    """Skip the backoff delays."""
    with patch("rss2html.rss_fetcher.time.sleep") as mock_sleep:
        yield mock_sleep


class TestRSSFetcher:
    """Test suite for RSSFetcher."""

    @responses.activate
    def test_fetch_success(self, sample_rss_feed):
        """Test successful feed download."""
        url = "https://planet.example.org/rss.xml"
        responses.add(responses.GET, url, body=sample_rss_feed, status=200)

        fetcher = RSSFetcher()
        document = fetcher.fetch(url)

        assert document == sample_rss_feed.encode()
        assert len(responses.calls) == 1

    @responses.activate
    def test_sends_user_agent(self, sample_rss_feed):
        url = "https://planet.example.org/rss.xml"
        responses.add(responses.GET, url, body=sample_rss_feed, status=200)

        RSSFetcher(user_agent="test-agent/1.0").fetch(url)

        assert responses.calls[0].request.headers["User-Agent"] == "test-agent/1.0"

    @responses.activate
    def test_fetch_raw_bytes(self):
        """fetch returns the body untouched (used for OPML)."""
        url = "https://planet.example.org/subscribers.opml"
        responses.add(responses.GET, url, body=b"<opml/>", status=200)

        assert RSSFetcher().fetch(url) == b"<opml/>"

    @responses.activate
    def test_fetch_with_retry(self, sample_rss_feed, no_sleep):
        """Test fetch with retry on failure then success."""
        url = "https://planet.example.org/rss.xml"
        responses.add(responses.GET, url, body="error", status=500)
        responses.add(responses.GET, url, body=sample_rss_feed, status=200)

        fetcher = RSSFetcher(max_retries=2)
        document = fetcher.fetch(url)

        assert b"Test Story" in document
        no_sleep.assert_called_once_with(1)

    @responses.activate
    def test_all_retries_fail(self):
        url = "https://planet.example.org/rss.xml"
        responses.add(responses.GET, url, body="error", status=503)

        fetcher = RSSFetcher(max_retries=3)

        with pytest.raises(requests.HTTPError):
            fetcher.fetch(url)
        assert len(responses.calls) == 3

    @responses.activate
    def test_connection_error_propagates(self):
        url = "https://planet.example.org/rss.xml"
        responses.add(responses.GET, url, body=requests.ConnectionError("refused"))

        with pytest.raises(requests.ConnectionError):
            RSSFetcher(max_retries=2).fetch(url)
        assert len(responses.calls) == 2

    def test_fetch_requires_url(self):
        with pytest.raises(ValueError):
            RSSFetcher().fetch("")

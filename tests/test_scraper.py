"""Tests for the web fetcher.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made during ``fetch_url`` / ``fetch_url_async`` tests.
- The async fetcher is driven with ``asyncio.run`` so no async test plugin is
  needed.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from termread.scraper.fetcher import describe_fetch_error, fetch_url, fetch_url_async, normalize_url
from termread.scraper.models import RawPage

_SIMPLE_HTML = """\
<!DOCTYPE html>
<html>
<head><title>Test Page</title></head>
<body><main><p>Main content.</p></main></body>
</html>
"""


# ---------------------------------------------------------------------------
# normalize_url
# ---------------------------------------------------------------------------

class TestNormalizeUrl:
    def test_adds_https_scheme(self) -> None:
        assert normalize_url("example.com/page") == "https://example.com/page"

    def test_keeps_existing_scheme(self) -> None:
        assert normalize_url("http://example.com") == "http://example.com"
        assert normalize_url("https://example.com") == "https://example.com"

    def test_trims_whitespace(self) -> None:
        assert normalize_url("  example.com \n") == "https://example.com"


# ---------------------------------------------------------------------------
# fetch_url
# ---------------------------------------------------------------------------

class TestFetchUrl:
    def test_successful_fetch_returns_raw_page(self) -> None:
        """A 200 response is returned as a RawPage."""
        with respx.mock:
            respx.get("https://example.com/article").mock(
                return_value=httpx.Response(200, text=_SIMPLE_HTML)
            )
            raw = fetch_url("https://example.com/article")

        assert isinstance(raw, RawPage)
        assert raw.url == "https://example.com/article"
        assert raw.status_code == 200
        assert "<title>Test Page</title>" in raw.html

    def test_http_error_raises(self) -> None:
        """A 404 response raises ``httpx.HTTPStatusError``."""
        with respx.mock:
            respx.get("https://example.com/missing").mock(
                return_value=httpx.Response(404, text="Not Found")
            )
            with pytest.raises(httpx.HTTPStatusError):
                fetch_url("https://example.com/missing")

    def test_follows_redirects_and_reports_final_url(self) -> None:
        with respx.mock:
            respx.get("https://example.com/old").mock(
                return_value=httpx.Response(301, headers={"Location": "https://example.com/new"})
            )
            respx.get("https://example.com/new").mock(
                return_value=httpx.Response(200, text=_SIMPLE_HTML)
            )
            raw = fetch_url("https://example.com/old")

        assert raw.url == "https://example.com/new"

    def test_sends_user_agent(self) -> None:
        with respx.mock:
            route = respx.get("https://example.com/").mock(
                return_value=httpx.Response(200, text=_SIMPLE_HTML)
            )
            fetch_url("https://example.com/")

        assert "termread" in route.calls.last.request.headers["User-Agent"]


class TestFetchUrlAsync:
    def test_successful_fetch(self) -> None:
        with respx.mock:
            respx.get("https://example.com/a").mock(
                return_value=httpx.Response(200, text=_SIMPLE_HTML)
            )
            raw = asyncio.run(fetch_url_async("https://example.com/a"))

        assert raw.status_code == 200
        assert "Main content" in raw.html

    def test_server_error_raises(self) -> None:
        with respx.mock:
            respx.get("https://example.com/a").mock(return_value=httpx.Response(500))
            with pytest.raises(httpx.HTTPStatusError):
                asyncio.run(fetch_url_async("https://example.com/a"))


class TestDescribeFetchError:
    def test_status_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/gone").mock(return_value=httpx.Response(404))
            with pytest.raises(httpx.HTTPStatusError) as info:
                fetch_url("https://example.com/gone")

        assert describe_fetch_error(info.value) == "HTTP 404 Not Found for https://example.com/gone"

    def test_connection_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(httpx.ConnectError) as info:
                fetch_url("https://example.com/")

        assert describe_fetch_error(info.value) == "could not connect: refused"

    def test_timeout(self) -> None:
        assert describe_fetch_error(httpx.ReadTimeout("slow")) == "request timed out"

    def test_other_errors_use_message(self) -> None:
        assert describe_fetch_error(ValueError("bad")) == "bad"

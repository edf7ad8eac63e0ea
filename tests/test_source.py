"""Tests for fetching and parsing the closings page."""

import asyncio

import httpx
import pytest

from snowday.config import SourceConfig
from snowday.errors import ConfigurationError, UpstreamError
from snowday.source import AnnouncementSource, is_closed_status, parse_announcements

URL = "https://closings.example.com/school-closings"

PAGE = """
<html><body>
  <div class="closing">
    <span class="text--primary js-sort-value">Example Public Schools</span>
    <span class="text--secondary">Closed</span>
    <span class="text--secondary">Updated 5:02 AM</span>
  </div>
  <div class="closing">
    <span class="text--primary js-sort-value">  Grand Blanc Community Schools </span>
    <span class="text--secondary">Delayed 2 Hours</span>
  </div>
  <div class="closing">
    <span class="text--secondary">Closed</span>
  </div>
  <div class="closing">
    <span class="text--primary js-sort-value">Holland Christian Schools</span>
  </div>
</body></html>
"""


def make_source(handler, url: str | None = URL) -> AnnouncementSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AnnouncementSource(SourceConfig(url=url), client=client)


def test_parse_announcements():
    announcements = parse_announcements(PAGE)
    assert [a.name for a in announcements] == [
        "Example Public Schools",
        "Grand Blanc Community Schools",
        "Holland Christian Schools",
    ]
    assert announcements[0].status == "Closed"
    assert announcements[0].is_closed is True
    assert announcements[1].is_closed is False
    assert announcements[2].status == ""
    assert announcements[2].is_closed is False


def test_parse_unexpected_markup_returns_empty():
    assert parse_announcements("<html><p>Nothing to see</p></html>") == []
    assert parse_announcements("") == []


def test_closed_status_is_case_insensitive():
    assert is_closed_status("CLOSED TODAY") is True
    assert is_closed_status("Closed - Snow") is True
    assert is_closed_status("Open") is False
    assert is_closed_status("") is False
    assert is_closed_status("No School", tokens=("closed", "no school")) is True


def test_fetch_success():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text=PAGE)

    announcements = asyncio.run(make_source(handler).fetch())
    assert len(announcements) == 3
    assert str(seen[0].url) == URL
    assert seen[0].headers["user-agent"].startswith("snowday")


def test_fetch_server_error_is_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(UpstreamError, match="503"):
        asyncio.run(make_source(handler).fetch())


def test_fetch_not_found_is_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with pytest.raises(UpstreamError):
        asyncio.run(make_source(handler).fetch())


def test_fetch_timeout_is_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(UpstreamError, match="timed out"):
        asyncio.run(make_source(handler).fetch())


def test_fetch_network_error_is_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(UpstreamError):
        asyncio.run(make_source(handler).fetch())


def test_missing_url_is_configuration_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=PAGE)

    with pytest.raises(ConfigurationError):
        asyncio.run(make_source(handler, url=None).fetch())

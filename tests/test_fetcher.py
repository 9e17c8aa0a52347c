"""Tests for the httpx-based fetcher and its failure classification."""

from __future__ import annotations

import asyncio

import httpx

from cleansight.config import FetchConfig
from cleansight.errors import NETWORK_ERROR, REMOTE_ERROR, TIMEOUT
from cleansight.fetch import HttpFetcher


def _fetcher(handler, **cfg_overrides) -> HttpFetcher:
    cfg = FetchConfig(trust_env=False, **cfg_overrides)
    return HttpFetcher(cfg, transport=httpx.MockTransport(handler))


def test_fetch_success_returns_text_and_sends_user_agent():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["user_agent"] = request.headers.get("user-agent")
        return httpx.Response(200, text="<html><body>ok</body></html>", headers={"content-type": "text/html"})

    fetcher = _fetcher(handler, user_agent="CleanSightTest/1.0")
    result = asyncio.run(fetcher.fetch("https://example.com/page"))

    assert result.ok
    assert result.status_code == 200
    assert result.text == "<html><body>ok</body></html>"
    assert result.error is None
    assert result.content_type == "text/html"
    assert seen["user_agent"] == "CleanSightTest/1.0"


def test_fetch_follows_redirects_and_records_final_url():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old":
            return httpx.Response(301, headers={"location": "https://example.com/new"})
        return httpx.Response(200, text="moved here")

    result = asyncio.run(_fetcher(handler).fetch("https://example.com/old"))

    assert result.ok
    assert result.url == "https://example.com/old"
    assert result.final_url == "https://example.com/new"


def test_origin_not_found_is_remote_error_with_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="missing")

    result = asyncio.run(_fetcher(handler).fetch("https://example.com/gone"))

    assert not result.ok
    assert result.text is None
    assert result.error.kind == REMOTE_ERROR
    assert result.error.status == 404
    assert result.error.message == "Source server responded with status 404"


def test_origin_server_error_is_remote_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    result = asyncio.run(_fetcher(handler).fetch("https://example.com/down"))

    assert result.error.kind == REMOTE_ERROR
    assert result.error.status == 503


def test_connection_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = asyncio.run(_fetcher(handler).fetch("https://unreachable.example.com/"))

    assert result.error.kind == NETWORK_ERROR
    assert result.error.status is None
    assert result.status_code is None
    assert "ConnectError" in result.error.message


def test_transport_timeout_is_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    result = asyncio.run(_fetcher(handler).fetch("https://slow.example.com/"))

    assert result.error.kind == TIMEOUT


def test_total_budget_cancels_slow_response():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1.0)
        return httpx.Response(200, text="too late")

    result = asyncio.run(_fetcher(handler).fetch("https://slow.example.com/", timeout=0.05))

    assert result.error.kind == TIMEOUT
    assert result.error.message == "Request timed out after 0.05s"
    assert result.text is None

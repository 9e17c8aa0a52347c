"""Tests for the FastAPI front door."""

from __future__ import annotations

import logging

from fastapi.testclient import TestClient

from cleansight.cache import MemoryCache
from cleansight.config import AppConfig, ExtractConfig
from cleansight.errors import REMOTE_ERROR, FetchFailure
from cleansight.extract import Extractor
from cleansight.pipeline import Pipeline
from cleansight.server import RATE_LIMIT_MESSAGE, SECURITY_HEADERS, create_app
from pages import ARTICLE_URL, FakeFetcher


def _client(fetcher: FakeFetcher | None = None, cfg: AppConfig | None = None, **kwargs) -> TestClient:
    fetcher = fetcher or FakeFetcher()
    pipeline = Pipeline(
        fetcher,
        Extractor(ExtractConfig(primary="density", fallback=[])),
        cache=MemoryCache(),
        logger=logging.getLogger("test_server"),
    )
    return TestClient(create_app(cfg or AppConfig(), pipeline=pipeline), **kwargs)


def test_landing_page_is_html():
    response = _client().get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "CleanSight" in response.text
    assert 'action="/proxy"' in response.text


def test_health_check():
    response = _client().get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert isinstance(body["timestamp"], float)


def test_proxy_defaults_to_markdown():
    response = _client().get("/proxy", params={"url": ARTICLE_URL})

    assert response.status_code == 200
    assert response.headers["content-type"] == "text/plain; charset=utf-8"
    assert response.text.startswith("# How Caching Works")


def test_proxy_text_html_and_json_content_types():
    client = _client()

    text = client.get("/proxy", params={"url": ARTICLE_URL, "format": "text"})
    html = client.get("/proxy", params={"url": ARTICLE_URL, "format": "html"})
    record = client.get("/proxy", params={"url": ARTICLE_URL, "format": "json"})

    assert text.headers["content-type"] == "text/plain; charset=utf-8"
    assert text.text.splitlines()[0] == "How Caching Works"
    assert html.headers["content-type"] == "text/html; charset=utf-8"
    assert "<h1>How Caching Works</h1>" in html.text
    assert record.headers["content-type"] == "application/json"
    assert record.json()["title"] == "How Caching Works"
    assert record.json()["textContent"] == text.text


def test_proxy_serves_repeat_requests_from_cache():
    fetcher = FakeFetcher()
    client = _client(fetcher)

    first = client.get("/proxy", params={"url": ARTICLE_URL})
    second = client.get("/proxy", params={"url": ARTICLE_URL})

    assert first.text == second.text
    assert len(fetcher.calls) == 1


def test_proxy_without_url_is_400():
    fetcher = FakeFetcher()
    response = _client(fetcher).get("/proxy")

    assert response.status_code == 400
    assert response.json()["error"] == "URL parameter is required"
    assert response.json()["kind"] == "missing_param"
    assert fetcher.calls == []


def test_proxy_with_invalid_format_is_400():
    response = _client().get("/proxy", params={"url": ARTICLE_URL, "format": "pdf"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Invalid format"
    assert body["validFormats"] == ["text", "markdown", "html", "json"]


def test_proxy_with_relative_url_is_400():
    response = _client().get("/proxy", params={"url": "/not/absolute"})

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_url"


def test_origin_not_found_is_passed_through():
    failure = FetchFailure(kind=REMOTE_ERROR, message="Source server responded with status 404", status=404)
    response = _client(FakeFetcher(error=failure)).get("/proxy", params={"url": ARTICLE_URL})

    assert response.status_code == 404
    assert response.json()["upstreamStatus"] == 404


def test_origin_failure_is_bad_gateway():
    failure = FetchFailure(kind=REMOTE_ERROR, message="Source server responded with status 500", status=500)
    response = _client(FakeFetcher(error=failure)).get("/proxy", params={"url": ARTICLE_URL})

    assert response.status_code == 502
    assert response.json()["kind"] == "remote_error"


def test_unextractable_page_is_422():
    response = _client(FakeFetcher(html="<html><body><div>Hi</div></body></html>")).get(
        "/proxy", params={"url": ARTICLE_URL}
    )

    assert response.status_code == 422
    assert response.json()["error"] == "Could not parse content from the provided URL"


def test_security_and_timing_headers_are_set():
    response = _client().get("/health")

    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value
    assert float(response.headers["X-Process-Time"]) >= 0


def test_error_responses_also_carry_security_headers():
    response = _client().get("/proxy")

    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_rate_limit_rejects_after_max_requests():
    cfg = AppConfig()
    cfg.rate_limit.max_requests = 2
    client = _client(cfg=cfg)

    first = client.get("/health")
    second = client.get("/health")
    third = client.get("/health")

    assert first.status_code == 200
    assert first.headers["RateLimit-Limit"] == "2"
    assert first.headers["RateLimit-Remaining"] == "1"
    assert second.headers["RateLimit-Remaining"] == "0"
    assert third.status_code == 429
    assert third.json()["error"] == RATE_LIMIT_MESSAGE
    assert "Retry-After" in third.headers
    assert third.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_rate_limit_can_be_disabled():
    cfg = AppConfig()
    cfg.rate_limit.enabled = False
    cfg.rate_limit.max_requests = 1
    client = _client(cfg=cfg)

    responses = [client.get("/health") for _ in range(3)]

    assert all(r.status_code == 200 for r in responses)
    assert "RateLimit-Limit" not in responses[0].headers


def test_unexpected_exception_is_generic_500():
    class _Broken:
        async def handle(self, url, fmt=None):
            raise RuntimeError("boom")

    cfg = AppConfig()
    client = TestClient(create_app(cfg, pipeline=_Broken()), raise_server_exceptions=False)
    response = client.get("/proxy", params={"url": ARTICLE_URL})

    assert response.status_code == 500
    assert response.json()["error"] == "An unexpected error occurred"
    assert "boom" not in response.text


def test_cors_allows_any_origin_by_default():
    response = _client().get("/health", headers={"Origin": "https://agent.example.net"})

    assert response.headers["access-control-allow-origin"] == "*"

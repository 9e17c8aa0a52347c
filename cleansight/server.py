"""
HTTP front door for the CleanSight pipeline.

Thin FastAPI layer: query parameter parsing, response content types,
error rendering, CORS, security headers and per-client rate limiting.
All content decisions live in the pipeline.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response

from . import __version__
from .config import AppConfig
from .errors import RATE_LIMITED, RequestError
from .logging_utils import get_logger, log_event
from .output import MEDIA_TYPES
from .pipeline import Pipeline
from .ratelimit import RateLimiter
from .types import DEFAULT_FORMAT, FORMATS

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Content-Security-Policy": (
        "default-src 'self'; base-uri 'self'; form-action 'self'; frame-ancestors 'self'; "
        "img-src 'self' data: https:; object-src 'none'; script-src 'none'; "
        "style-src 'self' https: 'unsafe-inline'"
    ),
}

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later"

LANDING_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>CleanSight - Web Content for AI</title>
  <link rel="stylesheet" href="https://cdn.jsdelivr.net/npm/water.css@2/out/water.css">
</head>
<body>
  <h1>CleanSight</h1>
  <p>Transform web content into clean, readable formats optimized for AI consumption.</p>
  <form action="/proxy" method="get">
    <label for="url">Webpage URL</label>
    <input type="url" id="url" name="url" placeholder="https://example.com" required>
    <label for="format">Output format</label>
    <select id="format" name="format">
      <option value="markdown">Markdown</option>
      <option value="text">Plain Text</option>
      <option value="html">Clean HTML</option>
      <option value="json">JSON with Metadata</option>
    </select>
    <button type="submit">Clean URL</button>
  </form>
  <h2>API Usage</h2>
  <code>GET /proxy?url=https://example.com&amp;format=markdown</code>
  <ul>
    <li><strong>url</strong> (required): the page to process</li>
    <li><strong>format</strong> (optional): <code>markdown</code> (default), <code>text</code>,
      <code>html</code> or <code>json</code></li>
  </ul>
</body>
</html>
"""


def create_app(cfg: AppConfig | None = None, pipeline: Pipeline | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        cfg: Application configuration (defaults when omitted)
        pipeline: Pre-built pipeline, e.g. with fake collaborators in tests
    """
    cfg = cfg or AppConfig()
    logger = get_logger("server")
    pipeline = pipeline or Pipeline.from_config(cfg)
    limiter = None
    if cfg.rate_limit.enabled:
        limiter = RateLimiter(cfg.rate_limit.max_requests, cfg.rate_limit.window_seconds)

    app = FastAPI(
        title="CleanSight",
        description="Readable web content for AI agents",
        version=__version__,
    )
    app.state.cfg = cfg
    app.state.pipeline = pipeline
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        if limiter is None:
            return await call_next(request)
        client = request.client.host if request.client else "unknown"
        decision = limiter.hit(client)
        headers = {
            "RateLimit-Limit": str(decision.limit),
            "RateLimit-Remaining": str(decision.remaining),
            "RateLimit-Reset": str(decision.reset_seconds),
        }
        if not decision.allowed:
            log_event(
                logger,
                "Rate limit exceeded",
                event="rate_limited",
                client=client,
                path=request.url.path,
            )
            error = RequestError(RATE_LIMITED, RATE_LIMIT_MESSAGE)
            headers["Retry-After"] = str(decision.reset_seconds)
            return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=headers)
        response = await call_next(request)
        response.headers.update(headers)
        return response

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        response.headers["X-Process-Time"] = f"{time.perf_counter() - start:.6f}"
        return response

    @app.exception_handler(RequestError)
    async def request_error_handler(request: Request, exc: RequestError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        log_event(
            logger,
            "Unhandled error",
            level=logging.ERROR,
            exc_info=True,
            event="unhandled_error",
            path=request.url.path,
            error=f"{type(exc).__name__}: {exc}",
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "An unexpected error occurred", "kind": "internal_error", "status": 500},
        )

    @app.get("/", response_class=HTMLResponse)
    async def home() -> HTMLResponse:
        return HTMLResponse(LANDING_PAGE)

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "timestamp": time.time()}

    @app.get("/proxy")
    async def proxy(
        request: Request,
        url: str | None = Query(None, description="Page to process"),
        fmt: str | None = Query(None, alias="format", description=f"One of {', '.join(FORMATS)}"),
    ) -> Response:
        payload = await request.app.state.pipeline.handle(url, fmt)
        return render_payload(payload, fmt or DEFAULT_FORMAT)

    return app


def render_payload(payload, fmt: str) -> Response:
    """Wrap a transcoded payload in a response with the right content type."""
    if fmt == "json":
        return JSONResponse(content=payload)
    return Response(content=payload, media_type=MEDIA_TYPES[fmt])

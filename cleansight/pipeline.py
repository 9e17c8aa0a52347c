"""
Request pipeline for CleanSight.

This module coordinates one request end to end:
1. Validate the url and format parameters
2. Serve from cache when a live entry exists
3. Fetch the page
4. Extract the readable article
5. Transcode to the requested format
6. Populate the cache and return the payload

Each step short-circuits on failure. This is the one place where fetch and
extraction failures are mapped to caller-visible RequestErrors. Failures
are never cached and nothing is retried.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import logging
import time
from typing import Protocol
from urllib.parse import urlparse

from .cache import MemoryCache, cache_key
from .config import AppConfig
from .errors import (
    INTERNAL_ERROR,
    INVALID_FORMAT,
    INVALID_URL,
    MISSING_PARAM,
    UNPROCESSABLE,
    ExtractionError,
    RequestError,
    status_for_fetch_failure,
)
from .extract import Extractor
from .fetch import HttpFetcher
from .logging_utils import get_logger, log_event
from .output import transcode
from .types import DEFAULT_FORMAT, FORMATS, FetchResult, Payload


class Fetcher(Protocol):
    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        ...


class Cache(Protocol):
    def get(self, key: str) -> Payload | None:
        ...

    def set(self, key: str, payload: Payload, ttl: float | None = None) -> None:
        ...


@dataclass
class PipelineStats:
    """Counters collected across requests.

    Attributes:
        requests: Requests that passed validation
        cache_hits: Requests served from cache
        fetches: Fetcher invocations
        fetch_failed: Fetches that failed
        extract_failed: Pages with no extractable article
        internal_errors: Unexpected failures during extraction or transcoding
        succeeded: Requests answered from a fresh fetch
    """

    requests: int = 0
    cache_hits: int = 0
    fetches: int = 0
    fetch_failed: int = 0
    extract_failed: int = 0
    internal_errors: int = 0
    succeeded: int = 0


class Pipeline:
    """Fetch, extract and transcode one URL per call.

    Args:
        fetcher: Outbound page fetcher
        extractor: Article extractor
        cache: Shared payload cache, or None to disable caching
        logger: Destination for structured events
    """

    def __init__(
        self,
        fetcher: Fetcher,
        extractor: Extractor,
        cache: Cache | None = None,
        logger: logging.Logger | None = None,
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.cache = cache
        self.logger = logger or get_logger("pipeline")
        self.stats = PipelineStats()

    @classmethod
    def from_config(cls, cfg: AppConfig, logger: logging.Logger | None = None) -> "Pipeline":
        cache = None
        if cfg.cache.enabled:
            cache = MemoryCache(ttl_seconds=cfg.cache.ttl_seconds, max_entries=cfg.cache.max_entries)
        return cls(
            fetcher=HttpFetcher(cfg.fetch),
            extractor=Extractor(cfg.extract),
            cache=cache,
            logger=logger,
        )

    async def handle(self, url: str | None, fmt: str | None = DEFAULT_FORMAT) -> Payload:
        """Run the pipeline for one request.

        Args:
            url: Page to process
            fmt: Output format; None means the default (markdown)

        Returns:
            The transcoded payload

        Raises:
            RequestError: For every failure, already classified
        """
        start = time.perf_counter()
        fmt = DEFAULT_FORMAT if fmt is None else fmt

        if url is None or not url.strip():
            raise self._reject(MISSING_PARAM, "URL parameter is required", url, fmt, start)
        if fmt not in FORMATS:
            raise self._reject(
                INVALID_FORMAT,
                "Invalid format",
                url,
                fmt,
                start,
                details={"validFormats": list(FORMATS)},
            )
        if not is_absolute_http_url(url):
            raise self._reject(INVALID_URL, "URL must be an absolute http or https URL", url, fmt, start)

        self.stats.requests += 1
        key = cache_key(url, fmt)

        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                self.stats.cache_hits += 1
                log_event(
                    self.logger,
                    "Cache hit",
                    event="cache_hit",
                    url=url,
                    format=fmt,
                    duration_ms=_elapsed_ms(start),
                )
                if isinstance(cached, dict):
                    return dict(cached)
                return cached

        self.stats.fetches += 1
        result = await self.fetcher.fetch(url)
        if result.error is not None:
            self.stats.fetch_failed += 1
            failure = result.error
            status = status_for_fetch_failure(failure)
            log_event(
                self.logger,
                "Error fetching URL",
                level=logging.WARNING,
                event="fetch_error",
                url=url,
                format=fmt,
                kind=failure.kind,
                upstream_status=failure.status,
                status_code=status,
                error=failure.message,
                duration_ms=_elapsed_ms(start),
            )
            details = {"details": failure.message}
            if failure.status is not None:
                details["upstreamStatus"] = failure.status
            raise RequestError(failure.kind, failure.message, status_code=status, details=details)

        base_url = result.final_url or url
        try:
            article = await asyncio.to_thread(self.extractor.extract, result.text or "", base_url)
            payload = transcode(article, fmt)
        except ExtractionError as exc:
            self.stats.extract_failed += 1
            log_event(
                self.logger,
                "Failed to parse content",
                level=logging.WARNING,
                event="extract_error",
                url=url,
                format=fmt,
                error=exc.message,
                duration_ms=_elapsed_ms(start),
            )
            raise RequestError(UNPROCESSABLE, "Could not parse content from the provided URL") from exc
        except Exception as exc:  # noqa: BLE001
            self.stats.internal_errors += 1
            log_event(
                self.logger,
                "Error processing URL",
                level=logging.ERROR,
                exc_info=True,
                event="internal_error",
                url=url,
                format=fmt,
                error=f"{type(exc).__name__}: {exc}",
                duration_ms=_elapsed_ms(start),
            )
            raise RequestError(INTERNAL_ERROR, "Failed to process the URL") from exc

        if self.cache is not None:
            self.cache.set(key, dict(payload) if isinstance(payload, dict) else payload)

        self.stats.succeeded += 1
        log_event(
            self.logger,
            "Content processed successfully",
            event="success",
            url=url,
            format=fmt,
            content_length=_payload_length(payload),
            duration_ms=_elapsed_ms(start),
        )
        return payload

    def _reject(
        self,
        kind: str,
        message: str,
        url: str | None,
        fmt: str,
        start: float,
        details: dict | None = None,
    ) -> RequestError:
        log_event(
            self.logger,
            "Rejected request",
            level=logging.WARNING,
            event="invalid_request",
            kind=kind,
            url=url,
            format=fmt,
            duration_ms=_elapsed_ms(start),
        )
        return RequestError(kind, message, details=details)


def is_absolute_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _payload_length(payload: Payload) -> int:
    if isinstance(payload, str):
        return len(payload)
    return len(json.dumps(payload, ensure_ascii=False))

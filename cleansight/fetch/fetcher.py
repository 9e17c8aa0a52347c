"""
HTTP page fetching with httpx.

A single bounded-time GET per call. The whole exchange (connect, headers
and body) shares one deadline; when it passes the request is cancelled and
reported as a timeout. Failures are classified here and nowhere else:
- timeout: no complete response within the budget
- remote_error: the origin answered with a non-2xx status
- network_error: no response reached us (DNS, connection, protocol)

No retries are attempted at this layer.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from ..config import FetchConfig
from ..errors import NETWORK_ERROR, REMOTE_ERROR, TIMEOUT, FetchFailure
from ..types import FetchResult

logger = logging.getLogger(__name__)


class HttpFetcher:
    """Fetches raw pages from remote origins.

    Args:
        cfg: Fetch settings (timeout, user agent, redirects, proxies)
        transport: Optional httpx transport, used to stub the network in tests
    """

    def __init__(self, cfg: FetchConfig | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.cfg = cfg or FetchConfig()
        self._transport = transport

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        """Fetch url within the configured time budget.

        Args:
            url: Absolute URL, already validated by the caller
            timeout: Override for the configured budget, in seconds

        Returns:
            FetchResult with text on success or a classified error on failure
        """
        budget = self.cfg.timeout_seconds if timeout is None else timeout
        try:
            return await asyncio.wait_for(self._get(url, budget), timeout=budget)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            message = f"Request timed out after {budget:g}s"
            logger.debug("Fetch timeout for %s: %r", url, exc)
            return _failure(url, FetchFailure(kind=TIMEOUT, message=message))
        except httpx.HTTPError as exc:
            logger.debug("Fetch network failure for %s: %r", url, exc)
            message = f"No response received from the source server ({type(exc).__name__})"
            return _failure(url, FetchFailure(kind=NETWORK_ERROR, message=message))

    async def _get(self, url: str, budget: float) -> FetchResult:
        headers = {
            "User-Agent": self.cfg.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        }
        async with httpx.AsyncClient(
            timeout=budget,
            headers=headers,
            follow_redirects=self.cfg.follow_redirects,
            trust_env=self.cfg.trust_env,
            transport=self._transport,
        ) as client:
            resp = await client.get(url)

        final_url = str(resp.url)
        content_type = resp.headers.get("content-type")
        if not resp.is_success:
            failure = FetchFailure(
                kind=REMOTE_ERROR,
                message=f"Source server responded with status {resp.status_code}",
                status=resp.status_code,
            )
            return FetchResult(
                url=url,
                status_code=resp.status_code,
                text=None,
                error=failure,
                final_url=final_url,
                content_type=content_type,
            )

        return FetchResult(
            url=url,
            status_code=resp.status_code,
            text=resp.text,
            error=None,
            final_url=final_url,
            content_type=content_type,
        )


def _failure(url: str, failure: FetchFailure) -> FetchResult:
    return FetchResult(url=url, status_code=None, text=None, error=failure)

"""Sample pages and fake collaborators shared by the tests."""

from __future__ import annotations

from cleansight.errors import FetchFailure
from cleansight.types import FetchResult

ARTICLE_URL = "https://example.com/article"

ARTICLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>How Caching Works | Example Blog</title>
  <meta name="author" content="Jane Doe">
  <meta property="og:site_name" content="Example Blog">
  <meta name="description" content="A short tour of response caching.">
  <script>var tracking = true;</script>
  <style>body { color: red; }</style>
</head>
<body>
  <nav class="site-nav"><a href="/">Home</a> <a href="/about">About</a></nav>
  <div id="sidebar"><a href="/ads">Buy now</a></div>
  <article class="post">
    <h1>How Caching Works</h1>
    <p>Caching stores the result of expensive work so that later requests can reuse it,
    which saves time, bandwidth, and money for everyone involved.</p>
    <p>A cache entry lives for a fixed time to live. After that, the entry is treated as
    absent and the work is done again, with the fresh result stored in its place.</p>
    <p>Read the <a href="/docs/ttl">TTL guide</a> for <em>more</em> detail, or see the
    <strong>summary</strong> below.</p>
    <pre>code here</pre>
    <p>Use <code>cache.get(key)</code> to read an entry.</p>
    <img src="/img/diagram.png" alt="Cache diagram" onerror="alert(1)">
    <button onclick="steal()">Share</button>
  </article>
  <footer>Copyright 2024 Example Blog</footer>
</body>
</html>
"""

BARE_HTML = "<html><body><div>Hi</div></body></html>"


class FakeFetcher:
    """Fetcher stub that records calls and returns a canned result."""

    def __init__(self, html: str | None = ARTICLE_HTML, error: FetchFailure | None = None):
        self.html = html
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        self.calls.append(url)
        if self.error is not None:
            return FetchResult(url=url, status_code=self.error.status, text=None, error=self.error)
        return FetchResult(
            url=url,
            status_code=200,
            text=self.html,
            error=None,
            final_url=url,
            content_type="text/html; charset=utf-8",
        )

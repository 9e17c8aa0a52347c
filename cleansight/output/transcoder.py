"""
Projection of an Article into an output encoding.

transcode is pure: the same Article and format always give the same
payload, except for the json processedAt stamp, which is taken from the
clock (or the ``now`` argument) at call time.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..types import FORMATS, Article, Payload
from .markdown import html_to_markdown

MEDIA_TYPES = {
    "text": "text/plain; charset=utf-8",
    "markdown": "text/plain; charset=utf-8",
    "html": "text/html; charset=utf-8",
    "json": "application/json",
}


def transcode(article: Article, fmt: str, now: datetime | None = None) -> Payload:
    """Render an Article in the requested format.

    Args:
        article: The extracted article
        fmt: One of "text", "markdown", "html", "json"
        now: Timestamp for the json processedAt field (defaults to current UTC time)

    Returns:
        A string for text/markdown/html, a dict for json

    Raises:
        ValueError: fmt is not a supported format
    """
    if fmt == "text":
        return article.text_content
    if fmt == "html":
        return article.content_html
    if fmt == "markdown":
        return html_to_markdown(article.content_html)
    if fmt == "json":
        return to_record(article, now)
    raise ValueError(f"Unsupported format {fmt!r}; expected one of {', '.join(FORMATS)}")


def to_record(article: Article, now: datetime | None = None) -> dict[str, Any]:
    return {
        "title": article.title,
        "byline": article.byline,
        "content": article.content_html,
        "textContent": article.text_content,
        "siteName": article.site_name,
        "excerpt": article.excerpt,
        "length": article.length,
        "processedAt": iso_timestamp(now or datetime.now(timezone.utc)),
    }


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")

"""
Core data types for CleanSight.

This module defines the records that flow through the pipeline:
- FetchResult: Transient outcome of fetching a URL
- Article: Canonical readable representation of a page
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

from .errors import FetchFailure

# Supported output encodings, in the order they are advertised.
FORMATS: tuple[str, ...] = ("text", "markdown", "html", "json")
DEFAULT_FORMAT = "markdown"

# A transcoded payload: a string for text/markdown/html, a mapping for json.
Payload = Union[str, dict[str, Any]]


@dataclass(frozen=True)
class FetchResult:
    """Result of an outbound fetch.

    Either text will be populated (success) or error will be populated
    (failure), but never both. status_code is None when no response
    reached us (timeouts, connection failures).

    Attributes:
        url: The URL that was requested
        status_code: HTTP status of the final response, if any
        text: Decoded response body on success
        error: Classified failure, None on success
        final_url: URL after redirects, defaults to the requested URL
        content_type: Value of the Content-Type header, if any
    """

    url: str
    status_code: int | None
    text: str | None
    error: FetchFailure | None
    final_url: str | None = None
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Article:
    """Readable article extracted from a page.

    Immutable once constructed; transcoders only read from it.

    Attributes:
        title: Article headline, possibly empty
        content_html: Sanitized HTML fragment of the main content
        text_content: Content with markup stripped and whitespace normalized
        byline: Author attribution, if found
        site_name: Publication name, if found
        excerpt: Short lede or description, if found
        extracted_at: UTC time the extraction completed
    """

    title: str
    content_html: str
    text_content: str
    byline: str | None = None
    site_name: str | None = None
    excerpt: str | None = None
    extracted_at: datetime = field(default_factory=_utcnow)

    @property
    def length(self) -> int:
        """Character count of text_content."""
        return len(self.text_content)

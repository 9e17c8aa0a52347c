"""
Page metadata lookup: title, byline, site name and excerpt.

Reads from the full document before any strategy strips it, preferring
explicit metadata (<meta> tags, rel=author) over visible page text.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from bs4 import BeautifulSoup, Tag

from .sanitize import inner_text

_TITLE_SEPARATORS = re.compile(r"\s+[|\-–—:/»]+\s+")
_BYLINE_HINT = re.compile(r"byline|author|writtenby|p-author", re.IGNORECASE)
_URL_LIKE = re.compile(r"^https?://", re.IGNORECASE)
MAX_BYLINE_CHARS = 100


@dataclass(frozen=True)
class PageMetadata:
    title: str = ""
    byline: str | None = None
    site_name: str | None = None
    excerpt: str | None = None


def read_metadata(soup: BeautifulSoup) -> PageMetadata:
    return PageMetadata(
        title=_title(soup),
        byline=_byline(soup),
        site_name=_meta(soup, "og:site_name", "application-name"),
        excerpt=_meta(soup, "description", "og:description", "twitter:description"),
    )


def _meta(soup: BeautifulSoup, *keys: str) -> str | None:
    """Return the content of the first <meta> matching any key, in key order."""
    wanted = [key.lower() for key in keys]
    found: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        content = tag.get("content")
        if not isinstance(content, str) or not content.strip():
            continue
        for attr in ("property", "name", "itemprop"):
            value = tag.get(attr)
            if isinstance(value, str) and value.strip().lower() in wanted:
                found.setdefault(value.strip().lower(), " ".join(content.split()))
    for key in wanted:
        if key in found:
            return found[key]
    return None


def _title(soup: BeautifulSoup) -> str:
    title = _meta(soup, "og:title", "twitter:title")
    if title:
        return title
    if soup.title is not None and soup.title.string:
        return clean_title(soup.title.string)
    h1 = soup.find("h1")
    if h1 is not None:
        return inner_text(h1)
    return ""


def clean_title(raw: str) -> str:
    """Drop a trailing " | Site Name" style suffix when enough title remains."""
    title = " ".join(raw.split())
    parts = _TITLE_SEPARATORS.split(title)
    if len(parts) < 2:
        return title
    head = parts[0]
    if len(head.split()) >= 3:
        return head
    return title


def _byline(soup: BeautifulSoup) -> str | None:
    author = _meta(soup, "author", "article:author", "parsely-author")
    if author and not _URL_LIKE.match(author):
        return author

    rel = soup.find(attrs={"rel": "author"})
    if isinstance(rel, Tag):
        text = inner_text(rel)
        if 0 < len(text) <= MAX_BYLINE_CHARS:
            return text

    for tag in soup.find_all(True):
        if tag.name in ("html", "body", "article", "main"):
            continue
        hint = " ".join(tag.get("class", [])) + " " + str(tag.get("id", ""))
        if tag.get("itemprop") == "author" or _BYLINE_HINT.search(hint):
            text = inner_text(tag)
            if 0 < len(text) <= MAX_BYLINE_CHARS:
                return text
    return None

"""
Sanitization and text flattening for extracted content.

Every content region, whichever strategy produced it, passes through
sanitize_fragment before it becomes part of an Article. The output never
carries executable or embedded nodes, event-handler attributes or
script URLs, and its links and images are absolute.
"""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Comment, Declaration, Doctype, ProcessingInstruction, Tag

# Removed with their contents.
DROP_TAGS = [
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "frame",
    "frameset",
    "object",
    "embed",
    "applet",
    "link",
    "meta",
    "base",
    "form",
    "input",
    "button",
    "select",
    "textarea",
    "svg",
    "canvas",
    "audio",
    "video",
    "nav",
    "aside",
    "dialog",
]

GLOBAL_ATTRS = {"title", "lang", "dir"}
TAG_ATTRS = {
    "a": {"href"},
    "img": {"src", "alt", "width", "height"},
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan", "scope"},
    "time": {"datetime"},
    "blockquote": {"cite"},
    "q": {"cite"},
    "ol": {"start"},
    "pre": {"class"},
    "code": {"class"},
}
URL_ATTRS = {"href", "src", "cite"}
SAFE_SCHEMES = {"http", "https", "mailto"}
# Browsers ignore these inside URLs, so "java\tscript:" still runs script.
_URL_CONTROL = re.compile(r"[\x00-\x1f\x7f]")
_KEEP_CLASS = re.compile(r"^(language|lang)-[\w+#.-]+$")
_WHITESPACE = re.compile(r"\s+")

# Elements pruned when they end up with no text and no media.
PRUNE_IF_EMPTY = [
    "p",
    "div",
    "span",
    "section",
    "article",
    "li",
    "a",
    "strong",
    "em",
    "b",
    "i",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "blockquote",
    "figure",
    "ul",
    "ol",
]
_MEDIA = ["img", "br", "hr", "pre", "table"]

# Elements that start a new line in the flattened text.
BLOCK_TAGS = [
    "address",
    "article",
    "blockquote",
    "br",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "main",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "tr",
    "ul",
]


def sanitize_fragment(fragment: str, base_url: str) -> BeautifulSoup:
    """Parse and clean an HTML fragment.

    Args:
        fragment: HTML produced by an extraction strategy
        base_url: URL the page was served from, for absolutizing links

    Returns:
        A BeautifulSoup tree holding only the safe, structural content
    """
    soup = BeautifulSoup(fragment, "html.parser")
    if soup.body is not None:
        soup = BeautifulSoup(soup.body.decode_contents(), "html.parser")

    for node in soup.find_all(string=lambda s: isinstance(s, (Comment, Declaration, Doctype, ProcessingInstruction))):
        node.extract()

    drop_all(soup.find_all(DROP_TAGS))

    for tag in soup.find_all(True):
        _promote_lazy_src(tag)
        _clean_attributes(tag, base_url)

    for tag in reversed(soup.find_all(PRUNE_IF_EMPTY)):
        if tag.get_text(strip=True):
            continue
        if tag.find(_MEDIA) is not None:
            continue
        tag.decompose()

    return soup


def drop_all(tags: list[Tag]) -> None:
    """Decompose tags, skipping ones already destroyed with an ancestor."""
    for tag in tags:
        if tag.decomposed:
            continue
        tag.decompose()


def _promote_lazy_src(tag: Tag) -> None:
    if tag.name != "img" or tag.get("src"):
        return
    for attr in ("data-src", "data-original", "data-lazy-src"):
        value = tag.get(attr)
        if value:
            tag["src"] = value
            return


def _clean_attributes(tag: Tag, base_url: str) -> None:
    allowed = GLOBAL_ATTRS | TAG_ATTRS.get(tag.name, set())
    for attr in list(tag.attrs):
        if attr not in allowed:
            del tag[attr]
            continue
        if attr == "class":
            classes = [c for c in tag.get("class", []) if _KEEP_CLASS.match(c)]
            if classes:
                tag["class"] = classes
            else:
                del tag[attr]
            continue
        if attr in URL_ATTRS:
            url = safe_url(tag.get(attr), base_url)
            if url is None:
                del tag[attr]
            else:
                tag[attr] = url


def safe_url(value, base_url: str) -> str | None:
    """Resolve value against base_url; None unless it is http(s) or mailto."""
    if not isinstance(value, str):
        return None
    value = _URL_CONTROL.sub("", value).strip()
    if not value:
        return None
    try:
        url = urljoin(base_url, value)
        scheme = urlparse(url).scheme.lower()
    except ValueError:
        return None
    if scheme not in SAFE_SCHEMES:
        return None
    return url


def fragment_text(soup: BeautifulSoup) -> str:
    """Flatten sanitized content to whitespace-normalized text.

    Block elements start new lines; runs of spaces collapse to one space
    and blank lines are dropped.
    """
    work = BeautifulSoup(soup.decode(), "html.parser")
    for node in work.find_all(string=True):
        if node.find_parent("pre") is None:
            node.replace_with(_WHITESPACE.sub(" ", str(node)))
    for tag in work.find_all(BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    for cell in work.find_all(["td", "th"]):
        cell.insert_after(" ")
    lines = (" ".join(line.split()) for line in work.get_text().splitlines())
    return "\n".join(line for line in lines if line)


def inner_text(tag: Tag) -> str:
    """Text of a node with whitespace collapsed, used for scoring."""
    return " ".join(tag.get_text().split())

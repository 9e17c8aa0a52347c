"""
Main-content isolation strategies.

Each strategy takes raw page HTML and returns an HTML fragment holding
the main content region, or None when it cannot find one:
1. density: readability-style paragraph scoring over BeautifulSoup (default)
2. readability: readability-lxml, the Python port of Arc90 readability
3. trafilatura: trafilatura's HTML output

Strategies do not sanitize; the Extractor does that for every result.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from bs4 import BeautifulSoup, Tag
from readability import Document
from readability.readability import Unparseable
import trafilatura

from ..config import ExtractConfig
from .sanitize import drop_all, inner_text

logger = logging.getLogger(__name__)


class ExtractionStrategy(Protocol):
    name: str

    def extract_content(self, html: str, base_url: str) -> str | None:
        ...


BOILERPLATE_TAGS = [
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "object",
    "embed",
    "svg",
    "canvas",
    "form",
    "button",
    "input",
    "select",
    "textarea",
    "nav",
    "aside",
    "footer",
    "header",
    "menu",
    "dialog",
    "link",
    "meta",
]
BOILERPLATE_ROLES = {"navigation", "banner", "complementary", "contentinfo", "menu", "menubar", "dialog", "alert"}

UNLIKELY = re.compile(
    r"-ad-|^ad$|^ads?[-_]|[-_]ads?$|advert|banner|breadcrumb|combx|comment|community|cookie|"
    r"disqus|footer|gdpr|masthead|menu|modal|navbar|nav-|pager|pagination|popup|promo|"
    r"related|remark|replies|rss|share|sharing|shoutbox|sidebar|skyscraper|social|sponsor|"
    r"subscribe|newsletter|widget",
    re.IGNORECASE,
)
MAYBE_CANDIDATE = re.compile(r"and|article|body|column|content|main|shadow", re.IGNORECASE)
POSITIVE = re.compile(
    r"article|body|content|entry|hentry|h-entry|main|page|post|text|blog|story",
    re.IGNORECASE,
)
NEGATIVE = re.compile(
    r"-ad-|hidden|^hid$|banner|combx|comment|com-|contact|foot|footer|footnote|gdpr|masthead|"
    r"media|meta|outbrain|promo|related|scroll|share|shoutbox|sidebar|skyscraper|sponsor|"
    r"shopping|tags|tool|widget",
    re.IGNORECASE,
)
SENTENCE_END = re.compile(r"\.( |$)")

PARAGRAPH_TAGS = ["p", "pre", "td", "blockquote", "div"]
# A div holding none of these is scored like a paragraph.
DIV_BLOCK_CHILDREN = ["a", "blockquote", "dl", "div", "img", "ol", "p", "pre", "table", "ul"]
PROTECTED_TAGS = {"html", "body", "article", "main"}

TAG_PRIOR = {
    "article": 10.0,
    "main": 10.0,
    "section": 3.0,
    "div": 5.0,
    "pre": 3.0,
    "td": 3.0,
    "blockquote": 3.0,
    "address": -3.0,
    "ol": -3.0,
    "ul": -3.0,
    "dl": -3.0,
    "dd": -3.0,
    "dt": -3.0,
    "li": -3.0,
    "form": -3.0,
    "h1": -5.0,
    "h2": -5.0,
    "h3": -5.0,
    "h4": -5.0,
    "h5": -5.0,
    "h6": -5.0,
    "th": -5.0,
}


def class_weight(tag: Tag) -> float:
    """Score a node's class and id against content/boilerplate hints."""
    weight = 0.0
    classes = " ".join(tag.get("class", []))
    ident = str(tag.get("id", ""))
    for hint in (classes, ident):
        if not hint:
            continue
        if NEGATIVE.search(hint):
            weight -= 25
        if POSITIVE.search(hint):
            weight += 25
    return weight


def link_density(tag: Tag) -> float:
    text_length = len(inner_text(tag))
    if text_length == 0:
        return 0.0
    link_length = sum(len(inner_text(a)) for a in tag.find_all("a"))
    return link_length / text_length


class DensityStrategy:
    """Readability-style content scoring.

    Paragraph-like nodes push a score onto their parent and, halved, onto
    their grandparent. Containers start from a prior based on their tag
    and class/id, and the final score is discounted by link density.
    The best container plus any strong siblings is the content region.
    """

    name = "density"

    def __init__(self, min_paragraph_chars: int = 25):
        self.min_paragraph_chars = min_paragraph_chars

    def extract_content(self, html: str, base_url: str) -> str | None:
        soup = BeautifulSoup(html, "html.parser")
        self._strip_boilerplate(soup)

        scores, nodes = self._score(soup)
        if not scores:
            return None

        for key, node in nodes.items():
            scores[key] *= 1 - link_density(node)

        top_key = max(scores, key=lambda k: scores[k])
        top = nodes[top_key]
        top_score = scores[top_key]
        logger.debug("Top candidate <%s> scored %.1f", top.name, top_score)

        wrapper = soup.new_tag("div")
        for node in self._collect_siblings(top, top_score, scores):
            wrapper.append(node)
        self._clean_conditionally(wrapper)
        return str(wrapper)

    def _strip_boilerplate(self, soup: BeautifulSoup) -> None:
        drop_all(soup.find_all(BOILERPLATE_TAGS))
        doomed = []
        for tag in soup.find_all(True):
            if tag.name in PROTECTED_TAGS:
                continue
            role = str(tag.get("role", "")).lower()
            if role in BOILERPLATE_ROLES or tag.get("aria-hidden") == "true" or tag.has_attr("hidden"):
                doomed.append(tag)
                continue
            hint = " ".join(tag.get("class", [])) + " " + str(tag.get("id", ""))
            if UNLIKELY.search(hint) and not MAYBE_CANDIDATE.search(hint):
                doomed.append(tag)
        drop_all(doomed)

    def _score(self, soup: BeautifulSoup) -> tuple[dict[int, float], dict[int, Tag]]:
        scores: dict[int, float] = {}
        nodes: dict[int, Tag] = {}
        for node in soup.find_all(PARAGRAPH_TAGS):
            if node.name == "div" and node.find(DIV_BLOCK_CHILDREN) is not None:
                continue
            if node.find_parent("pre") is not None:
                continue
            text = inner_text(node)
            if len(text) < self.min_paragraph_chars:
                continue

            content_score = 1 + text.count(",") + min(len(text) / 100, 3)
            ancestors = (node.parent, node.parent.parent if node.parent is not None else None)
            for divider, ancestor in enumerate(ancestors, start=1):
                if not isinstance(ancestor, Tag) or isinstance(ancestor, BeautifulSoup):
                    continue
                key = id(ancestor)
                if key not in scores:
                    scores[key] = TAG_PRIOR.get(ancestor.name, 0.0) + class_weight(ancestor)
                    nodes[key] = ancestor
                scores[key] += content_score / divider
        return scores, nodes

    def _collect_siblings(self, top: Tag, top_score: float, scores: dict[int, float]) -> list[Tag]:
        parent = top.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return [top]

        threshold = max(10.0, top_score * 0.2)
        selected = []
        for sibling in parent.find_all(True, recursive=False):
            if sibling is top:
                selected.append(sibling)
                continue
            score = scores.get(id(sibling))
            if score is not None and score >= threshold:
                selected.append(sibling)
                continue
            if sibling.name == "p":
                text = inner_text(sibling)
                density = link_density(sibling)
                if len(text) > 80 and density < 0.25:
                    selected.append(sibling)
                elif 0 < len(text) <= 80 and density == 0 and SENTENCE_END.search(text):
                    selected.append(sibling)
        return selected

    def _clean_conditionally(self, root: Tag) -> None:
        """Drop link-heavy or negatively weighted blocks left inside the region."""
        doomed = []
        for node in root.find_all(["div", "section", "ul", "ol", "table"]):
            if node.find("pre") is not None or node.find_parent("pre") is not None:
                continue
            weight = class_weight(node)
            if weight < 0:
                doomed.append(node)
                continue
            text = inner_text(node)
            if text.count(",") >= 10:
                continue
            density = link_density(node)
            if (weight < 25 and density > 0.5) or (weight >= 25 and density > 0.75):
                doomed.append(node)
        drop_all(doomed)


class ReadabilityStrategy:
    """Content isolation via readability-lxml."""

    name = "readability"

    def extract_content(self, html: str, base_url: str) -> str | None:
        try:
            return Document(html, url=base_url).summary(html_partial=True)
        except (Unparseable, ValueError) as exc:
            logger.debug("readability could not parse %s: %s", base_url, exc)
            return None


class TrafilaturaStrategy:
    """Content isolation via trafilatura's HTML output."""

    name = "trafilatura"

    def extract_content(self, html: str, base_url: str) -> str | None:
        return trafilatura.extract(
            html,
            url=base_url,
            output_format="html",
            include_comments=False,
            include_formatting=True,
            include_links=True,
            include_images=True,
        )


def build_strategy(name: str, cfg: ExtractConfig) -> ExtractionStrategy | None:
    """Get the strategy for a given name.

    Args:
        name: "density", "readability" or "trafilatura"
        cfg: Extraction settings passed to strategies that take them

    Returns:
        The strategy instance, or None if the name is unrecognized
    """
    if name == "density":
        return DensityStrategy(min_paragraph_chars=cfg.min_paragraph_chars)
    if name == "readability":
        return ReadabilityStrategy()
    if name == "trafilatura":
        return TrafilaturaStrategy()
    return None

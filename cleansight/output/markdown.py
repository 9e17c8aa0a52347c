"""
HTML to markdown conversion for article content.

Built on markdownify's structural mapping (ATX headings, "-" bullets,
"*"/"**" emphasis, inline links and images). Before the default mapping
handles a node, an ordered list of rules is consulted and the first rule
whose tag matches produces the node's markdown on its own:
1. <pre>  -> fenced code block, text kept verbatim
2. <code> -> `inline code`
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Callable

from bs4 import BeautifulSoup, Tag
from markdownify import MarkdownConverter

_FENCE_BLOCK = re.compile(r"(^[ \t]*```.*?^[ \t]*```[ \t]*$)", re.MULTILINE | re.DOTALL)
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class MarkdownRule:
    """A per-node override of the default conversion.

    Attributes:
        name: Identifier used in logs and tests
        tags: Tag names the rule applies to
        replacement: Builds the markdown for a matching node
    """

    name: str
    tags: frozenset[str]
    replacement: Callable[[Tag], str]

    def matches(self, node: Tag) -> bool:
        return node.name in self.tags


def _code_language(node: Tag) -> str:
    candidates = [node]
    code = node.find("code")
    if isinstance(code, Tag):
        candidates.append(code)
    for tag in candidates:
        for cls in tag.get("class", []):
            for prefix in ("language-", "lang-"):
                if cls.startswith(prefix):
                    return cls[len(prefix):]
    return ""


def fenced_pre(node: Tag) -> str:
    code = node.get_text()
    if code.startswith("\n"):
        code = code[1:]
    code = code.rstrip("\n")
    return f"\n\n```{_code_language(node)}\n{code}\n```\n\n"


def inline_code(node: Tag) -> str:
    text = node.get_text()
    if not text:
        return ""
    return f"`{text}`"


DEFAULT_RULES: tuple[MarkdownRule, ...] = (
    MarkdownRule(name="fenced_pre", tags=frozenset({"pre"}), replacement=fenced_pre),
    MarkdownRule(name="inline_code", tags=frozenset({"code"}), replacement=inline_code),
)


class ArticleMarkdownConverter(MarkdownConverter):
    """markdownify converter that consults an ordered rule list first."""

    def __init__(self, rules: tuple[MarkdownRule, ...] = DEFAULT_RULES, **options):
        options.setdefault("heading_style", "atx")
        options.setdefault("bullets", "-")
        options.setdefault("strong_em_symbol", "*")
        super().__init__(**options)
        self.rules = rules

    def process_tag(self, node, *args, **kwargs):
        for rule in self.rules:
            if rule.matches(node):
                return rule.replacement(node)
        return super().process_tag(node, *args, **kwargs)


def html_to_markdown(html: str, rules: tuple[MarkdownRule, ...] = DEFAULT_RULES) -> str:
    """Convert an HTML fragment to markdown.

    Runs of blank lines outside fenced blocks are collapsed to one and
    leading/trailing blank lines are removed.
    """
    soup = BeautifulSoup(html, "html.parser")
    markdown = ArticleMarkdownConverter(rules=rules).convert_soup(soup)
    return _tidy(markdown)


def _tidy(markdown: str) -> str:
    parts = _FENCE_BLOCK.split(markdown)
    for i in range(0, len(parts), 2):
        parts[i] = _EXTRA_BLANK_LINES.sub("\n\n", parts[i])
    return "".join(parts).strip("\n")

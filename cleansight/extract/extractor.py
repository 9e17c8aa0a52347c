"""
Article extraction with a chain of content strategies.

The extractor reads page metadata from the full document, then tries each
configured strategy in order until one yields a content region with enough
text. Whatever strategy wins, its output is sanitized before it is stored
on the Article.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from ..config import ExtractConfig
from ..errors import ExtractionError
from ..types import Article
from .metadata import read_metadata
from .sanitize import fragment_text, inner_text, sanitize_fragment
from .strategies import ExtractionStrategy, build_strategy

logger = logging.getLogger(__name__)

MAX_EXCERPT_CHARS = 300


class Extractor:
    """Turns raw page HTML into an Article.

    Args:
        cfg: Strategy chain and thresholds
        strategies: Explicit strategy chain, overriding cfg.primary/cfg.fallback
    """

    def __init__(
        self,
        cfg: ExtractConfig | None = None,
        strategies: list[ExtractionStrategy] | None = None,
    ):
        self.cfg = cfg or ExtractConfig()
        self.strategies = strategies if strategies is not None else self._build_chain()

    def _build_chain(self) -> list[ExtractionStrategy]:
        order = [self.cfg.primary] + [name for name in self.cfg.fallback if name != self.cfg.primary]
        chain = []
        for name in order:
            strategy = build_strategy(name, self.cfg)
            if strategy is None:
                logger.warning("Unknown extraction strategy %r ignored", name)
                continue
            chain.append(strategy)
        return chain

    def extract(self, raw_html: str, base_url: str) -> Article:
        """Extract the main article from a page.

        Args:
            raw_html: Page HTML as fetched
            base_url: URL the page was served from

        Returns:
            Article with sanitized content and metadata

        Raises:
            ExtractionError: No strategy found a content region meeting
                the minimum content length
        """
        if not raw_html or not raw_html.strip():
            raise ExtractionError("Document is empty")

        metadata = read_metadata(BeautifulSoup(raw_html, "html.parser"))

        for strategy in self.strategies:
            fragment = strategy.extract_content(raw_html, base_url)
            if not fragment:
                logger.debug("Strategy %s found no content for %s", strategy.name, base_url)
                continue

            content = sanitize_fragment(fragment, base_url)
            text = fragment_text(content)
            if len(text) < self.cfg.min_content_chars:
                logger.debug(
                    "Strategy %s content too short for %s (%d chars)",
                    strategy.name,
                    base_url,
                    len(text),
                )
                continue

            excerpt = metadata.excerpt
            if not excerpt:
                first = content.find("p")
                if first is not None:
                    excerpt = inner_text(first)[:MAX_EXCERPT_CHARS] or None

            return Article(
                title=metadata.title,
                byline=metadata.byline,
                site_name=metadata.site_name,
                excerpt=excerpt,
                content_html=content.decode().strip(),
                text_content=text,
            )

        raise ExtractionError("Could not parse content from the provided URL")

"""
CleanSight - readable web content for AI agents.

This package fetches a web page, extracts its main article (dropping
navigation, ads and scripts), and re-emits it as plain text, markdown,
sanitized HTML or JSON metadata, with response caching.

Main entry points are the `cleansight serve` and `cleansight fetch`
CLI commands.

Example:
    $ cleansight fetch https://example.com/article --format markdown
"""

__all__ = ["__version__", "Article", "Extractor", "MemoryCache", "Pipeline", "transcode"]
__version__ = "0.1.0"

from .cache import MemoryCache
from .extract import Extractor
from .output import transcode
from .pipeline import Pipeline
from .types import Article

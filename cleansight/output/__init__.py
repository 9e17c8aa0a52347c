"""
Output encodings.

This package projects extracted articles into text, markdown,
html and json payloads.
"""

from .markdown import ArticleMarkdownConverter, MarkdownRule, html_to_markdown
from .transcoder import MEDIA_TYPES, transcode

__all__ = [
    "ArticleMarkdownConverter",
    "MarkdownRule",
    "html_to_markdown",
    "MEDIA_TYPES",
    "transcode",
]

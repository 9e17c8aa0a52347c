"""
Readable-content extraction.

This package parses raw HTML, isolates the main article with a pluggable
strategy, and sanitizes the result.
"""

from .extractor import Extractor
from .strategies import DensityStrategy, ReadabilityStrategy, TrafilaturaStrategy, build_strategy

__all__ = [
    "Extractor",
    "DensityStrategy",
    "ReadabilityStrategy",
    "TrafilaturaStrategy",
    "build_strategy",
]

"""
Outbound page fetching.

This package performs bounded-time HTTP retrieval and classifies
transport failures for the pipeline.
"""

from .fetcher import HttpFetcher

__all__ = ["HttpFetcher"]

"""
In-memory response cache.

Entries hold already-transcoded payloads keyed by "{url}:{format}".
They expire lazily on read once their TTL has elapsed, and the least
recently used entry is dropped when the store is full. All operations
are guarded by a single lock so the cache can be shared by concurrent
requests.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
import threading
import time
from typing import Callable

from .types import Payload


def cache_key(url: str, fmt: str) -> str:
    """Build the cache key for a request.

    The URL is used verbatim: trailing slashes, default ports and query
    order all produce distinct keys.
    """
    return f"{url}:{fmt}"


@dataclass
class CacheEntry:
    payload: Payload
    expires_at: float


class MemoryCache:
    """Thread-safe TTL cache with least-recently-used eviction.

    Attributes:
        ttl_seconds: Default lifetime for entries stored without an explicit ttl
        max_entries: Capacity of the store
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Payload | None:
        """Return the live payload for key, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry.payload

    def set(self, key: str, payload: Payload, ttl: float | None = None) -> None:
        """Store payload under key, replacing any previous entry."""
        lifetime = self.ttl_seconds if ttl is None else ttl
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(payload=payload, expires_at=self._clock() + lifetime)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

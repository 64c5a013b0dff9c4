# app/page_cache.py
from __future__ import annotations

from typing import Dict, Optional

from cachetools import LRUCache

from . import metrics
from .query import QueryResult, QueryState
from .settings import settings


class PageCache:
    """Per-process LRU cache of pipeline results keyed by `QueryState`.

    The character list is fixed once loaded, so entries never go stale on their own;
    the whole cache is dropped whenever the dataset is (re)loaded.
    """

    def __init__(self, capacity: int) -> None:
        """Initialize the cache.

        Args:
            capacity: Maximum number of query results to store (LRU-evicted).
        """
        self._cap = capacity
        self._store: LRUCache = LRUCache(maxsize=capacity)
        self._hits = 0
        self._misses = 0

    def get(self, key: QueryState) -> Optional[QueryResult]:
        """Return the cached result for ``key`` or None (counts hit/miss)."""
        val = self._store.get(key)
        if val is None:
            self._misses += 1
            metrics.record_cache_miss()
            return None
        self._hits += 1
        metrics.record_cache_hit()
        return val

    def put(self, key: QueryState, value: QueryResult) -> None:
        """Insert or refresh an entry; the LRU entry is evicted past capacity."""
        self._store[key] = value

    def invalidate_all(self) -> None:
        """Clear every entry."""
        self._store.clear()

    def stats(self) -> Dict[str, int]:
        """Return simple stats for observability."""
        return {
            "size": len(self._store),
            "capacity": self._cap,
            "hits": self._hits,
            "misses": self._misses,
        }


# Singleton configured from env (tweak via RESULT_CACHE_MAX)
page_cache = PageCache(capacity=settings.RESULT_CACHE_MAX)

"""In-memory cache for search results.

Entries expire lazily: a stale entry is only noticed (and removed) when it is
read. Once the cache grows past its capacity the earliest inserted entry is
evicted, regardless of how recently it was read.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_ENTRIES = 100


@dataclass
class CacheEntry:
    data: Any
    timestamp: float


class SearchCache:
    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def cache_key(query: str, limit: int, offset: int) -> str:
        return f"{query.lower().strip()}-{limit}-{offset}"

    def get(self, query: str, limit: int, offset: int) -> Any | None:
        """Return cached data, or None on a miss (absent or expired)."""
        key = self.cache_key(query, limit, offset)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp > self.ttl:
                del self._entries[key]
                return None
            return entry.data

    def set(self, query: str, limit: int, offset: int, data: Any) -> None:
        key = self.cache_key(query, limit, offset)
        with self._lock:
            self._entries[key] = CacheEntry(data=data, timestamp=self._clock())
            if len(self._entries) > self.max_entries:
                oldest, _ = self._entries.popitem(last=False)
                logger.debug("Search cache full, evicted %s", oldest)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

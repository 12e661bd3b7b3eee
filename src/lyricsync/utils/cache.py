"""In-memory LRU cache for resolved lyrics."""

from collections import OrderedDict
from typing import Any, Dict, Generic, Hashable, List, Optional, TypeVar

from ..config import CACHE_CAPACITY
from .logging import get_logger
from .validation import validate_capacity

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class LyricsCache(Generic[K, V]):
    """Bounded least-recently-used store.

    Both ``get`` and ``put`` count as an access. Inserting past capacity
    evicts exactly one entry, the least recently accessed one. A missing
    key is always a plain miss.

    Not thread-safe: the cache is owned by one resolver running on one
    event loop.
    """

    def __init__(self, capacity: int = CACHE_CAPACITY):
        self.capacity = validate_capacity(capacity)
        self._entries: "OrderedDict[K, V]" = OrderedDict()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: K) -> Optional[V]:
        """Return the entry for ``key`` and mark it most recently used."""
        try:
            self._entries.move_to_end(key)
        except KeyError:
            self.misses += 1
            return None
        self.hits += 1
        return self._entries[key]

    def put(self, key: K, value: V) -> None:
        """Insert or refresh ``key``, evicting the LRU entry on overflow."""
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = value

        while len(self._entries) > self.capacity:
            evicted, _ = self._entries.popitem(last=False)
            self.evictions += 1
            logger.debug(f"Evicted cached lyrics: {evicted}")

    def delete(self, key: K) -> bool:
        """Drop ``key``; returns False if it was not cached."""
        if key not in self._entries:
            return False
        del self._entries[key]
        return True

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> List[K]:
        """Keys from least to most recently used."""
        return list(self._entries.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "size": len(self._entries),
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }

# ----------------------
# file   : blog/ssr/cache.py
# function: render cache bounded by entry count and time-to-live (LRU eviction)
# ----------------------

import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple


class LRUCache:
    """
    Rendered markup keyed by url. Expired entries are dropped on access;
    the least recently used entry goes first once ``max_entries`` is hit.
    """

    def __init__(self, max_entries: int = 1000, ttl: float = 60 * 15, clock: Callable[[], float] = time.monotonic):
        self._entries: "OrderedDict[str, Tuple[float, str]]" = OrderedDict()
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        return value

    def set(self, key: str, value: str) -> None:
        if key in self._entries:
            self._entries.move_to_end(key)
        self._entries[key] = (self._clock() + self.ttl, value)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

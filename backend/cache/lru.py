from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any

DEFAULT_MAX_SIZE = 20


@dataclass
class QueryCache:
    """
    Bounded LRU cache of serialized query results (bbox key -> JSON string).

    Both a successful `get` and a `put` count as a use. `has` is a plain membership
    test and does not touch recency or the hit/miss counters.

    Entries never expire: the dataset they were computed from is immutable for the
    lifetime of the process.
    """

    max_size: int = DEFAULT_MAX_SIZE
    _entries: "OrderedDict[str, str]" = field(default_factory=OrderedDict, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)
    _hits: int = field(default=0, repr=False)
    _misses: int = field(default=0, repr=False)

    def __post_init__(self) -> None:
        if int(self.max_size) < 1:
            raise ValueError(f"max_size must be >= 1, got {self.max_size}")
        self.max_size = int(self.max_size)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> str | None:
        with self._lock:
            payload = self._entries.get(key)
            if payload is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return payload

    def put(self, key: str, payload: str) -> None:
        with self._lock:
            self._entries[key] = payload
            self._entries.move_to_end(key)
            if len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[str]:
        """Keys from least to most recently used (used by tests/diagnostics)."""
        with self._lock:
            return list(self._entries.keys())

    def stats(self) -> dict[str, Any]:
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._entries),
                "maxSize": self.max_size,
            }

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0

from __future__ import annotations

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

_DEFAULT_TTL = 600  # 10 minutes


def make_key(request_dict: dict) -> str:
    normalized = json.dumps(request_dict, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    created_at: float


class ResultCache:
    """
    Time-boxed memo of computed responses, keyed by request parameters.

    Entries are replaced whole under a lock, so concurrent readers see
    either the previous entry or the new one. Expired entries are dropped
    on the next lookup.
    """

    def __init__(self, ttl_seconds: float = _DEFAULT_TTL, clock: Callable[[], float] = time.time) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, request_dict: dict) -> Any | None:
        key = make_key(request_dict)
        with self._lock:
            entry = self._entries.get(key)
            if entry and self._clock() - entry.created_at < self.ttl_seconds:
                self._hits += 1
                return entry.value
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def set(self, request_dict: dict, value: Any) -> None:
        key = make_key(request_dict)
        entry = CacheEntry(value=value, created_at=self._clock())
        with self._lock:
            self._entries[key] = entry

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
                "ttl_seconds": self.ttl_seconds,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0


class NullCache(ResultCache):
    """A cache that never stores anything."""

    def __init__(self) -> None:
        super().__init__(ttl_seconds=0)

    def set(self, request_dict: dict, value: Any) -> None:
        return None

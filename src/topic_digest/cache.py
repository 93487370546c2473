from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    payload: Any
    expires_at: float


def normalize_topic(topic: str) -> str:
    return (topic or "").strip().lower()


class ResponseCache:
    """Topic-keyed response cache with TTL expiry and an LRU capacity bound.

    Safe for concurrent get/put from any thread. Expired entries are not
    swept; they are replaced on the next put or dropped by LRU eviction.
    There is no single-flight: concurrent misses each compute and the last
    put wins.
    """

    def __init__(self, max_entries: int = 1024, clock: Callable[[], float] = time.time):
        self.max_entries = max(1, int(max_entries))
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.stats = {"hits": 0, "misses": 0, "evictions": 0}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, topic: str) -> Any | None:
        key = normalize_topic(topic)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now > entry.expires_at:
                self.stats["misses"] += 1
                logger.debug("cache miss for %r", key)
                return None
            self._entries.move_to_end(key)
            self.stats["hits"] += 1
        logger.debug("cache hit for %r", key)
        return entry.payload

    def put(self, topic: str, payload: Any, ttl_seconds: int) -> None:
        key = normalize_topic(topic)
        entry = CacheEntry(payload=payload, expires_at=self._clock() + max(1, int(ttl_seconds)))
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self.stats["evictions"] += 1
                logger.debug("cache evicted %r", evicted)

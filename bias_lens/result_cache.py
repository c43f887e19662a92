"""
In-memory cache of analysis reports.

Benefits:
- Cost savings: a page already analyzed is not sent to the paid API again
- Bounded: entries expire after max_age and the cache never holds more than capacity

Eviction runs on writes only.  Between writes an entry may outlive max_age
slightly; reads do not check age.  Contents are not persisted: a new process
starts with an empty cache.
"""

import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from .schemas import AnalysisReport, CacheEntry
from .logger import get_module_logger

logger = get_module_logger("result_cache")

DEFAULT_MAX_AGE = 30 * 60  # seconds
DEFAULT_CAPACITY = 100


class ResultCache:
    """
    Report cache with max-age expiry and insertion-order eviction.

    The OrderedDict keeps keys in insertion order, so the oldest entry is
    always first.  One lock covers every read and mutation: concurrent
    flows must never see a put without its eviction.
    """

    def __init__(
        self,
        max_age: float = DEFAULT_MAX_AGE,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], float] = time.time
    ):
        """
        Args:
            max_age: Seconds an entry stays valid
            capacity: Maximum number of entries after any put
            clock: Time source in seconds (tests inject a fake one)
        """
        self.max_age = max_age
        self.capacity = capacity
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[AnalysisReport]:
        """Return the cached report for key, or None on a miss."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        logger.info(f"Cache hit for key: {key}")
        return entry.report

    def put(self, key: str, report: AnalysisReport) -> None:
        """Store report under key, then evict."""
        with self._lock:
            # A re-put counts as a fresh insertion
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(report=report, stored_at=self._clock())
            self._evict()
        logger.debug(f"Cached report with key: {key}")

    def evict(self) -> None:
        """Drop expired entries, then the oldest one if over capacity."""
        with self._lock:
            self._evict()

    def _evict(self) -> None:
        # Caller holds the lock
        now = self._clock()
        expired = [key for key, entry in self._entries.items()
                   if now - entry.stored_at > self.max_age]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"Evicted {len(expired)} expired entries")

        # At most one entry is added per put, so one removal restores the bound
        if len(self._entries) > self.capacity:
            oldest_key, _ = self._entries.popitem(last=False)
            logger.info(f"Evicted oldest entry: {oldest_key}")

    def clear(self) -> int:
        """Remove every entry. Returns the number removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {count} cached reports")
        return count

    def keys(self) -> list[str]:
        """Keys from oldest to newest insertion."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

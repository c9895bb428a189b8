"""Short-lived cache of parsed line changes per table range"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from tablediff.domain.models.line_change import LineChange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiffCacheKey:
    """Identifies a table range inside a file at a given revision"""

    file_path: str
    start_line: int
    end_line: int
    revision_range: Optional[str] = None

    def __str__(self) -> str:
        key = f"{self.file_path}:{self.start_line}:{self.end_line}"
        if self.revision_range:
            key = f"{key}@{self.revision_range}"
        return key


class DiffCache:
    """TTL cache for line changes

    Entries older than ttl_seconds are treated as missing and evicted when
    read. A ttl of 0 disables reuse entirely.
    """

    def __init__(self, ttl_seconds: float = 5.0, clock: Callable[[], float] = time.monotonic):
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[DiffCacheKey, Tuple[float, List[LineChange]]] = {}
        self._lock = threading.Lock()

    def get(self, key: DiffCacheKey) -> Optional[List[LineChange]]:
        """Return cached changes, or None when missing or expired"""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, changes = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            logger.debug(f"Cache hit: {key}")
            return list(changes)

    def put(self, key: DiffCacheKey, changes: List[LineChange]) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), list(changes))

    def invalidate(self, key: Optional[DiffCacheKey] = None) -> None:
        """Drop one entry, or everything when key is None"""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def invalidate_file(self, file_path: str) -> int:
        """Drop every entry belonging to a file

        Returns:
            Number of entries removed
        """
        with self._lock:
            stale = [key for key in self._entries if key.file_path == file_path]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cache entries for {file_path}")
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

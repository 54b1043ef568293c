"""
Content Cache

Keeps raw file bytes keyed by (path, modification time) so unchanged files
are not re-read across load cycles.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Optional

from .utils import CacheStats

logger = logging.getLogger(__name__)


class ContentCache:
    """
    Thread-safe byte cache with mtime-based invalidation.

    One entry is kept per path. Storing a newer modification time for a
    path supersedes the older bytes; a lookup with any other modification
    time is a miss. The cache is unbounded unless ``max_entries`` is given,
    in which case least recently used paths are evicted.

    Usage:
        cache = ContentCache()
        data = cache.get(path, mtime)
        if data is None:
            data = read(path)
            cache.put(path, mtime, data)
    """

    def __init__(self, max_entries: Optional[int] = None):
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive or None")
        self._max_entries = max_entries
        self._entries: OrderedDict[str, tuple[float, bytes]] = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats()

    @property
    def max_entries(self) -> Optional[int]:
        return self._max_entries

    @property
    def stats(self) -> CacheStats:
        """Copy of the current statistics."""
        with self._lock:
            return self._stats.copy()

    def get(self, path: str, modified_at: float) -> Optional[bytes]:
        """Return cached bytes for ``path`` if they were stored for ``modified_at``."""
        with self._lock:
            stored = self._entries.get(path)
            if stored is None or stored[0] != modified_at:
                self._stats.record_miss()
                return None
            self._entries.move_to_end(path)
            self._stats.record_hit()
            return stored[1]

    def put(self, path: str, modified_at: float, content: bytes) -> None:
        """
        Store bytes for ``path`` at ``modified_at``.

        An older modification time than the one already stored is ignored
        so a slow cycle cannot regress the entry.
        """
        with self._lock:
            stored = self._entries.get(path)
            if stored is not None:
                if modified_at < stored[0]:
                    logger.debug(f"Ignoring stale cache put for {path}")
                    return
                if modified_at > stored[0]:
                    self._stats.record_supersession()
            self._entries[path] = (modified_at, content)
            self._entries.move_to_end(path)
            self._stats.record_store()

            if self._max_entries is not None:
                while len(self._entries) > self._max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    self._stats.record_eviction()
                    logger.debug(f"Evicted cached content: {evicted}")

    def invalidate(self, path: str) -> bool:
        """Drop the entry for ``path``. Returns True if one existed."""
        with self._lock:
            return self._entries.pop(path, None) is not None

    def clear(self) -> None:
        """Release all cached bytes and reset statistics."""
        with self._lock:
            self._entries.clear()
            self._stats.reset()

    def modified_at(self, path: str) -> Optional[float]:
        """Modification time stored for ``path``, if any."""
        with self._lock:
            stored = self._entries.get(path)
            return stored[0] if stored is not None else None

    def total_bytes(self) -> int:
        with self._lock:
            return sum(len(content) for _, content in self._entries.values())

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return f"ContentCache(entries={len(self)}, max_entries={self._max_entries})"

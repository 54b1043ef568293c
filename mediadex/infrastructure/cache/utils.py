"""
Cache Utilities

Statistics shared by the in-memory caches.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CacheStats:
    """
    Track cache hit/miss statistics.

    Not synchronized on its own; owners update it under their lock.
    """

    hits: int = 0
    misses: int = 0
    stores: int = 0
    supersessions: int = 0
    evictions: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def record_hit(self) -> None:
        self.hits += 1

    def record_miss(self) -> None:
        self.misses += 1

    def record_store(self) -> None:
        self.stores += 1

    def record_supersession(self) -> None:
        self.supersessions += 1

    def record_eviction(self) -> None:
        self.evictions += 1

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.stores = 0
        self.supersessions = 0
        self.evictions = 0

    def copy(self) -> "CacheStats":
        return CacheStats(
            hits=self.hits,
            misses=self.misses,
            stores=self.stores,
            supersessions=self.supersessions,
            evictions=self.evictions,
        )

    def __repr__(self) -> str:
        return (
            f"CacheStats(hits={self.hits}, misses={self.misses}, "
            f"stores={self.stores}, evictions={self.evictions}, "
            f"hit_rate={self.hit_rate:.2%})"
        )

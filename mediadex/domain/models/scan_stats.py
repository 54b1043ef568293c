"""
Scan statistics for a single load cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from ..exceptions import DirectoryListError, FileAccessError


@dataclass
class ScanStats:
    """Counters collected while scanning one root."""

    files_seen: int = 0
    files_indexed: int = 0
    files_excluded: int = 0
    content_reads: int = 0
    cache_hits: int = 0
    errors: List[FileAccessError] = field(default_factory=list)
    tree_errors: List[DirectoryListError] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def files_skipped(self) -> int:
        """Files dropped because of an access error."""
        return len(self.errors)

    def __repr__(self) -> str:
        return (
            f"ScanStats(seen={self.files_seen}, indexed={self.files_indexed}, "
            f"excluded={self.files_excluded}, reads={self.content_reads}, "
            f"cache_hits={self.cache_hits}, errors={len(self.errors)})"
        )

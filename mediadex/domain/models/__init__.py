"""
Domain Models Module

Contains all domain models for mediadex.
"""

from .media_entry import MediaEntry, media_kind
from .directory_node import DirectoryNode
from .scan_stats import ScanStats
from .snapshot import Categories, IndexerState, Snapshot

__all__ = [
    # Entries
    "MediaEntry",
    "media_kind",
    # Tree
    "DirectoryNode",
    # Snapshot
    "Categories",
    "IndexerState",
    "ScanStats",
    "Snapshot",
]

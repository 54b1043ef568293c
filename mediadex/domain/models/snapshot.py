"""
Snapshot Domain Model

The immutable, versioned result of one load cycle: categorized media
entries plus the directory tree of the root. Exactly one snapshot is
current for an indexer at any time.
"""

from __future__ import annotations

import enum
import os
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .directory_node import DirectoryNode
from .media_entry import MediaEntry, media_kind
from .scan_stats import ScanStats


class IndexerState(enum.Enum):
    """Lifecycle state of an indexer."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


Categories = Mapping[str, Tuple[MediaEntry, ...]]


def _is_under(path: str, directory: str) -> bool:
    directory = directory.rstrip(os.sep) or os.sep
    if path == directory:
        return True
    prefix = directory if directory.endswith(os.sep) else directory + os.sep
    return path.startswith(prefix)


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable view of a root at one generation.

    ``categories`` is ordered by label and never contains an empty
    category; each category is ordered newest first with case-insensitive
    path as tie-break.
    """

    root: str
    generation: int
    categories: Categories = field(hash=False)
    tree: Optional[DirectoryNode] = field(default=None, hash=False)
    stats: ScanStats = field(default_factory=ScanStats, compare=False, repr=False)
    created_at: float = field(default_factory=time.time, compare=False)

    def __post_init__(self):
        cleaned = {
            label: tuple(entries)
            for label, entries in self.categories.items()
            if entries
        }
        object.__setattr__(self, "categories", MappingProxyType(cleaned))

    @property
    def category_labels(self) -> List[str]:
        return list(self.categories)

    @property
    def entry_count(self) -> int:
        return sum(len(entries) for entries in self.categories.values())

    @property
    def is_empty(self) -> bool:
        return not self.categories

    def get(self, label: str) -> Tuple[MediaEntry, ...]:
        """Entries of a category, empty tuple if the category is absent."""
        return self.categories.get(label, ())

    def entries(self) -> Iterator[MediaEntry]:
        """Iterate every entry, category by category."""
        for entries in self.categories.values():
            yield from entries

    def find(self, path: str) -> Optional[MediaEntry]:
        for entry in self.entries():
            if entry.path == path:
                return entry
        return None

    def filter_by_directory(self, directory: str) -> Dict[str, Tuple[MediaEntry, ...]]:
        """
        Restrict categories to entries located under ``directory``.

        Category and entry order are preserved; categories left empty are
        dropped.
        """
        directory = os.path.normpath(directory)
        filtered: Dict[str, Tuple[MediaEntry, ...]] = {}
        for label, entries in self.categories.items():
            kept = tuple(e for e in entries if _is_under(e.path, directory))
            if kept:
                filtered[label] = kept
        return filtered

    def group_by_kind(self) -> Dict[str, List[str]]:
        """Group category labels by major type, e.g. {'image': ['image/jpeg', ...]}."""
        groups: Dict[str, List[str]] = {}
        for label in self.categories:
            groups.setdefault(media_kind(label), []).append(label)
        return groups

    def summary(self) -> Dict[str, int]:
        """Entry count per category label."""
        return {label: len(entries) for label, entries in self.categories.items()}

    def __repr__(self) -> str:
        return (
            f"Snapshot(root='{self.root}', generation={self.generation}, "
            f"categories={len(self.categories)}, entries={self.entry_count})"
        )

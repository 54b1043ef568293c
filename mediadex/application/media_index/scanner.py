"""
Media Scanner Module

Walks a root recursively, classifies every file, reads size and
modification time, and loads the bytes of eager categories (images)
through the content cache.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from mediadex.domain.exceptions import FileAccessError, RootNotFoundError, ScanIOError
from mediadex.domain.models import MediaEntry, ScanStats
from mediadex.infrastructure.cache import ContentCache

from .classifier import DEFAULT_POLICY, ClassifierPolicy, classify, requires_content

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Result of scanning one root."""

    root: str
    categories: Dict[str, Tuple[MediaEntry, ...]] = field(default_factory=dict)
    stats: ScanStats = field(default_factory=ScanStats)

    @property
    def entry_count(self) -> int:
        return sum(len(entries) for entries in self.categories.values())


def sort_categories(groups: Dict[str, List[MediaEntry]]) -> Dict[str, Tuple[MediaEntry, ...]]:
    """
    Order categories by label and each category newest first.

    Ties on modification time are broken by case-insensitive path.
    Empty groups are dropped.
    """
    return {
        label: tuple(sorted(groups[label], key=MediaEntry.sort_key))
        for label in sorted(groups)
        if groups[label]
    }


class MediaScanner:
    """
    Scans a directory tree for media files.

    Features:
    - Explicit-stack traversal, output order independent of traversal order
    - Per-file errors recorded and skipped
    - Cached image bytes reused while the modification time is unchanged
    - Symlinked directories followed only on request, with cycle detection

    The scanner holds no per-scan state and may be used from several
    threads at once.
    """

    def __init__(
        self,
        policy: ClassifierPolicy = DEFAULT_POLICY,
        cache: Optional[ContentCache] = None,
        follow_symlinks: bool = False,
    ):
        """
        Initialize the scanner.

        Args:
            policy: Classification rules
            cache: Content cache for eager categories; bytes are read on
                every scan when omitted
            follow_symlinks: Descend into symlinked directories
        """
        self.policy = policy
        self.cache = cache
        self.follow_symlinks = follow_symlinks

    def scan(self, root: str) -> ScanResult:
        """
        Scan ``root`` and return its categorized entries.

        Raises:
            RootNotFoundError: ``root`` is missing or not a directory.
            ScanIOError: ``root`` itself cannot be listed.
        """
        started = time.monotonic()
        root = os.path.abspath(root)
        if not os.path.isdir(root):
            raise RootNotFoundError(root)

        stats = ScanStats()
        groups: Dict[str, List[MediaEntry]] = {}
        visited: Set[Tuple[int, int]] = set()
        if self.follow_symlinks:
            visited.add(self._identity(root))

        stack = [root]
        while stack:
            directory = stack.pop()
            try:
                entries = self._list_dir(directory)
            except OSError as e:
                if directory == root:
                    raise ScanIOError(root, e) from e
                logger.warning(f"Skipping unreadable directory {directory}: {e}")
                continue

            for entry in entries:
                if self._is_directory(entry):
                    if self.follow_symlinks and not self._first_visit(entry, visited):
                        logger.debug(f"Skipping already visited directory {entry.path}")
                        continue
                    stack.append(entry.path)
                    continue

                try:
                    is_file = entry.is_file()
                except OSError:
                    is_file = False
                if is_file:
                    self._scan_file(entry, root, stats, groups)

        result = ScanResult(root=root, categories=sort_categories(groups), stats=stats)
        stats.duration_seconds = time.monotonic() - started
        logger.debug(f"Scanned {root}: {stats}")
        return result

    def _scan_file(
        self,
        entry: os.DirEntry,
        root: str,
        stats: ScanStats,
        groups: Dict[str, List[MediaEntry]],
    ) -> None:
        stats.files_seen += 1
        label = classify(os.path.relpath(entry.path, root), self.policy)
        if label is None:
            stats.files_excluded += 1
            return

        try:
            st = entry.stat()
        except OSError as e:
            self._record_error(stats, entry.path, e)
            return

        content = None
        if requires_content(label, self.policy):
            try:
                content = self._load_content(entry.path, st.st_mtime, stats)
            except OSError as e:
                self._record_error(stats, entry.path, e)
                return

        groups.setdefault(label, []).append(MediaEntry(
            path=entry.path,
            size_bytes=st.st_size,
            modified_at=st.st_mtime,
            category=label,
            content=content,
        ))
        stats.files_indexed += 1

    def _load_content(self, path: str, modified_at: float, stats: ScanStats) -> bytes:
        if self.cache is not None:
            cached = self.cache.get(path, modified_at)
            if cached is not None:
                stats.cache_hits += 1
                return cached

        with open(path, "rb") as f:
            content = f.read()
        stats.content_reads += 1

        if self.cache is not None:
            self.cache.put(path, modified_at, content)
        return content

    def _list_dir(self, directory: str) -> List[os.DirEntry]:
        with os.scandir(directory) as it:
            return list(it)

    def _is_directory(self, entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=self.follow_symlinks)
        except OSError:
            return False

    def _first_visit(self, entry: os.DirEntry, visited: Set[Tuple[int, int]]) -> bool:
        try:
            key = self._identity(entry.path)
        except OSError:
            return False
        if key in visited:
            return False
        visited.add(key)
        return True

    @staticmethod
    def _identity(path: str) -> Tuple[int, int]:
        st = os.stat(path)
        return (st.st_dev, st.st_ino)

    @staticmethod
    def _record_error(stats: ScanStats, path: str, cause: OSError) -> None:
        error = FileAccessError(path, cause)
        stats.errors.append(error)
        logger.warning(str(error))


def scan_media(
    root: str,
    policy: ClassifierPolicy = DEFAULT_POLICY,
    cache: Optional[ContentCache] = None,
    follow_symlinks: bool = False,
) -> ScanResult:
    """Scan ``root`` with a one-off :class:`MediaScanner`."""
    return MediaScanner(policy=policy, cache=cache, follow_symlinks=follow_symlinks).scan(root)

"""
Media Index Module

Provides classification, scanning, tree building, change watching and the
indexer that ties them together.
"""

from .classifier import (
    ClassifierPolicy,
    DEFAULT_POLICY,
    classify,
    content_type,
    media_kind,
    requires_content,
)

from .scanner import (
    MediaScanner,
    ScanResult,
    scan_media,
    sort_categories,
)

from .tree_builder import build_tree

from .file_watcher import (
    ChangeEventHandler,
    ChangeSignal,
    ChangeStream,
    DirectoryWatcher,
)

from .load_cycle import LoadCycle

from .indexer import MediaIndexer

__all__ = [
    # Classifier
    "ClassifierPolicy",
    "DEFAULT_POLICY",
    "classify",
    "content_type",
    "media_kind",
    "requires_content",
    # Scanner
    "MediaScanner",
    "ScanResult",
    "scan_media",
    "sort_categories",
    # Tree
    "build_tree",
    # Watcher
    "ChangeEventHandler",
    "ChangeSignal",
    "ChangeStream",
    "DirectoryWatcher",
    # Orchestration
    "LoadCycle",
    "MediaIndexer",
]

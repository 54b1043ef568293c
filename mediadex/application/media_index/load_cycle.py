"""
Load Cycle Module

One complete Scanner + TreeBuilder run over a root, producing a Snapshot.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional

from mediadex.core.config import IndexSettings
from mediadex.domain.exceptions import DirectoryListError
from mediadex.domain.models import Snapshot
from mediadex.infrastructure.cache import ContentCache

from .classifier import ClassifierPolicy, describe_policy
from .scanner import MediaScanner
from .tree_builder import build_tree

logger = logging.getLogger(__name__)


class LoadCycle:
    """
    Builds snapshots for a root.

    The scanner runs first so a missing root fails the cycle before the
    tree is built. Instances are stateless between runs and may execute
    several cycles concurrently; they share only the content cache.
    """

    def __init__(
        self,
        settings: Optional[IndexSettings] = None,
        cache: Optional[ContentCache] = None,
    ):
        self.settings = settings or IndexSettings()
        self.cache = cache
        self.policy = ClassifierPolicy.from_settings(self.settings)
        self.scanner = MediaScanner(
            policy=self.policy,
            cache=cache,
            follow_symlinks=self.settings.follow_symlinks,
        )
        logger.debug(f"Classifier policy: {describe_policy(self.policy)}")

    def run(self, root: str, generation: int) -> Snapshot:
        """
        Scan ``root`` and build its tree.

        Raises:
            RootNotFoundError: ``root`` is missing.
            ScanIOError: ``root`` cannot be listed.
        """
        started = time.monotonic()
        result = self.scanner.scan(root)

        tree_errors: List[DirectoryListError] = []
        tree = build_tree(
            result.root,
            hidden_marker=self.settings.hidden_marker,
            follow_symlinks=self.settings.follow_symlinks,
            errors=tree_errors,
        )
        result.stats.tree_errors.extend(tree_errors)
        result.stats.duration_seconds = time.monotonic() - started

        logger.debug(
            f"Load cycle {generation} for {result.root}: "
            f"{result.entry_count} entries in {len(result.categories)} categories"
        )
        return Snapshot(
            root=result.root,
            generation=generation,
            categories=result.categories,
            tree=tree,
            stats=result.stats,
        )

"""
Directory Tree Builder

Builds the browsable directory hierarchy of a root. Only directories are
visited; hidden directories are neither listed nor descended into.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, FrozenSet, List, Optional, Tuple

from mediadex.core.constants import HIDDEN_MARKER
from mediadex.domain.exceptions import DirectoryListError
from mediadex.domain.models import DirectoryNode

logger = logging.getLogger(__name__)


def _child_directories(
    path: str,
    hidden_marker: str,
    follow_symlinks: bool,
    errors: Optional[List[DirectoryListError]],
) -> List[str]:
    """Visible child directory paths of ``path``; partial on listing errors."""
    found: List[str] = []
    try:
        with os.scandir(path) as it:
            for entry in it:
                if hidden_marker and entry.name.startswith(hidden_marker):
                    continue
                try:
                    if entry.is_dir(follow_symlinks=follow_symlinks):
                        found.append(entry.path)
                except OSError:
                    continue
    except OSError as e:
        error = DirectoryListError(path, e)
        logger.warning(str(error))
        if errors is not None:
            errors.append(error)
    return found


def _build_nodes(
    root: str,
    hidden_marker: str,
    follow_symlinks: bool,
    errors: Optional[List[DirectoryListError]],
    root_ancestors: FrozenSet[Tuple[int, int]],
) -> DirectoryNode:
    # Pre-order walk with an explicit stack, then assemble bottom-up.
    visits: List[Tuple[str, Optional[str]]] = []
    stack: List[Tuple[str, Optional[str], FrozenSet[Tuple[int, int]]]] = [(root, None, root_ancestors)]
    while stack:
        path, parent, ancestors = stack.pop()
        visits.append((path, parent))
        for child in _child_directories(path, hidden_marker, follow_symlinks, errors):
            if not follow_symlinks:
                stack.append((child, path, ancestors))
                continue
            try:
                st = os.stat(child)
            except OSError:
                continue
            key = (st.st_dev, st.st_ino)
            if key in ancestors:
                logger.debug(f"Symlink cycle at {child}")
                continue
            stack.append((child, path, ancestors | {key}))

    pending: Dict[str, List[DirectoryNode]] = {}
    node = None
    for path, parent in reversed(visits):
        children = pending.pop(path, [])
        children.sort(key=lambda child: child.path.casefold())
        node = DirectoryNode(path=path, children=tuple(children))
        if parent is not None:
            pending.setdefault(parent, []).append(node)
    return node


def build_tree(
    root: str,
    hidden_marker: str = HIDDEN_MARKER,
    follow_symlinks: bool = False,
    errors: Optional[List[DirectoryListError]] = None,
) -> Optional[DirectoryNode]:
    """
    Build the directory hierarchy below ``root``.

    Args:
        root: Directory to start from
        hidden_marker: Name prefix of directories to leave out
        follow_symlinks: Descend into symlinked directories
        errors: Receives a DirectoryListError for every unlistable directory

    Returns:
        The root node, or None if ``root`` does not exist. A directory that
        cannot be listed is returned with the children found before the
        failure.
    """
    root = os.path.abspath(root)
    if not os.path.isdir(root):
        return None

    ancestors: FrozenSet[Tuple[int, int]] = frozenset()
    if follow_symlinks:
        try:
            st = os.stat(root)
        except OSError:
            return None
        ancestors = frozenset({(st.st_dev, st.st_ino)})

    return _build_nodes(root, hidden_marker, follow_symlinks, errors, ancestors)

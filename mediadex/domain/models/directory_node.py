"""
DirectoryNode Domain Model

One directory in the browsable hierarchy of a root. Hidden directories
never appear as nodes. UI expansion state is owned by the presenter and
keyed by path; it is not stored here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple


@dataclass(frozen=True)
class DirectoryNode:
    """A directory and its visible child directories, sorted case-insensitively."""

    path: str
    children: Tuple["DirectoryNode", ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return os.path.basename(self.path.rstrip(os.sep)) or self.path

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def walk(self) -> Iterator["DirectoryNode"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find(self, path: str) -> Optional["DirectoryNode"]:
        """Return the node for ``path`` or None if it is not part of this tree."""
        target = os.path.normpath(path)
        for node in self.walk():
            if os.path.normpath(node.path) == target:
                return node
        return None

    def count(self) -> int:
        """Number of nodes in this subtree, including this one."""
        return sum(1 for _ in self.walk())

    def to_dict(self) -> Dict[str, Any]:
        """Nested plain representation; built without recursion."""
        result: Dict[str, Any] = {"path": self.path, "name": self.name, "children": []}
        stack = [(self, result)]
        while stack:
            node, data = stack.pop()
            for child in node.children:
                child_data = {"path": child.path, "name": child.name, "children": []}
                data["children"].append(child_data)
                stack.append((child, child_data))
        return result

    def walk_with_depth(self) -> Iterator[Tuple["DirectoryNode", int]]:
        """Like :meth:`walk`, paired with the depth below this node."""
        stack = [(self, 0)]
        while stack:
            node, depth = stack.pop()
            yield node, depth
            stack.extend((child, depth + 1) for child in reversed(node.children))

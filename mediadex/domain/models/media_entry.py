"""
MediaEntry Domain Model

Represents one indexed file: its identity, size, modification time,
category and, for eagerly loaded categories, its raw bytes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


def media_kind(label: str) -> str:
    """Return the major type of a category label ('image/png' -> 'image')."""
    return label.split("/", 1)[0]


@dataclass(frozen=True)
class MediaEntry:
    """
    Domain model for a file found during a load cycle.

    Entries are immutable and replaced, never mutated, by the next cycle.
    """

    path: str
    size_bytes: int
    modified_at: float  # POSIX seconds from os.stat
    category: str
    content: Optional[bytes] = field(default=None, repr=False, compare=False)

    @property
    def name(self) -> str:
        return os.path.basename(self.path)

    @property
    def modified_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.modified_at)

    @property
    def media_kind(self) -> str:
        return media_kind(self.category)

    @property
    def has_content(self) -> bool:
        return self.content is not None

    def sort_key(self) -> tuple[float, str]:
        """Newest first, then case-insensitive path."""
        return (-self.modified_at, self.path.casefold())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (bytes are not included)."""
        return {
            "path": self.path,
            "name": self.name,
            "size_bytes": self.size_bytes,
            "modified_at": self.modified_datetime.isoformat(),
            "category": self.category,
            "has_content": self.has_content,
        }

    def __repr__(self) -> str:
        return f"MediaEntry(path='{self.path}', category='{self.category}')"

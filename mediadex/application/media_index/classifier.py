"""
Classifier Module

Maps a file path to a category label (a MIME type such as "image/jpeg")
or excludes it. Lookup is extension based and uses only the interpreter's
built-in type table plus configured additions, so results do not depend on
the host's mime.types files.
"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping, Optional, Tuple

from mediadex.core.config import IndexSettings
from mediadex.core.constants import (
    EAGER_CONTENT_PREFIXES,
    EXCLUDED_FAMILIES,
    EXTRA_CONTENT_TYPES,
    HIDDEN_MARKER,
    SYSTEM_MARKER_FILES,
    UNKNOWN_LABEL,
)
from mediadex.domain.models import media_kind

__all__ = [
    "ClassifierPolicy",
    "DEFAULT_POLICY",
    "classify",
    "content_type",
    "media_kind",
    "requires_content",
]


def _build_type_table(extra_types: Mapping[str, str]) -> mimetypes.MimeTypes:
    table = mimetypes.MimeTypes()
    for ext, label in extra_types.items():
        if not ext.startswith("."):
            ext = "." + ext
        table.add_type(label, ext.lower())
    return table


@dataclass(frozen=True)
class ClassifierPolicy:
    """
    Rules applied by :func:`classify`.

    Attributes:
        system_files: Base names that are never media.
        hidden_marker: Prefix marking hidden files and directories.
        include_hidden: Keep files with a hidden segment in their path.
        excluded_families: Label prefixes that are dropped.
        allowed_labels: Labels kept even though their family is excluded.
        eager_prefixes: Label prefixes whose bytes are read during a scan.
        extra_types: Extension to label additions.
    """

    system_files: FrozenSet[str] = frozenset(SYSTEM_MARKER_FILES)
    hidden_marker: str = HIDDEN_MARKER
    include_hidden: bool = False
    excluded_families: Tuple[str, ...] = EXCLUDED_FAMILIES
    allowed_labels: FrozenSet[str] = frozenset()
    eager_prefixes: Tuple[str, ...] = EAGER_CONTENT_PREFIXES
    extra_types: Mapping[str, str] = field(default_factory=lambda: dict(EXTRA_CONTENT_TYPES), hash=False)
    _types: mimetypes.MimeTypes = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_types", _build_type_table(self.extra_types))

    @classmethod
    def from_settings(cls, settings: IndexSettings) -> "ClassifierPolicy":
        return cls(
            system_files=frozenset(settings.system_files),
            hidden_marker=settings.hidden_marker,
            include_hidden=settings.include_hidden,
            excluded_families=tuple(settings.excluded_families),
            allowed_labels=frozenset(settings.allowed_labels),
            eager_prefixes=tuple(settings.eager_prefixes),
            extra_types=dict(settings.extra_types),
        )

    def guess_type(self, path: str) -> Optional[str]:
        """Label for the final extension of ``path``; compression suffixes are not unwrapped."""
        ext = os.path.splitext(path)[1]
        if not ext:
            return None
        for strict in (True, False):
            table = self._types.types_map[strict]
            label = table.get(ext) or table.get(ext.lower())
            if label:
                return label
        return None


DEFAULT_POLICY = ClassifierPolicy()


def _has_hidden_segment(path: str, marker: str) -> bool:
    for part in path.replace("\\", "/").split("/"):
        if part and part not in (".", "..") and part.startswith(marker):
            return True
    return False


def content_type(path: str, policy: ClassifierPolicy = DEFAULT_POLICY) -> str:
    """Content-type label of ``path`` or ``"unknown"``."""
    return policy.guess_type(path) or UNKNOWN_LABEL


def classify(path: str, policy: ClassifierPolicy = DEFAULT_POLICY) -> Optional[str]:
    """
    Return the category label of ``path``, or None if it is excluded.

    Rules, in order:
    1. the base name is a reserved system file;
    2. a path segment is hidden (unless the policy includes hidden files);
    3. the label cannot be determined;
    4. the label belongs to an excluded family and is not allow-listed.

    Callers pass paths relative to the indexed root so that the root's own
    location does not count as a hidden segment.
    """
    name = os.path.basename(path)
    if not name or name in policy.system_files:
        return None

    if not policy.include_hidden and policy.hidden_marker:
        if _has_hidden_segment(path, policy.hidden_marker):
            return None

    label = content_type(path, policy)
    if label == UNKNOWN_LABEL:
        return None

    if label in policy.allowed_labels:
        return label

    if label.startswith(policy.excluded_families):
        return None

    return label


def requires_content(label: str, policy: ClassifierPolicy = DEFAULT_POLICY) -> bool:
    """True if entries of this category carry their raw bytes."""
    return bool(policy.eager_prefixes) and label.startswith(policy.eager_prefixes)


def describe_policy(policy: ClassifierPolicy) -> Dict[str, object]:
    """Plain representation of a policy for diagnostics."""
    return {
        "system_files": sorted(policy.system_files),
        "hidden_marker": policy.hidden_marker,
        "include_hidden": policy.include_hidden,
        "excluded_families": list(policy.excluded_families),
        "allowed_labels": sorted(policy.allowed_labels),
        "eager_prefixes": list(policy.eager_prefixes),
    }

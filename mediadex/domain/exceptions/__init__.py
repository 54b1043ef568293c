"""
Domain Exceptions Module

Contains indexing exceptions:
- RootNotFoundError: Selected root is missing or not a directory
- ScanIOError: The root could not be listed during a scan
- FileAccessError: A single file could not be stat'ed or read
- DirectoryListError: A single directory could not be listed
- NoRootSelectedError: An operation needs a root but none is selected
- WatchError: The change subscription for a root failed
"""

from __future__ import annotations

from typing import Optional


class MediaIndexError(Exception):
    """Base class for all indexing errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class RootNotFoundError(MediaIndexError):
    """Raised when the selected root does not exist or is not a directory."""

    def __init__(self, path: str):
        super().__init__(f"Root directory not found: {path}", path)


class ScanIOError(MediaIndexError):
    """Raised when the root itself cannot be listed. Fatal to the load cycle."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to scan {path}{detail}", path)
        self.cause = cause


class FileAccessError(MediaIndexError):
    """
    A file could not be stat'ed or read.

    Recorded in the scan statistics; the entry is skipped and the scan
    continues.
    """

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Cannot access {path}{detail}", path)
        self.cause = cause


class DirectoryListError(MediaIndexError):
    """A directory could not be listed; its node keeps the children found so far."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Cannot list directory {path}{detail}", path)
        self.cause = cause


class NoRootSelectedError(MediaIndexError):
    """Raised when an operation needs a root but none is selected."""

    def __init__(self):
        super().__init__("No root directory selected")


class WatchError(MediaIndexError):
    """Terminal failure of a change subscription. Not retried automatically."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Watching {path} failed{detail}", path)
        self.cause = cause


__all__ = [
    "MediaIndexError",
    "RootNotFoundError",
    "ScanIOError",
    "FileAccessError",
    "DirectoryListError",
    "NoRootSelectedError",
    "WatchError",
]

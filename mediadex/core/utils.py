"""
Core utility functions for mediadex.
Provides formatting helpers used by the command line front end.
"""

import os
from datetime import datetime
from typing import Union


def format_file_size(size: int) -> str:
    """
    Format a file size in bytes to a human-readable string.

    Args:
        size: File size in bytes

    Returns:
        Formatted string like "1.5 MB", "256 KB", or "512 B"
    """
    if size < 1024:
        return f"{size} B"
    elif size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    elif size < 1024 * 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    else:
        return f"{size / (1024 * 1024 * 1024):.2f} GB"


def format_elapsed(seconds: Union[int, float]) -> str:
    """Format a scan duration, e.g. "850 ms" or "2.4 s"."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    return f"{seconds:.1f} s"


def format_timestamp(timestamp: float) -> str:
    """Format a POSIX timestamp as local "YYYY-MM-DD HH:MM:SS"."""
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def relative_to_root(path: str, root: str) -> str:
    """Return ``path`` relative to ``root``; ``path`` unchanged if outside it."""
    try:
        rel = os.path.relpath(path, root)
    except ValueError:
        return path
    if rel.startswith(os.pardir):
        return path
    return rel

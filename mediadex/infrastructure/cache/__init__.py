"""
Cache Infrastructure Module

Provides the in-memory content cache used by the scanner.
"""

from .content_cache import ContentCache
from .utils import CacheStats

__all__ = [
    'ContentCache',
    'CacheStats',
]

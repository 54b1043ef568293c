"""
mediadex - Live Media Directory Indexer

Indexes a directory subtree into a categorized, browsable view of media
files and keeps that view synchronized with filesystem changes.

Architecture:
- Application Layer: Classifier, scanner, tree builder, watcher and the indexer
- Domain Layer: Media entries, directory nodes, snapshots and exceptions
- Infrastructure Layer: In-memory content cache
- Runtime Layer: Runtime paths and logging bootstrap
"""

__version__ = "1.0.0"
__author__ = "mediadex Team"
__description__ = "Live media directory indexer"
